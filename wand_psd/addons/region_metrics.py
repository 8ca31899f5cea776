"""
Measurements of a wand-selected region in the µm domain.
"""

from __future__ import annotations
import math
from typing import Dict
import numpy as np

from wand_psd.core.outline import Region
from wand_psd.addons.geometry import (
    contour_px_to_um,
    perimeter_um,
    feret_diameters_um,
    equivalent_diameter,
)


def measure_region(region: Region, umx: float = 1.0, umy: float = 1.0) -> Dict[str, float]:
    """
    Return area, perimeter, equivalent diameter, Feret diameters and
    circularity of `region`. Area counts pixels; perimeter sums the outer
    and hole polygons.
    """
    out = {
        "area_px": float(region.area_px),
        "area_um2": 0.0, "perimeter_um": 0.0, "d_eq_area_um": 0.0,
        "feret_min_um": 0.0, "feret_max_um": 0.0, "circularity": 0.0,
    }
    if region.is_empty:
        return out

    area = region.area_px * umx * umy
    polys = [contour_px_to_um(c, umx, umy) for c in region.contours + region.holes]
    perim = sum(perimeter_um(p) for p in polys)
    outer = np.vstack([contour_px_to_um(c, umx, umy) for c in region.contours])
    if not region.traced:
        # contours run through pixel centres: pad by half a pixel on every side
        outer = np.vstack([outer + (dx * umx, dy * umy)
                           for dx in (-0.5, 0.5) for dy in (-0.5, 0.5)])
    fmin, fmax = feret_diameters_um(outer)

    out.update(
        area_um2=area,
        perimeter_um=perim,
        d_eq_area_um=equivalent_diameter(area),
        feret_min_um=fmin,
        feret_max_um=fmax,
        circularity=min(1.0, (4.0 * math.pi * area) / (perim * perim + 1e-12)),
    )
    return out
