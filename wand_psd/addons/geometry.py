"""
Polygon geometry in the µm domain.

- Convert pixel polygons to µm with per-axis pixel sizes
- Closed-polygon perimeter
- Feret min/max diameters by angular sweep
"""

from __future__ import annotations
import math
from typing import Tuple
import numpy as np


def contour_px_to_um(cnt_px: np.ndarray, umx: float, umy: float) -> np.ndarray:
    """Scale an (N, 1, 2) or (N, 2) pixel polygon to an (N, 2) µm polygon."""
    pts = np.asarray(cnt_px, np.float64).reshape(-1, 2).copy()
    pts[:, 0] *= umx
    pts[:, 1] *= umy
    return pts


def perimeter_um(pts_um: np.ndarray) -> float:
    """Length of the closed polygon through `pts_um` ((N, 2), µm)."""
    if len(pts_um) < 2:
        return 0.0
    seg = np.roll(pts_um, -1, axis=0) - pts_um
    return float(np.hypot(seg[:, 0], seg[:, 1]).sum())


def feret_diameters_um(pts_um: np.ndarray, step_deg: int = 2) -> Tuple[float, float]:
    """Return (min_feret, max_feret) in µm via brute-force angular sweep."""
    pts = np.asarray(pts_um, np.float64).reshape(-1, 2)
    if len(pts) < 2:
        return 0.0, 0.0
    pts0 = pts - pts.mean(axis=0)
    angles = np.radians(np.arange(0, 180, max(1, step_deg)))
    # projection of every point on every direction
    proj = pts0[:, 0:1] * np.cos(angles) + pts0[:, 1:2] * np.sin(angles)
    widths = proj.max(axis=0) - proj.min(axis=0)
    return float(widths.min()), float(widths.max())


def equivalent_diameter(area: float) -> float:
    """Diameter of the circle with the given area."""
    return 2.0 * math.sqrt(area / math.pi) if area > 0 else 0.0
