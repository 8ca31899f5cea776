"""
Add-ons package for wand-based particle analysis.

Provides helper functions for:
- polygon geometry in the µm domain
- measurements of a selected region
- Schwartz–Saltikov 3-D size distribution unfolding
- CSV import/export
"""

# ---- Geometry helpers ----
from .geometry import (
    contour_px_to_um,
    perimeter_um,
    feret_diameters_um,
    equivalent_diameter,
)

# ---- Region measurement ----
from .region_metrics import measure_region

# ---- Schwartz–Saltikov ----
from .saltikov import (
    SaltikovResult,
    scott_bins,
    resolve_binning,
    section_histogram,
    transition_matrix,
    unfold,
    saltikov,
)

# ---- CSV ----
from .csv_ext import write_outline_csv, write_saltikov_csv, read_diameters_csv


__all__ = [
    # geometry
    "contour_px_to_um", "perimeter_um", "feret_diameters_um", "equivalent_diameter",
    # metrics
    "measure_region",
    # saltikov
    "SaltikovResult", "scott_bins", "resolve_binning", "section_histogram", "transition_matrix", "unfold", "saltikov",
    # csv
    "write_outline_csv", "write_saltikov_csv", "read_diameters_csv",
]
