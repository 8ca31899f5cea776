"""
CSV export utilities.

Writes region outlines and Saltikov distributions to UTF-8 CSV files.
"""

from __future__ import annotations
import csv
from typing import List
import numpy as np

from wand_psd.core.outline import Region
from wand_psd.addons.saltikov import SaltikovResult


def write_outline_csv(path: str, region: Region) -> None:
    """One row per polygon vertex: polygon index, kind (outer/hole), x, y."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["polygon", "kind", "x", "y"])
        polys: List[tuple[str, np.ndarray]] = [("outer", c) for c in region.contours]
        polys += [("hole", c) for c in region.holes]
        for i, (kind, cnt) in enumerate(polys):
            for x, y in cnt.reshape(-1, 2):
                writer.writerow([i, kind, int(x), int(y)])


def write_saltikov_csv(path: str, result: SaltikovResult, unit: str = "µm") -> None:
    """One row per size class with its bounds, Na and Nv."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow([f"d_low_{unit}", f"d_high_{unit}", "Na", "Nv"])
        edges = result.bin_edges
        for i, (na, nv) in enumerate(zip(result.na, result.nv)):
            writer.writerow([edges[i], edges[i + 1], na, nv])


def read_diameters_csv(path: str, column: str | int = 0) -> np.ndarray:
    """
    Read one numeric column from a CSV file with a header row.

    `column` is a header name or a 0-based index; blank cells are skipped.
    """
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    if not rows:
        raise ValueError(f"Empty CSV: {path}")
    header, data = rows[0], rows[1:]
    if isinstance(column, str) and not column.isdigit():
        if column not in header:
            raise ValueError(f"Column {column!r} not in {header}")
        idx = header.index(column)
    else:
        idx = int(column)
    vals = [float(r[idx]) for r in data if len(r) > idx and r[idx].strip()]
    return np.asarray(vals, np.float64)
