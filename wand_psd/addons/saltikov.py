"""
Schwartz–Saltikov unfolding.

Reconstructs the 3-D number density of spherical particles per size class
(Nv) from the 2-D section-diameter histogram per unit area (Na), for
sections of finite thickness t (Cortes & Leibler, 2005):

    Na = A · Nv,  with A upper triangular,
    A[i, i] = t + δ·sqrt((i+1)² − i²)
    A[i, j] = δ·(sqrt((j+1)² − i²) − sqrt(j² − i²))   for i < j

(1-based class indices i, j; δ = bin width.)
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class SaltikovResult:
    """Section histogram and unfolded 3-D distribution over the same bins."""
    bin_edges: np.ndarray   # n_bins + 2 edges, starting at 0
    na: np.ndarray          # 2-D counts per unit area
    nv: np.ndarray          # 3-D counts per unit volume


def scott_bins(d: np.ndarray) -> int:
    """
    Number of classes from Scott's rule, width 3.49·sd·N^(-1/3),
    spread over the data range; at least 2.
    """
    d = np.asarray(d, np.float64).ravel()
    if d.size < 2:
        return 2
    width = 3.49 * float(np.std(d, ddof=1)) * d.size ** (-1.0 / 3.0)
    if width <= 0:
        return 2
    return max(2, int(np.floor((d.max() - d.min()) / width + 0.5)))


def resolve_binning(d: np.ndarray, n_bins: Optional[int], bin_width: Optional[float]) -> Tuple[int, float]:
    """
    Return (n_bins, bin_width) so that the n_bins + 1 classes starting at 0
    cover the largest diameter.

    Without a bin width the classes split [0, max] evenly; without a class
    count it follows from the width, or from Scott's rule if both are missing.
    """
    d_max = float(d.max())
    if d_max <= 0:
        raise ValueError("Diameters must be positive.")
    if bin_width is not None and bin_width <= 0:
        raise ValueError(f"bin_width must be positive, got {bin_width}")
    if n_bins is None:
        if bin_width is None:
            n_bins = scott_bins(d)
        else:
            n_bins = max(1, int(np.ceil(d_max / bin_width)) - 1)
    if n_bins < 1:
        raise ValueError(f"n_bins must be >= 1, got {n_bins}")
    w = float(bin_width) if bin_width is not None else d_max / (n_bins + 1)
    return n_bins, w


def section_histogram(
    diameters: np.ndarray,
    n_bins: int,
    bin_width: float,
    area: float = 1.0,
) -> np.ndarray:
    """
    Na: number of sections per unit area in classes (i·δ, (i+1)·δ],
    i = 0..n_bins (n_bins + 1 classes). Diameters beyond the last class
    are dropped with a warning.
    """
    d = np.asarray(diameters, np.float64).ravel()
    if d.size == 0:
        raise ValueError("No diameters given.")
    if area <= 0:
        raise ValueError(f"area must be positive, got {area}")
    if n_bins < 1 or bin_width <= 0:
        raise ValueError(f"Invalid binning: n_bins={n_bins}, bin_width={bin_width}")
    # class index k such that k·δ < d <= (k+1)·δ
    k = np.ceil(d / bin_width).astype(np.int64) - 1
    top = (n_bins + 1) * bin_width
    # rounding in d / δ must not push the top edge out of the last class
    k[(k > n_bins) & (d <= top * (1 + 1e-12))] = n_bins
    keep = (k >= 0) & (k <= n_bins)
    if not keep.all():
        logger.warning("%d of %d diameters outside (0, %g] were dropped",
                       int((~keep).sum()), d.size, top)
    return np.bincount(k[keep], minlength=n_bins + 1).astype(np.float64) / area


def transition_matrix(n_bins: int, bin_width: float, thickness: float = 0.0) -> np.ndarray:
    """Upper-triangular (n_bins+1)² Saltikov coefficient matrix."""
    n = n_bins + 1
    A = np.zeros((n, n), np.float64)
    for i in range(1, n + 1):
        A[i - 1, i - 1] = thickness + bin_width * np.sqrt((i + 1) ** 2 - i ** 2)
        for j in range(i + 1, n + 1):
            A[i - 1, j - 1] = bin_width * (np.sqrt((j + 1) ** 2 - i ** 2) - np.sqrt(j ** 2 - i ** 2))
    return A


def unfold(na: np.ndarray, A: np.ndarray) -> np.ndarray:
    """Solve A·Nv = Na by back-substitution (A upper triangular)."""
    na = np.asarray(na, np.float64)
    n = na.size
    if A.shape != (n, n):
        raise ValueError(f"Matrix shape {A.shape} does not match {n} classes")
    nv = np.zeros(n, np.float64)
    for k in range(n - 1, -1, -1):
        nv[k] = (na[k] - A[k, k + 1:] @ nv[k + 1:]) / A[k, k]
    return nv


def saltikov(
    diameters: np.ndarray,
    n_bins: Optional[int] = None,
    bin_width: Optional[float] = None,
    thickness: float = 0.0,
    area: float = 1.0,
    clip_negative: bool = False,
) -> SaltikovResult:
    """
    Unfold section diameters into a 3-D size distribution.

    With `clip_negative`, negative Nv classes (an artefact of too fine
    binning or noise) are replaced by 0.
    """
    d = np.asarray(diameters, np.float64).ravel()
    if d.size == 0:
        raise ValueError("No diameters given.")
    n_bins, w = resolve_binning(d, n_bins, bin_width)
    na = section_histogram(d, n_bins, w, area)
    nv = unfold(na, transition_matrix(n_bins, w, thickness))
    if clip_negative:
        nv = np.clip(nv, 0.0, None)
    return SaltikovResult(bin_edges=w * np.arange(n_bins + 2), na=na, nv=nv)
