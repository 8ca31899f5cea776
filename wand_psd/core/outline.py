"""
Mask -> region conversion.

- Outer contour tracing along pixel edges (region without holes)
- Threshold-to-selection via OpenCV contours (region with holes)
- Combining a new region with a previous one (add/subtract/intersect)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple
import cv2
import numpy as np


@dataclass
class Region:
    """
    A selected region.

    `mask` is the exact pixel set. `contours` and `holes` are OpenCV-style
    (N, 1, 2) int32 polygons; when `traced` is True the single contour runs
    along pixel corners (vertex (x, y) is the top-left corner of pixel (x, y)),
    otherwise it passes through pixel centres as returned by cv2.findContours.
    """

    mask: np.ndarray
    contours: List[np.ndarray] = field(default_factory=list)
    holes: List[np.ndarray] = field(default_factory=list)
    traced: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.mask.any()

    @property
    def area_px(self) -> int:
        return int(np.count_nonzero(self.mask))

    def bounds(self) -> Tuple[int, int, int, int] | None:
        """(x, y, w, h) bounding box of the pixel set, None when empty."""
        if self.is_empty:
            return None
        x, y, w, h = cv2.boundingRect(self.mask.astype(np.uint8))
        return int(x), int(y), int(w), int(h)


def trace_outline(inside: np.ndarray, x0: int, y0: int, eight_connected: bool = True) -> np.ndarray:
    """
    Trace the outer boundary of the component containing pixel (x0, y0).

    (x0, y0) must be inside, with its upper and left neighbours outside
    (e.g. the leftmost inside pixel of the uppermost row). The walk keeps
    the inside on its right; diagonal contacts are followed only when
    `eight_connected`.

    Returns:
        (N, 2) int32 array of corner vertices where the boundary turns.
    """
    h, w = inside.shape
    if not (0 <= x0 < w and 0 <= y0 < h and inside[y0, x0]):
        raise ValueError(f"Start pixel ({x0}, {y0}) is not inside the mask")

    def at(px: int, py: int) -> bool:
        return 0 <= px < w and 0 <= py < h and bool(inside[py, px])

    x, y = x0, y0
    dx, dy = 1, 0  # along the top edge of the start pixel
    pts = [(x0, y0)]
    while True:
        x += dx
        y += dy
        if x == x0 and y == y0:
            break
        # pixels ahead-left (a) and ahead-right (b) of the vertex
        a = at(x + min(0, dx) + min(0, dy), y + min(0, dy) + min(0, -dx))
        b = at(x + min(0, dx) + min(0, -dy), y + min(0, dy) + min(0, dx))
        if b and not a:
            continue
        if a and (b or eight_connected):
            dx, dy = dy, -dx  # left
        else:
            dx, dy = -dy, dx  # right
        pts.append((x, y))
    return np.asarray(pts, np.int32)


def outline_to_mask(vertices: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
    """Fill a pixel-corner polygon: a pixel is inside if its centre is (even-odd rule)."""
    h, w = shape
    toggles = np.zeros((h, w + 1), np.uint8)
    pts = np.asarray(vertices).reshape(-1, 2)
    nxt = np.roll(pts, -1, axis=0)
    for (x1, y1), (x2, y2) in zip(pts, nxt):
        if x1 == x2 and y1 != y2:
            toggles[min(y1, y2):max(y1, y2), x1] ^= 1
    return (np.cumsum(toggles[:, :w], axis=1) & 1).astype(bool)


def auto_outline(inside: np.ndarray, y_start: int, eight_connected: bool = True) -> Region | None:
    """
    Scan row `y_start` from the left for the first inside pixel and trace
    the outer outline from there. Returns None if the row has no inside pixel.
    """
    row = np.flatnonzero(inside[y_start]) if 0 <= y_start < inside.shape[0] else np.empty(0)
    if row.size == 0:
        return None
    verts = trace_outline(inside, int(row[0]), y_start, eight_connected)
    return Region(
        mask=outline_to_mask(verts, inside.shape),
        contours=[verts.reshape(-1, 1, 2)],
        traced=True,
    )


def threshold_to_selection(inside: np.ndarray) -> Region:
    """Region matching the mask exactly, holes included (OpenCV two-level contours)."""
    bw = inside.astype(np.uint8) * 255
    contours, hier = cv2.findContours(bw, cv2.RETR_CCOMP, cv2.CHAIN_APPROX_SIMPLE)
    outer: List[np.ndarray] = []
    holes: List[np.ndarray] = []
    if hier is not None:
        for cnt, hh in zip(contours, hier[0]):
            (holes if hh[3] != -1 else outer).append(cnt)
    return Region(mask=inside.astype(bool), contours=outer, holes=holes)


COMBINE_MODES = ("replace", "add", "subtract", "intersect")


def combine_mode(shift: bool, alt: bool) -> str:
    """Map modifier keys to a combine mode: shift adds, alt subtracts, both intersect."""
    if shift and alt:
        return "intersect"
    if shift:
        return "add"
    if alt:
        return "subtract"
    return "replace"


def combine_regions(previous: Region | None, new: Region, mode: str) -> Region:
    """Combine `new` with `previous` by pixel-set algebra and re-extract contours."""
    if mode not in COMBINE_MODES:
        raise ValueError(f"Unknown combine mode: {mode!r}")
    if previous is None or mode == "replace":
        return new
    if previous.mask.shape != new.mask.shape:
        raise ValueError(f"Region shapes differ: {previous.mask.shape} vs {new.mask.shape}")
    if mode == "add":
        m = previous.mask | new.mask
    elif mode == "subtract":
        m = previous.mask & ~new.mask
    else:
        m = previous.mask & new.mask
    return threshold_to_selection(m)
