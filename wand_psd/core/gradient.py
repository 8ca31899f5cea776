"""
Neighbour geometry and local gradient estimation for gradient gating.

Directions are numbered clockwise starting "up": even numbers are the
4-connected (axis-aligned) neighbours, odd numbers the diagonals.
"""

from __future__ import annotations
from typing import Tuple
import numpy as np

from .image import Calibration

DIR_X = (0, 1, 1, 1, 0, -1, -1, -1)
DIR_Y = (-1, -1, 0, 1, 1, 1, 0, -1)


def dir_offsets(width: int) -> Tuple[int, ...]:
    """Flat-index offsets of the 8 neighbours in an image of the given width."""
    return tuple(dy * width + dx for dx, dy in zip(DIR_X, DIR_Y))


def is_within(x: int, y: int, direction: int, width: int, height: int) -> bool:
    """Whether the neighbour of (x, y) in `direction` is inside the image; (x, y) must be."""
    nx = x + DIR_X[direction]
    ny = y + DIR_Y[direction]
    return 0 <= nx < width and 0 <= ny < height


def is_inner(x: int, y: int, width: int, height: int) -> bool:
    """Pixel has all 8 neighbours inside the image."""
    return 0 < x < width - 1 and 0 < y < height - 1


def local_gradient(gray: np.ndarray, x: int, y: int) -> Tuple[float, float]:
    """
    Estimate (d/dx, d/dy) of the sample plane at (x, y).

    Interior pixels use a Sobel-like 3×3 kernel. Border pixels average the
    finite differences to the neighbours that exist, with weight 2 for
    axis-aligned and 1 for diagonal neighbours.
    """
    h, w = gray.shape
    if is_inner(x, y, w, h):
        vpp = float(gray[y + 1, x + 1])
        vpm = float(gray[y - 1, x + 1])
        vmp = float(gray[y + 1, x - 1])
        vmm = float(gray[y - 1, x - 1])
        gx = 0.125 * (2.0 * (float(gray[y, x + 1]) - float(gray[y, x - 1])) + vpp - vmm + (vpm - vmp))
        gy = 0.125 * (2.0 * (float(gray[y + 1, x]) - float(gray[y - 1, x])) + vpp - vmm - (vpm - vmp))
        return gx, gy

    v = float(gray[y, x])
    gx = gy = 0.0
    x_count = y_count = 0
    for d in range(8):
        if not is_within(x, y, d, w, h):
            continue
        dx, dy = DIR_X[d], DIR_Y[d]
        dv = float(gray[y + dy, x + dx]) - v
        weight = 2 - (d & 1)
        gx += dx * dv * weight
        gy += dy * dv * weight
        if dx:
            x_count += weight
        if dy:
            y_count += weight
    # A one pixel wide image has no neighbours along that axis
    gx = gx / x_count if x_count else 0.0
    gy = gy / y_count if y_count else 0.0
    return gx, gy


def gradient_limits(gradient_tolerance: float, calibration: Calibration) -> Tuple[float, float]:
    """
    Return (tolerance², aspect²) for the large-gradient test.

    The tolerance is given per calibrated length unit, so it is converted to
    per-pixel (x) units; the y component is rescaled by the pixel aspect ratio.
    """
    tol = gradient_tolerance * calibration.pixel_width
    return tol * tol, calibration.aspect_ratio_sqr


def is_large_gradient(gx: float, gy: float, tol2: float, aspect2: float) -> bool:
    return gx * gx + gy * gy * aspect2 > tol2


def is_downhill(dv: float, gx: float, gy: float, direction: int) -> bool:
    """A step of value change `dv` in `direction` does not climb along the gradient."""
    return dv * (gx * DIR_X[direction] + gy * DIR_Y[direction]) <= 0
