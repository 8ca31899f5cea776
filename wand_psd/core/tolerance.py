"""
Reference value resolution and value/color tolerance tests.

- resolve the reference sample (seed pixel or eyedropper color)
- derive the gray acceptance band, from the tolerance or an existing threshold
- color distance with variable brightness/hue sensitivity (`check_color`)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import numpy as np

from .errors import NotInThresholdedArea
from .image import WandImage
from .params import WandParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """Reference sample and derived thresholds, fixed for one wand operation."""

    gray: float
    low: float
    high: float
    color_mode: bool = False
    rgb: Tuple[int, int, int] = (0, 0, 0)
    # Unit vector of the "parallel" (brightness-like) color direction
    direction: Tuple[float, float, float] = (0.0, 0.0, 0.0)


def normalize(v: Sequence[float]) -> Tuple[float, float, float]:
    """Return the 3-vector scaled to unit length."""
    a = np.asarray(v, np.float64)
    n = float(np.sqrt(np.dot(a, a)))
    if n == 0:
        raise ValueError("Cannot normalize a zero vector.")
    a = a / n
    return float(a[0]), float(a[1]), float(a[2])


def parallel_direction(rgb0: Sequence[int], luma_weights: Sequence[float],
                       color_sensitivity: float) -> Tuple[float, float, float]:
    """Luma direction for black references or s <= 0, else the reference color direction."""
    r0, g0, b0 = rgb0
    if (r0 == 0 and g0 == 0 and b0 == 0) or color_sensitivity <= 0:
        return normalize(luma_weights)
    return normalize((r0, g0, b0))


def check_color(
    rgb: Sequence[int],
    rgb0: Sequence[int],
    direction: Sequence[float],
    value_tolerance: float,
    color_sensitivity: float,
) -> bool:
    """
    Return whether `rgb` is within the color tolerance of `rgb0`.

    The squared distance is split into a component parallel to `direction`
    and the perpendicular rest. Negative sensitivity up-weights the parallel
    (brightness) part, positive sensitivity suppresses it; at 0 this is the
    plain Euclidean RGB distance.
    """
    dr = int(rgb[0]) - int(rgb0[0])
    dg = int(rgb[1]) - int(rgb0[1])
    db = int(rgb[2]) - int(rgb0[2])
    d2 = dr * dr + dg * dg + db * db
    tol2 = value_tolerance * value_tolerance
    s = color_sensitivity
    if s == 0:
        return d2 <= tol2
    dpar = dr * direction[0] + dg * direction[1] + db * direction[2]
    dpar2 = dpar * dpar
    if s < 0:
        return d2 * (1.0 + s) - dpar2 * s <= tol2
    return d2 - dpar2 * s <= tol2


def check_color_array(rgb: np.ndarray, ref: Reference, value_tolerance: float,
                      color_sensitivity: float) -> np.ndarray:
    """Vectorised `check_color` over an (..., 3) uint8 array; returns a bool array."""
    delta = rgb.astype(np.int32) - np.asarray(ref.rgb, np.int32)
    d2 = (delta * delta).sum(axis=-1)
    tol2 = value_tolerance * value_tolerance
    s = color_sensitivity
    if s == 0:
        return d2 <= tol2
    dpar = delta.astype(np.float64) @ np.asarray(ref.direction, np.float64)
    dpar2 = dpar * dpar
    if s < 0:
        return d2 * (1.0 + s) - dpar2 * s <= tol2
    return d2 - dpar2 * s <= tol2


def resolve_reference(
    image: WandImage,
    x0: int,
    y0: int,
    params: WandParams,
    foreground: Optional[Sequence[int]] = None,
) -> Reference:
    """
    Resolve the reference sample and acceptance band for a wand started at (x0, y0).

    Raises:
        ValueError: eyedropper requested without a foreground color.
        NotInThresholdedArea: the reference lies outside its own band.
    """
    if params.use_eyedropper:
        if foreground is None:
            raise ValueError("use_eyedropper requires a foreground color")
        gray_ref = image.value_from_color(foreground)
    else:
        gray_ref = image.sample_at(x0, y0)

    band = image.calibrated_threshold()
    if band is None:
        low = gray_ref - params.value_tolerance
        high = gray_ref + params.value_tolerance
    else:
        low, high = band
        logger.debug("Using existing threshold band [%g, %g]", low, high)

    if gray_ref < low or gray_ref > high:
        raise NotInThresholdedArea(gray_ref, low, high)

    color_mode = image.is_rgb and params.color_sensitivity > -1
    if not color_mode:
        return Reference(gray=gray_ref, low=low, high=high)

    if params.use_eyedropper:
        rgb0 = tuple(int(c) for c in foreground)
    else:
        rgb0 = image.rgb_at(x0, y0)
    direction = parallel_direction(rgb0, image.luma_weights, params.color_sensitivity)
    logger.debug("Color mode: reference %s, direction %s", rgb0, direction)
    return Reference(gray=gray_ref, low=low, high=high, color_mode=True,
                     rgb=rgb0, direction=direction)
