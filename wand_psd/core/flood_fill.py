"""
Mask construction for the wand.

Pixels are labelled UNKNOWN -> INSIDE (accepted and queued once) or
UNKNOWN -> OUTSIDE (rejected, never revisited). Non-contiguous mode is a
flat scan; contiguous modes run a FIFO flood fill from the seed with
optional gradient gating.

Supports cooperative cancellation via an optional `cancel_cb`.
"""

from __future__ import annotations
import logging
from typing import Callable, Tuple
import numpy as np

from .errors import WandCancelled
from .frontier import FrontierQueue
from .gradient import (
    DIR_Y, dir_offsets, gradient_limits, is_downhill, is_inner, is_large_gradient,
    is_within, local_gradient,
)
from .image import WandImage
from .params import Connectivity, WandParams
from .tolerance import Reference, check_color_array

logger = logging.getLogger(__name__)

UNKNOWN, OUTSIDE, INSIDE = 0, 1, -1

# Progress/cancel checkpoint every 4096 dequeued pixels
CHECKPOINT_MASK = 0xFFF


def acceptance_plane(image: WandImage, ref: Reference, params: WandParams) -> np.ndarray:
    """Bool H×W plane of pixels passing the value (gray band) or color tolerance."""
    if ref.color_mode:
        return check_color_array(image.rgb, ref, params.value_tolerance, params.color_sensitivity)
    return (image.gray >= ref.low) & (image.gray <= ref.high)


def build_mask(
    image: WandImage,
    x0: int,
    y0: int,
    params: WandParams,
    ref: Reference,
    progress_cb: Callable[[float], None] | None = None,
    cancel_cb: Callable[[], bool] | None = None,
) -> Tuple[np.ndarray, int]:
    """
    Label every pixel of `image` for a wand started at (x0, y0).

    Returns:
        (mask, ymin): int8 H×W mask with UNKNOWN/OUTSIDE/INSIDE labels and
        the uppermost row holding an INSIDE pixel (image height if none).

    Raises:
        WandCancelled: `cancel_cb` returned True at a checkpoint.
    """
    h, w = image.shape
    ok = acceptance_plane(image, ref, params)

    if params.connectivity == Connectivity.NON_CONTIGUOUS:
        mask = np.where(ok, INSIDE, UNKNOWN).astype(np.int8)
        rows = np.flatnonzero(ok.any(axis=1))
        ymin = int(rows[0]) if rows.size else h
        logger.debug("Non-contiguous scan: %d pixels inside", int(ok.sum()))
        return mask, ymin

    gray = image.gray
    values = gray.ravel().tolist()
    accepted = ok.ravel().tolist()
    labels = [UNKNOWN] * (w * h)
    offsets = dir_offsets(w)
    steps = range(0, 8, 2) if params.connectivity == Connectivity.FOUR else range(8)
    n_pixels = float(w * h)

    use_gradient = params.use_gradient
    tol2, aspect2 = gradient_limits(params.gradient_tolerance, image.calibration)

    queue = FrontierQueue()
    offset0 = x0 + y0 * w
    labels[offset0] = INSIDE
    queue.push(offset0)
    ymin = y0

    while queue:
        offset = queue.pop()
        y, x = divmod(offset, w)
        inner = is_inner(x, y, w, h)
        v = values[offset]
        large = False
        gx = gy = 0.0
        if use_gradient:
            gx, gy = local_gradient(gray, x, y)
            large = is_large_gradient(gx, gy, tol2, aspect2)

        for d in steps:
            if not (inner or is_within(x, y, d, w, h)):
                continue
            offset2 = offset + offsets[d]
            if labels[offset2] != UNKNOWN:
                continue
            if not accepted[offset2]:
                labels[offset2] = OUTSIDE
            elif not large or is_downhill(values[offset2] - v, gx, gy, d):
                labels[offset2] = INSIDE
                if y + DIR_Y[d] < ymin:
                    ymin = y + DIR_Y[d]
                queue.push(offset2)
            # Uphill across a steep edge: stays UNKNOWN, reachable from another side

        if (queue.popped & CHECKPOINT_MASK) == 1:
            if progress_cb:
                progress_cb(queue.popped / n_pixels)
            if cancel_cb and cancel_cb():
                logger.debug("Flood fill cancelled after %d pixels", queue.popped)
                raise WandCancelled("Wand cancelled")

    logger.debug("Flood fill: %d pixels inside, queue capacity %d", queue.popped, queue.capacity)
    mask = np.asarray(labels, np.int8).reshape(h, w)
    return mask, ymin
