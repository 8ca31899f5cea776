"""
Versatile wand entry points.

`grow_region` turns a seed pixel plus tolerance settings into a `Region`.
`wand_select` wraps it the way an interactive tool uses it: failures are
reported instead of raised, and the result may be merged with the
previously active region.
"""

from __future__ import annotations
import logging
from typing import Callable, Optional, Sequence

from .errors import NotInThresholdedArea, WandCancelled
from .flood_fill import INSIDE, build_mask
from .image import WandImage
from .outline import Region, auto_outline, combine_mode, combine_regions, threshold_to_selection
from .params import Connectivity, WandParams
from .tolerance import resolve_reference

logger = logging.getLogger(__name__)


def grow_region(
    image: WandImage,
    seed_x: int,
    seed_y: int,
    params: WandParams,
    *,
    foreground: Optional[Sequence[int]] = None,
    progress_cb: Callable[[float], None] | None = None,
    cancel_cb: Callable[[], bool] | None = None,
) -> Region:
    """
    Grow a region from (seed_x, seed_y).

    Args:
        image: pixel source.
        seed_x, seed_y: seed pixel, must lie inside the image.
        params: tolerance settings.
        foreground: (r, g, b) eyedropper color, required with `use_eyedropper`.
        progress_cb: receives the fraction of image pixels processed.
        cancel_cb: polled at progress checkpoints; True aborts the operation.

    Raises:
        ValueError: seed outside the image.
        NotInThresholdedArea: reference value outside its acceptance band.
        WandCancelled: cancelled through `cancel_cb`.
    """
    if not image.contains(seed_x, seed_y):
        raise ValueError(f"Seed ({seed_x}, {seed_y}) outside {image.width}x{image.height} image")

    ref = resolve_reference(image, seed_x, seed_y, params, foreground)
    logger.debug("Wand at (%d, %d): reference %g, band [%g, %g], %s",
                 seed_x, seed_y, ref.gray, ref.low, ref.high, params.connectivity)

    mask, ymin = build_mask(image, seed_x, seed_y, params, ref, progress_cb, cancel_cb)
    inside = mask == INSIDE

    if params.include_holes and params.contiguous:
        # Starting the scan at the top row avoids tracing an inner hole first
        region = auto_outline(inside, ymin, params.connectivity == Connectivity.EIGHT)
        # the seed is INSIDE and its row is >= ymin, so the scan always finds it
        assert region is not None
    else:
        region = threshold_to_selection(inside)

    if cancel_cb and cancel_cb():
        raise WandCancelled("Wand cancelled")
    if progress_cb:
        progress_cb(1.0)
    logger.debug("Region: %d pixels, %d contour(s), %d hole(s)",
                 region.area_px, len(region.contours), len(region.holes))
    return region


def wand_select(
    image: WandImage,
    seed_x: int,
    seed_y: int,
    params: WandParams,
    *,
    previous: Optional[Region] = None,
    shift: bool = False,
    alt: bool = False,
    foreground: Optional[Sequence[int]] = None,
    progress_cb: Callable[[float], None] | None = None,
    cancel_cb: Callable[[], bool] | None = None,
    notify_cb: Callable[[str], None] | None = None,
) -> Region | None:
    """
    Interactive wand click.

    Returns the new active region (combined with `previous` when `shift`
    and/or `alt` are set), or None if the click was outside the
    thresholded area or the operation was cancelled; in both cases the
    previous region should stay active.
    """
    try:
        region = grow_region(image, seed_x, seed_y, params, foreground=foreground,
                             progress_cb=progress_cb, cancel_cb=cancel_cb)
    except NotInThresholdedArea as e:
        logger.warning("%s", e)
        if notify_cb:
            notify_cb("Not in Thresholded Area")
        return None
    except WandCancelled:
        logger.info("Wand cancelled at (%d, %d)", seed_x, seed_y)
        return None

    if previous is not None and not region.is_empty:
        region = combine_regions(previous, region, combine_mode(shift, alt))
    return region
