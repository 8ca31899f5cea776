# Public API of the core package (re-export)
from .io_utils import (
    imread_image,
    dump_tiff_metadata_text,
    parse_um_per_px_from_text,
    scale_from_metadata,
    load_wand_image,
)
from .image import (
    Calibration,
    WandImage,
    UNWEIGHTED_RGB,
    WEIGHTED_RGB,
)
from .params import Connectivity, WandParams
from .errors import WandError, NotInThresholdedArea, WandCancelled
from .tolerance import (
    Reference,
    normalize,
    check_color,
    check_color_array,
    resolve_reference,
)
from .gradient import local_gradient, is_within
from .frontier import FrontierQueue
from .flood_fill import UNKNOWN, OUTSIDE, INSIDE, build_mask
from .outline import (
    Region,
    trace_outline,
    outline_to_mask,
    auto_outline,
    threshold_to_selection,
    combine_mode,
    combine_regions,
)
from .wand import grow_region, wand_select

__all__ = [
    # io / meta
    "imread_image", "dump_tiff_metadata_text", "parse_um_per_px_from_text", "scale_from_metadata",
    "load_wand_image",
    # image model / params / errors
    "Calibration", "WandImage", "UNWEIGHTED_RGB", "WEIGHTED_RGB",
    "Connectivity", "WandParams",
    "WandError", "NotInThresholdedArea", "WandCancelled",
    # tolerance & gradient
    "Reference", "normalize", "check_color", "check_color_array", "resolve_reference",
    "local_gradient", "is_within",
    # flood fill
    "FrontierQueue", "UNKNOWN", "OUTSIDE", "INSIDE", "build_mask",
    # outlines & regions
    "Region", "trace_outline", "outline_to_mask", "auto_outline", "threshold_to_selection",
    "combine_mode", "combine_regions",
    # wand
    "grow_region", "wand_select",
]
