"""
Image model consumed by the wand.

`WandImage` wraps a grayscale (8/16-bit, float) or RGB array together with
an optional calibration and an optional "already thresholded" band. The
pixel kind is resolved once at construction: the calibrated sample plane
(`gray`) and, for RGB input, the color plane (`rgb`) are prepared up front
so that the flood fill only deals with two accessor variants.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import numpy as np

UNWEIGHTED_RGB = (1.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0)
WEIGHTED_RGB = (0.299, 0.587, 0.114)  # ITU-R BT.601 luma


@dataclass
class Calibration:
    """Spatial and value calibration of an image."""

    pixel_width: float = 1.0
    pixel_height: float = 1.0
    unit: str = "px"
    value_unit: str = "gray value"
    # Linear value function: calibrated = offset + slope * raw
    function: Optional[Tuple[float, float]] = None
    # Lookup table raw -> calibrated (takes precedence over `function`)
    table: Optional[np.ndarray] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.pixel_width <= 0 or self.pixel_height <= 0:
            raise ValueError("Pixel size must be positive.")
        if self.table is not None:
            self.table = np.asarray(self.table, np.float32)

    @property
    def calibrates_values(self) -> bool:
        return self.table is not None or self.function is not None

    @property
    def aspect_ratio_sqr(self) -> float:
        """(pixel width / pixel height)^2, scales the y part of squared gradients."""
        r = self.pixel_width / self.pixel_height
        return r * r

    def c_value(self, raw: float) -> float:
        """Calibrated value of a single raw sample."""
        if self.table is not None:
            idx = int(np.clip(int(raw), 0, self.table.size - 1))
            return float(self.table[idx])
        if self.function is not None:
            offset, slope = self.function
            return float(offset + slope * raw)
        return float(raw)

    def c_values(self, raw: np.ndarray) -> np.ndarray:
        """Calibrated values of a raw sample plane (float32)."""
        if self.table is not None:
            idx = np.clip(raw.astype(np.int64), 0, self.table.size - 1)
            return self.table[idx]
        if self.function is not None:
            offset, slope = self.function
            return (offset + slope * raw.astype(np.float64)).astype(np.float32)
        return raw.astype(np.float32)


class WandImage:
    """
    Read-only pixel source for the wand.

    Args:
        pixels: H×W gray array (uint8, uint16 or float) or H×W×3 RGB uint8 array.
        calibration: optional spatial/value calibration.
        threshold: optional (low, high) band in raw units marking the image
            as already binarized.
        luma_weights: RGB weights for brightness of color images.
    """

    def __init__(
        self,
        pixels: np.ndarray,
        calibration: Optional[Calibration] = None,
        threshold: Optional[Tuple[float, float]] = None,
        luma_weights: Sequence[float] = UNWEIGHTED_RGB,
    ) -> None:
        arr = np.asarray(pixels)
        if arr.ndim not in (2, 3) or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError(f"Expected a non-empty H×W or H×W×3 image, got shape {arr.shape}")
        if arr.ndim == 3 and arr.shape[2] != 3:
            raise ValueError(f"Color images must have 3 channels, got {arr.shape[2]}")
        if threshold is not None and threshold[0] > threshold[1]:
            raise ValueError(f"Invalid threshold band {threshold}")

        self.calibration = calibration or Calibration()
        self.threshold = None if threshold is None else (float(threshold[0]), float(threshold[1]))
        self.luma_weights = tuple(float(w) for w in luma_weights)
        self.height, self.width = arr.shape[:2]

        if arr.ndim == 3:
            self.kind = "rgb"
            self.rgb: Optional[np.ndarray] = arr.astype(np.uint8, copy=False)
            w = np.asarray(self.luma_weights, np.float32)
            self.gray = (self.rgb.astype(np.float32) * w).sum(axis=2)
        else:
            self.kind = {np.dtype(np.uint8): "gray8", np.dtype(np.uint16): "gray16"}.get(arr.dtype, "float")
            self.rgb = None
            self.gray = self.calibration.c_values(arr)

    # ---- accessors ----
    @property
    def is_rgb(self) -> bool:
        return self.rgb is not None

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def sample_at(self, x: int, y: int) -> float:
        """Calibrated sample value (brightness for RGB)."""
        return float(self.gray[y, x])

    def rgb_at(self, x: int, y: int) -> Tuple[int, int, int]:
        if self.rgb is None:
            raise TypeError("rgb_at() requires an RGB image")
        r, g, b = self.rgb[y, x]
        return int(r), int(g), int(b)

    def value_from_color(self, color: Sequence[int]) -> float:
        """
        Reference value for a foreground (eyedropper) color: its gray index,
        mapped through the value calibration.
        """
        if self.is_rgb:
            return float(np.dot(self.luma_weights, [float(c) for c in color]))
        index = int(round(float(np.dot(self.luma_weights, [float(c) for c in color]))))
        index = max(0, min(255, index))
        return self.calibration.c_value(index)

    def calibrated_threshold(self) -> Optional[Tuple[float, float]]:
        """Threshold band converted to calibrated units, or None if not thresholded."""
        if self.threshold is None:
            return None
        low, high = self.threshold
        if not self.calibration.calibrates_values:
            return low, high
        return self.calibration.c_value(int(low + 0.5)), self.calibration.c_value(int(high + 0.5))
