"""
Wand parameter data structure.

Defines the tolerance and connectivity settings that control one
region-growing (wand) operation. Instances are immutable.
"""

from __future__ import annotations
from dataclasses import dataclass


class Connectivity:
    """Neighbourhood used when growing a region."""

    EIGHT = "8-connected"
    FOUR = "4-connected"
    NON_CONTIGUOUS = "non-contiguous"

    ALL = (EIGHT, FOUR, NON_CONTIGUOUS)


@dataclass(frozen=True)
class WandParams:
    """Tolerance settings for the versatile wand."""

    # Max |value - reference| (gray) or radius in RGB space (color)
    value_tolerance: float = 0.0

    # -1 = brightness only, 0 = plain RGB distance, +1 = hue only
    color_sensitivity: float = 0.0

    # Max local gradient magnitude; 0 disables gradient gating
    gradient_tolerance: float = 0.0

    connectivity: str = Connectivity.EIGHT

    # Output region without interior holes (contiguous modes only)
    include_holes: bool = False

    # Reference comes from the foreground (eyedropper) color
    use_eyedropper: bool = False

    def __post_init__(self) -> None:
        if self.value_tolerance < 0:
            raise ValueError(f"value_tolerance must be >= 0, got {self.value_tolerance}")
        if not -1.0 <= self.color_sensitivity <= 1.0:
            raise ValueError(f"color_sensitivity must be in [-1, 1], got {self.color_sensitivity}")
        if self.gradient_tolerance < 0:
            raise ValueError(f"gradient_tolerance must be >= 0, got {self.gradient_tolerance}")
        if self.connectivity not in Connectivity.ALL:
            raise ValueError(f"Unknown connectivity: {self.connectivity!r}")

    @property
    def contiguous(self) -> bool:
        return self.connectivity != Connectivity.NON_CONTIGUOUS

    @property
    def use_gradient(self) -> bool:
        """Gradient gating only applies below the value tolerance and for contiguous fills."""
        return 0 < self.gradient_tolerance < self.value_tolerance and self.contiguous
