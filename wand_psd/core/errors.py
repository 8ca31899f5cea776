"""Exceptions raised by the wand."""


class WandError(Exception):
    """Base class for wand failures that are reported to the user."""


class NotInThresholdedArea(WandError):
    """The reference value lies outside its own acceptance band."""

    def __init__(self, reference: float, low: float, high: float) -> None:
        super().__init__(f"Not in thresholded area: {reference:g} outside [{low:g}, {high:g}]")
        self.reference = reference
        self.low = low
        self.high = high


class WandCancelled(WandError):
    """Region growing was cancelled at a progress checkpoint."""
