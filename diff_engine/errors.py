"""
Diff Engine Errors
Exception types raised by the visual diff engine.
"""

from typing import Optional, Tuple


class VisualDiffError(Exception):
    """Base class for every failure raised by the diff engine."""


class DimensionMismatch(VisualDiffError):
    def __init__(self, expected_size: Tuple[int, int], actual_size: Tuple[int, int]):
        self.expected_size = expected_size
        self.actual_size = actual_size
        super().__init__(
            f"Image dimensions mismatch: expected {expected_size[0]}x{expected_size[1]}, "
            f"got {actual_size[0]}x{actual_size[1]}"
        )


class InvalidBuffer(VisualDiffError):
    """Raised when a pixel buffer's length does not match width*height*4."""


class InvalidConfiguration(VisualDiffError):
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
