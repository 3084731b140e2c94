"""
Color Analyzer Module
Aggregates (expected color -> actual color) substitutions across the whole image.
"""

import logging
from typing import List

import numpy as np

from .models import ColorDifference, PixelBuffer

logger = logging.getLogger(__name__)


class ColorAnalyzer:
    def __init__(self, tolerance: int = 5, max_differences: int = 20):
        self.tolerance = tolerance
        self.max_differences = max_differences

    def analyze(self, expected: PixelBuffer, actual: PixelBuffer) -> List[ColorDifference]:
        """Most frequent color substitutions, largest pixel count first.

        A pixel counts when any RGB channel differs by more than the
        tolerance. Region membership and the diff mask play no part here.
        """
        expected_rgb = expected.as_array()[..., :3].reshape(-1, 3)
        actual_rgb = actual.as_array()[..., :3].reshape(-1, 3)
        channel_diff = np.abs(expected_rgb.astype(np.int16) - actual_rgb.astype(np.int16))
        changed = (channel_diff > self.tolerance).any(axis=1)
        if not changed.any() or self.max_differences == 0:
            return []

        pairs = (_pack(expected_rgb[changed]) << np.uint64(24)) | _pack(actual_rgb[changed])
        keys, counts = np.unique(pairs, return_counts=True)
        order = np.argsort(-counts, kind='stable')[:self.max_differences]

        differences = [
            ColorDifference(
                expected_color=_unpack(int(keys[i]) >> 24),
                actual_color=_unpack(int(keys[i]) & 0xFFFFFF),
                pixel_count=int(counts[i]),
            )
            for i in order
        ]
        logger.debug(f"Found {len(keys)} distinct color substitutions, reporting {len(differences)}")
        return differences


def _pack(rgb: np.ndarray) -> np.ndarray:
    rgb = rgb.astype(np.uint64)
    return (rgb[:, 0] << np.uint64(16)) | (rgb[:, 1] << np.uint64(8)) | rgb[:, 2]


def _unpack(value: int):
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF
