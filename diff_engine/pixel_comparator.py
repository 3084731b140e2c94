"""
Pixel Comparator Module
Per-pixel comparison of two RGBA buffers into a tri-state diff mask.

Color distance is measured in the YIQ space (perceptual weighting of
brightness and chroma) after blending semi-transparent pixels onto white,
so the threshold behaves the same for opaque and translucent content.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import DimensionMismatch
from .models import ANTI_ALIAS, SIGNIFICANT, UNCHANGED, DiffMask, PixelBuffer

logger = logging.getLogger(__name__)

# Largest possible YIQ delta between two colors (black vs white)
MAX_YIQ_DELTA = 35215.0

_Y = np.array([0.29889531, 0.58662247, 0.11448223])
_I = np.array([0.59597799, -0.27417610, -0.32180189])
_Q = np.array([0.21147017, -0.52261711, 0.31114694])


@dataclass(frozen=True)
class PixelComparison:
    mask: DiffMask
    match_percentage: float
    diff_pixel_count: int
    anti_alias_pixel_count: int
    total_pixel_count: int


def check_dimensions(expected: PixelBuffer, actual: PixelBuffer) -> None:
    if expected.size != actual.size:
        raise DimensionMismatch(expected.size, actual.size)


def blend_with_white(pixels: np.ndarray) -> np.ndarray:
    """Composite (H, W, 4) RGBA onto white, returning (H, W, 3) floats."""
    rgb = pixels[..., :3].astype(np.float64)
    alpha = pixels[..., 3:4].astype(np.float64) / 255.0
    return 255.0 + (rgb - 255.0) * alpha


def brightness(pixels: np.ndarray) -> np.ndarray:
    return blend_with_white(pixels) @ _Y


def yiq_delta(expected: np.ndarray, actual: np.ndarray) -> np.ndarray:
    """Squared YIQ distance for every pixel, in [0, MAX_YIQ_DELTA]."""
    blended_expected = blend_with_white(expected)
    blended_actual = blend_with_white(actual)
    dy = blended_expected @ _Y - blended_actual @ _Y
    di = blended_expected @ _I - blended_actual @ _I
    dq = blended_expected @ _Q - blended_actual @ _Q
    return 0.5053 * dy * dy + 0.299 * di * di + 0.1957 * dq * dq


def _neighbourhood(x: int, y: int, width: int, height: int) -> Tuple[int, int, int, int]:
    return max(x - 1, 0), max(y - 1, 0), min(x + 1, width - 1), min(y + 1, height - 1)


def antialias_candidates(luma: np.ndarray) -> np.ndarray:
    """Vectorized first stage of is_antialiased for a whole (H, W) brightness plane.

    Keeps pixels with at most two identical neighbours (image edges count as
    one) that also have both a darker and a brighter neighbour. Everything
    dropped here would be rejected by is_antialiased before its sibling checks.
    """
    height, width = luma.shape
    padded = np.pad(luma, 1, constant_values=np.nan)
    zeroes = np.zeros((height, width), dtype=np.int32)
    zeroes[0, :] = zeroes[-1, :] = 1
    zeroes[:, 0] = zeroes[:, -1] = 1
    darker = np.zeros((height, width), dtype=bool)
    brighter = np.zeros((height, width), dtype=bool)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            neighbour = padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width]
            zeroes += neighbour == luma
            darker |= neighbour < luma
            brighter |= neighbour > luma
    return (zeroes <= 2) & darker & brighter


def has_many_siblings(pixels: np.ndarray, x: int, y: int) -> bool:
    """True when at least three pixels around (x, y) are identical to it (image edges count as one)."""
    height, width = pixels.shape[:2]
    x0, y0, x2, y2 = _neighbourhood(x, y, width, height)
    zeroes = 1 if x in (x0, x2) or y in (y0, y2) else 0
    center = pixels[y, x]
    for nx in range(x0, x2 + 1):
        for ny in range(y0, y2 + 1):
            if nx == x and ny == y:
                continue
            if np.array_equal(pixels[ny, nx], center):
                zeroes += 1
            if zeroes > 2:
                return True
    return False


def is_antialiased(pixels: np.ndarray, luma: np.ndarray, other: np.ndarray, x: int, y: int) -> bool:
    """Heuristic check whether the pixel at (x, y) looks like an anti-aliased edge.

    A pixel with more than two identical neighbours is part of a flat area.
    Otherwise it must sit between a darker and a brighter neighbour, and one
    of those extremes must itself be part of a flat area in both images.
    """
    height, width = pixels.shape[:2]
    x0, y0, x2, y2 = _neighbourhood(x, y, width, height)
    zeroes = 1 if x in (x0, x2) or y in (y0, y2) else 0
    lowest = highest = 0.0
    low_at = high_at = None
    center = luma[y, x]
    for nx in range(x0, x2 + 1):
        for ny in range(y0, y2 + 1):
            if nx == x and ny == y:
                continue
            delta = center - luma[ny, nx]
            if delta == 0:
                zeroes += 1
                if zeroes > 2:
                    return False
            elif delta < lowest:
                lowest, low_at = delta, (nx, ny)
            elif delta > highest:
                highest, high_at = delta, (nx, ny)

    if lowest == 0 or highest == 0:
        return False
    return ((has_many_siblings(pixels, *low_at) and has_many_siblings(other, *low_at))
            or (has_many_siblings(pixels, *high_at) and has_many_siblings(other, *high_at)))


class PixelComparator:
    def __init__(self, threshold: float = 0.1, include_anti_aliasing: bool = True):
        self.threshold = threshold
        self.include_anti_aliasing = include_anti_aliasing

    @property
    def max_delta(self) -> float:
        return MAX_YIQ_DELTA * self.threshold * self.threshold

    def compare(self, expected: PixelBuffer, actual: PixelBuffer) -> PixelComparison:
        """Classify every pixel as unchanged, anti-alias-diff or significant-diff."""
        check_dimensions(expected, actual)
        width, height = expected.size
        total = width * height
        cells = np.full((height, width), UNCHANGED, dtype=np.uint8)

        if not np.array_equal(expected.data, actual.data):
            expected_px = expected.as_array()
            actual_px = actual.as_array()
            over = yiq_delta(expected_px, actual_px) > self.max_delta
            cells[over] = SIGNIFICANT
            if not self.include_anti_aliasing:
                expected_luma = brightness(expected_px)
                actual_luma = brightness(actual_px)
                # Flat-area pixels in both images cannot be anti-aliased
                candidates = over & (antialias_candidates(expected_luma) | antialias_candidates(actual_luma))
                for y, x in np.argwhere(candidates):
                    if (is_antialiased(expected_px, expected_luma, actual_px, x, y)
                            or is_antialiased(actual_px, actual_luma, expected_px, x, y)):
                        cells[y, x] = ANTI_ALIAS

        mask = DiffMask(width=width, height=height, cells=cells)
        diff_count = mask.significant_count
        aa_count = mask.anti_alias_count
        match_percentage = (total - diff_count) / total * 100
        logger.debug(f"Pixel comparison: {diff_count} significant, {aa_count} anti-aliased of {total} pixels")
        return PixelComparison(
            mask=mask,
            match_percentage=match_percentage,
            diff_pixel_count=diff_count,
            anti_alias_pixel_count=aa_count,
            total_pixel_count=total,
        )
