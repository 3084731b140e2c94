"""
Diff Image Module
Builds RGBA visualizations of a diff mask and its heatmap.

Both functions return numpy arrays; encoding them to PNG or drawing them
into a report is up to the caller.
"""

import cv2
import numpy as np

from diff_engine.config import DiffConfig
from diff_engine.models import ANTI_ALIAS, SIGNIFICANT, DiffMask, Heatmap, PixelBuffer
from diff_engine.errors import DimensionMismatch


def render_diff_image(expected: PixelBuffer, mask: DiffMask, config: DiffConfig = None) -> np.ndarray:
    """Expected image faded to grayscale, with anti-aliased pixels in aa_color
    and significant differences in diff_color.

    config.alpha is the opacity of the expected image underneath the markers.
    """
    config = config or DiffConfig()
    if expected.size != (mask.width, mask.height):
        raise DimensionMismatch(expected.size, (mask.width, mask.height))

    pixels = expected.as_array().astype(np.float64)
    luma = pixels[..., 0] * 0.29889531 + pixels[..., 1] * 0.58662247 + pixels[..., 2] * 0.11448223
    weight = config.alpha * pixels[..., 3] / 255.0
    gray = np.clip(255.0 + (luma - 255.0) * weight, 0, 255).astype(np.uint8)

    image = np.empty((mask.height, mask.width, 4), dtype=np.uint8)
    image[..., 0] = gray
    image[..., 1] = gray
    image[..., 2] = gray
    image[..., 3] = 255
    image[mask.cells == ANTI_ALIAS, :3] = config.aa_color
    image[mask.cells == SIGNIFICANT, :3] = config.diff_color
    return image


def render_heatmap(heatmap: Heatmap, width: int, height: int, colormap: int = cv2.COLORMAP_JET) -> np.ndarray:
    """Upscale the heatmap grid to width x height and color it, returning RGBA."""
    grid = np.array(heatmap.cells, dtype=np.float64).reshape(heatmap.height, heatmap.width)
    levels = np.round(grid * 255).astype(np.uint8)
    # Each grid cell covers grid_size pixels; crop the padding of the last row/column
    scaled = cv2.resize(
        levels,
        (heatmap.width * heatmap.grid_size, heatmap.height * heatmap.grid_size),
        interpolation=cv2.INTER_NEAREST,
    )[:height, :width]
    colored = cv2.applyColorMap(np.ascontiguousarray(scaled), colormap)
    return cv2.cvtColor(colored, cv2.COLOR_BGR2RGBA)
