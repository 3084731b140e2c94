"""
Heatmap Aggregator Module
Downsamples the diff mask into a coarse density grid.
"""

import logging
import math

import numpy as np

from .models import DiffMask, Heatmap

logger = logging.getLogger(__name__)


class HeatmapAggregator:
    def __init__(self, grid_size: int = 10):
        self.grid_size = grid_size

    def aggregate(self, mask: DiffMask) -> Heatmap:
        """Count significant pixels per grid cell and normalize by the busiest cell.

        Works on the raw mask, so cells covered only by regions too small to
        report still show up.
        """
        size = self.grid_size
        grid_width = math.ceil(mask.width / size)
        grid_height = math.ceil(mask.height / size)

        # Pad to whole cells, then sum each size x size block
        padded = np.zeros((grid_height * size, grid_width * size), dtype=np.int64)
        padded[:mask.height, :mask.width] = mask.significant()
        counts = padded.reshape(grid_height, size, grid_width, size).sum(axis=(1, 3))

        max_count = int(counts.max()) if counts.size else 0
        if max_count > 0:
            values = counts / max_count
        else:
            values = np.zeros(counts.shape, dtype=np.float64)

        logger.debug(f"Heatmap {grid_width}x{grid_height} (cell {size}px), densest cell {max_count}")
        return Heatmap(
            grid_size=size,
            width=grid_width,
            height=grid_height,
            cells=tuple(tuple(float(v) for v in row) for row in values),
            max_count=max_count,
        )
