"""
Region Clusterer Module
Groups significant-diff pixels into 4-connected regions.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from .models import DiffMask

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PixelCluster:
    """A connected component of significant-diff pixels before classification."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int
    xs: np.ndarray
    ys: np.ndarray

    @property
    def pixel_count(self) -> int:
        return int(self.xs.size)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1


class RegionClusterer:
    def __init__(self, min_region_size: int = 10):
        self.min_region_size = min_region_size

    def cluster(self, mask: DiffMask) -> List[PixelCluster]:
        """Extract connected regions in row-major discovery order.

        Uses an explicit stack so a diff spanning the whole image cannot
        exhaust the interpreter's recursion limit. Components smaller than
        min_region_size are dropped.
        """
        width, height = mask.width, mask.height
        significant = mask.significant().ravel()
        visited = np.zeros(width * height, dtype=bool)
        clusters: List[PixelCluster] = []
        discarded = 0

        for start in np.flatnonzero(significant):
            start = int(start)
            if visited[start]:
                continue
            visited[start] = True
            stack = [start]
            members = []
            min_x = max_x = start % width
            min_y = max_y = start // width

            while stack:
                idx = stack.pop()
                members.append(idx)
                y, x = divmod(idx, width)
                if x < min_x:
                    min_x = x
                elif x > max_x:
                    max_x = x
                if y < min_y:
                    min_y = y
                elif y > max_y:
                    max_y = y

                if x + 1 < width:
                    self._push(idx + 1, significant, visited, stack)
                if x > 0:
                    self._push(idx - 1, significant, visited, stack)
                if y + 1 < height:
                    self._push(idx + width, significant, visited, stack)
                if y > 0:
                    self._push(idx - width, significant, visited, stack)

            if len(members) < self.min_region_size:
                discarded += 1
                continue
            flat = np.array(sorted(members), dtype=np.int64)
            clusters.append(PixelCluster(
                min_x=min_x,
                min_y=min_y,
                max_x=max_x,
                max_y=max_y,
                xs=flat % width,
                ys=flat // width,
            ))

        logger.debug(f"Clustered {len(clusters)} regions, discarded {discarded} below {self.min_region_size} px")
        return clusters

    @staticmethod
    def _push(idx: int, significant: np.ndarray, visited: np.ndarray, stack: list) -> None:
        if significant[idx] and not visited[idx]:
            visited[idx] = True
            stack.append(idx)
