"""
Region Classifier Module
Assigns severity and semantic type to clustered diff regions by sampling
the colors of both images under each member pixel.
"""

import logging
from dataclasses import replace
from typing import Tuple

import numpy as np

from .config import SeverityRules, TypeRules
from .models import ColorCount, PixelBuffer, Region
from .region_clusterer import PixelCluster

logger = logging.getLogger(__name__)

_DESCRIPTIONS = {
    'color': "{size} area has a color difference across {count} pixels",
    'shape': "{size} area has a shape difference, likely a border or corner radius issue",
    'position': "{size} area is offset from its expected position ({count} pixels)",
    'size': "{size} area has a size difference across {count} pixels",
}


def color_histogram(rgb: np.ndarray) -> Tuple[ColorCount, ...]:
    """Frequency of each RGB color in an (N, 3) sample, most frequent first."""
    if rgb.size == 0:
        return ()
    packed = (rgb[:, 0].astype(np.uint32) << 16) | (rgb[:, 1].astype(np.uint32) << 8) | rgb[:, 2].astype(np.uint32)
    colors, counts = np.unique(packed, return_counts=True)
    # np.unique sorts colors ascending; the stable sort keeps that order among equal counts
    order = np.argsort(-counts, kind='stable')
    return tuple(
        ColorCount(color=(int(c >> 16) & 0xFF, int(c >> 8) & 0xFF, int(c) & 0xFF), count=int(n))
        for c, n in zip(colors[order], counts[order])
    )


class RegionClassifier:
    def __init__(self, severity_rules: SeverityRules = None, type_rules: TypeRules = None):
        self.severity_rules = severity_rules or SeverityRules()
        self.type_rules = type_rules or TypeRules()

    def classify(self, cluster: PixelCluster, expected: PixelBuffer, actual: PixelBuffer) -> Region:
        expected_rgb = expected.as_array()[cluster.ys, cluster.xs, :3]
        actual_rgb = actual.as_array()[cluster.ys, cluster.xs, :3]
        distances = np.sqrt(((expected_rgb.astype(np.float64) - actual_rgb.astype(np.float64)) ** 2).sum(axis=1))
        avg_delta = float(distances.mean()) if distances.size else 0.0

        region = Region(
            x=cluster.min_x,
            y=cluster.min_y,
            width=cluster.width,
            height=cluster.height,
            pixel_count=cluster.pixel_count,
            expected_colors=color_histogram(expected_rgb),
            actual_colors=color_histogram(actual_rgb),
            avg_color_delta=avg_delta,
        )
        region_type = self.determine_type(region)
        severity = self.determine_severity(region.pixel_count, avg_delta)
        logger.debug(f"Region ({region.x}, {region.y}) {region.width}x{region.height}: "
                     f"{region_type}/{severity}, avg delta {avg_delta:.1f}")
        return replace(
            region,
            severity=severity,
            type=region_type,
            description=self.describe(region_type, region),
        )

    def determine_type(self, region: Region) -> str:
        """Apply the type rules in order: color, shape, size, then position."""
        rules = self.type_rules
        if region.avg_color_delta > rules.color_delta:
            return 'color'
        aspect = region.aspect_ratio
        if aspect > rules.max_aspect_ratio or aspect < 1 / rules.max_aspect_ratio:
            return 'shape'
        if region.area > rules.size_area:
            return 'size'
        return 'position'

    def determine_severity(self, pixel_count: int, avg_color_delta: float) -> str:
        rules = self.severity_rules
        if pixel_count >= rules.high_pixel_count and avg_color_delta >= rules.high_color_delta:
            return 'high'
        if pixel_count >= rules.medium_pixel_count or avg_color_delta >= rules.medium_color_delta:
            return 'medium'
        return 'low'

    @staticmethod
    def describe(region_type: str, region: Region) -> str:
        return _DESCRIPTIONS[region_type].format(
            size=f"{region.width}x{region.height}",
            count=region.pixel_count,
        )
