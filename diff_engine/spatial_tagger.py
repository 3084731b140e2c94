"""
Spatial Tagger Module
Labels image coordinates as border, text or content zones.

This is a best-effort geometric approximation. It does not inspect the
layout or detect text; a region is called "text" only because it falls in
the band where component labels usually sit.
"""

from .config import ZoneRules
from .models import Region


class SpatialTagger:
    def __init__(self, width: int, height: int, rules: ZoneRules = None):
        self.width = width
        self.height = height
        self.rules = rules or ZoneRules()

    @property
    def margin(self) -> float:
        return self.rules.border_ratio * min(self.width, self.height)

    def tag(self, x: float, y: float) -> str:
        margin = self.margin
        if x < margin or y < margin or x >= self.width - margin or y >= self.height - margin:
            return 'border'

        band_width = self.width * self.rules.text_width_ratio
        band_height = self.height * self.rules.text_height_ratio
        left = (self.width - band_width) / 2
        top = (self.height - band_height) / 2
        if left <= x < left + band_width and top <= y < top + band_height:
            return 'text'
        return 'content'

    def tag_region(self, region: Region) -> str:
        """Tag a region by the center of its bounding box."""
        return self.tag(*region.center)
