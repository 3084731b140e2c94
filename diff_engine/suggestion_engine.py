"""
Suggestion Engine Module
Turns match statistics, classified regions and color substitutions into
a prioritized list of remediation hints.
"""

import logging
from typing import List, Sequence

from .config import SuggestionRules
from .models import PRIORITY_ORDER, ColorDifference, Region, Suggestion

logger = logging.getLogger(__name__)

# Per region type: (description, suggested fix)
REGION_TEMPLATES = {
    'color': ("Large area with a color difference detected",
              "Check background-color, border-color or text color settings"),
    'shape': ("Shape or border difference detected",
              "Check border-radius, border-width or the element's shape"),
    'position': ("Position offset detected",
                 "Check position, top, left, transform and other positioning properties"),
    'size': ("Size difference detected",
             "Check width, height, padding, margin and other sizing properties"),
}


class SuggestionEngine:
    def __init__(self, rules: SuggestionRules = None):
        self.rules = rules or SuggestionRules()

    def generate(self,
                 match_percentage: float,
                 regions: Sequence[Region],
                 color_differences: Sequence[ColorDifference]) -> List[Suggestion]:
        """Build suggestions from independent rules, highest priority first.

        regions must already be ranked by severity then pixel count, and
        color_differences by pixel count. Rules may overlap; nothing is
        deduplicated.
        """
        rules = self.rules
        suggestions: List[Suggestion] = []

        if match_percentage < rules.layout_match_below:
            suggestions.append(Suggestion(
                type='layout',
                priority='high',
                description="Overall match is low; check the component's basic layout and dimensions",
                suggested_fix="Check width, height, padding, margin and other base style properties",
                affected_area="Entire component",
                impact='high',
            ))

        for diff in color_differences[:rules.top_color_differences]:
            if diff.pixel_count <= rules.color_min_pixels:
                continue
            priority = 'high' if diff.pixel_count > rules.color_high_pixels else 'medium'
            suggestions.append(Suggestion(
                type='color',
                priority=priority,
                description=f"Significant color difference: expected {diff.expected_css}, got {diff.actual_css}",
                suggested_fix=f"background-color: {diff.expected_css}; or color: {diff.expected_css};",
                affected_area=f"{diff.pixel_count} pixels",
                impact=priority,
            ))

        for region in regions[:rules.top_regions]:
            if region.severity != 'high':
                continue
            description, fix = REGION_TEMPLATES[region.type]
            suggestions.append(Suggestion(
                type=region.type,
                priority='high',
                description=description,
                suggested_fix=fix,
                affected_area=f"Region ({region.x}, {region.y}) {region.width}x{region.height}",
                impact='high',
            ))

        if match_percentage >= rules.polish_match_at_least:
            suggestions.append(Suggestion(
                type='general',
                priority='low',
                description="Excellent match; consider fine-tuning the details",
                suggested_fix="Check font rendering, anti-aliasing settings or small spacing adjustments",
                affected_area="Detail polish",
                impact='low',
            ))
        elif match_percentage >= rules.focus_match_at_least:
            suggestions.append(Suggestion(
                type='general',
                priority='medium',
                description="Good match; focus on the major difference regions",
                suggested_fix="Prioritize the largest difference regions",
                affected_area="Major difference regions",
                impact='medium',
            ))

        # sorted() is stable, so rule order is kept within a priority
        suggestions = sorted(suggestions, key=lambda s: -PRIORITY_ORDER[s.priority])
        logger.debug(f"Generated {len(suggestions)} suggestions at {match_percentage:.2f}% match")
        return suggestions
