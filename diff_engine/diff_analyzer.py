"""
Visual Diff Analyzer
Coordinates pixel comparison, region clustering, classification, zoning,
heatmap and suggestion generation into a single ComparisonResult.
"""

from dataclasses import replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union
import logging

from .color_analyzer import ColorAnalyzer
from .config import DiffConfig
from .errors import InvalidConfiguration, VisualDiffError
from .heatmap_aggregator import HeatmapAggregator
from .models import SEVERITY_ORDER, ComparisonResult, PixelBuffer
from .pixel_comparator import PixelComparator, check_dimensions
from .region_classifier import RegionClassifier
from .region_clusterer import RegionClusterer
from .spatial_tagger import SpatialTagger
from .suggestion_engine import SuggestionEngine

logger = logging.getLogger(__name__)

ENGINE_VERSION = '1.0.0'

ConfigLike = Union[DiffConfig, Mapping[str, Any], None]


def resolve_config(config: ConfigLike) -> DiffConfig:
    if config is None:
        config = DiffConfig()
    elif isinstance(config, Mapping):
        return DiffConfig.from_dict(config)
    elif not isinstance(config, DiffConfig):
        raise InvalidConfiguration(f"config must be a DiffConfig or a mapping, got {type(config).__name__}")
    config.validate()
    return config


class VisualDiffAnalyzer:
    def __init__(self, config: ConfigLike = None):
        self.config = resolve_config(config)
        self.comparator = PixelComparator(self.config.threshold, self.config.include_anti_aliasing)
        self.clusterer = RegionClusterer(self.config.min_region_size)
        self.classifier = RegionClassifier(self.config.severity_rules, self.config.type_rules)
        self.heatmap_aggregator = HeatmapAggregator(self.config.grid_size)
        self.color_analyzer = ColorAnalyzer(self.config.color_tolerance, self.config.max_color_differences)
        self.suggestion_engine = SuggestionEngine(self.config.suggestion_rules)

    def analyze(self, expected: PixelBuffer, actual: PixelBuffer) -> ComparisonResult:
        """Compare a reference rendering against a captured one.

        Fails with DimensionMismatch before any pixel work when the sizes
        differ. Either a complete result is returned or an exception is
        raised; nothing partial escapes.
        """
        for name, buffer in (('expected', expected), ('actual', actual)):
            if not isinstance(buffer, PixelBuffer):
                raise TypeError(f"{name} must be a PixelBuffer, got {type(buffer).__name__}")
        check_dimensions(expected, actual)
        width, height = expected.size
        logger.info(f"Starting visual diff analysis of {width}x{height} images")

        try:
            comparison = self.comparator.compare(expected, actual)
            tagger = SpatialTagger(width, height, self.config.zone_rules)

            regions = []
            for cluster in self.clusterer.cluster(comparison.mask):
                region = self.classifier.classify(cluster, expected, actual)
                regions.append(replace(region, zone=tagger.tag_region(region)))
            regions.sort(key=lambda r: (-SEVERITY_ORDER[r.severity], -r.pixel_count))
            regions = regions[:self.config.max_reported_regions]

            heatmap = self.heatmap_aggregator.aggregate(comparison.mask)
            color_differences = self.color_analyzer.analyze(expected, actual)
            suggestions = self.suggestion_engine.generate(comparison.match_percentage, regions, color_differences)
        except VisualDiffError:
            raise
        except Exception as e:
            logger.error(f"Visual diff analysis failed: {str(e)}", exc_info=True)
            raise

        result = ComparisonResult(
            match_percentage=comparison.match_percentage,
            diff_pixel_count=comparison.diff_pixel_count,
            total_pixel_count=comparison.total_pixel_count,
            width=width,
            height=height,
            regions=tuple(regions),
            color_differences=tuple(color_differences),
            heatmap=heatmap,
            suggestions=tuple(suggestions),
            metadata=MappingProxyType({
                'config': self.config.to_dict(),
                'analysisTimestamp': datetime.now(timezone.utc).isoformat(),
                'engineVersion': ENGINE_VERSION,
            }),
            anti_alias_pixel_count=comparison.anti_alias_pixel_count,
            mask=comparison.mask,
        )
        logger.info(f"Visual diff complete: {result.match_percentage:.2f}% match, "
                    f"{len(result.regions)} regions, {len(result.suggestions)} suggestions")
        return result


def analyze(expected: PixelBuffer, actual: PixelBuffer, config: ConfigLike = None) -> ComparisonResult:
    """Run the full diff analysis with a one-off analyzer."""
    return VisualDiffAnalyzer(config).analyze(expected, actual)


def get_match_rating(match_percentage: float) -> str:
    if match_percentage >= 99:
        return 'excellent'
    elif match_percentage >= 95:
        return 'good'
    elif match_percentage >= 90:
        return 'fair'
    elif match_percentage >= 80:
        return 'poor'
    else:
        return 'very_poor'


def summarize(result: ComparisonResult) -> Dict[str, Any]:
    """Headline numbers for a result, e.g. for a CLI status line."""
    by_severity = {'high': 0, 'medium': 0, 'low': 0}
    by_type: Dict[str, int] = {}
    for region in result.regions:
        by_severity[region.severity] += 1
        by_type[region.type] = by_type.get(region.type, 0) + 1
    return {
        'match_percentage': result.match_percentage,
        'rating': get_match_rating(result.match_percentage),
        'diff_pixels': result.diff_pixel_count,
        'total_pixels': result.total_pixel_count,
        'regions': len(result.regions),
        'regions_by_severity': by_severity,
        'regions_by_type': by_type,
        'high_priority_suggestions': sum(1 for s in result.suggestions if s.priority == 'high'),
    }
