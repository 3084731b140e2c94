"""
Diff Configuration Module
Tunable thresholds and rule tables for the visual diff engine.

Every breakpoint used by the classifier, spatial tagger and suggestion
engine lives here so the rule tables can be tested and tuned without
touching the algorithms.
"""

from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import InvalidConfiguration


@dataclass(frozen=True)
class SeverityRules:
    """Severity breakpoints.

    high:   pixel_count >= high_pixel_count AND avg delta >= high_color_delta
    medium: pixel_count >= medium_pixel_count OR avg delta >= medium_color_delta
    low:    everything else
    """
    high_pixel_count: int = 250
    high_color_delta: float = 100.0
    medium_pixel_count: int = 100
    medium_color_delta: float = 50.0


@dataclass(frozen=True)
class TypeRules:
    """Ordered semantic type rules: color, then shape, then size, else position."""
    color_delta: float = 100.0
    max_aspect_ratio: float = 5.0
    size_area: int = 500


@dataclass(frozen=True)
class ZoneRules:
    # Fractions of the image; the border band is relative to min(width, height)
    border_ratio: float = 0.05
    text_width_ratio: float = 0.6
    text_height_ratio: float = 0.3


@dataclass(frozen=True)
class SuggestionRules:
    layout_match_below: float = 80.0
    polish_match_at_least: float = 95.0
    focus_match_at_least: float = 90.0
    top_color_differences: int = 5
    color_min_pixels: int = 100
    color_high_pixels: int = 1000
    top_regions: int = 3


_NESTED = {
    'severity_rules': SeverityRules,
    'type_rules': TypeRules,
    'zone_rules': ZoneRules,
    'suggestion_rules': SuggestionRules,
}


@dataclass(frozen=True)
class DiffConfig:
    threshold: float = 0.1
    include_anti_aliasing: bool = True
    alpha: float = 0.1
    grid_size: int = 10
    min_region_size: int = 10
    max_reported_regions: int = 50
    color_tolerance: int = 5
    max_color_differences: int = 20
    aa_color: Tuple[int, int, int] = (255, 255, 0)
    diff_color: Tuple[int, int, int] = (255, 0, 0)
    severity_rules: SeverityRules = field(default_factory=SeverityRules)
    type_rules: TypeRules = field(default_factory=TypeRules)
    zone_rules: ZoneRules = field(default_factory=ZoneRules)
    suggestion_rules: SuggestionRules = field(default_factory=SuggestionRules)

    @classmethod
    def from_dict(cls, values: Optional[Mapping[str, Any]] = None) -> 'DiffConfig':
        """Build a config from plain mappings, e.g. parsed JSON or CLI options."""
        values = dict(values or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration keys: {', '.join(unknown)}", field=unknown[0])

        kwargs: Dict[str, Any] = {}
        for name, value in values.items():
            rule_cls = _NESTED.get(name)
            if rule_cls is not None and isinstance(value, Mapping):
                rule_known = {f.name for f in fields(rule_cls)}
                bad = sorted(set(value) - rule_known)
                if bad:
                    raise InvalidConfiguration(f"Unknown {name} keys: {', '.join(bad)}", field=name)
                value = rule_cls(**value)
            elif rule_cls is not None and not isinstance(value, rule_cls):
                raise InvalidConfiguration(f"{name} must be a mapping, got {type(value).__name__}", field=name)
            elif name in ('aa_color', 'diff_color'):
                if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                    raise InvalidConfiguration(f"{name} must be an (r, g, b) sequence, got {value!r}", field=name)
                value = tuple(value)
            kwargs[name] = value
        config = cls(**kwargs)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['aa_color'] = list(self.aa_color)
        data['diff_color'] = list(self.diff_color)
        return data

    def validate(self) -> None:
        """Raise InvalidConfiguration if any value is outside its documented range."""
        _check_fraction('threshold', self.threshold)
        _check_fraction('alpha', self.alpha)
        if not isinstance(self.include_anti_aliasing, bool):
            raise InvalidConfiguration("include_anti_aliasing must be a bool", field='include_anti_aliasing')
        _check_int('grid_size', self.grid_size, minimum=1)
        _check_int('min_region_size', self.min_region_size, minimum=1)
        _check_int('max_reported_regions', self.max_reported_regions, minimum=0)
        _check_int('color_tolerance', self.color_tolerance, minimum=0)
        _check_int('max_color_differences', self.max_color_differences, minimum=0)
        _check_color('aa_color', self.aa_color)
        _check_color('diff_color', self.diff_color)
        for name, rule_cls in _NESTED.items():
            if not isinstance(getattr(self, name), rule_cls):
                raise InvalidConfiguration(f"{name} must be a {rule_cls.__name__}", field=name)

        severity = self.severity_rules
        _check_int('severity_rules.high_pixel_count', severity.high_pixel_count, minimum=0)
        _check_int('severity_rules.medium_pixel_count', severity.medium_pixel_count, minimum=0)
        _check_non_negative('severity_rules.high_color_delta', severity.high_color_delta)
        _check_non_negative('severity_rules.medium_color_delta', severity.medium_color_delta)

        types = self.type_rules
        _check_non_negative('type_rules.color_delta', types.color_delta)
        if _not_number(types.max_aspect_ratio) or types.max_aspect_ratio < 1:
            raise InvalidConfiguration("type_rules.max_aspect_ratio must be >= 1", field='type_rules.max_aspect_ratio')
        _check_int('type_rules.size_area', types.size_area, minimum=0)

        zones = self.zone_rules
        if _not_number(zones.border_ratio) or not 0 <= zones.border_ratio < 0.5:
            raise InvalidConfiguration("zone_rules.border_ratio must be in [0, 0.5)", field='zone_rules.border_ratio')
        _check_fraction('zone_rules.text_width_ratio', zones.text_width_ratio)
        _check_fraction('zone_rules.text_height_ratio', zones.text_height_ratio)

        rules = self.suggestion_rules
        for name in ('layout_match_below', 'polish_match_at_least', 'focus_match_at_least'):
            value = getattr(rules, name)
            if _not_number(value) or not 0 <= value <= 100:
                raise InvalidConfiguration(f"suggestion_rules.{name} must be in [0, 100]", field=f'suggestion_rules.{name}')
        for name in ('top_color_differences', 'color_min_pixels', 'color_high_pixels', 'top_regions'):
            _check_int(f'suggestion_rules.{name}', getattr(rules, name), minimum=0)


def _not_number(value) -> bool:
    return isinstance(value, bool) or not isinstance(value, (int, float)) or value != value


def _check_fraction(name: str, value) -> None:
    if _not_number(value) or not 0.0 <= value <= 1.0:
        raise InvalidConfiguration(f"{name} must be a number in [0, 1], got {value!r}", field=name)


def _check_non_negative(name: str, value) -> None:
    if _not_number(value) or value < 0:
        raise InvalidConfiguration(f"{name} must be a non-negative number, got {value!r}", field=name)


def _check_int(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidConfiguration(f"{name} must be an integer >= {minimum}, got {value!r}", field=name)


def _check_color(name: str, value) -> None:
    if (not isinstance(value, tuple) or len(value) != 3
            or any(isinstance(c, bool) or not isinstance(c, int) or not 0 <= c <= 255 for c in value)):
        raise InvalidConfiguration(f"{name} must be an (r, g, b) tuple of 0-255 integers", field=name)
