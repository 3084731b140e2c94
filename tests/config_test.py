import sys
import os
import numpy as np
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from diff_engine.config import DiffConfig, SeverityRules, ZoneRules
from diff_engine.diff_analyzer import analyze
from diff_engine.errors import InvalidConfiguration
from diff_engine.models import PixelBuffer


def test_defaults():
    config = DiffConfig()
    config.validate()
    assert config.threshold == 0.1
    assert config.grid_size == 10
    assert config.min_region_size == 10
    assert config.include_anti_aliasing is True
    assert config.zone_rules == ZoneRules(0.05, 0.6, 0.3)


def test_from_dict_builds_nested_rules():
    config = DiffConfig.from_dict({
        'threshold': 0.2,
        'grid_size': 8,
        'severity_rules': {'high_pixel_count': 500},
        'diff_color': [0, 0, 255],
    })
    assert config.threshold == 0.2
    assert config.grid_size == 8
    assert config.severity_rules == SeverityRules(high_pixel_count=500)
    assert config.diff_color == (0, 0, 255)


def test_to_dict_round_trips_through_from_dict():
    config = DiffConfig(threshold=0.3, max_reported_regions=5)
    assert DiffConfig.from_dict(config.to_dict()) == config


@pytest.mark.parametrize('values, field', [
    ({'threshold': 1.5}, 'threshold'),
    ({'threshold': -0.1}, 'threshold'),
    ({'alpha': 2}, 'alpha'),
    ({'grid_size': 0}, 'grid_size'),
    ({'min_region_size': 2.5}, 'min_region_size'),
    ({'max_reported_regions': -1}, 'max_reported_regions'),
    ({'include_anti_aliasing': 'yes'}, 'include_anti_aliasing'),
    ({'aa_color': [300, 0, 0]}, 'aa_color'),
    ({'zone_rules': {'border_ratio': 0.7}}, 'zone_rules.border_ratio'),
    ({'type_rules': {'max_aspect_ratio': 0.5}}, 'type_rules.max_aspect_ratio'),
    ({'severity_rules': 5}, 'severity_rules'),
    ({'zone_rules': 'wide'}, 'zone_rules'),
    ({'suggestion_rules': [95, 90]}, 'suggestion_rules'),
    ({'aa_color': 5}, 'aa_color'),
    ({'diff_color': 'red'}, 'diff_color'),
])
def test_out_of_range_values_are_rejected(values, field):
    with pytest.raises(InvalidConfiguration) as exc:
        DiffConfig.from_dict(values)
    assert exc.value.field == field


def test_unknown_keys_are_rejected():
    with pytest.raises(InvalidConfiguration):
        DiffConfig.from_dict({'treshold': 0.1})
    with pytest.raises(InvalidConfiguration):
        DiffConfig.from_dict({'severity_rules': {'huge': 1}})


def test_configuration_checked_before_dimensions():
    small = PixelBuffer(10, 10, np.zeros(400, dtype=np.uint8))
    tall = PixelBuffer(10, 11, np.zeros(440, dtype=np.uint8))
    with pytest.raises(InvalidConfiguration):
        analyze(small, tall, DiffConfig(threshold=3.0))


def test_malformed_values_fail_before_pixel_work():
    img = PixelBuffer(10, 10, np.zeros(400, dtype=np.uint8))
    for values in ({'severity_rules': 5}, {'aa_color': 5}, {'type_rules': None}):
        with pytest.raises(InvalidConfiguration) as exc:
            analyze(img, img, values)
        assert exc.value.field == next(iter(values))


def test_constructed_config_with_wrong_rule_type_is_rejected():
    with pytest.raises(InvalidConfiguration) as exc:
        DiffConfig(type_rules=3).validate()
    assert exc.value.field == 'type_rules'
    with pytest.raises(InvalidConfiguration):
        analyze(PixelBuffer(2, 2, bytes(16)), PixelBuffer(2, 2, bytes(16)), DiffConfig(zone_rules={'border_ratio': 0.1}))
