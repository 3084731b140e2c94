import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from diff_engine.models import ColorDifference, Region
from diff_engine.suggestion_engine import SuggestionEngine


def _region(severity, region_type='color', pixel_count=400):
    return Region(x=10, y=10, width=20, height=20, pixel_count=pixel_count, severity=severity, type=region_type)


def _color_diff(count):
    return ColorDifference(expected_color=(255, 255, 255), actual_color=(0, 0, 0), pixel_count=count)


def test_layout_suggestion_below_80():
    suggestions = SuggestionEngine().generate(70.0, [], [])
    assert [s.type for s in suggestions].count('layout') == 1
    layout = suggestions[0]
    assert layout.priority == 'high'
    assert layout.affected_area == 'Entire component'


def test_no_layout_suggestion_at_99():
    suggestions = SuggestionEngine().generate(99.0, [], [])
    assert [s.type for s in suggestions].count('layout') == 0
    assert len(suggestions) == 1
    assert suggestions[0].type == 'general'
    assert suggestions[0].priority == 'low'


def test_focus_suggestion_between_90_and_95():
    suggestions = SuggestionEngine().generate(92.5, [], [])
    assert [(s.type, s.priority) for s in suggestions] == [('general', 'medium')]
    assert SuggestionEngine().generate(85.0, [], []) == []


def test_color_suggestions_from_top_five():
    diffs = [_color_diff(5000), _color_diff(500), _color_diff(101), _color_diff(100), _color_diff(150), _color_diff(2000)]
    suggestions = SuggestionEngine().generate(85.0, [], diffs)
    assert [(s.type, s.priority) for s in suggestions] == [
        ('color', 'high'),
        ('color', 'medium'),
        ('color', 'medium'),
        ('color', 'medium'),
    ]
    assert 'expected rgb(255,255,255), got rgb(0,0,0)' in suggestions[0].description
    assert suggestions[0].affected_area == '5000 pixels'


def test_region_suggestions_only_for_high_severity_in_top_three():
    regions = [_region('high', 'shape'), _region('medium'), _region('low'), _region('high', 'size')]
    suggestions = SuggestionEngine().generate(85.0, regions, [])
    assert [(s.type, s.priority) for s in suggestions] == [('shape', 'high')]
    assert 'border-radius' in suggestions[0].suggested_fix
    assert suggestions[0].affected_area == 'Region (10, 10) 20x20'


def test_each_region_type_has_a_template():
    regions = [_region('high', t) for t in ('position', 'size', 'color')]
    suggestions = SuggestionEngine().generate(85.0, regions, [])
    assert [s.type for s in suggestions] == ['position', 'size', 'color']
    assert len({s.suggested_fix for s in suggestions}) == 3


def test_sorted_by_priority_without_dedup():
    regions = [_region('high', 'color')]
    diffs = [_color_diff(400), _color_diff(4000)]
    suggestions = SuggestionEngine().generate(96.0, regions, diffs)
    assert [s.priority for s in suggestions] == ['high', 'high', 'medium', 'low']
    assert [s.type for s in suggestions] == ['color', 'color', 'color', 'general']


def test_to_dict_keys():
    data = SuggestionEngine().generate(50.0, [], [])[0].to_dict()
    assert set(data) == {'type', 'priority', 'description', 'suggestedFix', 'affectedArea', 'impact'}
