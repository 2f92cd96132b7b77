"""
Tests for condition matching and feature value lookup.
"""

import logging

import pytest

from takeoff_rules.matching import MISSING, ConditionMatcher, FeatureValueResolver, matches, values_equal
from takeoff_rules.models import Feature
from takeoff_rules.ruleset import Rule, load_builtin_rule_set


@pytest.fixture
def wall():
    return Feature(
        id="w1",
        type="wall",
        length=40,
        props={"partitionType": "PT-1", "fireRating": "1HR", "level": 2},
    )


def test_subset_condition_matches(wall):
    """Test extra feature fields do not prevent a match."""
    assert matches({"type": "wall", "partitionType": "PT-1"}, wall)
    assert matches({"type": "wall"}, wall)


def test_missing_field_never_matches(wall):
    assert not matches({"type": "wall", "service": "CW"}, wall)
    assert not matches({"area": 10}, wall)


def test_value_mismatch(wall):
    assert not matches({"partitionType": "PT-2"}, wall)
    assert not matches({"partitionType": "pt-1"}, wall)
    assert not matches({"level": "2"}, wall)
    assert matches({"level": 2.0}, wall)


def test_direct_field_before_props():
    feature = Feature(id="p1", type="pipe", props={"type": "duct"})
    assert matches({"type": "pipe"}, feature)
    assert not matches({"type": "duct"}, feature)


def test_unset_direct_field_falls_through_to_props():
    feature = Feature(id="p1", type="pipe", length=None, props={"length": 5})
    assert matches({"length": 5}, feature)


@pytest.mark.parametrize(
    "actual, expected, equal",
    [
        (1, 1.0, True),
        (0.75, 0.75, True),
        (True, True, True),
        (True, 1, False),
        (0, False, False),
        ("1", 1, False),
        ("PT-1", "PT-1", True),
        ("PT-1", "pt-1", False),
    ],
)
def test_values_equal(actual, expected, equal):
    assert values_equal(actual, expected) is equal


def test_resolver_layers(wall):
    resolver = FeatureValueResolver()
    assert resolver.resolve(wall, "length") == 40
    assert resolver.resolve(wall, "fireRating") == "1HR"
    assert resolver.resolve(wall, "area") is MISSING
    assert resolver.direct(wall, "partitionType") is MISSING


def test_numeric_values():
    """Test expression values: numeric props plus measurements, measurements win."""
    feature = Feature(
        id="d1",
        type="duct",
        length=30,
        props={"length": 999, "diameterIn": "1.5", "runs": "3", "size": "12x10", "insulated": True},
    )
    values = FeatureValueResolver().numeric_values(feature)
    assert values == {"length": 30, "diameterIn": 1.5, "runs": 3}


def test_matching_rules_in_rule_set_order(caplog):
    rule_set = load_builtin_rule_set("standard_commercial")
    matcher = ConditionMatcher()
    pipe = Feature(id="p1", type="pipe", length=100, props={"service": "CW", "diameterIn": 1})

    with caplog.at_level(logging.DEBUG, logger="takeoff_rules.matching"):
        matched = matcher.matching_rules(rule_set.rules, pipe)

    assert [r.materials[0].sku for r in matched] == ["PVC-1IN"]
    assert "Feature p1 (type: pipe) matched 1 rule(s)" in caplog.text


def test_feature_can_match_several_rules():
    rules = [
        Rule.model_validate({"when": when, "materials": [{"sku": sku, "qty": "count"}]})
        for when, sku in [
            ({"type": "fixture"}, "FIXTURE-TAG"),
            ({"type": "fixture", "fixtureType": "Sink"}, "PLBG-TRAP"),
            ({"type": "fixture", "fixtureType": "Toilet"}, "PLBG-TOILET"),
        ]
    ]
    sink = Feature(id="s1", type="fixture", count=2, props={"fixtureType": "Sink"})
    matched = ConditionMatcher().matching_rules(rules, sink)
    assert [r.materials[0].sku for r in matched] == ["FIXTURE-TAG", "PLBG-TRAP"]
