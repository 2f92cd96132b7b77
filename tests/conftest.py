"""
Shared fixtures for rule engine tests.
"""

import pytest

from takeoff_rules.models import Feature
from takeoff_rules.ruleset import load_rule_set


@pytest.fixture
def pipe_rules_raw():
    """Raw rule set: water pipe plus a wall rule with an area template."""
    return {
        "version": 1,
        "units": {"linear": "ft", "area": "ft2"},
        "vars": {"waste_pct": 0.07, "height_ft": 10, "waste_floor": 1.1},
        "rules": [
            {
                "when": {"feature": "pipe", "service": "Water"},
                "materials": [
                    {"sku": "PVC-2IN", "qty": "length*(1+waste_pct)", "uom": "ft"},
                ],
            },
            {
                "when": {"type": "room"},
                "materials": [
                    {"sku": "FLOOR-TILE", "qty": "area * waste_floor"},
                    {"sku": "BASEBOARD", "qty": "perimeter"},
                ],
            },
        ],
    }


@pytest.fixture
def pipe_rules(pipe_rules_raw):
    return load_rule_set(pipe_rules_raw)


@pytest.fixture
def water_pipe():
    return Feature(
        id="f1",
        type="pipe",
        length=100,
        props={"feature": "pipe", "service": "Water"},
    )


@pytest.fixture
def mixed_features():
    """Feature records as they come from extraction."""
    return [
        {"id": "w1", "type": "wall", "length": 40, "props": {"partitionType": "PT-1"}},
        {"id": "p1", "type": "pipe", "length": 100, "props": {"service": "CW", "diameterIn": 1}},
        {"id": "w2", "type": "wall", "length": 24, "props": {"partitionType": "PT-1"}},
        {"id": "x1", "type": "fixture", "count": 8, "props": {"fixtureType": "FD2"}},
        {"id": "r1", "type": "room", "area": 350},
        {"id": "s1", "type": "fixture", "count": 2, "props": {"fixtureType": "Sink"}},
    ]
