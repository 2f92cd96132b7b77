"""
Feature value lookup.

A feature exposes values in two layers: its direct fields (id, type,
length, area, count) and its `props` bag. Lookups walk the layers in that
order and stop at the first one that has the key. A direct field holding
None counts as absent.
"""

import math
from typing import Any, Dict

from ..models import DIRECT_FIELDS, MEASURE_FIELDS, Feature, is_number

MISSING = object()


def _as_number(value: Any):
    """Numbers pass through; numeric strings ("12", "0.5") are parsed."""
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        if math.isfinite(number):
            return int(number) if number.is_integer() and "." not in value else number
    return None


class FeatureValueResolver:
    """Resolves a key on a feature: direct field, then props."""

    def direct(self, feature: Feature, key: str) -> Any:
        if key in DIRECT_FIELDS:
            value = getattr(feature, key)
            if value is not None:
                return value
        return MISSING

    def prop(self, feature: Feature, key: str) -> Any:
        return feature.props.get(key, MISSING)

    def resolve(self, feature: Feature, key: str) -> Any:
        """Return the feature's value for `key`, or MISSING."""
        for layer in (self.direct, self.prop):
            value = layer(feature, key)
            if value is not MISSING:
                return value
        return MISSING

    def numeric_values(self, feature: Feature) -> Dict[str, Any]:
        """
        Numeric values visible to quantity expressions.

        Direct measurements override props of the same name, matching the
        lookup order of `resolve`.
        """
        values = {}
        for key, value in feature.props.items():
            number = _as_number(value)
            if number is not None:
                values[key] = number
        for key in MEASURE_FIELDS:
            value = getattr(feature, key)
            if is_number(value):
                values[key] = value
        return values


def values_equal(actual: Any, expected: Any) -> bool:
    """
    Strict equality for condition matching.

    Booleans only equal booleans, numbers compare by value (1 == 1.0),
    everything else must share a type and compare equal.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if is_number(actual) and is_number(expected):
        return actual == expected
    return type(actual) is type(expected) and actual == expected

