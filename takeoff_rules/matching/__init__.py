"""
Condition matching against feature records.
"""

from .values import MISSING, FeatureValueResolver, values_equal
from .matcher import ConditionMatcher, matches

__all__ = [
    "MISSING",
    "FeatureValueResolver",
    "values_equal",
    "ConditionMatcher",
    "matches",
]
