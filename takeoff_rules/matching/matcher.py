"""
Condition Matcher - decides whether a rule applies to a feature.

Every key in `when` must resolve on the feature (direct field, then props)
and equal the expected value. A missing key is a non-match, not an error.
Rules are independent: a feature may match any number of them.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..models import Feature
from ..ruleset.schema import Rule
from .values import MISSING, FeatureValueResolver, values_equal

logger = logging.getLogger(__name__)


class ConditionMatcher:
    """Exact-match evaluation of `when` clauses."""

    def __init__(self, resolver: Optional[FeatureValueResolver] = None):
        self.resolver = resolver or FeatureValueResolver()

    def matches(self, when: Mapping[str, Any], feature: Feature) -> bool:
        for key, expected in when.items():
            actual = self.resolver.resolve(feature, key)
            if actual is MISSING or not values_equal(actual, expected):
                return False
        return True

    def matching_rules(self, rules, feature: Feature) -> List[Rule]:
        """Rules whose condition the feature satisfies, in rule-set order."""
        matched = [rule for rule in rules if self.matches(rule.when, feature)]
        if matched:
            logger.debug(f"Feature {feature.id} (type: {feature.type}) matched {len(matched)} rule(s)")
        return matched


def matches(when: Mapping[str, Any], feature: Feature) -> bool:
    """Module-level shortcut using the default resolver."""
    return ConditionMatcher().matches(when, feature)
