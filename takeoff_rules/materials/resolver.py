"""
Material Template Resolver - turns a matched rule into candidate line items.

For each template of a matched rule:
1. Build the value environment (rule set vars over feature values)
2. Evaluate the `qty` expression
3. Drop zero/negative quantities
4. Resolve the unit of measure

An expression that fails to evaluate skips that template only; the error is
logged and handed back as a warning.
"""

import hashlib
import json
import logging
from collections import ChainMap
from typing import Any, List, Mapping, Optional

from ..errors import ExpressionEvaluationError
from ..expression import evaluate
from ..matching.values import FeatureValueResolver
from ..models import CandidateLineItem, Feature
from ..ruleset.schema import Rule, RuleSet, Units

logger = logging.getLogger(__name__)

DEFAULT_UOM = "ea"


def rule_id(when: Mapping[str, Any]) -> str:
    """
    Stable identifier for a rule, derived from its `when` clause only.

    Key order does not matter; the same condition always yields the same id.
    """
    canonical = json.dumps(dict(when), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return "rule_" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:12]


def infer_uom(qty_expression: str, units: Units) -> str:
    """
    Guess a unit from the text of a qty expression.

    Looks for "area", then "length", then "volume" anywhere in the text
    (case-insensitive). This reads the expression's surface, not what it
    computes: "length * height_ft" still comes out linear.
    """
    text = qty_expression.lower()
    if "area" in text:
        return units.area
    if "length" in text:
        return units.linear
    if "volume" in text:
        return units.volume or "ft3"
    return DEFAULT_UOM


def build_environment(
    rule_set: RuleSet,
    feature: Feature,
    value_resolver: Optional[FeatureValueResolver] = None,
) -> ChainMap:
    """
    Values visible to a qty expression.

    Rule set vars are the first layer, so a var shadows a feature value with
    the same name.
    """
    value_resolver = value_resolver or FeatureValueResolver()
    return ChainMap(dict(rule_set.vars), value_resolver.numeric_values(feature))


class MaterialTemplateResolver:
    """Evaluates a matched rule's material templates for one feature."""

    def __init__(self, value_resolver: Optional[FeatureValueResolver] = None):
        self.value_resolver = value_resolver or FeatureValueResolver()

    def resolve(
        self,
        rule: Rule,
        feature: Feature,
        rule_set: RuleSet,
        warnings: Optional[List[ExpressionEvaluationError]] = None,
    ) -> List[CandidateLineItem]:
        """
        Produce candidate line items for one (rule, feature) pair.

        Args:
            rule: Rule whose condition matched the feature
            feature: The matched feature
            rule_set: Rule set supplying vars and units
            warnings: If given, evaluation errors are appended here

        Returns:
            Candidates with qty > 0, in template order
        """
        env = build_environment(rule_set, feature, self.value_resolver)
        source_rule_id = rule_id(rule.when)
        candidates = []

        for template in rule.materials:
            try:
                qty = evaluate(template.qty, env)
            except ExpressionEvaluationError as e:
                e.attach(sku=template.sku, rule_id=source_rule_id, feature_id=feature.id)
                logger.warning(
                    f"Error evaluating material {template.sku} for feature {feature.id}: {e} "
                    f"(length={feature.length}, area={feature.area}, count={feature.count}, type={feature.type})"
                )
                if warnings is not None:
                    warnings.append(e)
                continue

            if qty <= 0:
                continue

            candidates.append(CandidateLineItem(
                sku=template.sku,
                qty=qty,
                uom=template.uom or infer_uom(template.qty, rule_set.units),
                source_rule_id=source_rule_id,
                source_feature_id=feature.id,
                description=template.description,
            ))

        return candidates


def resolve(
    rule: Rule,
    feature: Feature,
    rule_set: RuleSet,
    warnings: Optional[List[ExpressionEvaluationError]] = None,
) -> List[CandidateLineItem]:
    """Module-level shortcut for MaterialTemplateResolver().resolve."""
    return MaterialTemplateResolver().resolve(rule, feature, rule_set, warnings)
