"""
Rules Engine

Main orchestration module: computes a consolidated material list from a
rule set and a collection of feature records.

Run states:
    IDLE -> VALIDATING -> MATCHING -> RESOLVING -> CONSOLIDATING -> DONE
    VALIDATING -> FAILED  (rule set or feature validation error)

Components:
1. Rule set validation (fatal on error)
2. Condition matching per feature
3. Material template resolution (expression errors become warnings)
4. Consolidation by SKU
5. Optional catalog pricing

Matching and resolution are independent per feature and may run on a thread
pool; results are folded sequentially in input order, so the output is the
same either way.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import EngineConfig
from .errors import ExpressionEvaluationError, FeatureValidationError, RuleSetValidationError
from .matching import ConditionMatcher, FeatureValueResolver
from .materials import Consolidator, MaterialTemplateResolver, PriceCatalog, apply_pricing
from .models import CandidateLineItem, EngineResult, Feature
from .ruleset import RuleSet, load_rule_set
from .ruleset.loader import RawRuleSet
from .ruleset.schema import Rule

logger = logging.getLogger(__name__)

FeatureInput = Union[Feature, Mapping[str, Any]]


class EngineState(str, Enum):
    """Lifecycle of a single run."""
    IDLE = "idle"
    VALIDATING = "validating"
    MATCHING = "matching"
    RESOLVING = "resolving"
    CONSOLIDATING = "consolidating"
    DONE = "done"
    FAILED = "failed"


class RulesEngine:
    """
    Applies a material rule set to feature records.

    The engine keeps no data between runs other than its current state and
    the summary of the last run. Both are per-instance, so concurrent runs
    need one engine each; the run summary is also returned on EngineResult.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        price_catalog: Optional[PriceCatalog] = None,
    ):
        self.config = config or EngineConfig()

        value_resolver = FeatureValueResolver()
        self.matcher = ConditionMatcher(value_resolver)
        self.template_resolver = MaterialTemplateResolver(value_resolver)
        self.consolidator = Consolidator()

        if price_catalog is None and self.config.pricing_path:
            price_catalog = PriceCatalog.from_yaml(self.config.pricing_path, self.config.currency)
        self.price_catalog = price_catalog

        self.state = EngineState.IDLE
        self.summary = {}

    def _transition(self, state: EngineState) -> None:
        logger.debug(f"Engine state: {self.state.value} -> {state.value}")
        self.state = state

    def _map(self, fn: Callable, items: Sequence) -> List:
        """Ordered map, on a thread pool when configured."""
        if self.config.max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                return list(pool.map(fn, items))
        return [fn(item) for item in items]

    def load_rule_set(self, raw: RawRuleSet) -> RuleSet:
        return load_rule_set(raw)

    def _validate_features(self, features: Iterable[FeatureInput]) -> List[Feature]:
        validated = []
        seen = set()
        for feature in features:
            if not isinstance(feature, Feature):
                feature = Feature.from_dict(feature)
            if feature.id in seen:
                raise FeatureValidationError(f"Duplicate feature id: {feature.id}", feature.id)
            seen.add(feature.id)
            validated.append(feature)
        return validated

    def run(self, rule_set: RawRuleSet, features: Iterable[FeatureInput]) -> EngineResult:
        """
        Compute the consolidated material list.

        Args:
            rule_set: RuleSet, raw mapping, or YAML/JSON text
            features: Feature objects or plain feature records

        Returns:
            EngineResult with line items, evaluation warnings and run summary

        Raises:
            RuleSetValidationError: rule set is malformed (nothing computed)
            FeatureValidationError: feature record malformed or id repeated
        """
        self.summary = {}
        self._transition(EngineState.VALIDATING)
        try:
            rules = self.load_rule_set(rule_set)
            feature_list = self._validate_features(features)
        except (RuleSetValidationError, FeatureValidationError) as e:
            logger.error(f"Run rejected: {e}")
            self._transition(EngineState.FAILED)
            raise

        # Step 1: Match features against rules
        self._transition(EngineState.MATCHING)
        logger.info(f"Processing {len(feature_list)} features against {len(rules.rules)} rules")
        matches: List[Tuple[Feature, List[Rule]]] = self._map(
            lambda f: (f, self.matcher.matching_rules(rules.rules, f)), feature_list
        )
        matched_features = sum(1 for _, matched in matches if matched)

        # Step 2: Resolve material templates
        self._transition(EngineState.RESOLVING)

        def resolve_feature(pair) -> Tuple[List[CandidateLineItem], List[ExpressionEvaluationError]]:
            feature, matched = pair
            candidates, warnings = [], []
            for rule in matched:
                candidates.extend(self.template_resolver.resolve(rule, feature, rules, warnings))
            return candidates, warnings

        resolved = self._map(resolve_feature, matches)
        candidates = [c for feature_candidates, _ in resolved for c in feature_candidates]
        warnings = [w for _, feature_warnings in resolved for w in feature_warnings]

        logger.info(
            f"Matched {matched_features} out of {len(feature_list)} features, "
            f"generated {len(candidates)} material items before consolidation"
        )

        # Step 3: Consolidate by SKU
        self._transition(EngineState.CONSOLIDATING)
        line_items = self.consolidator.consolidate(candidates)
        if self.price_catalog is not None:
            line_items = apply_pricing(line_items, self.price_catalog)
        logger.info(f"Consolidated to {len(line_items)} unique material SKUs")

        if warnings:
            logger.warning(f"{len(warnings)} material template(s) skipped due to expression errors")

        summary = {
            "features": len(feature_list),
            "rules": len(rules.rules),
            "matched_features": matched_features,
            "candidates": len(candidates),
            "line_items": len(line_items),
            "warnings": len(warnings),
        }
        self.summary = summary

        self._transition(EngineState.DONE)
        return EngineResult(line_items=line_items, warnings=warnings, summary=summary)


def run(
    rule_set: RawRuleSet,
    features: Iterable[FeatureInput],
    config: Optional[EngineConfig] = None,
) -> EngineResult:
    """
    Convenience function to run the rules engine once.

    Args:
        rule_set: RuleSet, raw mapping, or YAML/JSON text
        features: Feature objects or plain feature records
        config: Optional engine configuration

    Returns:
        EngineResult
    """
    return RulesEngine(config).run(rule_set, features)
