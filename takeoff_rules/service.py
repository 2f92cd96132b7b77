"""
Materials Service - job-level entry point over the engine and repositories.

Flow for apply_rules:
1. Fetch the job's features and the rule set
2. Run the engine
3. Replace the job's stored material list with the result
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .engine import RulesEngine
from .models import EngineResult
from .repositories import (
    InMemoryFeatureRepository,
    InMemoryMaterialRepository,
    InMemoryRuleSetRepository,
)
from .ruleset.loader import RawRuleSet

logger = logging.getLogger(__name__)


class MaterialsService:
    """Applies rule sets to stored jobs and keeps their material lists."""

    def __init__(
        self,
        features: Optional[InMemoryFeatureRepository] = None,
        rule_sets: Optional[InMemoryRuleSetRepository] = None,
        materials: Optional[InMemoryMaterialRepository] = None,
        engine: Optional[RulesEngine] = None,
    ):
        self.features = features if features is not None else InMemoryFeatureRepository()
        self.rule_sets = rule_sets if rule_sets is not None else InMemoryRuleSetRepository()
        self.materials = materials if materials is not None else InMemoryMaterialRepository()
        # Template for per-call engines; its config and price catalog are shared
        self.engine = engine or RulesEngine()

    def create_rule_set(self, name: str, version: str, payload: RawRuleSet) -> str:
        """Validate and store a rule set. Raises RuleSetValidationError if malformed."""
        rule_set_id = self.rule_sets.create(name, version, payload)
        logger.info(f"Created rule set {name} v{version} ({rule_set_id})")
        return rule_set_id

    def apply_rules(self, job_id: str, rule_set_id: str) -> EngineResult:
        """
        Compute and store the material list for a job.

        The stored list is only replaced when the run succeeds; validation
        errors and unknown rule set ids propagate and leave it untouched.
        Each call runs on its own engine, so calls for different jobs may
        overlap on worker threads.
        """
        rule_set = self.rule_sets.get_by_id(rule_set_id)
        features = self.features.list_by_job(job_id)
        logger.info(f"Applying rule set {rule_set_id} to job {job_id} ({len(features)} features)")

        engine = RulesEngine(self.engine.config, self.engine.price_catalog)
        result = engine.run(rule_set, features)
        logger.debug(f"Run summary for job {job_id}: {result.summary}")

        stored = self.materials.replace_all(job_id, result.line_items)
        logger.info(f"Stored {stored} material lines for job {job_id}")
        return result

    def get_materials_for_job(self, job_id: str) -> Dict[str, Any]:
        """Stored material list with a priced summary."""
        items = self.materials.list_by_job(job_id)
        total_value = round(sum(i.pricing.total_price for i in items if i.pricing), 2)
        currency = next((i.pricing.currency for i in items if i.pricing), None)
        return {
            "job_id": job_id,
            "materials": [i.to_dict() for i in items],
            "summary": {
                "total_items": len(items),
                "total_value": total_value,
                "currency": currency,
                "generated_at": datetime.now().isoformat(),
            },
        }
