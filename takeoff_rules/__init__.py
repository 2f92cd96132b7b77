"""
Material Rule Engine
Bill-of-quantities generation from takeoff features and declarative rule sets.
"""

__version__ = "1.0.0"
__author__ = "Takeoff Rules"

from .config import EngineConfig
from .engine import EngineState, RulesEngine, run
from .errors import (
    ErrorKind,
    ExpressionEvaluationError,
    FeatureValidationError,
    RuleSetNotFoundError,
    RuleSetValidationError,
    RulesEngineError,
)
from .models import CandidateLineItem, EngineResult, Feature, MaterialLineItem, Pricing
from .ruleset import RuleSet, list_builtin_rule_sets, load_builtin_rule_set, load_rule_set
from .service import MaterialsService

__all__ = [
    "EngineConfig",
    "EngineState",
    "RulesEngine",
    "run",
    "ErrorKind",
    "ExpressionEvaluationError",
    "FeatureValidationError",
    "RuleSetNotFoundError",
    "RuleSetValidationError",
    "RulesEngineError",
    "CandidateLineItem",
    "EngineResult",
    "Feature",
    "MaterialLineItem",
    "Pricing",
    "RuleSet",
    "list_builtin_rule_sets",
    "load_builtin_rule_set",
    "load_rule_set",
    "MaterialsService",
]
