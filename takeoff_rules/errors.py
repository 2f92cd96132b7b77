"""
Rule engine errors.

Fatal errors (rule set / feature validation, unknown rule set) abort a run
before anything is computed. ExpressionEvaluationError is recovered locally:
the offending material template is skipped and the error is reported back
as a warning.
"""

from enum import Enum
from typing import Any, Dict, Optional


class RulesEngineError(Exception):
    """Base class for all rule engine errors."""


class RuleSetValidationError(RulesEngineError, ValueError):
    """Malformed rule set. `path` points at the first offending location."""

    def __init__(self, message: str, path: str = ""):
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class FeatureValidationError(RulesEngineError, ValueError):
    """Malformed feature record or duplicate feature id within a run."""

    def __init__(self, message: str, feature_id: Optional[str] = None):
        self.message = message
        self.feature_id = feature_id
        super().__init__(message)


class RuleSetNotFoundError(RulesEngineError, LookupError):
    """Referenced rule set id does not resolve."""

    def __init__(self, rule_set_id: str):
        self.rule_set_id = rule_set_id
        super().__init__(f"Rule set not found: {rule_set_id}")


class ErrorKind(str, Enum):
    """Why an expression could not be evaluated."""
    UNKNOWN_VARIABLE = "unknown_variable"
    DIVISION_BY_ZERO = "division_by_zero"
    PARSE_ERROR = "parse_error"
    OVERFLOW = "overflow"


class ExpressionEvaluationError(RulesEngineError):
    """
    Expression could not be evaluated.

    Raised by the evaluator with only the expression text; the template
    resolver attaches sku / rule / feature context before reporting it.
    """

    def __init__(
        self,
        kind: ErrorKind,
        expression: str,
        detail: str,
        position: Optional[int] = None,
    ):
        self.kind = kind
        self.expression = expression
        self.detail = detail
        self.position = position
        self.sku: Optional[str] = None
        self.rule_id: Optional[str] = None
        self.feature_id: Optional[str] = None
        super().__init__(f"{kind.value}: {detail} in '{expression}'")

    def attach(
        self,
        sku: Optional[str] = None,
        rule_id: Optional[str] = None,
        feature_id: Optional[str] = None,
    ) -> "ExpressionEvaluationError":
        """Record where the failing expression came from."""
        self.sku = sku
        self.rule_id = rule_id
        self.feature_id = feature_id
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "expression": self.expression,
            "detail": self.detail,
            "position": self.position,
            "sku": self.sku,
            "rule_id": self.rule_id,
            "feature_id": self.feature_id,
        }
