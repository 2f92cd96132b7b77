"""
Data models for features and material line items.

Features are read-only inputs supplied by the extraction side of the system.
Candidate line items come out of the template resolver (one per matched
template and feature); material line items are the consolidated output.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import ExpressionEvaluationError, FeatureValidationError

Scalar = Union[str, int, float, bool]

# Direct (top-level) feature fields, in lookup order
DIRECT_FIELDS = ("id", "type", "length", "area", "count")

# Direct fields that hold measurements
MEASURE_FIELDS = ("length", "area", "count")


def is_number(value: Any) -> bool:
    """True for finite ints/floats. Booleans are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool)) or is_number(value)


@dataclass(frozen=True)
class Feature:
    """One extracted building element (wall, pipe, duct, room, fixture)."""
    id: str
    type: str
    length: Optional[float] = None
    area: Optional[float] = None
    count: Optional[float] = None
    props: Mapping[str, Scalar] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Feature":
        """
        Build a Feature from a plain record.

        Raises:
            FeatureValidationError: missing id/type, non-numeric measurement
                or a non-mapping props bag
        """
        if not isinstance(data, Mapping):
            raise FeatureValidationError(f"Feature record must be a mapping, got {type(data).__name__}")

        feature_id = data.get("id")
        if isinstance(feature_id, int) and not isinstance(feature_id, bool):
            feature_id = str(feature_id)
        if not isinstance(feature_id, str) or not feature_id:
            raise FeatureValidationError("Feature requires a non-empty 'id'")

        feature_type = data.get("type")
        if not isinstance(feature_type, str) or not feature_type:
            raise FeatureValidationError(
                f"Feature {feature_id} requires a non-empty 'type'", feature_id
            )

        measures = {}
        for name in MEASURE_FIELDS:
            value = data.get(name)
            if value is not None and not is_number(value):
                raise FeatureValidationError(
                    f"Feature {feature_id}: '{name}' must be numeric, got {value!r}", feature_id
                )
            measures[name] = value

        props = data.get("props") or {}
        if not isinstance(props, Mapping):
            raise FeatureValidationError(f"Feature {feature_id}: 'props' must be a mapping", feature_id)

        return cls(id=feature_id, type=feature_type, props=dict(props), **measures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "length": self.length,
            "area": self.area,
            "count": self.count,
            "props": dict(self.props),
        }


@dataclass(frozen=True)
class CandidateLineItem:
    """Material produced by one template for one feature, before consolidation."""
    sku: str
    qty: float
    uom: str
    source_rule_id: str
    source_feature_id: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Pricing:
    """Catalog price attached to a consolidated line item."""
    unit_price: float
    total_price: float
    currency: str = "USD"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unit_price": self.unit_price,
            "total_price": self.total_price,
            "currency": self.currency,
        }


@dataclass
class MaterialLineItem:
    """Consolidated output line: one per distinct SKU."""
    sku: str
    qty: float
    uom: str
    source_rule_id: str
    source_feature_ids: List[str] = field(default_factory=list)
    description: Optional[str] = None
    pricing: Optional[Pricing] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sku": self.sku,
            "qty": self.qty,
            "uom": self.uom,
            "description": self.description,
            "source_rule_id": self.source_rule_id,
            "source_feature_ids": list(self.source_feature_ids),
            "pricing": self.pricing.to_dict() if self.pricing else None,
        }


@dataclass
class EngineResult:
    """Outcome of one engine run: consolidated items, non-fatal warnings and run counts."""
    line_items: List[MaterialLineItem] = field(default_factory=list)
    warnings: List[ExpressionEvaluationError] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)

    @property
    def total_value(self) -> float:
        return round(sum(i.pricing.total_price for i in self.line_items if i.pricing), 2)

    def get(self, sku: str) -> Optional[MaterialLineItem]:
        return next((i for i in self.line_items if i.sku == sku), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_items": [i.to_dict() for i in self.line_items],
            "warnings": [w.to_dict() for w in self.warnings],
        }
