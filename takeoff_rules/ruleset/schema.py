"""
Rule Set Schema - validated, immutable rule set models.

Persisted form (JSON or YAML, same schema):

    version: 1
    units: {linear: ft, area: ft2, volume: ft3}
    vars: {height_ft: 10, waste_pct: 0.07}
    rules:
      - when: {type: wall, partitionType: PT-1}
        materials:
          - sku: STUD-362-20GA
            qty: "length * 0.75"
            uom: ea
            description: 3-5/8" Metal Stud, 20 GA

Models are frozen; sequences are stored as tuples so a loaded rule set
cannot be changed for the duration of a run.
"""

from typing import Annotated, Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from ..models import is_number, is_scalar

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


class Units(BaseModel):
    """Units used when a template does not declare its own uom."""
    model_config = ConfigDict(frozen=True)

    linear: NonEmptyStr = "ft"
    area: NonEmptyStr = "ft2"
    volume: Optional[NonEmptyStr] = None


class MaterialTemplate(BaseModel):
    """One material a rule produces. `qty` is an arithmetic expression."""
    model_config = ConfigDict(frozen=True)

    sku: NonEmptyStr
    qty: NonEmptyStr
    uom: Optional[NonEmptyStr] = None
    description: Optional[StrictStr] = None

    @field_validator("sku", "qty", mode="before")
    @classmethod
    def normalize_text(cls, v):
        # YAML turns `qty: 2` into an int
        if is_number(v):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
        return v


class Rule(BaseModel):
    """Exact-match condition plus the materials it yields."""
    model_config = ConfigDict(frozen=True)

    when: Dict[StrictStr, Any] = Field(min_length=1)
    materials: Tuple[MaterialTemplate, ...] = Field(min_length=1)

    @field_validator("when")
    @classmethod
    def scalar_conditions(cls, v):
        for key, value in v.items():
            if not is_scalar(value):
                raise ValueError(f"condition '{key}' must be a string, number or boolean, got {value!r}")
        return v


class RuleSet(BaseModel):
    """Versioned declarative mapping from feature conditions to materials."""
    model_config = ConfigDict(frozen=True)

    version: StrictInt
    units: Units
    vars: Dict[StrictStr, Any] = Field(default_factory=dict)
    rules: Tuple[Rule, ...] = Field(min_length=1)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        # Stored rule sets sometimes carry the version as "1"
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        return v

    @field_validator("vars", mode="before")
    @classmethod
    def default_vars(cls, v):
        return {} if v is None else v

    @field_validator("vars")
    @classmethod
    def numeric_vars(cls, v):
        for name, value in v.items():
            if not is_number(value):
                raise ValueError(f"var '{name}' must be a finite number, got {value!r}")
        return v

    @property
    def volume_unit(self) -> str:
        return self.units.volume or "ft3"

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
