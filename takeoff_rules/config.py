"""
Engine configuration.

Example config.yaml:

    max_workers: 4
    pricing_path: prices.yaml
    currency: USD
    rules_dir: ./rules
    default_rule_set: standard_commercial
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


@dataclass
class EngineConfig:
    """Configuration for rule engine runs."""
    max_workers: int = 1  # >1 runs per-feature matching on a thread pool
    pricing_path: Optional[str] = None  # None = no pricing
    currency: str = "USD"
    rules_dir: Optional[str] = None  # Directory of rule set files
    default_rule_set: str = "standard_commercial"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "EngineConfig":
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        with open(yaml_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
