"""
Built-in rule sets shipped with the package (takeoff_rules/rules/*.yaml).
"""

from pathlib import Path
from typing import Dict, List

from .loader import load_rule_set_file
from .schema import RuleSet

RULES_DIR = Path(__file__).parent.parent / "rules"

# name -> (display name, version)
BUILTIN_RULE_SETS: Dict[str, tuple] = {
    "standard_commercial": ("Standard Commercial Rules", "1.0"),
    "residential": ("Residential Rules", "1.0"),
}


def list_builtin_rule_sets() -> List[str]:
    return list(BUILTIN_RULE_SETS)


def load_builtin_rule_set(name: str) -> RuleSet:
    """Load a built-in rule set by short name, e.g. 'standard_commercial'."""
    if name not in BUILTIN_RULE_SETS:
        raise KeyError(f"Unknown built-in rule set: {name} (available: {', '.join(BUILTIN_RULE_SETS)})")
    return load_rule_set_file(RULES_DIR / f"{name}.yaml")
