"""
Rule Set Model - validated, immutable rule sets.

Provides:
- Schema models (RuleSet, Rule, MaterialTemplate, Units)
- Validation and loading from mappings, YAML/JSON text and files
- Built-in rule sets shipped with the package
"""

from .schema import RuleSet, Rule, MaterialTemplate, Units
from .loader import validate, load_rule_set, load_rule_set_file, parse_rule_set_text
from .builtins import RULES_DIR, list_builtin_rule_sets, load_builtin_rule_set

__all__ = [
    "RuleSet",
    "Rule",
    "MaterialTemplate",
    "Units",
    "validate",
    "load_rule_set",
    "load_rule_set_file",
    "parse_rule_set_text",
    "RULES_DIR",
    "list_builtin_rule_sets",
    "load_builtin_rule_set",
]
