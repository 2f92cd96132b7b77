"""
Rule set loading and validation.

A rule set is accepted whole or not at all: the first structural problem
raises RuleSetValidationError naming the offending location, e.g.
`rules[2].materials[0].sku`.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

import yaml
from pydantic import ValidationError

from ..errors import RuleSetValidationError
from .schema import RuleSet

logger = logging.getLogger(__name__)

RawRuleSet = Union[RuleSet, Mapping[str, Any], str, bytes]

# Friendlier wording for the pydantic error types we hit most
_MESSAGES = {
    "missing": "is required",
    "string_too_short": "must not be empty",
    "too_short": "must not be empty",
    "dict_type": "must be a mapping",
    "model_type": "must be a mapping",
    "tuple_type": "must be a list",
    "list_type": "must be a list",
    "string_type": "must be a string",
    "int_type": "must be an integer",
    "int_parsing": "must be an integer",
}


def format_location(loc: Sequence[Any]) -> str:
    """('rules', 2, 'materials', 0, 'sku') -> 'rules[2].materials[0].sku'"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def _to_validation_error(exc: ValidationError) -> RuleSetValidationError:
    first = exc.errors()[0]
    path = format_location(first.get("loc", ()))
    message = _MESSAGES.get(first.get("type", ""))
    if message is None:
        message = first.get("msg", "is invalid")
        # pydantic prefixes custom validator messages
        message = message.replace("Value error, ", "")
    if not path:
        message = f"Rule set payload {message}"
    return RuleSetValidationError(message, path)


def validate(raw: Union[RuleSet, Mapping[str, Any]]) -> RuleSet:
    """
    Validate a raw rule set mapping.

    Args:
        raw: Parsed rule set (e.g. from JSON/YAML) or an existing RuleSet

    Returns:
        Immutable RuleSet

    Raises:
        RuleSetValidationError: on the first structural violation
    """
    if isinstance(raw, RuleSet):
        return raw
    if not isinstance(raw, Mapping):
        raise RuleSetValidationError(f"Rule set payload must be a mapping, got {type(raw).__name__}")

    try:
        rule_set = RuleSet.model_validate(dict(raw))
    except ValidationError as e:
        error = _to_validation_error(e)
        logger.debug(f"Rule set rejected: {error}")
        raise error from e

    logger.debug(
        f"Validated rule set v{rule_set.version}: {len(rule_set.rules)} rules, {len(rule_set.vars)} vars"
    )
    return rule_set


def parse_rule_set_text(text: Union[str, bytes]) -> Any:
    """Parse a YAML or JSON payload (YAML first, then JSON)."""
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        pass
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        raise RuleSetValidationError("Rules must be valid YAML or JSON") from None


def load_rule_set(raw: RawRuleSet) -> RuleSet:
    """Load a rule set from a RuleSet, a mapping, or YAML/JSON text."""
    if isinstance(raw, (str, bytes)):
        raw = parse_rule_set_text(raw)
    return validate(raw)


def load_rule_set_file(path: Union[str, Path]) -> RuleSet:
    """Load and validate a .yaml/.yml/.json rule set file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        text = f.read()

    if path.suffix.lower() == ".json":
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise RuleSetValidationError(f"Invalid JSON in {path.name}: {e}") from e
    else:
        raw = parse_rule_set_text(text)

    rule_set = validate(raw)
    logger.info(f"Loaded rule set from {path} ({len(rule_set.rules)} rules)")
    return rule_set
