"""
Repositories - storage boundary for features, rule sets and material lists.

The engine itself never touches storage; MaterialsService fetches inputs
through these repositories and writes the consolidated result back.

Provides:
- InMemoryFeatureRepository: features per job
- InMemoryRuleSetRepository: named, versioned rule sets (seeded with built-ins)
- DirectoryRuleSetRepository: rule set files in a directory, id = file stem
- InMemoryMaterialRepository: consolidated line items per job
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .errors import RuleSetNotFoundError
from .models import Feature, MaterialLineItem
from .ruleset import RuleSet, load_rule_set, load_rule_set_file
from .ruleset.builtins import BUILTIN_RULE_SETS, load_builtin_rule_set
from .ruleset.loader import RawRuleSet

logger = logging.getLogger(__name__)

RULE_SET_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass
class RuleSetRecord:
    """A stored rule set with its catalog metadata."""
    id: str
    name: str
    version: str
    rule_set: RuleSet
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "created_at": self.created_at,
            "rules": self.rule_set.to_dict(),
        }


class InMemoryFeatureRepository:
    """Feature records grouped by job id, in insertion order."""

    def __init__(self):
        self._features: Dict[str, List[Feature]] = {}

    def add(self, job_id: str, features: Iterable[Union[Feature, Mapping[str, Any]]]) -> int:
        added = 0
        for feature in features:
            if not isinstance(feature, Feature):
                feature = Feature.from_dict(feature)
            self._features.setdefault(job_id, []).append(feature)
            added += 1
        return added

    def list_by_job(self, job_id: str) -> List[Feature]:
        return list(self._features.get(job_id, []))


class InMemoryRuleSetRepository:
    """
    Rule sets addressed by generated id, or by (name, version).

    Payloads are validated on create, so everything stored is runnable.
    """

    def __init__(self, seed_builtins: bool = True):
        self._records: Dict[str, RuleSetRecord] = {}
        if seed_builtins:
            for key, (name, version) in BUILTIN_RULE_SETS.items():
                self._store(key, name, version, load_builtin_rule_set(key))

    def _store(self, rule_set_id: str, name: str, version: str, rule_set: RuleSet) -> str:
        self._records[rule_set_id] = RuleSetRecord(
            id=rule_set_id, name=name, version=version, rule_set=rule_set
        )
        logger.debug(f"Stored rule set {name} v{version} as {rule_set_id}")
        return rule_set_id

    def create(self, name: str, version: str, payload: RawRuleSet) -> str:
        """
        Validate and store a rule set.

        Args:
            name: Display name
            version: Catalog version label
            payload: RuleSet, mapping, or YAML/JSON text

        Returns:
            Generated rule set id

        Raises:
            RuleSetValidationError: payload is malformed (nothing stored)
        """
        rule_set = load_rule_set(payload)
        return self._store(str(uuid.uuid4())[:12], name, version, rule_set)

    def get_by_id(self, rule_set_id: str) -> RuleSet:
        return self.get_record(rule_set_id).rule_set

    def get_record(self, rule_set_id: str) -> RuleSetRecord:
        record = self._records.get(rule_set_id)
        if record is None:
            raise RuleSetNotFoundError(rule_set_id)
        return record

    def find(self, name: str, version: Optional[str] = None) -> Optional[RuleSetRecord]:
        """Most recently created record with this name (and version, if given)."""
        for record in reversed(list(self._records.values())):
            if record.name == name and (version is None or record.version == version):
                return record
        return None

    def list_all(self) -> List[RuleSetRecord]:
        return list(self._records.values())


class DirectoryRuleSetRepository:
    """
    Rule set files in a directory (*.yaml, *.yml, *.json).

    Files are read on every lookup, so edits on disk take effect on the next run.
    """

    def __init__(self, rules_dir: Union[str, Path]):
        self.rules_dir = Path(rules_dir)
        if not self.rules_dir.is_dir():
            logger.warning(f"Rules directory not found: {self.rules_dir}")

    def _path_for(self, rule_set_id: str) -> Optional[Path]:
        for suffix in RULE_SET_SUFFIXES:
            path = self.rules_dir / f"{rule_set_id}{suffix}"
            if path.is_file():
                return path
        return None

    def get_by_id(self, rule_set_id: str) -> RuleSet:
        path = self._path_for(rule_set_id)
        if path is None:
            raise RuleSetNotFoundError(rule_set_id)
        return load_rule_set_file(path)

    def list_ids(self) -> List[str]:
        if not self.rules_dir.is_dir():
            return []
        return sorted(
            {p.stem for p in self.rules_dir.iterdir() if p.suffix.lower() in RULE_SET_SUFFIXES}
        )


class InMemoryMaterialRepository:
    """Consolidated line items per job; each write replaces the job's list."""

    def __init__(self):
        self._items: Dict[str, List[MaterialLineItem]] = {}

    def replace_all(self, job_id: str, items: Iterable[MaterialLineItem]) -> int:
        """Delete the job's existing line items, then insert the new ones."""
        self._items.pop(job_id, None)
        self._items[job_id] = list(items)
        return len(self._items[job_id])

    def list_by_job(self, job_id: str) -> List[MaterialLineItem]:
        return list(self._items.get(job_id, []))
