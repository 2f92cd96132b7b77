"""
Consolidator - merge candidate line items by SKU.

Provides:
- One output line per SKU, in first-encountered order
- Summed quantities
- Feature provenance (every contributing feature id, repeats kept)

The first candidate seen for a SKU fixes its uom, description and rule id.
Later candidates with a different uom are not reconciled.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List

from ..models import CandidateLineItem, MaterialLineItem

logger = logging.getLogger(__name__)


class Consolidator:
    """Fold candidates into consolidated material line items."""

    def consolidate(self, candidates: Iterable[CandidateLineItem]) -> List[MaterialLineItem]:
        grouped: Dict[str, Dict] = {}

        for candidate in candidates:
            entry = grouped.get(candidate.sku)
            if entry is None:
                grouped[candidate.sku] = {
                    "first": candidate,
                    "qty": Decimal(repr(candidate.qty)),
                    "features": [candidate.source_feature_id],
                }
                continue

            entry["qty"] += Decimal(repr(candidate.qty))
            entry["features"].append(candidate.source_feature_id)
            if candidate.uom != entry["first"].uom:
                logger.debug(
                    f"SKU {candidate.sku}: keeping uom '{entry['first'].uom}', "
                    f"ignoring '{candidate.uom}' from feature {candidate.source_feature_id}"
                )

        consolidated = []
        for sku, entry in grouped.items():
            first = entry["first"]
            consolidated.append(MaterialLineItem(
                sku=sku,
                qty=float(entry["qty"]),
                uom=first.uom,
                source_rule_id=first.source_rule_id,
                source_feature_ids=entry["features"],
                description=first.description,
            ))

        return consolidated


def consolidate(candidates: Iterable[CandidateLineItem]) -> List[MaterialLineItem]:
    return Consolidator().consolidate(candidates)
