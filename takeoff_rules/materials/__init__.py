"""
Material derivation - from matched rules to a consolidated material list.

This module provides:
- Template resolution (quantity evaluation, uom inference, rule ids)
- Consolidation by SKU with feature provenance
- Catalog pricing
- File export (CSV, JSON, Markdown, Excel)
"""

from .resolver import MaterialTemplateResolver, build_environment, infer_uom, resolve, rule_id
from .consolidator import Consolidator, consolidate
from .pricing import PriceCatalog, apply_pricing
from .exporter import MaterialListExporter

__all__ = [
    "MaterialTemplateResolver",
    "build_environment",
    "infer_uom",
    "resolve",
    "rule_id",
    "Consolidator",
    "consolidate",
    "PriceCatalog",
    "apply_pricing",
    "MaterialListExporter",
]
