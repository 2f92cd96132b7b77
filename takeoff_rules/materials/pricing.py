"""
Price catalog lookup for consolidated line items.

Catalog file format (YAML):

    currency: USD
    prices:
      PVC-2IN: 3.25
      PLBG-TRAP: 28
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from ..models import MaterialLineItem, Pricing, is_number

logger = logging.getLogger(__name__)

BUILTIN_PRICING_PATH = Path(__file__).parent.parent / "rules" / "pricing.yaml"


@dataclass
class PriceCatalog:
    """Unit prices by SKU."""
    prices: Dict[str, float] = field(default_factory=dict)
    currency: str = "USD"

    def get(self, sku: str) -> Optional[float]:
        return self.prices.get(sku)

    def __contains__(self, sku: str) -> bool:
        return sku in self.prices

    def __len__(self) -> int:
        return len(self.prices)

    @classmethod
    def from_dict(cls, data: dict, default_currency: str = "USD") -> "PriceCatalog":
        currency = data.get("currency") or default_currency
        prices = {}
        for sku, price in (data.get("prices") or {}).items():
            if not is_number(price):
                logger.warning(f"Ignoring non-numeric price for {sku}: {price!r}")
                continue
            prices[str(sku)] = float(price)
        return cls(prices=prices, currency=currency)

    @classmethod
    def from_yaml(cls, path: Union[str, Path], default_currency: str = "USD") -> "PriceCatalog":
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        catalog = cls.from_dict(data, default_currency)
        logger.info(f"Loaded {len(catalog)} prices from {path}")
        return catalog

    @classmethod
    def builtin(cls) -> "PriceCatalog":
        return cls.from_yaml(BUILTIN_PRICING_PATH)


def apply_pricing(items: List[MaterialLineItem], catalog: PriceCatalog) -> List[MaterialLineItem]:
    """
    Attach catalog pricing to line items.

    Returns new items; SKUs missing from the catalog come back unpriced.
    """
    priced = []
    for item in items:
        unit_price = catalog.get(item.sku)
        if unit_price is None:
            priced.append(replace(item, source_feature_ids=list(item.source_feature_ids)))
            continue
        pricing = Pricing(
            unit_price=unit_price,
            total_price=round(unit_price * item.qty, 2),
            currency=catalog.currency,
        )
        priced.append(replace(item, source_feature_ids=list(item.source_feature_ids), pricing=pricing))
    return priced
