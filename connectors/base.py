"""Base classes for item list / sales data connectors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

import numpy as np
import pandas as pd

ITEM_COLUMNS = [
    "item_number",
    "item_name",
    "category",
    "vendor_name",
    "avail_qty",
    "order_cost",
    "last_sold",
]

SALES_COLUMNS = ["transaction_id", "sku", "date"]

DEMO_CATEGORIES = ["Tops", "Bottoms", "Outerwear", "Accessories", "Shoes", None]
DEMO_VENDORS = ["North Loom", "Harbor Goods", "Kite & Co", "Mesa Supply"]


@dataclass
class ConnectorConfig:
    api_key: str


class BaseConnector:
    """Abstract connector definition."""

    service_name: str = ""

    def __init__(self, config: ConnectorConfig):
        self.config = config

    def authenticate(self) -> bool:
        return bool(self.config.api_key)

    def fetch_item_list(self) -> pd.DataFrame:
        raise NotImplementedError

    def fetch_sales_transactions(self) -> pd.DataFrame:
        raise NotImplementedError

    def _rng(self) -> np.random.Generator:
        seed = sum(ord(c) for c in f"{self.service_name}:{self.config.api_key}") % (2**32)
        return np.random.default_rng(seed)

    def _mock_item_list(self, count: int = 60, today: Optional[date] = None) -> pd.DataFrame:
        """Generate deterministic mock inventory for demos/tests."""

        today = today or date.today()
        rng = self._rng()
        idx = np.arange(1, count + 1)
        days_ago = rng.integers(0, 400, size=count)
        never_sold = rng.random(count) < 0.1
        last_sold = [
            None if never else pd.Timestamp(today) - pd.Timedelta(days=int(d))
            for d, never in zip(days_ago, never_sold)
        ]
        df = pd.DataFrame({
            "item_number": [f"SKU-{i:04d}" for i in idx],
            "item_name": [f"{self.service_name} Item {i}" for i in idx],
            "category": rng.choice(np.array(DEMO_CATEGORIES, dtype=object), size=count),
            "vendor_name": rng.choice(DEMO_VENDORS, size=count),
            "avail_qty": rng.integers(0, 120, size=count),
            "order_cost": rng.integers(300, 9000, size=count) / 100,
            "last_sold": last_sold,
        })
        return df[ITEM_COLUMNS]

    def _mock_sales_transactions(self, items: pd.DataFrame, days: int = 90, today: Optional[date] = None) -> pd.DataFrame:
        """One row per sale over the trailing ``days`` window."""

        today = today or date.today()
        rng = self._rng()
        rows = []
        for sku in items["item_number"]:
            for offset in rng.integers(0, days, size=int(rng.integers(0, 25))):
                rows.append({"sku": sku, "date": pd.Timestamp(today) - pd.Timedelta(days=int(offset))})
        df = pd.DataFrame(rows, columns=["sku", "date"])
        df.insert(0, "transaction_id", np.arange(1, len(df) + 1))
        return df[SALES_COLUMNS]
