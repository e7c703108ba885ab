"""Demo connector producing mock inventory and sales."""

from __future__ import annotations

from datetime import date
from typing import Optional

import pandas as pd

from .base import BaseConnector, ConnectorConfig


class DemoConnector(BaseConnector):
    service_name = "Demo"

    def __init__(self, config: ConnectorConfig, today: Optional[date] = None, item_count: int = 60):
        super().__init__(config)
        self.today = today
        self.item_count = item_count
        self._items: Optional[pd.DataFrame] = None

    def fetch_item_list(self) -> pd.DataFrame:
        if self._items is None:
            self._items = self._mock_item_list(self.item_count, today=self.today)
        return self._items.copy()

    def fetch_sales_transactions(self) -> pd.DataFrame:
        return self._mock_sales_transactions(self.fetch_item_list(), today=self.today)
