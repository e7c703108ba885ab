"""Session state helpers shared across pages."""

from __future__ import annotations

from typing import Optional, Tuple

import pandas as pd
import streamlit as st

from connectors import BaseConnector, ConnectorConfig, DemoConnector
from utils.config import AppConfig, build_storage, configure_logging
from utils.inventory_settings import InventorySettingsStore


def bootstrap_state(config: Optional[AppConfig] = None) -> None:
    """Ensure key session state entries exist."""

    if "app_config" not in st.session_state:
        config = config or AppConfig.load()
        configure_logging(config.log_level)
        st.session_state.app_config = config
    if "settings_store" not in st.session_state:
        st.session_state.settings_store = InventorySettingsStore(build_storage(st.session_state.app_config))
    if "inventory_settings" not in st.session_state:
        st.session_state.inventory_settings = st.session_state.settings_store.load()
    if "items_df" not in st.session_state or "sales_df" not in st.session_state:
        items, sales = load_inventory_data(DemoConnector(ConnectorConfig(api_key="demo")))
        st.session_state.items_df = items
        st.session_state.sales_df = sales


def load_inventory_data(connector: BaseConnector) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Return the item list and sales transactions from an authenticated connector."""

    if not connector.authenticate():
        raise ValueError("APIキーが正しくありません。")
    return connector.fetch_item_list(), connector.fetch_sales_transactions()
