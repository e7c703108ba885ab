from datetime import date

import pytest

from connectors import ITEM_COLUMNS, SALES_COLUMNS, ConnectorConfig, DemoConnector
from utils.state import load_inventory_data


def test_demo_connector_returns_item_list_and_sales():
    connector = DemoConnector(ConnectorConfig(api_key="demo"), today=date(2024, 6, 30), item_count=20)
    items = connector.fetch_item_list()
    sales = connector.fetch_sales_transactions()
    assert list(items.columns) == ITEM_COLUMNS
    assert len(items) == 20
    assert list(sales.columns) == SALES_COLUMNS
    assert set(sales["sku"]).issubset(set(items["item_number"]))


def test_demo_connector_is_deterministic():
    first = DemoConnector(ConnectorConfig(api_key="demo"), today=date(2024, 6, 30)).fetch_item_list()
    second = DemoConnector(ConnectorConfig(api_key="demo"), today=date(2024, 6, 30)).fetch_item_list()
    assert first.equals(second)


def test_load_inventory_data_requires_api_key():
    with pytest.raises(ValueError):
        load_inventory_data(DemoConnector(ConnectorConfig(api_key="")))


def test_load_inventory_data_returns_items_and_sales():
    items, sales = load_inventory_data(DemoConnector(ConnectorConfig(api_key="demo"), item_count=5))
    assert len(items) == 5
    assert list(sales.columns) == SALES_COLUMNS
