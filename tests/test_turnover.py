from datetime import date

import pandas as pd

from utils.inventory_settings import DEFAULT_SETTINGS
from utils.turnover import (
    category_analysis,
    overstock_understock,
    slow_moving_stock,
    turnover_metrics,
)

TODAY = date(2024, 6, 30)


def _items():
    return pd.DataFrame({
        "item_number": ["A", "B", "C", "D", "E"],
        "item_name": ["Alpha", "Beta", "Gamma", "Delta", "Eps"],
        "category": ["Tops", "Tops", None, "Shoes", "Shoes"],
        "vendor_name": ["V1", "V1", "V2", "V2", "V3"],
        "avail_qty": [10, 5, 8, 0, 100],
        "order_cost": ["2.50", None, 4, 10, 1],
        "last_sold": [
            pd.Timestamp("2024-06-20"),
            pd.Timestamp("2024-02-01"),
            None,
            pd.Timestamp("2023-01-01"),
            pd.Timestamp("2023-10-01"),
        ],
    })


def _sales():
    return pd.DataFrame({
        "transaction_id": [1, 2, 3, 4, 5, 6, 7],
        "sku": ["A", "A", "A", "A", "A", "E", "A"],
        "date": pd.to_datetime([
            "2024-06-25", "2024-06-10", "2024-06-11", "2024-06-12", "2024-06-13", "2024-06-29", "2024-01-01",
        ]),
    })


def test_turnover_metrics_counts_in_stock_items_only():
    metrics = turnover_metrics(_items(), DEFAULT_SETTINGS, TODAY)
    assert metrics["total_inventory_units"] == 123
    assert metrics["total_inventory_value"] == 25 + 0 + 32 + 100
    # C never sold, E unsold for 273 days (> 180)
    assert metrics["dead_stock_value"] == 132
    assert metrics["days_since_most_recent_sale"] == 10


def test_slow_moving_orders_never_sold_first_and_labels_status():
    result = slow_moving_stock(_items(), DEFAULT_SETTINGS, TODAY)
    assert result["item_number"].tolist() == ["C", "E", "B"]
    assert result["stock_status"].tolist() == ["Never Sold", "Dead Stock", "Slow Moving"]


def test_slow_moving_respects_limit():
    settings = DEFAULT_SETTINGS.merge({"slow_moving_limit": 1})
    assert len(slow_moving_stock(_items(), settings, TODAY)) == 1


def test_overstock_understock_classification():
    settings = DEFAULT_SETTINGS.merge({"understock_days": 80})
    result = overstock_understock(_items(), _sales(), settings, TODAY).set_index("item_number")
    assert result.loc["A", "units_sold"] == 5
    assert result.loc["A", "days_of_supply"] == 60
    assert result.loc["A", "stock_status"] == "Understock"
    assert result.loc["B", "days_of_supply"] == 999
    assert result.loc["B", "stock_status"] == "Overstock"
    assert result.loc["E", "stock_status"] == "Overstock"


def test_no_sales_status_without_transactions():
    settings = DEFAULT_SETTINGS.merge({"overstock_days": 1000})
    result = overstock_understock(_items(), None, settings, TODAY)
    assert set(result["stock_status"]) == {"No Sales"}


def test_category_analysis_groups_uncategorized():
    result = category_analysis(_items(), _sales(), DEFAULT_SETTINGS, TODAY).set_index("category")
    assert "Uncategorized" in result.index
    assert result.loc["Tops", "total_units"] == 15
    assert result.loc["Tops", "total_items_count"] == 2
    assert result.loc["Tops", "total_sales"] == 5
    assert result.loc["Tops", "avg_turnover_rate"] == round(5 / 15 * 100, 2)
    assert result.loc["Shoes", "total_units"] == 100


def test_units_sold_counts_distinct_transactions():
    sales = pd.DataFrame({
        "transaction_id": [10, 10, 11, 12],
        "sku": ["A", "A", "A", "B"],
        "date": pd.to_datetime(["2024-06-20", "2024-06-20", "2024-06-21", "2024-06-22"]),
    })
    result = overstock_understock(_items(), sales, DEFAULT_SETTINGS, TODAY).set_index("item_number")
    assert result.loc["A", "units_sold"] == 2
    assert result.loc["B", "units_sold"] == 1
    categories = category_analysis(_items(), sales, DEFAULT_SETTINGS, TODAY).set_index("category")
    assert categories.loc["Tops", "total_sales"] == 3
