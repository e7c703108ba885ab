"""Inventory turnover analyses parameterised by :class:`InventorySettings`.

``items`` is the item list with the columns ``item_number``,
``item_name``, ``category``, ``vendor_name``, ``avail_qty``,
``order_cost`` and ``last_sold``.  ``sales`` holds one row per sales
transaction with at least ``sku`` and ``date``.  All functions are pure
and take the reference ``today`` explicitly so they can be tested
without freezing the clock.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .inventory_settings import InventorySettings

NO_SALES_SUPPLY_DAYS = 999.0

SLOW_MOVING_EXPORT_COLUMNS: List[Tuple[str, str]] = [
    ("item_number", "Item #"),
    ("item_name", "Item Name"),
    ("category", "Category"),
    ("vendor_name", "Vendor"),
    ("avail_qty", "Qty"),
    ("inventory_value", "Value"),
    ("last_sold", "Last Sold"),
    ("days_since_last_sale", "Days Since Sale"),
    ("stock_status", "Status"),
]

STOCK_ANALYSIS_EXPORT_COLUMNS: List[Tuple[str, str]] = [
    ("item_number", "Item #"),
    ("item_name", "Item Name"),
    ("category", "Category"),
    ("avail_qty", "On Hand"),
    ("units_sold", "Units Sold"),
    ("avg_daily_sales", "Avg Daily Sales"),
    ("days_of_supply", "Days of Supply"),
    ("stock_status", "Status"),
]

CATEGORY_EXPORT_COLUMNS: List[Tuple[str, str]] = [
    ("category", "Category"),
    ("total_inventory_value", "Inventory Value"),
    ("total_units", "Units"),
    ("total_items_count", "Items Count"),
    ("total_sales", "Sales"),
    ("avg_turnover_rate", "Turnover %"),
]


def _in_stock(items: pd.DataFrame) -> pd.DataFrame:
    data = items.copy()
    data["avail_qty"] = pd.to_numeric(data["avail_qty"], errors="coerce").fillna(0)
    data = data[data["avail_qty"] > 0].copy()
    cost = pd.to_numeric(data["order_cost"], errors="coerce").fillna(0.0)
    data["inventory_value"] = data["avail_qty"] * cost
    return data


def _days_since(values: pd.Series, today: date) -> pd.Series:
    parsed = pd.to_datetime(values, errors="coerce")
    return (pd.Timestamp(today) - parsed).dt.days


def _units_sold(sales: Optional[pd.DataFrame], days: int, today: date) -> pd.Series:
    """Count distinct transactions per SKU within the trailing ``days`` window."""

    if sales is None or sales.empty:
        return pd.Series(dtype="float64")
    dates = pd.to_datetime(sales["date"], errors="coerce")
    start = pd.Timestamp(today) - pd.Timedelta(days=days)
    recent = sales[dates >= start]
    if "transaction_id" in recent.columns:
        return recent.groupby("sku")["transaction_id"].nunique().astype(float)
    return recent.groupby("sku").size().astype(float)


def turnover_metrics(items: pd.DataFrame, settings: InventorySettings, today: date) -> Dict[str, Optional[float]]:
    """Headline inventory KPIs over in-stock items."""

    data = _in_stock(items)
    if data.empty:
        return {
            "total_inventory_value": 0.0,
            "total_inventory_units": 0.0,
            "dead_stock_value": 0.0,
            "dead_stock_units": 0.0,
            "avg_days_since_last_sale": 0.0,
            "days_since_most_recent_sale": None,
        }
    days = _days_since(data["last_sold"], today)
    dead = days.isna() | (days > settings.dead_stock_days)
    avg_days = days.mean()
    most_recent = days.min()
    return {
        "total_inventory_value": float(data["inventory_value"].sum()),
        "total_inventory_units": float(data["avail_qty"].sum()),
        "dead_stock_value": float(data.loc[dead, "inventory_value"].sum()),
        "dead_stock_units": float(data.loc[dead, "avail_qty"].sum()),
        "avg_days_since_last_sale": 0.0 if pd.isna(avg_days) else float(avg_days),
        "days_since_most_recent_sale": None if pd.isna(most_recent) else float(most_recent),
    }


def slow_moving_stock(items: pd.DataFrame, settings: InventorySettings, today: date) -> pd.DataFrame:
    """In-stock items never sold or unsold for ``slow_moving_days``."""

    data = _in_stock(items)
    data["days_since_last_sale"] = _days_since(data["last_sold"], today)
    days = data["days_since_last_sale"]
    data = data[days.isna() | (days > settings.slow_moving_days)].copy()
    days = data["days_since_last_sale"]
    data["stock_status"] = np.select(
        [days.isna(), days > settings.dead_stock_days, days > settings.slow_moving_days],
        ["Never Sold", "Dead Stock", "Slow Moving"],
        default="Normal",
    )
    data = data.sort_values("days_since_last_sale", ascending=False, na_position="first")
    return data.head(settings.slow_moving_limit).reset_index(drop=True)


def classify_supply(days_of_supply: float, avg_daily_sales: float, settings: InventorySettings) -> str:
    if days_of_supply > settings.overstock_days:
        return "Overstock"
    if days_of_supply < settings.understock_days and avg_daily_sales > 0:
        return "Understock"
    if avg_daily_sales == 0:
        return "No Sales"
    return "Normal"


def overstock_understock(
    items: pd.DataFrame,
    sales: Optional[pd.DataFrame],
    settings: InventorySettings,
    today: date,
) -> pd.DataFrame:
    """Days-of-supply classification based on recent sales velocity."""

    data = _in_stock(items)
    units = _units_sold(sales, settings.sales_analysis_days, today)
    data["units_sold"] = data["item_number"].map(units).fillna(0.0)
    avg_daily = data["units_sold"] / settings.sales_analysis_days
    supply = np.where(avg_daily > 0, data["avail_qty"] / avg_daily.replace(0, np.nan), NO_SALES_SUPPLY_DAYS)
    data["avg_daily_sales"] = avg_daily.round(2)
    data["days_of_supply"] = pd.Series(supply, index=data.index).astype(float).round(1)
    data["stock_status"] = [
        classify_supply(dos, ads, settings)
        for dos, ads in zip(data["days_of_supply"], avg_daily)
    ]
    return data.head(settings.stock_analysis_limit).reset_index(drop=True)


def category_analysis(
    items: pd.DataFrame,
    sales: Optional[pd.DataFrame],
    settings: InventorySettings,
    today: date,
) -> pd.DataFrame:
    """Inventory value, units and turnover rate per category."""

    columns = [col for col, _ in CATEGORY_EXPORT_COLUMNS]
    data = _in_stock(items)
    if data.empty:
        return pd.DataFrame(columns=columns)
    data["category"] = data["category"].fillna("Uncategorized")
    units = _units_sold(sales, settings.category_analysis_days, today)
    data["sales"] = data["item_number"].map(units).fillna(0.0)
    grouped = data.groupby("category", as_index=False).agg(
        total_inventory_value=("inventory_value", "sum"),
        total_units=("avail_qty", "sum"),
        total_items_count=("item_number", "nunique"),
        total_sales=("sales", "sum"),
    )
    grouped["avg_turnover_rate"] = np.where(
        grouped["total_units"] > 0,
        (grouped["total_sales"] / grouped["total_units"].replace(0, np.nan) * 100).round(2),
        0.0,
    )
    return grouped[columns].sort_values("total_inventory_value", ascending=False).reset_index(drop=True)
