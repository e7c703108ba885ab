"""Reusable Streamlit forms for the dashboard."""

from __future__ import annotations

from typing import Dict, Optional

import streamlit as st

from .inventory_settings import FIELD_BOUNDS, InventorySettings, validate_settings

SECTIONS = {
    "表示・エクスポート上限": ("slow_moving_limit", "stock_analysis_limit"),
    "滞留在庫のしきい値（日）": ("dead_stock_days", "slow_moving_days"),
    "過剰・欠品分析（日）": ("sales_analysis_days", "overstock_days", "understock_days"),
    "カテゴリ分析（日）": ("category_analysis_days",),
}

HELP_TEXT = {
    "slow_moving_limit": "滞留在庫テーブルに表示・出力する最大件数です。",
    "stock_analysis_limit": "在庫分析テーブルに表示・出力する最大件数です。",
    "dead_stock_days": "この日数より売れていない商品をデッドストックとします。",
    "slow_moving_days": "この日数より売れていない商品を滞留在庫とします。",
    "sales_analysis_days": "在庫日数の算出に使う販売期間です。",
    "overstock_days": "在庫日数がこれを超えると過剰在庫です。",
    "understock_days": "在庫日数がこれを下回ると欠品リスクです。",
    "category_analysis_days": "カテゴリ別回転率の算出期間です。",
}


def render_settings_form(current: InventorySettings) -> Optional[InventorySettings]:
    """Render the settings form returning the validated record on submit."""

    values: Dict[str, int] = {}
    with st.form("inventory_settings"):
        for section, names in SECTIONS.items():
            st.markdown(f"### {section}")
            cols = st.columns(len(names))
            for col, name in zip(cols, names):
                label, low, high = FIELD_BOUNDS[name]
                with col:
                    values[name] = st.number_input(
                        f"{label} ({low}-{high})",
                        value=int(getattr(current, name)),
                        step=1,
                        help=HELP_TEXT[name],
                    )
        submitted = st.form_submit_button("設定を保存")
    if not submitted:
        return None
    errors = validate_settings(values)
    if errors:
        for message in errors:
            st.error(message)
        return None
    return current.merge(values)
