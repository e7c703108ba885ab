from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from utils.excel_export import ExcelExporter, ExportFile, ExportSheet, directory_sink, remap_columns
from utils.inventory_settings import InventorySettings
from utils.state import bootstrap_state
from utils.turnover import (
    CATEGORY_EXPORT_COLUMNS,
    SLOW_MOVING_EXPORT_COLUMNS,
    STOCK_ANALYSIS_EXPORT_COLUMNS,
    category_analysis,
    overstock_understock,
    slow_moving_stock,
    turnover_metrics,
)

APP_TITLE = "在庫回転ダッシュボード"
TABLE_PREVIEW_ROWS = 15


def _session_sink(export: ExportFile) -> None:
    st.session_state.pending_export = export


def _render_download() -> None:
    export: Optional[ExportFile] = st.session_state.pop("pending_export", None)
    if export is None:
        return
    st.download_button(
        f"{export.filename} をダウンロード",
        data=export.content,
        file_name=export.filename,
        mime=export.mime,
        use_container_width=True,
    )


def _build_tables(settings: InventorySettings, today: date) -> Dict[str, pd.DataFrame]:
    items = st.session_state.items_df
    sales = st.session_state.sales_df
    return {
        "slow": slow_moving_stock(items, settings, today),
        "stock": overstock_understock(items, sales, settings, today),
        "category": category_analysis(items, sales, settings, today),
    }


def _turnover_sheets(slow: pd.DataFrame, flagged: pd.DataFrame, category: pd.DataFrame) -> List[ExportSheet]:
    return [
        ExportSheet(remap_columns(slow, SLOW_MOVING_EXPORT_COLUMNS), "Slow Moving"),
        ExportSheet(remap_columns(flagged, STOCK_ANALYSIS_EXPORT_COLUMNS), "Stock Analysis"),
        ExportSheet(remap_columns(category, CATEGORY_EXPORT_COLUMNS), "Categories"),
    ]


def _format_currency(value: float) -> str:
    return f"${value:,.2f}"


def main() -> None:
    st.set_page_config(page_title=APP_TITLE, layout="wide")
    bootstrap_state()

    st.title(APP_TITLE)
    st.caption("滞留在庫・過剰在庫・カテゴリ別回転率を確認し、Excelで出力できます。")

    settings: InventorySettings = st.session_state.inventory_settings
    today = date.today()
    metrics = turnover_metrics(st.session_state.items_df, settings, today)
    tables = _build_tables(settings, today)

    st.sidebar.markdown("### 現在のしきい値")
    st.sidebar.caption(
        f"デッドストック: {settings.dead_stock_days}日 / 滞留: {settings.slow_moving_days}日 / "
        f"過剰: {settings.overstock_days}日 / 欠品: {settings.understock_days}日"
    )
    st.sidebar.caption("変更は「在庫回転設定」ページから行えます。")

    col1, col2, col3, col4 = st.columns(4)
    total_value = metrics["total_inventory_value"] or 0.0
    dead_value = metrics["dead_stock_value"] or 0.0
    col1.metric(
        "在庫金額",
        _format_currency(total_value),
        help=f"{metrics['total_inventory_units']:,.0f} 点の在庫原価合計です。",
    )
    col2.metric(
        "デッドストック金額",
        _format_currency(dead_value),
        help=f"{settings.dead_stock_days}日以上売れていない、または販売実績のない在庫です。",
    )
    col3.metric("平均経過日数", f"{metrics['avg_days_since_last_sale']:.0f}日", help="最終販売日からの平均日数。")
    col4.metric(
        "デッドストック比率",
        f"{dead_value / total_value * 100:.1f}%" if total_value > 0 else "0.0%",
    )

    exporter = ExcelExporter(sink=_session_sink)

    st.subheader("滞留・デッドストック")
    slow = tables["slow"]
    if slow.empty:
        st.info("滞留在庫はありません。")
    else:
        st.dataframe(
            remap_columns(slow.head(TABLE_PREVIEW_ROWS), SLOW_MOVING_EXPORT_COLUMNS),
            use_container_width=True,
        )
    if st.button("滞留在庫をExcel出力", disabled=slow.empty):
        exporter.export_single(
            remap_columns(slow, SLOW_MOVING_EXPORT_COLUMNS), "slow_moving_stock", "Slow Moving"
        )

    st.subheader("過剰・欠品分析")
    st.caption(f"直近{settings.sales_analysis_days}日間の販売実績に基づきます。")
    flagged = tables["stock"][tables["stock"]["stock_status"] != "Normal"]
    if flagged.empty:
        st.info("在庫の問題は検出されませんでした。")
    else:
        st.dataframe(
            remap_columns(flagged.head(TABLE_PREVIEW_ROWS), STOCK_ANALYSIS_EXPORT_COLUMNS),
            use_container_width=True,
        )

    st.subheader("カテゴリ別在庫")
    category = tables["category"]
    if category.empty:
        st.info("カテゴリデータがありません。")
    else:
        fig = px.bar(
            category,
            x="category",
            y="total_inventory_value",
            color="avg_turnover_rate",
            labels={"category": "カテゴリ", "total_inventory_value": "在庫金額", "avg_turnover_rate": "回転率(%)"},
            title="カテゴリ別在庫金額と回転率",
        )
        st.plotly_chart(fig, use_container_width=True, config={"displaylogo": False})
        st.dataframe(remap_columns(category, CATEGORY_EXPORT_COLUMNS), use_container_width=True)

    st.subheader("一括エクスポート")
    sheets = _turnover_sheets(slow, flagged, category)
    col_download, col_server = st.columns(2)
    if col_download.button("全シートをExcel出力"):
        if exporter.export_multiple(sheets, "inventory_turnover") is None:
            st.warning("出力できるデータがありません。")
    if col_server.button("サーバーに保存"):
        export_dir = st.session_state.app_config.export_dir
        saved = ExcelExporter(sink=directory_sink(export_dir)).export_multiple(sheets, "inventory_turnover")
        if saved is None:
            st.warning("出力できるデータがありません。")
        else:
            st.success(f"{export_dir}/{saved.filename} に保存しました。")
    _render_download()


if __name__ == "__main__":
    main()
