from __future__ import annotations

import streamlit as st

from utils.forms import render_settings_form
from utils.inventory_settings import InventorySettingsStore
from utils.state import bootstrap_state


def main() -> None:
    st.set_page_config(page_title="在庫回転設定", layout="wide")
    bootstrap_state()

    st.title("在庫回転設定")
    st.caption("在庫分析のしきい値と表示件数を設定します。保存した設定は次回起動時にも引き継がれます。")

    store: InventorySettingsStore = st.session_state.settings_store
    updated = render_settings_form(st.session_state.inventory_settings)
    if updated is not None:
        st.session_state.inventory_settings = updated
        if store.save(updated):
            st.success("設定を保存しました。")
        else:
            st.warning(f"設定を保存できませんでした。このセッション内でのみ有効です: {store.last_error}")

    if st.button("初期値に戻す"):
        st.session_state.inventory_settings = store.reset()
        if store.last_error is not None:
            st.warning(f"保存済みの設定を削除できませんでした: {store.last_error}")
        st.rerun()

    with st.expander("現在の設定 (JSON)", expanded=False):
        st.json(st.session_state.inventory_settings.to_storage())


if __name__ == "__main__":
    main()
