"""Key/value storage backends for client-side application state.

All backends expose the same small surface (``get_item``, ``set_item``,
``remove_item``) operating on string values, so the settings store does
not care whether the data lives in memory, in the Streamlit session or
in a DuckDB file.
"""

from __future__ import annotations

from pathlib import Path
import threading
from typing import Dict, MutableMapping, Optional, Protocol

import duckdb
import streamlit as st


class StorageQuotaExceeded(RuntimeError):
    """Raised when a write would exceed the configured storage quota."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """Dictionary-backed storage with an optional byte quota."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._items: Dict[str, str] = {}

    def _usage(self, exclude: Optional[str] = None) -> int:
        return sum(len(k) + len(v) for k, v in self._items.items() if k != exclude)

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            needed = self._usage(exclude=key) + len(key) + len(value)
            if needed > self.quota_bytes:
                raise StorageQuotaExceeded(
                    f"Writing {key!r} needs {needed} bytes, quota is {self.quota_bytes}"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SessionStateStorage:
    """Storage scoped to a single browser session via ``st.session_state``."""

    def __init__(self, state: Optional[MutableMapping] = None, namespace: str = "kv_store"):
        self._state = state if state is not None else st.session_state
        self.namespace = namespace

    def _bucket(self) -> MutableMapping[str, str]:
        if self.namespace not in self._state:
            self._state[self.namespace] = {}
        return self._state[self.namespace]

    def get_item(self, key: str) -> Optional[str]:
        return self._bucket().get(key)

    def set_item(self, key: str, value: str) -> None:
        self._bucket()[key] = value

    def remove_item(self, key: str) -> None:
        self._bucket().pop(key, None)


_SCHEMA_INITIALIZED: set[str] = set()
_SCHEMA_LOCK = threading.Lock()


def get_connection(path: str = "data/app_state.duckdb") -> duckdb.DuckDBPyConnection:
    """Return a DuckDB connection for the given path."""

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(path)


def create_kv_table(path: str = "data/app_state.duckdb") -> None:
    """Ensure that the key/value table exists."""

    with _SCHEMA_LOCK:
        if path in _SCHEMA_INITIALIZED:
            return
        con = get_connection(path)
        try:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    item_key TEXT NOT NULL,
                    item_value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT current_timestamp
                )
                """
            )
        finally:
            con.close()
        _SCHEMA_INITIALIZED.add(path)


class DuckDBStorage:
    """Durable storage in a DuckDB file, one row per key."""

    def __init__(self, path: str = "data/app_state.duckdb"):
        self.path = path

    def get_item(self, key: str) -> Optional[str]:
        create_kv_table(self.path)
        con = get_connection(self.path)
        try:
            row = con.execute("SELECT item_value FROM kv_store WHERE item_key = ?", [key]).fetchone()
        finally:
            con.close()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        create_kv_table(self.path)
        con = get_connection(self.path)
        try:
            con.execute("BEGIN TRANSACTION")
            try:
                con.execute("DELETE FROM kv_store WHERE item_key = ?", [key])
                con.execute(
                    "INSERT INTO kv_store (item_key, item_value) VALUES (?, ?)",
                    [key, value],
                )
                con.execute("COMMIT")
            except Exception:
                con.execute("ROLLBACK")
                raise
        finally:
            con.close()

    def remove_item(self, key: str) -> None:
        create_kv_table(self.path)
        con = get_connection(self.path)
        try:
            con.execute("DELETE FROM kv_store WHERE item_key = ?", [key])
        finally:
            con.close()
