"""Utility package for the Streamlit dashboard."""

from .excel_export import ExcelExporter, ExportFile, ExportSheet, compute_column_widths, remap_columns
from .inventory_settings import (
    DEFAULT_SETTINGS,
    STORAGE_KEY,
    InventorySettings,
    InventorySettingsStore,
    validate_settings,
)
from .settings_storage import DuckDBStorage, MemoryStorage, SessionStateStorage

__all__ = [
    "ExcelExporter",
    "ExportFile",
    "ExportSheet",
    "compute_column_widths",
    "remap_columns",
    "DEFAULT_SETTINGS",
    "STORAGE_KEY",
    "InventorySettings",
    "InventorySettingsStore",
    "validate_settings",
    "DuckDBStorage",
    "MemoryStorage",
    "SessionStateStorage",
]
