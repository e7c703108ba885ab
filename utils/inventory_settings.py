"""Inventory turnover thresholds and their persistence.

The settings record is a small immutable value object.  It is stored as a
single JSON document under a fixed key in whatever key/value backend the
caller injects (see :mod:`utils.settings_storage`).  Loading always
returns a complete record: persisted fields are merged over the defaults
so that fields added in later versions are back-filled automatically.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .settings_storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "inventory-turnover-settings"


@dataclass(frozen=True)
class InventorySettings:
    """Thresholds that parameterise the turnover analyses.

    Attributes
    ----------
    slow_moving_limit : int
        Maximum number of rows shown/exported in the slow-moving table.
    stock_analysis_limit : int
        Maximum number of rows shown/exported in the stock analysis table.
    dead_stock_days : int
        Items without a sale for longer than this are "Dead Stock".
    slow_moving_days : int
        Items without a sale for longer than this are "Slow Moving".
    sales_analysis_days : int
        Window of sales used for days-of-supply estimates.
    overstock_days : int
        Days of supply above which an item is overstocked.
    understock_days : int
        Days of supply below which an item is understocked.
    category_analysis_days : int
        Window of sales used for category turnover rates.
    """

    slow_moving_limit: int = 100
    stock_analysis_limit: int = 100
    dead_stock_days: int = 180
    slow_moving_days: int = 90
    sales_analysis_days: int = 30
    overstock_days: int = 90
    understock_days: int = 7
    category_analysis_days: int = 30

    def to_storage(self) -> Dict[str, int]:
        """Return the record keyed by its persisted (camelCase) names."""

        return {STORAGE_NAMES[name]: value for name, value in asdict(self).items()}

    def merge(self, partial: Mapping[str, Any]) -> "InventorySettings":
        """Return a new record with ``partial`` laid over this one."""

        values = asdict(self)
        for key, raw in partial.items():
            name = _field_name(key)
            if name is None:
                continue
            try:
                values[name] = _as_int(raw)
            except (TypeError, ValueError):
                logger.warning("Ignoring non-integer value %r for %s", raw, name)
        return InventorySettings(**values)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        base: Optional["InventorySettings"] = None,
    ) -> "InventorySettings":
        return (base or DEFAULT_SETTINGS).merge(data)


DEFAULT_SETTINGS = InventorySettings()

STORAGE_NAMES: Mapping[str, str] = {
    "slow_moving_limit": "slowMovingLimit",
    "stock_analysis_limit": "stockAnalysisLimit",
    "dead_stock_days": "deadStockDays",
    "slow_moving_days": "slowMovingDays",
    "sales_analysis_days": "salesAnalysisDays",
    "overstock_days": "overstockDays",
    "understock_days": "understockDays",
    "category_analysis_days": "categoryAnalysisDays",
}

# (label, minimum, maximum) in field-declaration order.
FIELD_BOUNDS: Mapping[str, Tuple[str, int, int]] = {
    "slow_moving_limit": ("Slow Moving Limit", 1, 1000),
    "stock_analysis_limit": ("Stock Analysis Limit", 1, 1000),
    "dead_stock_days": ("Dead Stock Days", 1, 365),
    "slow_moving_days": ("Slow Moving Days", 1, 365),
    "sales_analysis_days": ("Sales Analysis Days", 1, 365),
    "overstock_days": ("Overstock Days", 1, 365),
    "understock_days": ("Understock Days", 1, 90),
    "category_analysis_days": ("Category Analysis Days", 1, 365),
}

_ALIASES = {**{name: name for name in STORAGE_NAMES}, **{v: k for k, v in STORAGE_NAMES.items()}}


def _field_name(key: str) -> Optional[str]:
    return _ALIASES.get(key)


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not a valid setting value")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        return int(value)
    return int(value)


def validate_settings(partial: Mapping[str, Any] | InventorySettings) -> List[str]:
    """Return one message per field outside its allowed range.

    Only fields present in ``partial`` are checked, so a form can validate
    a single input before the whole record is committed.  Keys may use
    either the Python field names or the persisted camelCase names.
    """

    if isinstance(partial, InventorySettings):
        partial = asdict(partial)
    present: Dict[str, Any] = {}
    for key, value in partial.items():
        name = _field_name(key)
        if name is not None:
            present[name] = value

    errors: List[str] = []
    for name, (label, low, high) in FIELD_BOUNDS.items():
        if name not in present:
            continue
        try:
            value = _as_int(present[name])
        except (TypeError, ValueError):
            value = None
        if value is None or not low <= value <= high:
            errors.append(f"{label} must be between {low} and {high}")
    return errors


class InventorySettingsStore:
    """Load, save and reset the settings record in a key/value backend.

    Storage faults never escape this class.  Reads fall back to the
    defaults, writes and deletes are logged and the exception is kept on
    :attr:`last_error` so that interested callers can react.
    """

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key
        self.last_error: Optional[Exception] = None

    def load(self) -> InventorySettings:
        self.last_error = None
        try:
            stored = self.storage.get_item(self.key)
        except Exception as exc:
            logger.error("Failed to read settings from %s: %s", self.key, exc)
            self.last_error = exc
            return DEFAULT_SETTINGS
        if not stored:
            return DEFAULT_SETTINGS
        try:
            payload = json.loads(stored)
        except ValueError as exc:
            logger.warning("Stored settings under %s are not valid JSON: %s", self.key, exc)
            return DEFAULT_SETTINGS
        if not isinstance(payload, dict):
            logger.warning("Stored settings under %s are not an object; using defaults", self.key)
            return DEFAULT_SETTINGS
        return InventorySettings.from_mapping(payload)

    def save(self, settings: InventorySettings) -> bool:
        """Persist the complete record, returning ``False`` on failure."""

        self.last_error = None
        try:
            self.storage.set_item(self.key, json.dumps(settings.to_storage()))
        except Exception as exc:
            logger.error("Failed to save settings to %s: %s", self.key, exc)
            self.last_error = exc
            return False
        logger.info("Saved inventory settings to %s", self.key)
        return True

    def reset(self) -> InventorySettings:
        self.last_error = None
        try:
            self.storage.remove_item(self.key)
        except Exception as exc:
            logger.error("Failed to reset settings at %s: %s", self.key, exc)
            self.last_error = exc
        return DEFAULT_SETTINGS

    @staticmethod
    def validate(partial: Mapping[str, Any] | InventorySettings) -> List[str]:
        return validate_settings(partial)
