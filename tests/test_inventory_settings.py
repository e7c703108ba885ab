import json
from dataclasses import FrozenInstanceError

import pytest

from utils.inventory_settings import (
    DEFAULT_SETTINGS,
    FIELD_BOUNDS,
    STORAGE_KEY,
    InventorySettings,
    InventorySettingsStore,
    validate_settings,
)
from utils.settings_storage import MemoryStorage


class BrokenStorage:
    def get_item(self, key):
        raise OSError("storage disabled")

    def set_item(self, key, value):
        raise OSError("storage disabled")

    def remove_item(self, key):
        raise OSError("storage disabled")


def test_load_without_stored_data_returns_defaults():
    store = InventorySettingsStore(MemoryStorage())
    assert store.load() == DEFAULT_SETTINGS


def test_save_then_load_round_trips_full_record():
    store = InventorySettingsStore(MemoryStorage())
    updated = DEFAULT_SETTINGS.merge({"dead_stock_days": 200, "understock_days": 10})
    assert store.save(updated) is True
    loaded = store.load()
    assert loaded == updated
    assert loaded.slow_moving_days == 90


def test_saved_json_uses_storage_keys():
    storage = MemoryStorage()
    InventorySettingsStore(storage).save(DEFAULT_SETTINGS)
    payload = json.loads(storage.get_item(STORAGE_KEY))
    assert payload["deadStockDays"] == 180
    assert set(payload) == set(DEFAULT_SETTINGS.to_storage())


def test_partial_stored_data_is_merged_over_defaults():
    storage = MemoryStorage()
    storage.set_item(STORAGE_KEY, json.dumps({"deadStockDays": 120, "legacyField": 1}))
    loaded = InventorySettingsStore(storage).load()
    assert loaded.dead_stock_days == 120
    assert loaded.overstock_days == DEFAULT_SETTINGS.overstock_days


def test_corrupt_stored_data_falls_back_to_defaults():
    storage = MemoryStorage()
    storage.set_item(STORAGE_KEY, "{not json")
    assert InventorySettingsStore(storage).load() == DEFAULT_SETTINGS
    storage.set_item(STORAGE_KEY, "[1, 2, 3]")
    assert InventorySettingsStore(storage).load() == DEFAULT_SETTINGS


def test_non_integer_stored_field_uses_default():
    storage = MemoryStorage()
    storage.set_item(STORAGE_KEY, json.dumps({"slowMovingDays": "soon", "overstockDays": "60"}))
    loaded = InventorySettingsStore(storage).load()
    assert loaded.slow_moving_days == 90
    assert loaded.overstock_days == 60


def test_reset_removes_stored_settings():
    storage = MemoryStorage()
    store = InventorySettingsStore(storage)
    store.save(DEFAULT_SETTINGS.merge({"dead_stock_days": 30}))
    assert store.reset() == DEFAULT_SETTINGS
    assert storage.get_item(STORAGE_KEY) is None
    assert store.load() == DEFAULT_SETTINGS


def test_storage_faults_are_swallowed_and_recorded():
    store = InventorySettingsStore(BrokenStorage())
    assert store.load() == DEFAULT_SETTINGS
    assert isinstance(store.last_error, OSError)
    assert store.save(DEFAULT_SETTINGS) is False
    assert store.reset() == DEFAULT_SETTINGS
    assert store.last_error is not None


def test_quota_exceeded_save_reports_failure():
    store = InventorySettingsStore(MemoryStorage(quota_bytes=10))
    assert store.save(DEFAULT_SETTINGS) is False
    assert store.load() == DEFAULT_SETTINGS


def test_validate_reports_dead_stock_bounds():
    errors = validate_settings({"dead_stock_days": 0})
    assert errors == ["Dead Stock Days must be between 1 and 365"]
    assert validate_settings({"dead_stock_days": 200}) == []


def test_validate_empty_input_is_valid():
    assert validate_settings({}) == []


def test_validate_keeps_declaration_order_and_accepts_storage_keys():
    errors = validate_settings({"understockDays": 91, "slow_moving_limit": 1001, "overstock_days": "x"})
    assert errors == [
        "Slow Moving Limit must be between 1 and 1000",
        "Overstock Days must be between 1 and 365",
        "Understock Days must be between 1 and 90",
    ]


def test_validate_accepts_full_record():
    assert InventorySettingsStore.validate(DEFAULT_SETTINGS) == []


def test_settings_are_immutable():
    settings = InventorySettings()
    with pytest.raises(FrozenInstanceError):
        settings.dead_stock_days = 1
    assert settings.dead_stock_days == 180


@pytest.mark.parametrize("name", list(FIELD_BOUNDS))
def test_validate_bounds_are_inclusive(name):
    label, low, high = FIELD_BOUNDS[name]
    message = f"{label} must be between {low} and {high}"
    assert validate_settings({name: low}) == []
    assert validate_settings({name: high}) == []
    assert validate_settings({name: low - 1}) == [message]
    assert validate_settings({name: high + 1}) == [message]
