from __future__ import annotations

import logging
from dataclasses import replace

from ..models import Settings
from .data_store import DataStore

logger = logging.getLogger(__name__)

SETTINGS_MUTABLE_FIELDS = {"store_name", "tax_rate", "currency_symbol", "low_stock_threshold"}


class SettingsError(ValueError):
    pass


def get_settings(store: DataStore) -> Settings:
    return store.settings


def save_settings(store: DataStore, settings: Settings) -> Settings:
    """
    Replace the settings record and persist immediately.

    No range checks here; callers validate (see validation.enforce_rules_settings).
    Low-stock flags are recomputed because the threshold may have changed.
    """
    store.settings = settings
    store.save_settings()
    logger.info("Saved settings store_name=%r tax_rate=%s", settings.store_name, settings.tax_rate)
    return store.settings


def update_settings(store: DataStore, patch: dict) -> Settings:
    unknown = sorted(set(patch) - SETTINGS_MUTABLE_FIELDS)
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(unknown)}")
    return save_settings(store, replace(store.settings, **patch))
