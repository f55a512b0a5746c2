# Overview: Flask extension that owns the application's DataStore.

from __future__ import annotations

from flask import Flask, current_app

from .services.data_store import DataStore
from .services.record_store import create_record_store

EXTENSION_KEY = "grocer"


class GrocerStore:
    """
    Builds the record store from config and keeps one DataStore per app in
    app.extensions, the way Flask-SQLAlchemy keeps its engine.
    """

    def __init__(self, app: Flask | None = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> DataStore:
        records = create_record_store(
            app.config["RECORD_STORE_BACKEND"],
            data_dir=app.config["GROCER_DATA_DIR"],
            url=app.config.get("RECORD_STORE_URL"),
        )
        store = DataStore(records)
        app.extensions[EXTENSION_KEY] = store
        app.logger.info("Data store ready: %r", store)
        return store


grocer_store = GrocerStore()


def get_store() -> DataStore:
    return current_app.extensions[EXTENSION_KEY]
