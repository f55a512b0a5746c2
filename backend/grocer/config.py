# backend/grocer/config.py
from __future__ import annotations
import os


def default_data_dir() -> str:
    """Per-user application data folder, e.g. %APPDATA%\\GroceryStore or ~/.local/share/GroceryStore."""
    appdata = os.environ.get("APPDATA")
    if os.name == "nt" and appdata:
        base = appdata
    else:
        base = os.environ.get("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    return os.path.join(base, "GroceryStore")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Where categories.json, products.json, transactions.json and settings.json live
    GROCER_DATA_DIR = os.environ.get("GROCER_DATA_DIR", default_data_dir())

    # "json" (one file per collection) or "sql" (SQLAlchemy table of records)
    RECORD_STORE_BACKEND = os.environ.get("RECORD_STORE_BACKEND", "json")
    RECORD_STORE_URL = os.environ.get("RECORD_STORE_URL")  # sql backend only; defaults to a sqlite file in the data dir

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "true").lower() == "true"
