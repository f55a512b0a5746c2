# Overview: Named-record persistence; one JSON document per collection, on disk or in a SQL table.

"""
Record Store

Contract (shared by every backend):
- load(key) -> value | None        None on missing record, I/O error or malformed content
- save(key, value) -> bool          False on failure; never raises
- delete(key) -> bool
- save_many({key: value}) -> bool   all-or-nothing where the backend supports it

Values are JSON-compatible (dicts/lists of str/int/bool). Decimal amounts are
stored as text by the models; numeric literals with a fraction are read back as
Decimal so older files written with JSON numbers keep their exact value.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from ..time_utils import now

logger = logging.getLogger(__name__)

BACKEND_JSON = "json"
BACKEND_SQL = "sql"


class RecordStoreError(ValueError):
    """Raised for misconfiguration (unknown backend); I/O failures are logged instead."""


def _dumps(value: Any, *, indent: int | None = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False)


def _loads(text: str) -> Any:
    return json.loads(text, parse_float=Decimal)


class RecordStore:
    def load(self, key: str) -> Any | None:
        raise NotImplementedError

    def save(self, key: str, value: Any) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def save_many(self, values: dict[str, Any]) -> bool:
        ok = True
        for key, value in values.items():
            ok = self.save(key, value) and ok
        return ok


class JsonFileRecordStore(RecordStore):
    """
    One `<key>.json` file per record under `directory`.

    Writes go to a temp file in the same directory and are moved over the old
    file with os.replace, so an interrupted write leaves the previous version.
    """

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"<JsonFileRecordStore directory={str(self.directory)!r}>"

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return _loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("Error loading %s", path)
            return None

    def save(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        tmp_name = None
        try:
            text = _dumps(value, indent=2)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.directory)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
            return True
        except (OSError, TypeError, ValueError):
            logger.exception("Error saving %s", path)
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_name)

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
            return True
        except OSError:
            logger.exception("Error deleting %s", path)
            return False


metadata = sa.MetaData()

records_table = sa.Table(
    "records",
    metadata,
    sa.Column("key", sa.String(64), primary_key=True),
    sa.Column("payload", sa.Text, nullable=False),
    sa.Column("updated_at", sa.DateTime, nullable=False),
)


class SqlRecordStore(RecordStore):
    """
    Same JSON documents, one row per key in a `records` table.

    save_many runs inside a single database transaction, so the sale commit
    (ledger + stock) lands together or not at all on this backend.
    """

    def __init__(self, url: str | None = None, *, engine: sa.Engine | None = None):
        if engine is None:
            if not url:
                raise RecordStoreError("RECORD_STORE_URL is required for the sql backend")
            engine = sa.create_engine(url)
        self.engine = engine
        metadata.create_all(self.engine)

    def __repr__(self) -> str:
        return f"<SqlRecordStore url={self.engine.url.render_as_string(hide_password=True)!r}>"

    def load(self, key: str) -> Any | None:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    sa.select(records_table.c.payload).where(records_table.c.key == key)
                ).first()
        except SQLAlchemyError:
            logger.exception("Error loading record %s", key)
            return None

        if row is None:
            return None
        try:
            return _loads(row.payload)
        except ValueError:
            logger.exception("Malformed record %s", key)
            return None

    def _upsert(self, conn: sa.Connection, key: str, value: Any) -> None:
        payload = _dumps(value)
        result = conn.execute(
            sa.update(records_table)
            .where(records_table.c.key == key)
            .values(payload=payload, updated_at=now())
        )
        if result.rowcount == 0:
            conn.execute(
                sa.insert(records_table).values(key=key, payload=payload, updated_at=now())
            )

    def save(self, key: str, value: Any) -> bool:
        return self.save_many({key: value})

    def save_many(self, values: dict[str, Any]) -> bool:
        try:
            with self.engine.begin() as conn:
                for key, value in values.items():
                    self._upsert(conn, key, value)
            return True
        except (SQLAlchemyError, TypeError, ValueError):
            logger.exception("Error saving records %s", ", ".join(values))
            return False

    def delete(self, key: str) -> bool:
        try:
            with self.engine.begin() as conn:
                conn.execute(sa.delete(records_table).where(records_table.c.key == key))
            return True
        except SQLAlchemyError:
            logger.exception("Error deleting record %s", key)
            return False


def create_record_store(
    backend: str,
    *,
    data_dir: str | os.PathLike,
    url: str | None = None,
) -> RecordStore:
    backend = (backend or BACKEND_JSON).lower()
    if backend == BACKEND_JSON:
        return JsonFileRecordStore(data_dir)
    if backend == BACKEND_SQL:
        Path(data_dir).mkdir(parents=True, exist_ok=True)
        return SqlRecordStore(url or f"sqlite:///{Path(data_dir) / 'grocer.sqlite3'}")
    raise RecordStoreError(f"Unsupported record store backend: {backend}")
