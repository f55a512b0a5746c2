# Overview: Bulk import of products and categories from CSV, TSV or XLSX files.

from __future__ import annotations

import csv
import io
import logging
import os
import zipfile
from dataclasses import dataclass, field
from typing import IO, Any, Iterable

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .data_store import DataStore
from .import_schemas import SCHEMAS, resolve_columns

logger = logging.getLogger(__name__)


class ImportFileError(ValueError):
    """Raised when an upload cannot be read as a table."""


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def as_tuple(self) -> tuple[int, int, list[str]]:
        return self.imported, self.skipped, self.errors

    def to_dict(self) -> dict:
        return {"imported": self.imported, "skipped": self.skipped, "errors": list(self.errors)}


def _decode(data: bytes, label: str) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportFileError(f"{label} import files must be UTF-8 encoded.") from exc


def _xlsx_rows(data: bytes) -> list[dict[str, Any]]:
    try:
        workbook = load_workbook(filename=io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as exc:
        raise ImportFileError(f"Could not open workbook: {exc}") from exc

    try:
        values = list(workbook.active.iter_rows(values_only=True))
    finally:
        workbook.close()

    if not values:
        return []
    headers = ["" if h is None else str(h) for h in values[0]]
    return [
        {headers[i]: row[i] for i in range(min(len(headers), len(row)))}
        for row in values[1:]
        if any(cell not in (None, "") for cell in row)
    ]


def read_table(stream: IO[bytes], filename: str) -> list[dict[str, Any]]:
    """Return the rows of a CSV, TSV or XLSX upload as header -> value dicts."""
    ext = os.path.splitext(filename or "")[1].lower()
    data = stream.read()

    if ext == ".csv":
        return list(csv.DictReader(io.StringIO(_decode(data, "CSV"))))
    if ext == ".tsv":
        return list(csv.DictReader(io.StringIO(_decode(data, "TSV")), delimiter="\t"))
    if ext == ".xlsx":
        return _xlsx_rows(data)

    raise ImportFileError("Unsupported file type. Use a CSV, TSV, or XLSX file.")


def import_rows(store: DataStore, import_type: str, rows: Iterable[dict[str, Any]]) -> ImportResult:
    schema = SCHEMAS.get(import_type)
    if schema is None:
        raise ImportFileError(f"Unsupported import type: {import_type}")

    rows = list(rows)
    result = ImportResult()
    headers: list[str] = []
    for row in rows:
        for header in row.keys():
            if header not in headers:
                headers.append(header)
    columns = resolve_columns(headers, schema.synonyms)

    for raw in rows:
        normalized = schema.normalize_row(raw, columns)
        problems = schema.validate_row(normalized, store)
        if problems:
            result.errors.extend(problems)
            result.skipped += 1
            continue
        try:
            schema.post_row(normalized, store)
            result.imported += 1
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to import %s row %r", import_type, normalized.get("name"))
            result.errors.append(f"Error importing '{normalized.get('name')}': {exc}")
            result.skipped += 1

    logger.info(
        "Imported %s: imported=%d skipped=%d", import_type, result.imported, result.skipped,
    )
    return result


def import_upload(store: DataStore, import_type: str, stream: IO[bytes], filename: str) -> ImportResult:
    try:
        rows = read_table(stream, filename)
    except (ImportFileError, csv.Error, OSError) as exc:
        logger.warning("Could not read import file %s: %s", filename, exc)
        return ImportResult(errors=[f"File error: {exc}"])
    return import_rows(store, import_type, rows)


def import_file(store: DataStore, import_type: str, path: str | os.PathLike) -> ImportResult:
    try:
        with open(path, "rb") as fh:
            return import_upload(store, import_type, fh, os.fspath(path))
    except OSError as exc:
        logger.warning("Could not open import file %s: %s", path, exc)
        return ImportResult(errors=[f"File error: {exc}"])


def import_products(store: DataStore, path: str | os.PathLike) -> ImportResult:
    return import_file(store, "products", path)


def import_categories(store: DataStore, path: str | os.PathLike) -> ImportResult:
    return import_file(store, "categories", path)
