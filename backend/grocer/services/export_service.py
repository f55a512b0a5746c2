"""CSV export of a sales report."""

from __future__ import annotations

import csv
import io
import logging
import os
from pathlib import Path
from typing import IO, Iterable

from ..models import Transaction
from ..money import round_money
from ..time_utils import DateLike, as_date
from .data_store import DataStore
from .reporting_service import sales_in_range

logger = logging.getLogger(__name__)

REPORT_HEADER = ["Transaction ID", "Date", "Items", "SubTotal", "Tax", "Total"]
DATE_FORMAT = "%Y-%m-%d %H:%M"


def _row(t: Transaction) -> list[str]:
    return [
        str(t.id),
        t.date.strftime(DATE_FORMAT),
        str(t.item_count),
        f"{round_money(t.sub_total):.2f}",
        f"{round_money(t.tax_amount):.2f}",
        f"{round_money(t.total_amount):.2f}",
    ]


def export_transactions_csv(transactions: Iterable[Transaction], stream: IO[str]) -> int:
    """Write the report to `stream`; returns the number of transaction rows."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_HEADER)
    count = 0
    for t in transactions:
        writer.writerow(_row(t))
        count += 1
    return count


def transactions_csv_text(transactions: Iterable[Transaction]) -> str:
    output = io.StringIO()
    export_transactions_csv(transactions, output)
    return output.getvalue()


def report_filename(start: DateLike, end: DateLike) -> str:
    return f"SalesReport_{as_date(start):%Y%m%d}_{as_date(end):%Y%m%d}.csv"


def export_report(
    store: DataStore,
    start: DateLike,
    end: DateLike,
    directory: str | os.PathLike,
) -> Path:
    """Write the sales report for [start, end] into `directory` and return its path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / report_filename(start, end)

    transactions = sales_in_range(store, start, end)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        count = export_transactions_csv(transactions, fh)

    logger.info("Exported %d transactions to %s", count, path)
    return path


def default_export_dir() -> Path:
    desktop = Path.home() / "Desktop"
    return desktop if desktop.is_dir() else Path.cwd()
