# Overview: Read-only aggregation over catalog and ledger state; no side effects.

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..models import UNKNOWN_CATEGORY, Product, Transaction
from ..money import ZERO
from ..time_utils import DateLike, as_date, today as local_today
from .data_store import DataStore


class ReportError(Exception):
    """Raised when report parameters are unusable."""
    pass


def _check_range(start: DateLike, end: DateLike) -> tuple[date, date]:
    if start is None or end is None:
        raise ReportError("start and end are required")
    return as_date(start), as_date(end)


def low_stock_products(store: DataStore) -> list[Product]:
    threshold = store.settings.low_stock_threshold
    return sorted(
        (p for p in store.products if 0 < p.quantity < threshold),
        key=lambda p: p.quantity,
    )


def sales_in_range(store: DataStore, start: DateLike, end: DateLike) -> list[Transaction]:
    """
    Transactions dated within [start, end] by calendar date, newest first.

    A start later than the end matches nothing.
    """
    start_d, end_d = _check_range(start, end)
    return sorted(
        (t for t in store.transactions if start_d <= t.date.date() <= end_d),
        key=lambda t: t.date,
        reverse=True,
    )


def _on_day(store: DataStore, day: date) -> list[Transaction]:
    return [t for t in store.transactions if t.date.date() == day]


def today_sales(store: DataStore, today: date | None = None) -> Decimal:
    return sum((t.total_amount for t in _on_day(store, today or local_today())), ZERO)


def today_transaction_count(store: DataStore, today: date | None = None) -> int:
    return len(_on_day(store, today or local_today()))


def recent_transactions(store: DataStore, count: int = 10) -> list[Transaction]:
    if count <= 0:
        return []
    return sorted(store.transactions, key=lambda t: t.date, reverse=True)[:count]


def sales_by_category(store: DataStore, start: DateLike, end: DateLike) -> dict[int, Decimal]:
    """
    Sum of line totals keyed by the product's *current* category id.

    Moving a product to another category re-attributes its past sales. Lines
    whose product has since been deleted are left out.
    """
    category_of = {p.id: p.category_id for p in store.products}
    result: dict[int, Decimal] = {}
    for transaction in sales_in_range(store, start, end):
        for item in transaction.items:
            category_id = category_of.get(item.product_id)
            if category_id is None:
                continue
            result[category_id] = result.get(category_id, ZERO) + item.total_price
    return result


def top_selling_products(store: DataStore, start: DateLike, end: DateLike, count: int = 5) -> dict[str, int]:
    """
    Units sold keyed by the product name captured at sale time, best sellers
    first, at most `count` entries.
    """
    totals: dict[str, int] = {}
    for transaction in sales_in_range(store, start, end):
        for item in transaction.items:
            totals[item.product_name] = totals.get(item.product_name, 0) + item.quantity

    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return dict(ranked[:max(count, 0)])


def sales_summary(store: DataStore, start: DateLike, end: DateLike, top: int = 10) -> dict:
    transactions = sales_in_range(store, start, end)
    start_d, end_d = as_date(start), as_date(end)

    total_sales = sum((t.total_amount for t in transactions), ZERO)
    count = len(transactions)
    average = total_sales / count if count else ZERO

    names = {c.id: c.name for c in store.categories}
    category_rows = [
        {
            "category_id": category_id,
            "category_name": names.get(category_id, UNKNOWN_CATEGORY),
            "amount": amount,
        }
        for category_id, amount in sales_by_category(store, start_d, end_d).items()
    ]
    top_rows = [
        {"product_name": name, "quantity_sold": qty}
        for name, qty in top_selling_products(store, start_d, end_d, top).items()
    ]

    return {
        "start": start_d.isoformat(),
        "end": end_d.isoformat(),
        "total_sales": total_sales,
        "total_transactions": count,
        "average_transaction": average,
        "category_sales": category_rows,
        "top_products": top_rows,
        "transactions": [t.to_dict() for t in transactions],
    }


def dashboard(store: DataStore, today: date | None = None) -> dict:
    day = today or local_today()
    return {
        "store_name": store.settings.store_name,
        "currency_symbol": store.settings.currency_symbol,
        "total_products": len(store.products),
        "total_categories": len(store.categories),
        "today_sales": today_sales(store, day),
        "today_transactions": today_transaction_count(store, day),
        "low_stock": [p.to_dict() for p in low_stock_products(store)],
        "recent_transactions": [t.to_dict() for t in recent_transactions(store, 10)],
    }
