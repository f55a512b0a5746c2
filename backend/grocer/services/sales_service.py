"""
Sales Service - append-only sale ledger with stock decrement

WHY: A completed sale is one unit of work: the ledger entry and the stock
change are committed together through DataStore.commit_sale().

Overselling is allowed: a line may exceed current stock and the product's
quantity is clamped at 0 rather than rejecting the sale.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from ..models import Transaction, TransactionItem
from ..money import ZERO, to_decimal
from ..time_utils import now as local_now
from .data_store import KEY_TRANSACTIONS, DataStore

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class SaleLineInput:
    product_id: int
    quantity: int
    unit_price: Decimal | None = None


@dataclass(frozen=True)
class SaleTotals:
    sub_total: Decimal
    tax_amount: Decimal
    total_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "sub_total": self.sub_total,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
        }


def compute_totals(items: Iterable[TransactionItem], tax_rate: Decimal) -> SaleTotals:
    """taxAmount = subTotal * taxRate / 100; nothing is rounded here."""
    sub_total = sum((item.total_price for item in items), ZERO)
    tax_amount = sub_total * tax_rate / HUNDRED
    return SaleTotals(sub_total=sub_total, tax_amount=tax_amount, total_amount=sub_total + tax_amount)


def _pick(raw: dict, *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _coerce_line(raw: Any) -> SaleLineInput:
    if isinstance(raw, SaleLineInput):
        line = raw
    elif isinstance(raw, dict):
        product_id = _pick(raw, "product_id", "productId")
        quantity = _pick(raw, "quantity", "qty")
        unit_price = _pick(raw, "unit_price", "unitPrice")
        if isinstance(product_id, bool) or not isinstance(product_id, int):
            raise SaleError("product_id must be an integer", details={"line": raw})
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise SaleError("quantity must be an integer", details={"line": raw})
        if unit_price is not None:
            try:
                unit_price = to_decimal(unit_price)
            except (InvalidOperation, ValueError):
                raise SaleError("unit_price must be a number", details={"line": raw})
        line = SaleLineInput(product_id=product_id, quantity=quantity, unit_price=unit_price)
    else:
        raise SaleError("Invalid sale line")

    if line.quantity <= 0:
        raise SaleError("Quantity must be greater than zero", details={"product_id": line.product_id})
    if line.unit_price is not None and line.unit_price < 0:
        raise SaleError("Unit price cannot be negative", details={"product_id": line.product_id})
    return line


def build_items(store: DataStore, lines: Iterable[Any]) -> list[TransactionItem]:
    """Validate sale lines and snapshot product name and price for each."""
    coerced = [_coerce_line(raw) for raw in lines]
    if not coerced:
        raise SaleError("Cannot record a sale with no items")

    items: list[TransactionItem] = []
    missing = []
    for line in coerced:
        product = store.find_product(line.product_id)
        if product is None:
            missing.append(line.product_id)
            continue
        items.append(TransactionItem.for_product(product, line.quantity, line.unit_price))

    if missing:
        raise SaleError("Product not found", details={"product_ids": missing})
    return items


def quote_sale(store: DataStore, lines: Iterable[Any]) -> tuple[list[TransactionItem], SaleTotals]:
    """Running totals for a cart; nothing is recorded."""
    items = build_items(store, lines)
    return items, compute_totals(items, store.settings.tax_rate)


def _stock_after(store: DataStore, items: list[TransactionItem]) -> dict[int, int]:
    levels: dict[int, int] = {}
    for item in items:
        product = store.find_product(item.product_id)
        current = levels.get(item.product_id, product.quantity)
        levels[item.product_id] = max(0, current - item.quantity)
    return levels


def record_sale(store: DataStore, lines: Iterable[Any], *, now: datetime | None = None) -> Transaction:
    """
    Record a completed sale and decrement stock.

    Lines are SaleLineInput instances or dicts with product_id, quantity and an
    optional unit_price (defaults to the product's current price).

    Raises:
        SaleError: no lines, non-positive quantity, unknown product, bad price
    """
    items, totals = quote_sale(store, lines)

    transaction = Transaction(
        id=store.allocate_id(KEY_TRANSACTIONS),
        date=now or local_now(),
        items=items,
        sub_total=totals.sub_total,
        tax_amount=totals.tax_amount,
        total_amount=totals.total_amount,
    )
    stock_levels = _stock_after(store, items)

    requested: dict[int, int] = {}
    for item in items:
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
    oversold = sorted(
        pid for pid, qty in requested.items() if qty > store.find_product(pid).quantity
    )
    if oversold:
        logger.warning("Sale %s oversells products %s; stock clamped at 0", transaction.id, oversold)

    if not store.commit_sale(transaction, stock_levels):
        logger.error("Sale %s recorded in memory but not fully persisted", transaction.id)

    logger.info(
        "Recorded sale id=%s items=%d total=%s",
        transaction.id, transaction.item_count, transaction.total_amount,
    )
    return transaction


def get_transaction(store: DataStore, transaction_id: int) -> Transaction | None:
    return store.find_transaction(transaction_id)
