# Overview: The single in-process owner of catalog, ledger and settings state.

"""
DataStore invariants (authoritative)

- Owns categories, products, transactions and settings; every mutation goes
  through a save_* method which persists, recomputes the derived product view
  and then notifies subscribers synchronously.
- Derived product fields come only from projection.derive_view; they are
  recomputed after every load and every save, never patched by hand.
- Ids are max(existing) + 1 per collection (1 when empty) and never reused:
  the highest id ever handed out is kept in the `sequences` record, so
  deleting the newest product does not free its id.
- A sale is committed as one logical write: a `pending_sale` journal record is
  written first, then ledger and products together, then the journal is
  removed. A journal left behind by a crash is replayed on the next load.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, TypeVar

from ..models import Category, Product, Settings, Transaction
from .projection import derive_view
from .record_store import RecordStore

logger = logging.getLogger(__name__)

KEY_CATEGORIES = "categories"
KEY_PRODUCTS = "products"
KEY_TRANSACTIONS = "transactions"
KEY_SETTINGS = "settings"
KEY_PENDING_SALE = "pending_sale"
KEY_SEQUENCES = "sequences"

SEQUENCED_KEYS = (KEY_CATEGORIES, KEY_PRODUCTS, KEY_TRANSACTIONS)

DEFAULT_CATEGORIES = (
    "Fruits & Vegetables",
    "Dairy Products",
    "Beverages",
    "Snacks",
    "Household",
)

Subscriber = Callable[[str], None]
RecordT = TypeVar("RecordT")


def next_id(records: Iterable[Any], high_water: int = 0) -> int:
    ids = [r.id for r in records]
    return max(ids + [high_water]) + 1


class DataStore:
    def __init__(self, records: RecordStore, *, default_categories: Iterable[str] = DEFAULT_CATEGORIES):
        self.records = records
        self.default_categories = tuple(default_categories)

        self.categories: list[Category] = []
        self.products: list[Product] = []
        self.transactions: list[Transaction] = []
        self.settings = Settings()
        self.sequences: dict[str, int] = {}

        self._subscribers: dict[int, Subscriber] = {}
        self._next_token = 1
        self._journal_pending = False

        self.load_all()

    def __repr__(self) -> str:
        return (
            f"<DataStore categories={len(self.categories)} products={len(self.products)} "
            f"transactions={len(self.transactions)} records={self.records!r}>"
        )

    # -- loading -----------------------------------------------------------

    def _load_list(self, key: str, record_type: type[RecordT]) -> list[RecordT]:
        data = self.records.load(key)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.error("Record %s is not a list; starting empty", key)
            return []
        try:
            return [record_type.from_record(row) for row in data]
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError):
            logger.exception("Malformed %s record; starting empty", key)
            return []

    def _load_settings(self) -> Settings:
        data = self.records.load(KEY_SETTINGS)
        if not isinstance(data, dict):
            return Settings()
        try:
            return Settings.from_record(data)
        except (TypeError, ValueError, ArithmeticError):
            logger.exception("Malformed settings record; using defaults")
            return Settings()

    def _load_sequences(self) -> dict[str, int]:
        data = self.records.load(KEY_SEQUENCES)
        sequences = {key: 0 for key in SEQUENCED_KEYS}
        if isinstance(data, dict):
            for key in SEQUENCED_KEYS:
                try:
                    sequences[key] = int(data.get(key, 0))
                except (TypeError, ValueError):
                    logger.warning("Ignoring malformed %s sequence", key)
        return sequences

    def load_all(self) -> None:
        self.categories = self._load_list(KEY_CATEGORIES, Category)
        self.products = self._load_list(KEY_PRODUCTS, Product)
        self.transactions = self._load_list(KEY_TRANSACTIONS, Transaction)
        self.settings = self._load_settings()
        self.sequences = self._load_sequences()

        self._replay_pending_sale()

        if not self.categories and self.default_categories:
            self.categories = [
                Category(id=self.allocate_id(KEY_CATEGORIES), name=name)
                for name in self.default_categories
            ]
            logger.info("Seeded %d default categories", len(self.categories))
            self._persist(KEY_CATEGORIES)

        self.refresh_view()

    def _replay_pending_sale(self) -> None:
        journal = self.records.load(KEY_PENDING_SALE)
        if journal is None:
            return
        try:
            transaction = Transaction.from_record(journal["transaction"])
            stock = {int(k): int(v) for k, v in (journal.get("stock") or {}).items()}
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError):
            logger.exception("Discarding unreadable pending sale journal")
            self.records.delete(KEY_PENDING_SALE)
            return

        logger.warning("Replaying interrupted sale %s", transaction.id)
        if not any(t.id == transaction.id for t in self.transactions):
            self.transactions.append(transaction)
        for product in self.products:
            if product.id in stock:
                product.quantity = stock[product.id]

        self._journal_pending = True
        self._persist(KEY_TRANSACTIONS, KEY_PRODUCTS)

    # -- persistence -------------------------------------------------------

    def _snapshot(self, key: str) -> Any:
        if key == KEY_CATEGORIES:
            return [c.to_record() for c in self.categories]
        if key == KEY_PRODUCTS:
            return [p.to_record() for p in self.products]
        if key == KEY_TRANSACTIONS:
            return [t.to_record() for t in self.transactions]
        if key == KEY_SETTINGS:
            return self.settings.to_record()
        if key == KEY_SEQUENCES:
            return dict(self.sequences)
        raise KeyError(key)

    def _persist(self, *keys: str) -> bool:
        if self._journal_pending:
            # Keep ledger and stock together until the journal is cleared
            keys = tuple(dict.fromkeys(keys + (KEY_TRANSACTIONS, KEY_PRODUCTS)))
        if any(key in SEQUENCED_KEYS for key in keys):
            keys = tuple(dict.fromkeys(keys + (KEY_SEQUENCES,)))

        ok = self.records.save_many({key: self._snapshot(key) for key in keys})
        if not ok:
            logger.error("Failed to persist %s; in-memory state is ahead of storage", ", ".join(keys))
            return False

        if self._journal_pending and KEY_TRANSACTIONS in keys and KEY_PRODUCTS in keys:
            self._journal_pending = not self.records.delete(KEY_PENDING_SALE)
        return True

    def refresh_view(self) -> None:
        self.products = derive_view(self.categories, self.products, self.settings)

    def _changed(self, topic: str, *keys: str) -> bool:
        ok = self._persist(*keys)
        self.refresh_view()
        self.publish(topic)
        return ok

    def save_categories(self) -> bool:
        return self._changed(KEY_CATEGORIES, KEY_CATEGORIES)

    def save_products(self) -> bool:
        return self._changed(KEY_PRODUCTS, KEY_PRODUCTS)

    def save_transactions(self) -> bool:
        return self._changed(KEY_TRANSACTIONS, KEY_TRANSACTIONS)

    def save_settings(self) -> bool:
        return self._changed(KEY_SETTINGS, KEY_SETTINGS)

    def commit_sale(self, transaction: Transaction, stock_levels: dict[int, int]) -> bool:
        """
        Append `transaction` to the ledger and set the given absolute stock
        levels, persisted as one unit (see module docstring).
        """
        journal = {
            "transaction": transaction.to_record(),
            "stock": {str(pid): qty for pid, qty in stock_levels.items()},
        }
        if self.records.save(KEY_PENDING_SALE, journal):
            self._journal_pending = True
        else:
            logger.error("Could not write sale journal for transaction %s", transaction.id)

        self.transactions.append(transaction)
        for product in self.products:
            if product.id in stock_levels:
                product.quantity = stock_levels[product.id]

        return self._changed(KEY_TRANSACTIONS, KEY_TRANSACTIONS, KEY_PRODUCTS)

    def refresh(self) -> None:
        self.refresh_view()
        self.publish("refresh")

    # -- lookups -----------------------------------------------------------

    def _collection(self, key: str) -> list:
        return {
            KEY_CATEGORIES: self.categories,
            KEY_PRODUCTS: self.products,
            KEY_TRANSACTIONS: self.transactions,
        }[key]

    def peek_id(self, key: str) -> int:
        return next_id(self._collection(key), self.sequences.get(key, 0))

    def allocate_id(self, key: str) -> int:
        """Hand out the next id for a collection and remember it as used."""
        new_id = self.peek_id(key)
        self.sequences[key] = new_id
        return new_id

    def next_category_id(self) -> int:
        return self.peek_id(KEY_CATEGORIES)

    def next_product_id(self) -> int:
        return self.peek_id(KEY_PRODUCTS)

    def next_transaction_id(self) -> int:
        return self.peek_id(KEY_TRANSACTIONS)

    def find_category(self, category_id: int) -> Category | None:
        return next((c for c in self.categories if c.id == category_id), None)

    def find_product(self, product_id: int) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)

    def find_transaction(self, transaction_id: int) -> Transaction | None:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    # -- observers ---------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> int:
        """Register `callback(topic)`; returns a token for unsubscribe()."""
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: int) -> bool:
        return self._subscribers.pop(token, None) is not None

    def publish(self, topic: str) -> None:
        """Notify every subscriber; a failing subscriber is logged and skipped."""
        for callback in list(self._subscribers.values()):
            try:
                callback(topic)
            except Exception:
                logger.exception("Subscriber failed for %s", topic)
