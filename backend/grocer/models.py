# Overview: Plain data records for the catalog, the sale ledger and store settings.

"""
Domain records.

Each record has three shapes:
- the dataclass itself (in-memory state owned by DataStore)
- to_record()/from_record(): the persisted form, camelCase keys, decimals as text
- to_dict(): the API form, snake_case keys

Derived product fields (category_name, is_low_stock) are never persisted and are
excluded from equality so a save/load round-trip compares equal.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from .money import ZERO, decimal_text, to_decimal
from .time_utils import now, parse_iso_datetime, to_iso

UNKNOWN_CATEGORY = "Unknown"
DEFAULT_UNIT = "piece"


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _amount(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    return to_decimal(value)


@dataclass
class Category:
    id: int = 0
    name: str = ""

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_record(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_record(cls, data: dict) -> "Category":
        return cls(id=int(data.get("id", 0)), name=_text(data.get("name")))

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass
class Product:
    id: int = 0
    name: str = ""
    category_id: int = 0
    price: Decimal = ZERO
    quantity: int = 0
    unit: str = DEFAULT_UNIT
    barcode: str = ""
    description: str = ""

    # Derived by projection.derive_view; not persisted
    category_name: str = field(default=UNKNOWN_CATEGORY, compare=False)
    is_low_stock: bool = field(default=False, compare=False)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} category_id={self.category_id} quantity={self.quantity}>"

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "categoryId": self.category_id,
            "price": decimal_text(self.price),
            "quantity": self.quantity,
            "unit": self.unit,
            "barcode": self.barcode,
            "description": self.description,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Product":
        return cls(
            id=int(data.get("id", 0)),
            name=_text(data.get("name")),
            category_id=int(data.get("categoryId", 0)),
            price=_amount(data.get("price")),
            quantity=int(data.get("quantity", 0)),
            unit=_text(data.get("unit"), DEFAULT_UNIT),
            barcode=_text(data.get("barcode")),
            description=_text(data.get("description")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "price": self.price,
            "quantity": self.quantity,
            "unit": self.unit,
            "barcode": self.barcode,
            "description": self.description,
            "is_low_stock": self.is_low_stock,
        }


@dataclass
class TransactionItem:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal = ZERO

    @classmethod
    def for_product(cls, product: Product, quantity: int, unit_price: Decimal | None = None) -> "TransactionItem":
        """Snapshot the product's name and price as they are at sale time."""
        price = product.price if unit_price is None else unit_price
        return cls(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=price,
            total_price=price * quantity,
        )

    def to_record(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": decimal_text(self.unit_price),
            "totalPrice": decimal_text(self.total_price),
        }

    @classmethod
    def from_record(cls, data: dict) -> "TransactionItem":
        quantity = int(data.get("quantity", 0))
        unit_price = _amount(data.get("unitPrice"))
        total = data.get("totalPrice")
        return cls(
            product_id=int(data.get("productId", 0)),
            product_name=_text(data.get("productName")),
            quantity=quantity,
            unit_price=unit_price,
            total_price=_amount(total) if total not in (None, "") else unit_price * quantity,
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
        }


@dataclass
class Transaction:
    """A completed sale. Append-only: never edited once it is in the ledger."""
    id: int = 0
    date: datetime = field(default_factory=now)
    items: list[TransactionItem] = field(default_factory=list)
    sub_total: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total_amount: Decimal = ZERO

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} date={to_iso(self.date)} total={self.total_amount}>"

    @property
    def item_count(self) -> int:
        return len(self.items)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso(self.date),
            "items": [item.to_record() for item in self.items],
            "subTotal": decimal_text(self.sub_total),
            "taxAmount": decimal_text(self.tax_amount),
            "totalAmount": decimal_text(self.total_amount),
        }

    @classmethod
    def from_record(cls, data: dict) -> "Transaction":
        when = parse_iso_datetime(data.get("date"))
        if when is None:
            raise ValueError(f"transaction {data.get('id')} has no date")
        return cls(
            id=int(data.get("id", 0)),
            date=when,
            items=[TransactionItem.from_record(i) for i in data.get("items") or []],
            sub_total=_amount(data.get("subTotal")),
            tax_amount=_amount(data.get("taxAmount")),
            total_amount=_amount(data.get("totalAmount")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso(self.date),
            "items": [item.to_dict() for item in self.items],
            "item_count": self.item_count,
            "sub_total": self.sub_total,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
        }


@dataclass
class Settings:
    store_name: str = "My Grocery Store"
    tax_rate: Decimal = Decimal("5.0")
    currency_symbol: str = "$"
    low_stock_threshold: int = 10

    def to_record(self) -> dict:
        return {
            "storeName": self.store_name,
            "taxRate": decimal_text(self.tax_rate),
            "currencySymbol": self.currency_symbol,
            "lowStockThreshold": self.low_stock_threshold,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Settings":
        defaults = cls()
        tax_rate = data.get("taxRate")
        return cls(
            store_name=_text(data.get("storeName"), defaults.store_name),
            tax_rate=_amount(tax_rate) if tax_rate is not None else defaults.tax_rate,
            currency_symbol=_text(data.get("currencySymbol"), defaults.currency_symbol),
            low_stock_threshold=int(data.get("lowStockThreshold", defaults.low_stock_threshold)),
        )

    def to_dict(self) -> dict:
        return {
            "store_name": self.store_name,
            "tax_rate": self.tax_rate,
            "currency_symbol": self.currency_symbol,
            "low_stock_threshold": self.low_stock_threshold,
        }
