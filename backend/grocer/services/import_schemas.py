from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from ..models import DEFAULT_UNIT, Category, Product
from ..money import ZERO
from . import catalog_service
from .data_store import DataStore

# Category used when a product row leaves the category blank
FALLBACK_CATEGORY_ID = 1

_HEADER_NOISE = re.compile(r"[\s_\-]+")


def normalize_header(header: Any) -> str:
    """'Product Name', 'product_name' and 'PRODUCTNAME' all become 'productname'."""
    if header is None:
        return ""
    return _HEADER_NOISE.sub("", str(header)).casefold()


def resolve_columns(headers: Iterable[Any], synonyms: dict[str, tuple[str, ...]]) -> dict[str, str]:
    """Map each schema field to the first header in the file that names it."""
    by_normalized: dict[str, str] = {}
    for header in headers:
        key = normalize_header(header)
        if key and key not in by_normalized:
            by_normalized[key] = header

    columns: dict[str, str] = {}
    for field, names in synonyms.items():
        for name in names:
            if name in by_normalized:
                columns[field] = by_normalized[name]
                break
    return columns


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _to_amount(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    text = str(value).strip().replace("$", "").replace(",", "")
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


class BaseImportSchema:
    synonyms: dict[str, tuple[str, ...]] = {}

    def normalize_row(self, raw_row: dict[str, Any], columns: dict[str, str]) -> dict[str, Any]:
        return {field: raw_row.get(header) for field, header in columns.items()}

    def validate_row(self, normalized_row: dict[str, Any], store: DataStore) -> list[str]:
        raise NotImplementedError

    def post_row(self, normalized_row: dict[str, Any], store: DataStore) -> Any:
        raise NotImplementedError


class ProductsSchema(BaseImportSchema):
    synonyms = {
        "name": ("name", "productname"),
        "category": ("category", "categoryname"),
        "price": ("price",),
        "quantity": ("quantity", "qty", "stock"),
        "unit": ("unit", "unittype"),
        "barcode": ("barcode", "sku", "code"),
        "description": ("description", "desc"),
    }

    def normalize_row(self, raw_row: dict[str, Any], columns: dict[str, str]) -> dict[str, Any]:
        raw = super().normalize_row(raw_row, columns)
        price = _to_amount(raw.get("price"))
        quantity = _to_int(raw.get("quantity"))
        return {
            "name": _to_text(raw.get("name")),
            "category": _to_text(raw.get("category")),
            # Unparsable numbers fall back to 0 rather than rejecting the row
            "price": price if price is not None else ZERO,
            "quantity": quantity if quantity is not None else 0,
            "unit": _to_text(raw.get("unit")) or DEFAULT_UNIT,
            "barcode": _to_text(raw.get("barcode")) or "",
            "description": _to_text(raw.get("description")) or "",
        }

    def validate_row(self, normalized_row: dict[str, Any], store: DataStore) -> list[str]:
        if not normalized_row.get("name"):
            return ["Skipped row: Product name is empty"]
        return []

    def _resolve_category_id(self, name: str | None, store: DataStore) -> int:
        if not name:
            return FALLBACK_CATEGORY_ID
        category = catalog_service.find_category_by_name(store, name)
        if category is None:
            category = catalog_service.add_category(store, name)
        return category.id

    def post_row(self, normalized_row: dict[str, Any], store: DataStore) -> Product:
        product = Product(
            name=normalized_row["name"],
            category_id=self._resolve_category_id(normalized_row.get("category"), store),
            price=normalized_row["price"],
            quantity=normalized_row["quantity"],
            unit=normalized_row["unit"],
            barcode=normalized_row["barcode"],
            description=normalized_row["description"],
        )
        return catalog_service.add_product(store, product)


class CategoriesSchema(BaseImportSchema):
    synonyms = {
        "name": ("name", "categoryname", "category"),
    }

    def normalize_row(self, raw_row: dict[str, Any], columns: dict[str, str]) -> dict[str, Any]:
        raw = super().normalize_row(raw_row, columns)
        return {"name": _to_text(raw.get("name"))}

    def validate_row(self, normalized_row: dict[str, Any], store: DataStore) -> list[str]:
        name = normalized_row.get("name")
        if not name:
            return ["Skipped row: Category name is empty"]
        if catalog_service.find_category_by_name(store, name) is not None:
            return [f"Skipped '{name}': Category already exists"]
        return []

    def post_row(self, normalized_row: dict[str, Any], store: DataStore) -> Category:
        return catalog_service.add_category(store, normalized_row["name"])


SCHEMAS: dict[str, BaseImportSchema] = {
    "products": ProductsSchema(),
    "categories": CategoriesSchema(),
}
