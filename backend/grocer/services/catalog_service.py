# Overview: Catalog operations (categories and products) over the DataStore.

"""
Catalog Service

All mutators go through DataStore.save_categories()/save_products(), which
persist, recompute category names and low-stock flags, and notify subscribers.

Refusals are reported as return values, not exceptions:
- update_* returns None when the id does not exist
- delete_* returns False when nothing was removed
"""
from __future__ import annotations

import logging
from dataclasses import replace

from ..models import Category, Product
from .data_store import KEY_CATEGORIES, KEY_PRODUCTS, DataStore

logger = logging.getLogger(__name__)

PRODUCT_MUTABLE_FIELDS = {"name", "category_id", "price", "quantity", "unit", "barcode", "description"}


def apply_product_patch(p: Product, patch: dict) -> Product:
    """Return a copy of `p` with the allowed fields from `patch` applied."""
    changes = {k: v for k, v in patch.items() if k in PRODUCT_MUTABLE_FIELDS}
    return replace(p, **changes)


# -- categories -------------------------------------------------------------

def list_categories(store: DataStore) -> list[Category]:
    return list(store.categories)


def list_categories_with_counts(store: DataStore) -> list[dict]:
    counts: dict[int, int] = {}
    for p in store.products:
        counts[p.category_id] = counts.get(p.category_id, 0) + 1
    return [
        {**c.to_dict(), "product_count": counts.get(c.id, 0)}
        for c in list_categories(store)
    ]


def get_category(store: DataStore, category_id: int) -> Category | None:
    return store.find_category(category_id)


def find_category_by_name(store: DataStore, name: str) -> Category | None:
    """Case-insensitive exact match on the category name."""
    wanted = name.strip().casefold()
    return next((c for c in store.categories if c.name.casefold() == wanted), None)


def add_category(store: DataStore, name: str) -> Category:
    """Append a new category. Duplicate names are not checked here."""
    category = Category(id=store.allocate_id(KEY_CATEGORIES), name=name)
    store.categories.append(category)
    store.save_categories()
    logger.info("Created category id=%s name=%r", category.id, category.name)
    return category


def update_category(store: DataStore, category_id: int, name: str) -> Category | None:
    for index, existing in enumerate(store.categories):
        if existing.id == category_id:
            updated = Category(id=category_id, name=name)
            store.categories[index] = updated
            store.save_categories()
            return updated
    return None


def can_delete_category(store: DataStore, category_id: int) -> bool:
    return not any(p.category_id == category_id for p in store.products)


def delete_category(store: DataStore, category_id: int) -> bool:
    if not can_delete_category(store, category_id):
        return False

    before = len(store.categories)
    store.categories = [c for c in store.categories if c.id != category_id]
    if len(store.categories) == before:
        return False

    store.save_categories()
    logger.info("Deleted category id=%s", category_id)
    return True


# -- products ---------------------------------------------------------------

def _matches(p: Product, search: str) -> bool:
    return search in p.name.casefold() or search in p.barcode.casefold()


def list_products(
    store: DataStore,
    *,
    search: str | None = None,
    category_id: int | None = None,
    in_stock: bool = False,
) -> list[Product]:
    """
    Catalog listing in storage order.

    search: case-insensitive substring of name or barcode
    category_id: restrict to one category
    in_stock: only products with quantity > 0
    """
    products = store.products
    if search and search.strip():
        needle = search.strip().casefold()
        products = [p for p in products if _matches(p, needle)]
    if category_id is not None:
        products = [p for p in products if p.category_id == category_id]
    if in_stock:
        products = [p for p in products if p.quantity > 0]
    return list(products)


def available_products(store: DataStore, search: str | None = None) -> list[Product]:
    """Products that can be rung up right now."""
    return list_products(store, search=search, in_stock=True)


def get_product(store: DataStore, product_id: int) -> Product | None:
    return store.find_product(product_id)


def add_product(store: DataStore, product: Product) -> Product:
    """Assign the next id, append and persist. Returns the annotated product."""
    product = replace(product, id=store.allocate_id(KEY_PRODUCTS))
    store.products.append(product)
    store.save_products()
    logger.info("Created product id=%s name=%r", product.id, product.name)
    return store.find_product(product.id)


def update_product(store: DataStore, product: Product) -> Product | None:
    for index, existing in enumerate(store.products):
        if existing.id == product.id:
            store.products[index] = product
            store.save_products()
            return store.find_product(product.id)
    return None


def delete_product(store: DataStore, product_id: int) -> bool:
    product = store.find_product(product_id)
    if product is None:
        return False

    store.products = [p for p in store.products if p.id != product_id]
    store.save_products()
    logger.info("Deleted product id=%s name=%r", product.id, product.name)
    return True
