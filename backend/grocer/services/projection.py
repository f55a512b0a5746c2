from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from ..models import UNKNOWN_CATEGORY, Category, Product, Settings


def is_low_stock(quantity: int, threshold: int) -> bool:
    """Strictly between 0 and the threshold; out-of-stock is not low-stock."""
    return 0 < quantity < threshold


def derive_view(
    categories: Iterable[Category],
    products: Iterable[Product],
    settings: Settings,
) -> list[Product]:
    """
    Return annotated copies of `products` with category_name and is_low_stock
    filled in from the current categories and settings.

    Pure: inputs are not modified.
    """
    names = {c.id: c.name for c in categories}
    return [
        replace(
            p,
            category_name=names.get(p.category_id, UNKNOWN_CATEGORY),
            is_low_stock=is_low_stock(p.quantity, settings.low_stock_threshold),
        )
        for p in products
    ]
