# Overview: Flask API routes for products; parses input and returns JSON responses.

# backend/grocer/routes/products.py
"""
Product management routes.

Validation happens here (types, allowlist, business rules) before the
catalog service is called, so a rejected request never mutates state.
"""
from flask import Blueprint, request

from ..extensions import get_store
from ..models import Product
from ..services import catalog_service
from ..validation import (
    PRODUCT_POLICY,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products.

    Query params:
    - search: str (optional) - case-insensitive match on name or barcode
    - category_id: int (optional) - filter by category
    - in_stock: "true" to list only products with quantity > 0
    """
    search = request.args.get("search")
    category_id = request.args.get("category_id", type=int)
    in_stock = request.args.get("in_stock", "false").lower() == "true"

    products = catalog_service.list_products(
        get_store(),
        search=search,
        category_id=category_id,
        in_stock=in_stock,
    )
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = catalog_service.get_product(get_store(), product_id)
    if product is None:
        return {"error": "Product not found"}, 404
    return product.to_dict()


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}
    store = get_store()

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch, store)
    except ValidationError as e:
        return {"error": str(e)}, 400

    created = catalog_service.add_product(store, catalog_service.apply_product_patch(Product(), patch))
    return created.to_dict(), 201


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """Partial update: only the fields present in the body change."""
    payload = request.get_json(silent=True) or {}
    store = get_store()

    existing = catalog_service.get_product(store, product_id)
    if existing is None:
        return {"error": "Product not found"}, 404

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch, store)
    except ValidationError as e:
        return {"error": str(e)}, 400

    updated = catalog_service.update_product(store, catalog_service.apply_product_patch(existing, patch))
    return updated.to_dict()


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    if not catalog_service.delete_product(get_store(), product_id):
        return {"error": "Product not found"}, 404
    return {"ok": True}, 200
