# Overview: Flask API routes for categories; parses input and returns JSON responses.

from flask import Blueprint, request

from ..extensions import get_store
from ..models import Category
from ..services import catalog_service
from ..validation import (
    CATEGORY_POLICY,
    ConflictError,
    ValidationError,
    enforce_category_deletable,
    enforce_rules_category,
    validate_payload,
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
def list_categories():
    """List categories with the number of products in each."""
    items = catalog_service.list_categories_with_counts(get_store())
    return {"items": items, "count": len(items)}


@categories_bp.post("")
def create_category_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
        enforce_rules_category(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    category = catalog_service.add_category(get_store(), patch["name"])
    return category.to_dict(), 201


@categories_bp.put("/<int:category_id>")
def update_category_route(category_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
        enforce_rules_category(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    updated = catalog_service.update_category(get_store(), category_id, patch["name"])
    if updated is None:
        return {"error": "Category not found"}, 404
    return updated.to_dict()


@categories_bp.delete("/<int:category_id>")
def delete_category_route(category_id: int):
    """
    Delete a category.

    Refused with 409 while any product still references it.
    """
    store = get_store()
    if catalog_service.get_category(store, category_id) is None:
        return {"error": "Category not found"}, 404

    try:
        enforce_category_deletable(store, category_id)
    except ConflictError as e:
        return {"error": str(e)}, 409

    catalog_service.delete_category(store, category_id)
    return {"ok": True}, 200
