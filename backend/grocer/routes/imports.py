# Overview: Flask API routes for bulk imports; parses input and returns JSON responses.

"""
Import Routes

Accepts a multipart `file` field holding a CSV, TSV or Excel (.xlsx) sheet.
Bad rows are skipped and reported; they never fail the whole upload.
"""

from flask import Blueprint, jsonify, request

from ..extensions import get_store
from ..services import import_service


imports_bp = Blueprint("imports", __name__, url_prefix="/api/imports")


def _import(import_type: str):
    if "file" not in request.files:
        return jsonify({"error": "file is required"}), 400

    file = request.files["file"]
    result = import_service.import_upload(get_store(), import_type, file.stream, file.filename or "")
    return jsonify(result.to_dict()), 200


@imports_bp.post("/products")
def import_products_route():
    return _import("products")


@imports_bp.post("/categories")
def import_categories_route():
    return _import("categories")
