# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/grocer/routes/sales.py
"""Sales API routes: quote a cart, record a sale, browse the ledger."""

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store
from ..services import reporting_service, sales_service
from ..services.reporting_service import ReportError
from ..services.sales_service import SaleError
from ..time_utils import parse_date


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _lines_from_request():
    data = request.get_json(silent=True) or {}
    items = data.get("items")
    if not isinstance(items, list):
        raise SaleError("items must be a list")
    return items


@sales_bp.post("/quote")
def quote_sale_route():
    """
    Running totals for a cart without recording anything.

    Body: {"items": [{"product_id": 1, "quantity": 2, "unit_price": "1.50"?}]}
    """
    try:
        items, totals = sales_service.quote_sale(get_store(), _lines_from_request())
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400

    return jsonify({"items": [i.to_dict() for i in items], **totals.to_dict()}), 200


@sales_bp.post("")
def create_sale_route():
    """
    Record a completed sale.

    Stock is decremented for every line and clamped at zero.
    """
    try:
        transaction = sales_service.record_sale(get_store(), _lines_from_request())
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"transaction": transaction.to_dict()}), 201


@sales_bp.get("")
def list_sales_route():
    try:
        start = parse_date(request.args.get("start"))
        end = parse_date(request.args.get("end"))
    except ValueError:
        return jsonify({"error": "start and end must be YYYY-MM-DD dates"}), 400

    try:
        transactions = reporting_service.sales_in_range(get_store(), start, end)
    except ReportError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"items": [t.to_dict() for t in transactions], "count": len(transactions)})


@sales_bp.get("/recent")
def recent_sales_route():
    count = request.args.get("count", 10, type=int)
    transactions = reporting_service.recent_transactions(get_store(), count)
    return jsonify({"items": [t.to_dict() for t in transactions], "count": len(transactions)})


@sales_bp.get("/<int:transaction_id>")
def get_sale_route(transaction_id: int):
    transaction = sales_service.get_transaction(get_store(), transaction_id)
    if transaction is None:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify({"transaction": transaction.to_dict()})
