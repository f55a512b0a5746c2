# Overview: Flask API routes for store settings; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..extensions import get_store
from ..models import Settings
from ..services import settings_service
from ..validation import (
    SETTINGS_POLICY,
    ValidationError,
    enforce_rules_settings,
    validate_payload,
)

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
def get_settings_route():
    return jsonify({"settings": settings_service.get_settings(get_store()).to_dict()})


@settings_bp.put("")
def update_settings_route():
    """
    Update any subset of store_name, tax_rate, currency_symbol and
    low_stock_threshold. Low-stock flags follow the new threshold at once.
    """
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Settings, payload=payload, policy=SETTINGS_POLICY, partial=True)
        enforce_rules_settings(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    settings = settings_service.update_settings(get_store(), patch)
    current_app.logger.info("Settings updated: %s", ", ".join(sorted(patch)) or "nothing")
    return jsonify({"settings": settings.to_dict()})
