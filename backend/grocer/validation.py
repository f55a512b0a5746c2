from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any, TYPE_CHECKING

from .money import to_decimal

if TYPE_CHECKING:
    from .services.data_store import DataStore


# Maximum price: 9,999,999.99
# Keeps totals readable and rejects obviously mistyped prices
MAX_PRICE = Decimal("9999999.99")


class ValidationError(ValueError):
    """400-level input problem; the message is shown to the user as-is."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a category in use)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set
    - required_on_create: fields required for POST
    - allow_blank_fields: text fields that may be submitted as ""
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    allow_blank_fields: set[str] | None = None


CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name"},
    required_on_create={"name"},
    allow_blank_fields={"name"},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category_id", "price", "quantity", "unit", "barcode", "description"},
    required_on_create={"name", "category_id"},
    allow_blank_fields={"name", "barcode", "description"},
)

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields={"store_name", "tax_rate", "currency_symbol", "low_stock_threshold"},
    allow_blank_fields={"store_name", "currency_symbol"},
)


def _fields_by_key(model: type) -> dict[str, str]:
    # Annotations are strings under `from __future__ import annotations`
    return {f.name: str(f.type) for f in fields(model)}


def _coerce_value(key: str, type_name: str, value: Any):
    # Integers - strict validation to reject floats and scientific notation
    if type_name == "int":
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{key} must be an integer")
            if "e" in stripped.lower():
                raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
            if "." in stripped:
                raise ValidationError(f"{key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{key} must be an integer")
        if isinstance(value, float):
            raise ValidationError(f"{key} must be an integer, not a decimal")
        raise ValidationError(f"{key} must be an integer")

    # Money / rates
    if type_name == "Decimal":
        if isinstance(value, bool):
            raise ValidationError(f"{key} must be a number")
        try:
            return to_decimal(value)
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{key} must be a number")

    if type_name == "str":
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: type,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - the dataclass field types of `model`
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    types = _fields_by_key(model)
    allow_blank = policy.allow_blank_fields or set()

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in types:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}
    for k, raw in payload.items():
        if raw is None:
            raise ValidationError(f"{k} cannot be null")

        val = _coerce_value(k, types[k], raw)

        if types[k] == "str" and val == "" and k not in allow_blank:
            raise ValidationError(f"{k} cannot be blank")

        patch[k] = val

    return patch


def enforce_rules_category(patch: dict) -> None:
    if "name" in patch and not patch["name"]:
        raise ValidationError("Category name is required")


def enforce_rules_product(patch: dict, store: "DataStore | None" = None) -> None:
    """
    Business rules that the field types alone do not capture.
    Keep these small and centralized.
    """
    if "name" in patch and not patch["name"]:
        raise ValidationError("Product name is required")

    if "category_id" in patch and store is not None:
        if store.find_category(patch["category_id"]) is None:
            raise ValidationError("Please select a category")

    if "price" in patch:
        price = patch["price"]
        if price < 0:
            raise ValidationError("Price cannot be negative")
        if price > MAX_PRICE:
            raise ValidationError(f"Price cannot exceed {MAX_PRICE:,.2f}")

    if "quantity" in patch and patch["quantity"] < 0:
        raise ValidationError("Quantity cannot be negative")


def enforce_rules_settings(patch: dict) -> None:
    if "store_name" in patch and not patch["store_name"]:
        raise ValidationError("Store name is required")
    if "tax_rate" in patch and patch["tax_rate"] < 0:
        raise ValidationError("Tax rate cannot be negative")
    if "low_stock_threshold" in patch and patch["low_stock_threshold"] < 0:
        raise ValidationError("Low stock threshold cannot be negative")


def enforce_category_deletable(store: "DataStore", category_id: int) -> None:
    if any(p.category_id == category_id for p in store.products):
        raise ConflictError("Cannot delete category with existing products")
