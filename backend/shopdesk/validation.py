"""
Request payload checks shared by the catalog, client and payables routes.

A route declares a ModelValidationPolicy (which fields a caller may write,
which are required on create) and validate_payload turns the JSON body into
a clean patch using the target model's column metadata. Rules that column
metadata cannot express live in the enforce_rules_* helpers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .records import UNITS
from .time_utils import parse_iso_datetime


# R$ 9,999,999.99; anything larger is a typo
MAX_PRICE_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate barcode)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = field(default_factory=frozenset)


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be an integer")

    text = value.strip()
    # int() would happily take "1_000"; only plain signed digits are cents
    digits = text[1:] if text[:1] in "+-" else text
    if not digits.isdigit():
        raise ValidationError(f"{key} must be a plain integer")
    return int(text)


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(f"{key} must be a number")
    try:
        number = float(value.strip().replace(",", ".")) if isinstance(value, str) else float(value)
    except ValueError:
        raise ValidationError(f"{key} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number")
    return number


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{key} must be true or false")


def _as_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_datetime(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise ValidationError(f"{key} must be an ISO-8601 date or datetime")


def _as_text(key: str, value: Any) -> str:
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{key} must be text")
    return str(value).strip()


# First matching column type wins
_COERCERS: tuple[tuple[type, Callable[[str, Any], Any]], ...] = (
    (Boolean, _as_bool),
    (Integer, _as_int),
    (Float, _as_float),
    (DateTime, _as_datetime),
    ((String, Text), _as_text),
)


def _coerce(column, value: Any) -> Any:
    for sql_type, coerce in _COERCERS:
        if isinstance(column.type, sql_type):
            return coerce(column.key, value)
    return value


def _clean_field(column, raw: Any) -> Any:
    key = column.key
    if raw is None:
        if not column.nullable:
            raise ValidationError(f"{key} cannot be null")
        return None

    value = _coerce(column, raw)
    if not isinstance(value, str):
        return value

    if value == "":
        if not column.nullable:
            raise ValidationError(f"{key} cannot be blank")
        return None
    max_length = getattr(column.type, "length", None)
    if max_length and len(value) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Check a JSON body against a policy and the model's columns.

    Only writable fields are accepted. With partial=False every field in
    required_on_create must be present. Values are coerced by column type,
    nullability and String(n) lengths are enforced, and blank optional text
    becomes None. Returns the cleaned patch.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create - payload.keys())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {column.key: column for column in model.__mapper__.columns}
    for key in payload:
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}")
        if key not in columns:
            raise ValidationError(f"Unknown field: {key}")

    return {key: _clean_field(columns[key], raw) for key, raw in payload.items()}


def _check_cents(patch: dict, key: str) -> None:
    value = patch.get(key)
    if value is None:
        return
    if value < 0:
        raise ValidationError(f"{key} must be >= 0")
    if value > MAX_PRICE_CENTS:
        raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS} (R$ {MAX_PRICE_CENTS / 100:,.2f})")


def enforce_rules_product(patch: dict) -> None:
    """Catalog rules on top of column checks: money bounds, unit, barcode charset."""
    _check_cents(patch, "price_cents")
    _check_cents(patch, "cost_cents")

    unit = patch.get("unit")
    if unit is not None and unit not in UNITS:
        raise ValidationError(f"unit must be one of: {', '.join(UNITS)}")

    barcode = patch.get("barcode")
    if barcode and not barcode.isalnum():
        raise ValidationError("barcode must be alphanumeric")


def enforce_rules_store_debt(patch: dict) -> None:
    _check_cents(patch, "amount_cents")


def parse_cents(value: Any, key: str, *, allow_zero: bool = True) -> int:
    """Validate an integer-cents request field."""
    if value is None:
        raise ValidationError(f"{key} required")
    cents = _as_int(key, value)
    if cents < 0 or (cents == 0 and not allow_zero):
        raise ValidationError(f"{key} must be {'>=' if allow_zero else '>'} 0")
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{key} cannot exceed {MAX_PRICE_CENTS}")
    return cents


def parse_quantity(value: Any, key: str = "quantity") -> float:
    """Validate a positive quantity (units or kg). Missing means one unit."""
    if value is None:
        return 1.0
    quantity = _as_float(key, value)
    if quantity <= 0:
        raise ValidationError(f"{key} must be > 0")
    return quantity
