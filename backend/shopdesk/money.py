# Overview: Integer-cents money helpers shared by services and validation.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

CENT = Decimal("1")


def _decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr round-trips the float without binary noise (0.1 -> "0.1")
        return Decimal(repr(value))
    return Decimal(str(value))


def to_cents(value: Any) -> int | None:
    """Convert a currency amount in units (12.5, "12,50", "R$ 3") to cents."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    if isinstance(value, str):
        text = value.strip().replace("R$", "").replace(" ", "")
        if not text:
            return None
        # "1.234,56" (pt-BR) and "1,234.56" both mean 1234.56
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
        value = text
    try:
        amount = _decimal(value)
    except InvalidOperation:
        raise ValueError(f"invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    return int((amount * 100).quantize(CENT, rounding=ROUND_HALF_UP))


def multiply_cents(cents: int, factor: Any) -> int:
    """cents × factor, rounded half-up to a whole cent."""
    return int((Decimal(cents) * _decimal(factor)).quantize(CENT, rounding=ROUND_HALF_UP))


def format_brl(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}R$ {cents // 100}.{cents % 100:02d}"
