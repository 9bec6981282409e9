"""
BRL currency helpers operating on integer minor units (centavos).

Amounts that cross a persistence or display boundary travel as cents so
that no floating-point drift leaks into stored or shown values.
"""

from __future__ import annotations

import math
import re
from typing import Optional

NEGOTIATION_MIN_VALUE_CENTS = 300  # R$ 3,00
NEGOTIATION_STEP_CENTS = 100  # R$ 1,00

CURRENCY_SYMBOL = "R$"
_NBSP = "\u00a0"  # pt-BR formatting separates symbol and amount with a NBSP

_NOT_AMOUNT = re.compile(r"[^\d.,]")
_NOT_DIGIT = re.compile(r"\D")


def format_minor_units(cents: int) -> str:
    """1470 -> ``"R$ 14,70"``; 123456 -> ``"R$ 1.234,56"``."""
    sign = "-" if cents < 0 else ""
    units, rest = divmod(abs(int(cents)), 100)
    grouped = f"{units:,}".replace(",", ".")
    return f"{sign}{CURRENCY_SYMBOL}{_NBSP}{grouped},{rest:02d}"


def parse_to_minor_units(text: Optional[str]) -> Optional[int]:
    """
    Parse user-typed money into cents, or ``None`` when it is not a value.

    Accepts ``"50"``, ``"50,9"``, ``"50.00"``, ``"R$ 50,00"``.  Dot and comma
    are interchangeable; the group after the single separator is the
    decimal part (one digit is padded, extra digits are truncated).  More
    than one separator is ambiguous and rejected.
    """
    if not text:
        return None

    sanitized = _NOT_AMOUNT.sub("", text).replace(".", ",")
    if not sanitized:
        return None

    parts = sanitized.split(",")
    if len(parts) == 1:
        units = _NOT_DIGIT.sub("", parts[0])
        if not units:
            return None
        return int(units) * 100

    if len(parts) == 2:
        units = _NOT_DIGIT.sub("", parts[0]) or "0"
        decimals = _NOT_DIGIT.sub("", parts[1])
        decimals = (decimals + "00")[:2] if decimals else "00"
        return int(units) * 100 + int(decimals)

    return None


def clamp_minimum(cents: int) -> int:
    return max(cents, NEGOTIATION_MIN_VALUE_CENTS)


def cents_to_units(cents: int) -> float:
    return cents / 100


def units_to_cents(amount: float) -> int:
    # half-up on the cent boundary, like the price calculator
    return math.floor(amount * 100 + 0.5)
