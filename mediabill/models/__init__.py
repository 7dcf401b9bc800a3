from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal | int | float, symbol: str = "$") -> str:
    """Format a money value for display: Decimal('1234.5') -> '$1,234.50'"""
    amount = round_money(Decimal(str(value)))
    if amount < 0:
        return f"-{symbol}{-amount:,.2f}"
    return f"{symbol}{amount:,.2f}"


def parse_money(text: str | int | float | Decimal | None) -> Decimal | None:
    """Parse user or record input like '$1,234.50' into a Decimal.

    Returns None for empty or unparseable input.
    """
    if text is None:
        return None
    if isinstance(text, Decimal):
        return text if text.is_finite() else None
    if isinstance(text, (int, float)):
        value = Decimal(str(text))
        return value if value.is_finite() else None
    cleaned = re.sub(r"[^0-9.\-]", "", str(text))
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None
