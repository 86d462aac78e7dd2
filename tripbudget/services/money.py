"""Money / rounding / keypad helpers.

Centralized so the ledger, the rate cache and the widget entries use identical
rounding, formatting and input-parsing semantics.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

DECIMAL_SEPARATORS = (".", ",")
BACKSPACE_KEY = "⌫"
CLEAR_KEY = "C"
MAX_FRACTION_DIGITS = 2
MAX_KEYPAD_AMOUNT = 1_000_000_000


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(value: float) -> str:
    """Decimal style, at most two fraction digits, space grouping.

    >>> format_amount(1234.5)
    '1 234.5'
    >>> format_amount(-0.004)
    '0'
    """
    rounded = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded == 0:
        return "0"
    text = f"{abs(rounded):,.2f}".replace(",", " ")
    text = text.rstrip("0").rstrip(".")
    return f"-{text}" if rounded < 0 else text


def format_rate(rate: float, digits: int = 4) -> str:
    return f"{rate:.{digits}f}"


def parse_amount(text: Optional[str]) -> Optional[float]:
    """Parse user typed amount text; None means "not a usable amount".

    Accepts either '.' or ',' as the decimal separator and spaces as grouping.
    """
    if text is None:
        return None
    cleaned = text.strip().replace(" ", "").replace("\u00a0", "")
    if not cleaned:
        return None
    if cleaned.count(",") + cleaned.count(".") > 1:
        return None
    cleaned = cleaned.replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return float(value)


def append_keypad_input(text: str, key: str) -> str:
    """Apply one calculator key press to the amount text."""
    if key == CLEAR_KEY:
        return "0"
    if key == BACKSPACE_KEY:
        trimmed = text[:-1]
        return trimmed if trimmed else "0"
    if key in DECIMAL_SEPARATORS:
        if any(sep in text for sep in DECIMAL_SEPARATORS):
            return text
        return (text or "0") + "."
    if len(key) != 1 or not key.isdigit():
        return text
    for sep in DECIMAL_SEPARATORS:
        if sep in text:
            _, fraction = text.split(sep, 1)
            if len(fraction) >= MAX_FRACTION_DIGITS:
                return text
            return text + key
    if text in ("", "0"):
        return key
    return text + key


def type_digit(current: float, digit: int) -> float:
    """Widget keypad rule: shift the amount left and append `digit`."""
    if not 0 <= digit <= 9:
        raise ValueError("digit must be between 0 and 9")
    if current < MAX_KEYPAD_AMOUNT:
        return current * 10 + digit
    return current
