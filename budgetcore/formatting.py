"""Currency parsing and display helpers.

Every place where user text becomes a stored amount goes through
``parse_currency_input`` so that the coercion rules live in one spot.
"""

import math
import re
from typing import Any

_NON_NUMERIC = re.compile(r"[^\d.]")
_LEADING_ZEROS = re.compile(r"^0+(\d)")

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def parse_currency_input(value: Any) -> float:
    """Turn user input into a non-negative amount.

    - ``None``, booleans and blank strings give 0.
    - Numbers are returned as floats when finite and positive, else 0.
    - Strings lose every character that is not a digit or a dot (thousands
      separators, currency symbols, signs, whitespace) and the rest is parsed;
      anything that still fails to parse ("", ".", "1.2.3") gives 0.

    >>> parse_currency_input("₦1,500.50")
    1500.5
    >>> parse_currency_input("abc")
    0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) and number > 0 else 0.0

    cleaned = _NON_NUMERIC.sub("", str(value))
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def format_ngn(value: Any) -> str:
    """Format an amount as whole naira, e.g. ``₦1,234,567``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = 0.0
    if not math.isfinite(number):
        number = 0.0
    sign = "-" if number < 0 else ""
    return f"{sign}₦{abs(number):,.0f}"


def format_amount_input(raw: str) -> str:
    """Accounting-style echo of what the user typed: "0012500.5" -> "12,500.5"."""
    cleaned = _NON_NUMERIC.sub("", raw or "")
    cleaned = _LEADING_ZEROS.sub(r"\1", cleaned)
    whole, dot, fraction = cleaned.partition(".")
    if whole:
        whole = f"{int(whole):,}"
    return f"{whole}{dot}{fraction}"


def format_plain_number(value: float) -> str:
    # integral floats print without a trailing ".0", like the exported JSON/CSV
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def month_label(key: str, short: bool = False) -> str:
    year, month = key.split("-")
    name = _MONTH_NAMES[int(month) - 1]
    return f"{name[:3] if short else name} {year}"


def format_plan_amount(value: float) -> str:
    """Text a stored plan amount is shown as in its input box; 0 shows blank."""
    if not value:
        return ""
    return format_amount_input(format_plain_number(value))


def amount_changed(raw: str, value: float) -> bool:
    return parse_currency_input(raw) != value
