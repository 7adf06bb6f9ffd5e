"""
Utility functions for SplitLedger application
"""
from __future__ import annotations
import os
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def to_minor_units(value: Union[str, int, float, Decimal]) -> int:
    """
    Convert a decimal currency value (e.g. "12.34") to integer minor units (1234).
    Rounds half-up to the cent. Raises ValueError on anything that is not a number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a currency amount: {value!r}")
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Not a currency amount: {value!r}") from None
    if not d.is_finite():
        raise ValueError(f"Not a currency amount: {value!r}")
    return int((d.quantize(CENT, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def from_minor_units(units: int) -> Decimal:
    """Convert integer minor units back to a 2-digit Decimal"""
    return (Decimal(units) / 100).quantize(CENT)


def format_amount(units: int) -> str:
    return f"{from_minor_units(units):.2f}"


def app_dir() -> str:
    """
    Get application data directory: $SPLITLEDGER_HOME, else ~/.splitledger
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("SPLITLEDGER_HOME") or os.path.expanduser("~/.splitledger")
    os.makedirs(path, exist_ok=True)
    return path


def months_before(d: date, months: int) -> date:
    """Same day `months` calendar months earlier, clamped to the end of a shorter month"""
    y, m = divmod(d.year * 12 + d.month - 1 - months, 12)
    first_of_next = date(y + (m + 1) // 12, (m + 1) % 12 + 1, 1)
    last_day = (first_of_next - date(y, m + 1, 1)).days
    return date(y, m + 1, min(d.day, last_day))
