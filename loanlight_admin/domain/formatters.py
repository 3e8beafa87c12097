"""Display formatting for currency amounts and dates"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from loanlight_admin.config import settings


def to_number(value) -> float:
    """Coerce a backend numeric value to float; None, NaN and garbage become 0.0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(Decimal(str(value))) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, InvalidOperation):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def format_currency(value, currency: str | None = None, decimals: int | None = None) -> str:
    """
    Format an amount with thousands separators and the institution's currency.

    Example:
        format_currency(1234567) -> "KES 1,234,567"
        format_currency(None)    -> "KES 0"
    """
    currency = currency or settings.currency_code
    decimals = settings.currency_decimals if decimals is None else decimals
    amount = to_number(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.{decimals}f}"


def format_date(value) -> str:
    """Long display date, e.g. "18 Oct 2026". Empty string when missing."""
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return ""
    return value.strftime("%d %b %Y")


def format_short_date(value) -> str:
    """Compact display date, e.g. "18/10/2026"; "-" when missing"""
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        return "-"
    return value.strftime("%d/%m/%Y")
