"""Display helpers shared by the app pages."""

import math
from typing import Optional

from fincore import config


def format_currency(amount: float, symbol: Optional[str] = None) -> str:
    """Format a float as currency string, e.g. 'Kz 1,234.56'."""
    symbol = config.CURRENCY_SYMBOL if symbol is None else symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {abs(amount):,.2f}"


def format_percent(value: float, signed: bool = False) -> str:
    if signed and value > 0:
        return f"+{value:.2f}%"
    return f"{value:.2f}%"


def format_duration(months: float) -> str:
    """Months below a year are rounded up to whole months, longer spans shown in years."""
    if months < 12:
        whole = math.ceil(months)
        return f"{whole} month" if whole == 1 else f"{whole} months"
    return f"{months / 12:.1f} years"
