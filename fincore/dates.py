import calendar
import re
from datetime import date, datetime
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_date(value) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string (or pass a date through), None on failure."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return datetime.strptime(str(value)[:10], DATE_FORMAT).date()
    except ValueError:
        return None


def parse_month(month_str: str) -> Optional[date]:
    """Return the first day of the given YYYY-MM month string."""
    if not month_str or not _MONTH_RE.match(str(month_str)):
        return None
    return datetime.strptime(month_str, MONTH_FORMAT).date()


def is_month(month_str: str) -> bool:
    return parse_month(month_str) is not None


def month_key(value) -> str:
    """The ``YYYY-MM`` bucket of an ISO date string or a date."""
    if isinstance(value, date):
        return value.strftime(MONTH_FORMAT)
    return str(value)[:7]


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def prev_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    if d.month == 1:
        return month_key(d.replace(year=d.year - 1, month=12))
    return month_key(d.replace(month=d.month - 1))


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)
