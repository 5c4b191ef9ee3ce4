"""Pure aggregations over user-scoped transaction lists.

Input order never affects the output. Empty input yields zeros and empty
mappings.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, Tuple

from fincore.dates import month_key, parse_date
from fincore.domain import EXPENSE, INCOME, Transaction


def is_kind(kind: str):
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


def in_category(category: str):
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def in_month(month: str):
    def _filter(t: Transaction) -> bool:
        return month_key(t.date) == month

    return _filter


def in_date_range(start: date, end: date):
    """Start inclusive, end exclusive."""
    def _filter(t: Transaction) -> bool:
        d = parse_date(t.date)
        return d is not None and start <= d < end

    return _filter


def total_by_kind(trans: Iterable[Transaction], kind: str) -> float:
    return sum((t.amount for t in filter(is_kind(kind), trans)), 0.0)


def net_balance(trans: Iterable[Transaction]) -> float:
    trans = tuple(trans)
    return total_by_kind(trans, INCOME) - total_by_kind(trans, EXPENSE)


def by_month(trans: Iterable[Transaction]) -> Dict[str, Dict[str, float]]:
    """Income and expense sums per ``YYYY-MM``, keys in chronological order.

    Only months with at least one transaction appear.
    """
    months: Dict[str, Dict[str, float]] = defaultdict(lambda: {INCOME: 0.0, EXPENSE: 0.0})
    for t in trans:
        months[month_key(t.date)][t.kind] += t.amount
    return {m: dict(months[m]) for m in sorted(months)}


def by_category(trans: Iterable[Transaction], kind: str = EXPENSE) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for t in filter(is_kind(kind), trans):
        totals[t.category] += t.amount
    return {c: totals[c] for c in sorted(totals)}


def in_window(trans: Iterable[Transaction], start: date, end: date) -> Tuple[Transaction, ...]:
    return tuple(filter(in_date_range(start, end), trans))


def trailing_windows(today: date, days: int) -> Tuple[Tuple[date, date], Tuple[date, date]]:
    """The current and previous ``days``-long windows ending with ``today``.

    Current covers ``today - days`` through ``today``; previous covers the
    ``days`` before that.
    """
    current_start = today - timedelta(days=days)
    previous_start = today - timedelta(days=2 * days)
    return (current_start, today + timedelta(days=1)), (previous_start, current_start)
