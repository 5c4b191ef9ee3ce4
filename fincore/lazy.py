from collections import defaultdict
from typing import Callable, Iterable, Iterator

from fincore.domain import EXPENSE, Transaction


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def lazy_top_categories(
    trans: Iterable[Transaction], k: int, kind: str = EXPENSE
) -> Iterator[tuple[str, float]]:
    """Yield the ``k`` largest categories of ``kind`` as (category, total).

    Ties are broken alphabetically so the ranking is stable.
    """
    totals: dict[str, float] = defaultdict(float)
    for t in trans:
        if t.kind == kind:
            totals[t.category] += t.amount

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))

    for name, total in ordered[: max(0, k)]:
        yield name, total
