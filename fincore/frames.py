"""pandas DataFrames for the app's charts and tables."""

from dataclasses import asdict
from typing import Iterable

import pandas as pd

from fincore.aggregation import by_category
from fincore.domain import EXPENSE, BudgetStatus, Transaction
from fincore.services import monthly_series

TRANSACTION_COLUMNS = ["date", "kind", "category", "description", "amount"]


def transactions_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    """Transactions newest first, with ``date`` parsed to datetimes."""
    rows = [asdict(t) for t in trans]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS)
    df = pd.DataFrame(rows)[TRANSACTION_COLUMNS]
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df.sort_values("date", ascending=False, kind="stable").reset_index(drop=True)


def monthly_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    series = monthly_series(tuple(trans))["monthly"]
    return pd.DataFrame(series, columns=["month", "income", "expenses", "balance"])


def category_frame(trans: Iterable[Transaction], kind: str = EXPENSE) -> pd.DataFrame:
    totals = by_category(trans, kind)
    df = pd.DataFrame({"category": list(totals), "amount": list(totals.values())})
    total = df["amount"].sum()
    df["share"] = df["amount"] / total * 100 if total else 0.0
    return df.sort_values("amount", ascending=False, kind="stable").reset_index(drop=True)


def budget_frame(statuses: Iterable[BudgetStatus]) -> pd.DataFrame:
    rows = [
        {
            "category": s.budget.category,
            "period": s.budget.period,
            "limit": s.budget.limit,
            "spent": s.spent,
            "remaining": s.remaining,
            "percentage": s.percentage,
            "status": s.classification,
        }
        for s in statuses
    ]
    return pd.DataFrame(
        rows, columns=["category", "period", "limit", "spent", "remaining", "percentage", "status"]
    )
