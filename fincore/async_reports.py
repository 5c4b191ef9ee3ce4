import asyncio
from typing import Dict, List, Optional

from fincore.budgets import with_spent
from fincore.domain import Budget, FinancialGoal, Investment, Snapshot, Transaction
from fincore.errors import MissingUserError
from fincore.store import BUDGETS, GOALS, INVESTMENTS, TRANSACTIONS, RecordStore
from fincore.transforms import from_record


async def fetch_collections(store: RecordStore, user_id: str, collections: List[str]) -> Dict[str, list]:
    """Fetch each collection for ``user_id`` concurrently.

    Returns mapping collection -> list of raw records.
    """
    async def fetch(collection: str) -> tuple[str, list]:
        rows = store.list(collection, {"user_id": user_id})
        await asyncio.sleep(0)  # cooperate
        return collection, rows

    results = await asyncio.gather(*(fetch(c) for c in collections))
    return {k: v for k, v in results}


async def load_snapshot(store: RecordStore, user_id: Optional[str]) -> Snapshot:
    """Materialize a full per-user snapshot with budgets' spent filled in."""
    if not user_id:
        raise MissingUserError("an authenticated user is required")

    rows = await fetch_collections(store, user_id, [TRANSACTIONS, BUDGETS, INVESTMENTS, GOALS])
    transactions = tuple(from_record(Transaction, r) for r in rows[TRANSACTIONS])
    budgets = tuple(from_record(Budget, r) for r in rows[BUDGETS])
    return Snapshot(
        transactions=transactions,
        budgets=with_spent(budgets, transactions),
        investments=tuple(from_record(Investment, r) for r in rows[INVESTMENTS]),
        goals=tuple(from_record(FinancialGoal, r) for r in rows[GOALS]),
        user_id=user_id,
    )
