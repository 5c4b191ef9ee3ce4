import pytest

from fincore.async_reports import fetch_collections, load_snapshot
from fincore.errors import MissingUserError
from fincore.store import BUDGETS, GOALS, TRANSACTIONS, FinanceRepository, InMemoryStore


def make_store():
    store = InMemoryStore()
    repo = FinanceRepository(store, "u1")
    repo.add_budget({"category": "Food", "limit": 300, "period": "2025-01"})
    repo.add_transaction({"kind": "expense", "amount": 120, "category": "Food", "date": "2025-01-05"})
    repo.add_transaction({"kind": "income", "amount": 900, "category": "Salary", "date": "2025-01-01"})
    repo.add_goal({"title": "Trip", "target_amount": 1000, "target_date": "2025-12-01"})
    FinanceRepository(store, "u2").add_transaction(
        {"kind": "income", "amount": 1, "category": "Salary", "date": "2025-01-01"})
    return store


@pytest.mark.asyncio
async def test_fetch_collections_scoped_to_user():
    rows = await fetch_collections(make_store(), "u1", [TRANSACTIONS, BUDGETS, GOALS])
    assert set(rows) == {TRANSACTIONS, BUDGETS, GOALS}
    assert len(rows[TRANSACTIONS]) == 2
    assert all(r["user_id"] == "u1" for r in rows[TRANSACTIONS])


@pytest.mark.asyncio
async def test_load_snapshot_matches_repository():
    store = make_store()
    snapshot = await load_snapshot(store, "u1")

    assert snapshot == FinanceRepository(store, "u1").snapshot()
    assert snapshot.budgets[0].spent == 120
    assert len(snapshot.goals) == 1
    assert snapshot.investments == ()


@pytest.mark.asyncio
async def test_load_snapshot_requires_user():
    with pytest.raises(MissingUserError):
        await load_snapshot(InMemoryStore(), None)
