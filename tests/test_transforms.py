from datetime import date

import pytest

from fincore import config
from fincore.domain import Budget, FinancialGoal, Investment, Transaction
from fincore.transforms import (
    contribute_to_goal,
    days_remaining,
    from_record,
    goal_progress,
    load_seed,
    new_budget,
    new_goal,
    new_investment,
    new_transaction,
    portfolio_summary,
)


def make_goal(current=0.0, target=1000.0):
    return FinancialGoal(id="g1", title="Car", target_amount=target, current_amount=current,
                         target_date="2025-06-30", category="savings")


def test_load_seed():
    snapshot = load_seed(config.SEED_PATH)

    assert len(snapshot.transactions) >= 5
    assert len(snapshot.budgets) >= 3
    assert len(snapshot.investments) >= 1
    assert len(snapshot.goals) >= 1
    assert all(isinstance(t, Transaction) for t in snapshot.transactions)


def test_from_record_ignores_store_fields():
    record = {"id": "x", "user_id": "u1", "kind": "expense", "amount": 5.0,
              "category": "Food", "date": "2025-01-01", "description": ""}
    t = from_record(Transaction, record)
    assert t.id == "x"
    assert not hasattr(t, "user_id")


def test_new_transaction_valid():
    result = new_transaction({"kind": "expense", "amount": "42.5", "category": " Food ",
                              "date": "2025-01-02", "description": "lunch"})
    t = result.unwrap()
    assert t.amount == 42.5
    assert t.category == "Food"
    assert t.description == "lunch"


@pytest.mark.parametrize("values,field", [
    ({"kind": "transfer", "amount": 1, "category": "Food", "date": "2025-01-01"}, "kind"),
    ({"kind": "expense", "amount": 0, "category": "Food", "date": "2025-01-01"}, "amount"),
    ({"kind": "expense", "amount": -3, "category": "Food", "date": "2025-01-01"}, "amount"),
    ({"kind": "expense", "amount": 3, "category": "", "date": "2025-01-01"}, "category"),
    ({"kind": "expense", "amount": 3, "category": "Food", "date": "2025-13-01"}, "date"),
    ({"kind": "expense", "amount": "inf", "category": "Food", "date": "2025-01-01"}, "amount"),
    ({"kind": "expense", "amount": float("nan"), "category": "Food", "date": "2025-01-01"}, "amount"),
    ({"kind": "expense", "amount": True, "category": "Food", "date": "2025-01-01"}, "amount"),
])
def test_new_transaction_invalid(values, field):
    result = new_transaction(values)
    assert result.is_left()
    assert result.get_error()["field"] == field


def test_new_budget_valid():
    budget = new_budget({"category": "Food", "limit": "500", "period": "2025-02"}).unwrap()
    assert budget.limit == 500
    assert budget.spent == 0


@pytest.mark.parametrize("values,field", [
    ({"category": "Food", "limit": 0, "period": "2025-02"}, "limit"),
    ({"category": "Food", "limit": -10, "period": "2025-02"}, "limit"),
    ({"category": "Food", "limit": "nan", "period": "2025-02"}, "limit"),
    ({"category": "Food", "limit": "inf", "period": "2025-02"}, "limit"),
    ({"category": "Food", "limit": float("-inf"), "period": "2025-02"}, "limit"),
    ({"category": "Food", "limit": 10, "period": "2025-2"}, "period"),
    ({"category": "Food", "limit": 10, "period": "2025-13"}, "period"),
    ({"limit": 10, "period": "2025-02"}, "category"),
])
def test_new_budget_invalid(values, field):
    assert new_budget(values).get_error()["field"] == field


def test_new_budget_rejects_duplicate_category_period():
    existing = (Budget(id="b1", category="Food", limit=300, period="2025-02"),)
    result = new_budget({"category": "Food", "limit": 500, "period": "2025-02"}, existing)
    assert result.is_left()
    assert "already exists" in result.get_error()["message"]


def test_new_investment_computes_static_current_value():
    inv = new_investment({"kind": "Stocks", "principal": 1000, "annual_return_rate": 12,
                          "date": "2025-01-01"}).unwrap()
    assert inv.current_value == pytest.approx(1120)


def test_new_goal_defaults_and_clamps():
    goal = new_goal({"title": "Bike", "target_amount": 500, "current_amount": 800,
                     "target_date": "2025-12-01"}).unwrap()
    assert goal.category == "savings"
    assert goal.current_amount == 500


def test_new_goal_requires_target_date_and_known_category():
    assert new_goal({"title": "Bike", "target_amount": 500}).get_error()["field"] == "target_date"
    result = new_goal({"title": "Bike", "target_amount": 500, "target_date": "2025-12-01",
                       "category": "holiday"})
    assert result.get_error()["field"] == "category"


def test_contribute_to_goal_adds_and_clamps():
    goal = make_goal(current=900)
    assert contribute_to_goal(goal, 50).unwrap().current_amount == 950
    assert contribute_to_goal(goal, 500).unwrap().current_amount == 1000
    assert goal.current_amount == 900


def test_contribute_to_goal_rejects_non_positive():
    assert contribute_to_goal(make_goal(), 0).is_left()
    assert contribute_to_goal(make_goal(), -5).is_left()


def test_goal_progress_and_days_remaining():
    goal = make_goal(current=250)
    assert goal_progress(goal) == 25
    assert days_remaining(goal, date(2025, 6, 1)) == 29
    assert days_remaining(goal, date(2025, 7, 1)) == -1


def test_portfolio_summary():
    investments = (
        Investment("i1", "Stocks", 1000, 10, "2025-01-01", 1100),
        Investment("i2", "ETFs", 1000, -5, "2025-01-01", 950),
    )
    summary = portfolio_summary(investments)
    assert summary["total_invested"] == 2000
    assert summary["total_current_value"] == 2050
    assert summary["total_return"] == 50
    assert summary["return_pct"] == pytest.approx(2.5)


def test_portfolio_summary_empty():
    assert portfolio_summary(())["return_pct"] == 0
