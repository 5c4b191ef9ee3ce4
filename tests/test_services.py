from datetime import date

import pytest

from fincore import config
from fincore.domain import NEAR, OVER, Budget, Transaction
from fincore.services import (
    BudgetService,
    ReportService,
    dashboard_summary,
    default_budget_service,
    default_report_service,
    filter_transactions,
    period_start,
    totals,
)
from fincore.transforms import load_seed

TODAY = date(2025, 9, 25)


def make_tx(id, kind, amount, category, d):
    return Transaction(id=id, kind=kind, amount=amount, category=category, date=d)


def make_budget(id, category, limit, period="2025-01"):
    return Budget(id=id, category=category, limit=limit, period=period)


@pytest.fixture
def seed():
    return load_seed(config.SEED_PATH)


def test_budgetservice_validators_and_calculators():
    def v_ok(month, transactions, budgets):
        return []

    def c_count(month, transactions, budgets, acc):
        return {"count": len(transactions)}

    def c_double(month, transactions, budgets, acc):
        return {"double": acc["count"] * 2}

    service = BudgetService(validators=[v_ok], calculators=[c_count, c_double])
    report = service.monthly_report("2025-01", [make_tx("t1", "expense", 10, "Food", "2025-01-02")], [])

    assert report["month"] == "2025-01"
    assert report["validation"] == [{"validator": "v_ok", "messages": []}]
    assert [s["calculator"] for s in report["steps"]] == ["c_count", "c_double"]
    assert report["result"] == {"count": 1, "double": 2}


def test_budgetservice_records_failing_validator():
    def broken(month, transactions, budgets):
        raise RuntimeError("boom")

    report = BudgetService(validators=[broken], calculators=[]).monthly_report("2025-01", [], [])
    assert report["validation"][0]["messages"] == ["validator_error: boom"]


def test_default_budget_service_report():
    transactions = [
        make_tx("t1", "expense", 950, "Food", "2025-01-05"),
        make_tx("t2", "expense", 700, "Leisure", "2025-01-09"),
        make_tx("t3", "expense", 100, "Rent", "2025-01-09"),
        make_tx("t4", "expense", 999, "Food", "2025-02-01"),
    ]
    budgets = [
        make_budget("b1", "Food", 1000),
        make_budget("b2", "Leisure", 500),
        make_budget("b3", "Rent", 1000),
        make_budget("b4", "Food", 1000, period="2025-02"),
    ]
    report = default_budget_service().monthly_report("2025-01", transactions, budgets)
    result = report["result"]

    assert all(v["messages"] == [] for v in report["validation"])
    assert [s.budget.id for s in result["statuses"]] == ["b1", "b2", "b3"]
    assert result["total_limit"] == 2500
    assert result["total_spent"] == 1750
    assert result["total_remaining"] == 750
    assert [(s.budget.id, s.classification) for s in result["attention"]] == [("b1", NEAR), ("b2", OVER)]


def test_default_budget_service_flags_bad_month_and_duplicates():
    budgets = [make_budget("b1", "Food", 100), make_budget("b2", "Food", 200)]
    report = default_budget_service().monthly_report("2025-01", [], budgets)
    messages = [m for v in report["validation"] for m in v["messages"]]
    assert messages == ["duplicate budget for Food in 2025-01"]

    report = default_budget_service().monthly_report("January", [], [])
    assert report["validation"][0]["messages"] == ["invalid month: 'January'"]


@pytest.mark.parametrize("period,expected", [
    ("this_month", date(2025, 9, 1)),
    ("last_3_months", date(2025, 6, 25)),
    ("last_6_months", date(2025, 3, 25)),
    ("this_year", date(2025, 1, 1)),
    ("all", None),
])
def test_period_start(period, expected):
    assert period_start(period, TODAY) == expected


def test_period_start_unknown():
    with pytest.raises(ValueError):
        period_start("last_decade", TODAY)


def test_filter_transactions(seed):
    assert len(filter_transactions(seed.transactions, "this_month", "all", TODAY)) == 5
    assert len(filter_transactions(seed.transactions, "all", "Food", TODAY)) == 3
    assert filter_transactions(seed.transactions, "this_month", "Leisure", TODAY) == ()


def test_filter_transactions_skips_unparseable_dates():
    transactions = [
        make_tx("t1", "expense", 10, "Food", "2025-09-10"),
        make_tx("t2", "expense", 20, "Food", "not a date"),
    ]
    assert [t.id for t in filter_transactions(transactions, "this_month", "all", TODAY)] == ["t1"]
    assert len(filter_transactions(transactions, "all", "Food", TODAY)) == 2


def test_report_service_steps():
    def count(transactions, acc):
        return {"count": len(transactions)}

    report = ReportService(aggregators=[count]).period_report(
        [make_tx("t1", "income", 5, "Salary", "2025-09-02")], "this_month", today=TODAY
    )
    assert report["count"] == 1
    assert report["steps"] == [{"aggregator": "count", "output": {"count": 1}}]


def test_default_report_service(seed):
    report = default_report_service().period_report(seed.transactions, "all", today=TODAY)
    result = report["result"]

    assert report["count"] == 14
    assert result["income"] == 1110000
    assert result["expenses"] == 608000
    assert result["net_balance"] == 502000
    assert [m["month"] for m in result["monthly"]] == ["2025-07", "2025-08", "2025-09"]
    assert result["monthly"][0]["balance"] == 350000 - 183000
    assert result["categories"]["Food"] == 158000
    assert [c for c, _ in result["top_categories"]] == ["Housing", "Food", "Bills", "Leisure", "Transport"]


def test_totals_empty():
    assert totals(()) == {"income": 0, "expenses": 0, "net_balance": 0}


def test_dashboard_summary(seed):
    summary = dashboard_summary(seed, TODAY)

    assert summary["income"] == 1110000
    assert summary["expenses"] == 608000
    assert summary["investments_value"] == 311400
    assert len(summary["monthly"]) == 3
    assert summary["expense_categories"]["Housing"] == 360000
    warnings = {s.budget.category: s.classification for s in summary["budget_warnings"]}
    assert warnings == {"Food": OVER, "Housing": NEAR}
