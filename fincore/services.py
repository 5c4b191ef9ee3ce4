import logging
from collections import Counter
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from fincore.aggregation import by_category, by_month, in_category, net_balance, total_by_kind
from fincore.budgets import evaluate_budgets
from fincore.config import DASHBOARD_MONTHS, REPORT_PERIODS
from fincore.dates import add_months, is_month, month_key, parse_date
from fincore.domain import EXPENSE, INCOME, UNDER, Budget, Snapshot, Transaction
from fincore.lazy import iter_transactions, lazy_top_categories
from fincore.transforms import portfolio_summary

logger = logging.getLogger(__name__)

Validator = Callable[[str, Sequence[Transaction], Sequence[Budget]], Sequence[str]]
Calculator = Callable[[str, Sequence[Transaction], Sequence[Budget], Dict[str, Any]], Dict[str, Any]]
Aggregator = Callable[[Sequence[Transaction], Dict[str, Any]], Dict[str, Any]]


class BudgetService:
    """Facade for budget-related operations using injected validators and calculators.

    validators: functions taking (month, transactions, budgets) -> Sequence[str]
    calculators: functions taking (month, transactions, budgets, acc) -> dict (partial results)
    """

    def __init__(self, validators: Sequence[Validator], calculators: Sequence[Calculator]):
        self.validators = validators
        self.calculators = calculators

    def monthly_report(self, month: str, transactions: Iterable[Transaction], budgets: Iterable[Budget]) -> Dict[str, Any]:
        """Run validators and calculators and return an aggregated report with intermediate steps."""
        transactions = tuple(transactions)
        budgets = tuple(b for b in budgets if b.period == month)
        report = {
            "month": month,
            "validation": [],
            "steps": [],
            "result": {}
        }

        for v in self.validators:
            try:
                msgs = v(month, transactions, budgets)
            except Exception as e:
                logger.exception("budget validator %s failed", getattr(v, "__name__", v))
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": list(msgs)})

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(month, transactions, budgets, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


def validate_month(month, transactions, budgets):
    return [] if is_month(month) else [f"invalid month: {month!r}"]


def validate_unique_budgets(month, transactions, budgets):
    counts = Counter(b.category for b in budgets)
    return [f"duplicate budget for {c} in {month}" for c, n in counts.items() if n > 1]


def budget_statuses(month, transactions, budgets, acc):
    return {"statuses": evaluate_budgets(budgets, transactions)}


def budget_totals(month, transactions, budgets, acc):
    statuses = acc.get("statuses") or evaluate_budgets(budgets, transactions)
    limit = sum((s.budget.limit for s in statuses), 0.0)
    spent = sum((s.spent for s in statuses), 0.0)
    return {
        "total_limit": limit,
        "total_spent": spent,
        "total_remaining": limit - spent,
        "attention": tuple(s for s in statuses if s.classification != UNDER),
    }


def default_budget_service() -> BudgetService:
    return BudgetService(
        validators=[validate_month, validate_unique_budgets],
        calculators=[budget_statuses, budget_totals],
    )


class ReportService:
    """Facade for period reports using injected aggregators."""

    def __init__(self, aggregators: Sequence[Aggregator]):
        self.aggregators = aggregators

    def period_report(
        self,
        transactions: Iterable[Transaction],
        period: str = "last_6_months",
        category: str = "all",
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        today = today or date.today()
        selected = filter_transactions(transactions, period, category, today)
        report = {"period": period, "category": category, "count": len(selected), "steps": [], "result": {}}
        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            out = agg(selected, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            acc.update(out)
        report["result"] = acc
        return report


def period_start(period: str, today: date) -> Optional[date]:
    """First day included by a report period; None means no lower bound."""
    if period == "this_month":
        return today.replace(day=1)
    if period == "last_3_months":
        return add_months(today, -3)
    if period == "last_6_months":
        return add_months(today, -6)
    if period == "this_year":
        return today.replace(month=1, day=1)
    if period == "all":
        return None
    raise ValueError(f"Unknown report period {period!r}, expected one of {', '.join(REPORT_PERIODS)}")


def filter_transactions(
    transactions: Iterable[Transaction], period: str, category: str, today: date
) -> tuple:
    start = period_start(period, today)
    matches_category = in_category(category)

    def keep(t: Transaction) -> bool:
        if category != "all" and not matches_category(t):
            return False
        if start is None:
            return True
        d = parse_date(t.date)
        return d is not None and d >= start

    return tuple(iter_transactions(transactions, keep))


def totals(transactions, acc=None):
    return {
        "income": total_by_kind(transactions, INCOME),
        "expenses": total_by_kind(transactions, EXPENSE),
        "net_balance": net_balance(transactions),
    }


def monthly_series(transactions, acc=None):
    series = [
        {
            "month": month,
            "income": t[INCOME],
            "expenses": t[EXPENSE],
            "balance": t[INCOME] - t[EXPENSE],
        }
        for month, t in by_month(transactions).items()
    ]
    return {"monthly": series}


def category_breakdown(transactions, acc=None):
    return {"categories": by_category(transactions, EXPENSE)}


def top_categories(transactions, acc=None, k: int = 5):
    return {"top_categories": list(lazy_top_categories(transactions, k))}


def default_report_service() -> ReportService:
    return ReportService(aggregators=[totals, monthly_series, category_breakdown, top_categories])


def dashboard_summary(snapshot: Snapshot, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    current = month_key(today)
    statuses = evaluate_budgets((b for b in snapshot.budgets if b.period == current), snapshot.transactions)
    summary = totals(snapshot.transactions)
    summary.update({
        "investments_value": portfolio_summary(snapshot.investments)["total_current_value"],
        "monthly": monthly_series(snapshot.transactions)["monthly"][-DASHBOARD_MONTHS:],
        "expense_categories": by_category(snapshot.transactions, EXPENSE),
        "budget_warnings": tuple(s for s in statuses if s.classification != UNDER),
    })
    return summary
