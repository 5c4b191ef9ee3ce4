"""Budget utilization and threshold classification.

Every surface that shows budget progress goes through ``evaluate_budget``
so the dashboard, the budget page and the alerts agree on one policy:
``over`` above 100%, ``near`` above 80%, otherwise ``under``.
"""

from dataclasses import replace
from typing import Dict, Iterable, Tuple

from fincore.aggregation import by_category, in_month
from fincore.config import NEAR_LIMIT_PCT, OVER_LIMIT_PCT
from fincore.domain import NEAR, OVER, UNDER, Budget, BudgetStatus, Transaction
from fincore.errors import ValidationError, validation_error
from fincore.functional import Either, Left, Maybe, Right, find_first


def classify(percentage: float) -> str:
    if percentage > OVER_LIMIT_PCT:
        return OVER
    if percentage > NEAR_LIMIT_PCT:
        return NEAR
    return UNDER


def utilization(spent: float, limit: float) -> float:
    if limit <= 0:
        raise ValidationError.from_detail(
            validation_error("limit", "limit must be greater than 0", value=limit)
        )
    return spent * 100 / limit


def period_spending(trans: Iterable[Transaction], period: str) -> Dict[str, float]:
    """Expense totals per category for one ``YYYY-MM`` period."""
    return by_category(filter(in_month(period), trans))


def evaluate_budget(budget: Budget, spending: Dict[str, float]) -> BudgetStatus:
    """``spending`` is ``period_spending`` for the budget's period."""
    spent = spending.get(budget.category, 0.0)
    percentage = utilization(spent, budget.limit)
    return BudgetStatus(
        budget=budget,
        spent=spent,
        percentage=percentage,
        classification=classify(percentage),
    )


def evaluate_budgets(
    budgets: Iterable[Budget], trans: Iterable[Transaction]
) -> Tuple[BudgetStatus, ...]:
    trans = tuple(trans)
    spending_by_period: Dict[str, Dict[str, float]] = {}
    statuses = []
    for b in budgets:
        if b.period not in spending_by_period:
            spending_by_period[b.period] = period_spending(trans, b.period)
        statuses.append(evaluate_budget(b, spending_by_period[b.period]))
    return tuple(statuses)


def with_spent(budgets: Iterable[Budget], trans: Iterable[Transaction]) -> Tuple[Budget, ...]:
    """Copies of ``budgets`` with the derived ``spent`` filled in."""
    return tuple(replace(s.budget, spent=s.spent) for s in evaluate_budgets(budgets, trans))


def find_budget(budgets: Iterable[Budget], category: str, period: str) -> Maybe[Budget]:
    return find_first(budgets, lambda b: b.category == category and b.period == period)


def check_unique(budget: Budget, existing: Iterable[Budget]) -> Either[dict, Budget]:
    duplicate = find_budget(existing, budget.category, budget.period)
    if duplicate.is_some():
        return Left(validation_error(
            "category",
            f"A budget for {budget.category} already exists for {budget.period}",
            category=budget.category,
            period=budget.period,
            existing_id=duplicate.get_or_else(None).id,
        ))
    return Right(budget)
