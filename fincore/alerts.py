"""Derive the dashboard alert list from the current snapshot.

Alerts come out in a fixed order: budget alerts, the spending trend alert,
goal alerts, then the income drop alert. Nothing here is stored; the list
is rebuilt from scratch on every call.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from fincore.aggregation import in_month, in_window, total_by_kind, trailing_windows
from fincore.budgets import evaluate_budgets
from fincore.config import (
    GOAL_DUE_WINDOW_DAYS,
    GOAL_NEAR_DUE_PROGRESS_PCT,
    INCOME_DROP_RATIO,
    TREND_INCREASE_PCT,
    TREND_WINDOW_DAYS,
)
from fincore.dates import month_key, prev_month
from fincore.domain import (
    DANGER,
    EXPENSE,
    INCOME,
    NEAR,
    OVER,
    WARNING,
    Alert,
    Budget,
    FinancialGoal,
    Transaction,
)
from fincore.formatting import format_currency
from fincore.transforms import days_remaining, goal_progress

logger = logging.getLogger(__name__)

BUDGET_EXCEEDED = "budget_exceeded"
BUDGET_NEAR_LIMIT = "budget_near_limit"
SPENDING_INCREASE = "spending_increase"
GOAL_OVERDUE = "goal_overdue"
GOAL_NEAR_DUE = "goal_near_due"
INCOME_DROP = "income_drop"


def budget_alerts(
    budgets: Iterable[Budget], trans: Iterable[Transaction], today: date
) -> List[Alert]:
    """One alert per current-month budget that is near or over its limit."""
    current = month_key(today)
    alerts = []
    for status in evaluate_budgets((b for b in budgets if b.period == current), trans):
        category = status.budget.category
        if status.classification == OVER:
            alerts.append(Alert(
                kind=BUDGET_EXCEEDED,
                severity=DANGER,
                title="Budget exceeded",
                message=(
                    f'"{category}" is at {status.percentage:.1f}% of its budget, '
                    f"{format_currency(abs(status.remaining))} over the limit"
                ),
                value=status.percentage,
            ))
        elif status.classification == NEAR:
            alerts.append(Alert(
                kind=BUDGET_NEAR_LIMIT,
                severity=WARNING,
                title="Budget near its limit",
                message=f'"{category}" has used {status.percentage:.1f}% of its budget',
                value=status.percentage,
            ))
    return alerts


def spending_increase(trans: Iterable[Transaction], today: date) -> float:
    """Percent change of expenses in the last window versus the one before.

    Zero when there was no spending in the previous window.
    """
    trans = tuple(trans)
    current_window, previous_window = trailing_windows(today, TREND_WINDOW_DAYS)
    current = total_by_kind(in_window(trans, *current_window), EXPENSE)
    previous = total_by_kind(in_window(trans, *previous_window), EXPENSE)
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def trend_alert(trans: Iterable[Transaction], today: date) -> Optional[Alert]:
    increase = spending_increase(trans, today)
    if increase <= TREND_INCREASE_PCT:
        return None
    return Alert(
        kind=SPENDING_INCREASE,
        severity=WARNING,
        title="Spending is up",
        message=f"Your spending rose {increase:.1f}% over the last {TREND_WINDOW_DAYS} days",
        value=increase,
    )


def goal_alert(goal: FinancialGoal, today: date) -> Optional[Alert]:
    days = days_remaining(goal, today)
    progress = goal_progress(goal)
    if days < 0 and progress < 100:
        return Alert(
            kind=GOAL_OVERDUE,
            severity=DANGER,
            title="Goal overdue",
            message=f'"{goal.title}" was due {abs(days)} days ago',
            value=progress,
        )
    if 0 < days <= GOAL_DUE_WINDOW_DAYS and progress < GOAL_NEAR_DUE_PROGRESS_PCT:
        remaining = goal.target_amount - goal.current_amount
        return Alert(
            kind=GOAL_NEAR_DUE,
            severity=WARNING,
            title="Goal due soon",
            message=f'"{goal.title}" is due in {days} days, {format_currency(remaining)} to go',
            value=progress,
        )
    return None


def income_alert(trans: Iterable[Transaction], today: date) -> Optional[Alert]:
    trans = tuple(trans)
    current_month = month_key(today)
    current = total_by_kind(filter(in_month(current_month), trans), INCOME)
    previous = total_by_kind(filter(in_month(prev_month(current_month)), trans), INCOME)
    if previous <= 0 or current >= previous * INCOME_DROP_RATIO:
        return None
    drop = (previous - current) / previous * 100
    return Alert(
        kind=INCOME_DROP,
        severity=WARNING,
        title="Income dropped",
        message=f"Income this month is {drop:.1f}% lower than last month",
        value=current / previous * 100,
    )


def derive_alerts(
    trans: Iterable[Transaction],
    budgets: Iterable[Budget],
    goals: Iterable[FinancialGoal],
    today: Optional[date] = None,
) -> Tuple[Alert, ...]:
    today = today or date.today()
    trans = tuple(trans)

    alerts: List[Alert] = budget_alerts(budgets, trans, today)
    trend = trend_alert(trans, today)
    if trend is not None:
        alerts.append(trend)
    alerts.extend(a for a in (goal_alert(g, today) for g in goals) if a is not None)
    income = income_alert(trans, today)
    if income is not None:
        alerts.append(income)

    logger.debug("derived %d alerts for %s", len(alerts), today.isoformat())
    return tuple(alerts)
