from dataclasses import dataclass, field
from typing import Optional, Tuple

INCOME = "income"
EXPENSE = "expense"

UNDER = "under"
NEAR = "near"
OVER = "over"

WARNING = "warning"
DANGER = "danger"


@dataclass(frozen=True)
class Transaction:
    id: str
    kind: str        # income | expense
    amount: float    # always positive, kind carries the sign
    category: str
    date: str        # "2025-09-01"
    description: str = ""


# A spending limit for one category in one month
@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    limit: float
    period: str          # "2025-09"
    spent: float = 0.0   # derived from transactions, never authoritative


@dataclass(frozen=True)
class Investment:
    id: str
    kind: str
    principal: float
    annual_return_rate: float  # percent
    date: str
    current_value: float       # one-shot estimate made at creation


@dataclass(frozen=True)
class FinancialGoal:
    id: str
    title: str
    target_amount: float
    current_amount: float
    target_date: str
    category: str = "savings"
    description: str = ""


@dataclass(frozen=True)
class Notification:
    id: str
    kind: str       # budget_alert | goal_reminder | transaction_alert
    title: str
    message: str
    created_at: str
    is_read: bool = False


@dataclass(frozen=True)
class Alert:
    """A derived warning shown on the dashboard; never persisted."""
    kind: str
    severity: str   # warning | danger
    title: str
    message: str
    value: float    # unclamped percentage

    @property
    def progress(self) -> float:
        return min(100.0, max(0.0, self.value))


@dataclass(frozen=True)
class BudgetStatus:
    budget: Budget
    spent: float
    percentage: float
    classification: str  # under | near | over

    @property
    def remaining(self) -> float:
        return self.budget.limit - self.spent

    @property
    def progress(self) -> float:
        return min(100.0, max(0.0, self.percentage))


@dataclass(frozen=True)
class LoanResult:
    monthly_payment: float
    total_payment: float
    total_interest: float
    payments: float


@dataclass(frozen=True)
class GrowthResult:
    final_amount: float
    total_contributed: float
    total_returns: float


@dataclass(frozen=True)
class GoalProjection:
    months: float
    final_amount: float

    @property
    def years(self) -> float:
        return self.months / 12


@dataclass(frozen=True)
class Snapshot:
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)
    budgets: Tuple[Budget, ...] = field(default_factory=tuple)
    investments: Tuple[Investment, ...] = field(default_factory=tuple)
    goals: Tuple[FinancialGoal, ...] = field(default_factory=tuple)
    user_id: Optional[str] = None
