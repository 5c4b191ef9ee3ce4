import json
import math
from dataclasses import asdict, fields, replace
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Type, TypeVar

from fincore.budgets import check_unique
from fincore.config import GOAL_CATEGORIES, TRANSACTION_KINDS
from fincore.dates import format_date, is_month, parse_date
from fincore.domain import Budget, FinancialGoal, Investment, Snapshot, Transaction
from fincore.errors import validation_error
from fincore.functional import Either, Left, Right, first_error

R = TypeVar("R")


def from_record(cls: Type[R], record: Mapping[str, Any]) -> R:
    """Build a dataclass from a store record, ignoring store-only keys like user_id."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in record.items() if k in names})


def to_record(item) -> Dict[str, Any]:
    return asdict(item)


def load_seed(path) -> Snapshot:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return Snapshot(
        transactions=tuple(from_record(Transaction, t) for t in data.get("transactions", [])),
        budgets=tuple(from_record(Budget, b) for b in data.get("budgets", [])),
        investments=tuple(from_record(Investment, i) for i in data.get("investments", [])),
        goals=tuple(from_record(FinancialGoal, g) for g in data.get("goals", [])),
    )


def _text(values: Mapping[str, Any], key: str) -> Either[dict, str]:
    raw = values.get(key)
    text = "" if raw is None else str(raw).strip()
    if not text:
        return Left(validation_error(key, f"{key} is required"))
    return Right(text)


def _amount(values: Mapping[str, Any], key: str, minimum: float = 0.0,
            strict: bool = True, default: Optional[float] = None) -> Either[dict, float]:
    raw = values.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if default is not None:
            return Right(default)
        return Left(validation_error(key, f"{key} is required"))
    if isinstance(raw, bool):
        return Left(validation_error(key, f"{key} must be a number", value=raw))
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return Left(validation_error(key, f"{key} must be a number", value=raw))
    if math.isnan(value) or math.isinf(value):
        return Left(validation_error(key, f"{key} must be a finite number", value=raw))
    if value < minimum or (strict and value == minimum):
        rule = "greater than" if strict else "at least"
        return Left(validation_error(key, f"{key} must be {rule} {minimum:g}", value=value))
    return Right(value)


def _date(values: Mapping[str, Any], key: str) -> Either[dict, str]:
    d = parse_date(values.get(key))
    if d is None:
        return Left(validation_error(key, f"{key} must be a date (YYYY-MM-DD)", value=values.get(key)))
    return Right(format_date(d))


def _one_of(values: Mapping[str, Any], key: str, allowed: Iterable[str],
            default: Optional[str] = None) -> Either[dict, str]:
    raw = values.get(key) or default
    allowed = tuple(allowed)
    if raw not in allowed:
        return Left(validation_error(key, f"{key} must be one of {', '.join(allowed)}", value=raw))
    return Right(raw)


def _collect(checks: Dict[str, Either]) -> Either[dict, Dict[str, Any]]:
    error = first_error(checks.values())
    if error.is_some():
        return Left(error.get_or_else(None))
    return Right({k: v.unwrap() for k, v in checks.items()})


def new_transaction(values: Mapping[str, Any], record_id: str = "") -> Either[dict, Transaction]:
    checks = {
        "kind": _one_of(values, "kind", TRANSACTION_KINDS),
        "amount": _amount(values, "amount"),
        "category": _text(values, "category"),
        "date": _date(values, "date"),
    }
    return _collect(checks).map(lambda v: Transaction(
        id=record_id,
        description=str(values.get("description") or "").strip(),
        **v,
    ))


def new_budget(
    values: Mapping[str, Any], existing: Iterable[Budget] = (), record_id: str = ""
) -> Either[dict, Budget]:
    period = values.get("period")
    checks = {
        "category": _text(values, "category"),
        "limit": _amount(values, "limit"),
        "period": Right(period) if is_month(period) else Left(
            validation_error("period", "period must be a month (YYYY-MM)", value=period)
        ),
    }
    existing = tuple(existing)
    return (
        _collect(checks)
        .map(lambda v: Budget(id=record_id, spent=0.0, **v))
        .bind(lambda b: check_unique(b, existing))
    )


def current_value(principal: float, annual_return_rate: float) -> float:
    return principal * (1 + annual_return_rate / 100)


def new_investment(values: Mapping[str, Any], record_id: str = "") -> Either[dict, Investment]:
    checks = {
        "kind": _text(values, "kind"),
        "principal": _amount(values, "principal"),
        "annual_return_rate": _amount(values, "annual_return_rate", minimum=-100.0, strict=False),
        "date": _date(values, "date"),
    }
    return _collect(checks).map(lambda v: Investment(
        id=record_id,
        current_value=current_value(v["principal"], v["annual_return_rate"]),
        **v,
    ))


def new_goal(values: Mapping[str, Any], record_id: str = "") -> Either[dict, FinancialGoal]:
    checks = {
        "title": _text(values, "title"),
        "target_amount": _amount(values, "target_amount"),
        "current_amount": _amount(values, "current_amount", strict=False, default=0.0),
        "target_date": _date(values, "target_date"),
        "category": _one_of(values, "category", GOAL_CATEGORIES, default="savings"),
    }

    def _build(v: Dict[str, Any]) -> FinancialGoal:
        v["current_amount"] = min(v["current_amount"], v["target_amount"])
        return FinancialGoal(
            id=record_id,
            description=str(values.get("description") or "").strip(),
            **v,
        )

    return _collect(checks).map(_build)


def contribute_to_goal(goal: FinancialGoal, amount) -> Either[dict, FinancialGoal]:
    """Add a contribution, clamping progress at the target."""
    return _amount({"amount": amount}, "amount").map(
        lambda a: replace(goal, current_amount=min(goal.current_amount + a, goal.target_amount))
    )


def goal_progress(goal: FinancialGoal) -> float:
    if goal.target_amount <= 0:
        return 0.0
    return goal.current_amount / goal.target_amount * 100


def days_remaining(goal: FinancialGoal, today: date) -> int:
    target = parse_date(goal.target_date)
    if target is None:
        raise ValueError(f"Invalid target date for goal {goal.id}: {goal.target_date!r}")
    return (target - today).days


def portfolio_summary(investments: Iterable[Investment]) -> Dict[str, float]:
    investments = tuple(investments)
    invested = sum((i.principal for i in investments), 0.0)
    value = sum((i.current_value for i in investments), 0.0)
    total_return = value - invested
    return {
        "total_invested": invested,
        "total_current_value": value,
        "total_return": total_return,
        "return_pct": total_return / invested * 100 if invested > 0 else 0.0,
    }
