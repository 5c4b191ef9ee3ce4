"""Loan, investment growth and savings goal calculators.

Each ``compute_*`` entry point takes a plain mapping of form values
(numbers or numeric strings) and returns an ``Either``: ``Right`` with a
result record, or ``Left`` with an error dict when the input is missing,
malformed or has no real solution. All rates are annual percentages and
compound monthly.
"""

import logging
import math
from typing import Any, Mapping, Optional

from fincore.domain import GoalProjection, GrowthResult, LoanResult
from fincore.errors import DomainUndefined, domain_undefined, validation_error
from fincore.functional import Either, Left, Right, first_error

logger = logging.getLogger(__name__)

_REQUIRED = object()


def monthly_rate(annual_rate_pct: float) -> float:
    return annual_rate_pct / 100 / 12


def loan_payment(principal: float, r: float, n: float) -> float:
    """Fixed monthly payment for ``principal`` over ``n`` payments at monthly rate ``r``."""
    if r == 0:
        return principal / n
    growth = (1 + r) ** n
    return principal * r * growth / (growth - 1)


def future_value(initial: float, monthly: float, r: float, n: float) -> float:
    """Value after ``n`` months of ``initial`` plus ``monthly`` deposits at end of month."""
    growth = (1 + r) ** n
    if r == 0:
        return initial * growth + monthly * n
    return initial * growth + monthly * (growth - 1) / r


def months_to_target(remaining: float, monthly: float, r: float) -> float:
    """Solve the annuity future value for the number of months reaching ``remaining``.

    Raises DomainUndefined when the logarithm has no real solution.
    """
    if remaining <= 0:
        return 0.0
    if r == 0:
        return remaining / monthly
    arg = 1 + remaining * r / monthly
    if arg <= 0 or 1 + r <= 0:
        raise DomainUndefined(
            f"Goal cannot be reached: ln({arg:.6g}) / ln({1 + r:.6g}) is undefined",
            domain_undefined("goal is unreachable at this rate", argument=arg),
        )
    return math.log(arg) / math.log(1 + r)


def _number(params: Mapping[str, Any], key: str, default=_REQUIRED) -> Either[dict, float]:
    raw = params.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if default is _REQUIRED:
            return Left(validation_error(key, f"{key} is required"))
        return Right(default)
    if isinstance(raw, bool):
        return Left(validation_error(key, f"{key} must be a number", value=raw))
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return Left(validation_error(key, f"{key} must be a number", value=raw))
    if math.isnan(value) or math.isinf(value):
        return Left(validation_error(key, f"{key} must be a finite number", value=raw))
    return Right(value)


def _check(result: Either[dict, float], key: str, pred, rule: str) -> Either[dict, float]:
    def _validate(value: float) -> Either[dict, float]:
        if pred(value):
            return Right(value)
        return Left(validation_error(key, f"{key} must be {rule}", value=value))
    return result.bind(_validate)


def _positive(params, key, default=_REQUIRED):
    return _check(_number(params, key, default), key, lambda v: v > 0, "greater than 0")


def _non_negative(params, key, default=_REQUIRED):
    return _check(_number(params, key, default), key, lambda v: v >= 0, "0 or more")


def _rejected(kind: str, error: dict) -> Left:
    logger.debug("%s calculator rejected input: %s", kind, error)
    return Left(error)


def compute_loan(params: Mapping[str, Any]) -> Either[dict, LoanResult]:
    """Amortize ``principal`` over ``term_years`` at ``annual_rate`` percent."""
    fields = (
        _positive(params, "principal"),
        _non_negative(params, "annual_rate"),
        _positive(params, "term_years"),
    )
    error = first_error(fields)
    if error.is_some():
        return _rejected("loan", error.get_or_else(None))

    principal, annual_rate, term_years = (f.unwrap() for f in fields)
    n = term_years * 12
    payment = loan_payment(principal, monthly_rate(annual_rate), n)
    total = payment * n
    return Right(LoanResult(
        monthly_payment=payment,
        total_payment=total,
        total_interest=total - principal,
        payments=n,
    ))


def compute_growth(params: Mapping[str, Any]) -> Either[dict, GrowthResult]:
    """Project ``initial`` plus ``monthly`` contributions over ``years``."""
    fields = (
        _non_negative(params, "initial", 0.0),
        _non_negative(params, "monthly", 0.0),
        _check(_number(params, "annual_rate"), "annual_rate", lambda v: monthly_rate(v) > -1,
               "greater than -1200"),
        _positive(params, "years"),
    )
    error = first_error(fields)
    if error.is_some():
        return _rejected("growth", error.get_or_else(None))

    initial, monthly, annual_rate, years = (f.unwrap() for f in fields)
    n = years * 12
    final = future_value(initial, monthly, monthly_rate(annual_rate), n)
    contributed = initial + monthly * n
    return Right(GrowthResult(
        final_amount=final,
        total_contributed=contributed,
        total_returns=final - contributed,
    ))


def compute_goal(params: Mapping[str, Any]) -> Either[dict, GoalProjection]:
    """Months needed to grow ``current`` to ``target`` with ``monthly`` deposits.

    The projection is always expressed in months; ``final_amount`` replays
    the growth formula over the solved month count.
    """
    fields = (
        _positive(params, "target"),
        _non_negative(params, "current", 0.0),
        _positive(params, "monthly"),
        _number(params, "annual_rate", 0.0),
    )
    error = first_error(fields)
    if error.is_some():
        return _rejected("goal", error.get_or_else(None))

    target, current, monthly, annual_rate = (f.unwrap() for f in fields)
    remaining = target - current
    if remaining <= 0:
        return Right(GoalProjection(months=0.0, final_amount=current))

    r = monthly_rate(annual_rate)
    try:
        months = months_to_target(remaining, monthly, r)
    except DomainUndefined as exc:
        return _rejected("goal", exc.detail)
    return Right(GoalProjection(months=months, final_amount=future_value(current, monthly, r, months)))


def describe_error(error: Optional[dict]) -> str:
    if not error:
        return ""
    return error.get("message", "invalid input")
