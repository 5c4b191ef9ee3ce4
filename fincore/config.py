"""Configuration for the finance tracker.

Paths and display settings can be overridden through environment
variables. The threshold constants define alert and budget behavior and
are fixed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINCORE_DATA_DIR", _PROJECT_ROOT / "data"))
SEED_PATH = Path(os.getenv("FINCORE_SEED_PATH", DATA_DIR / "seed.json"))

CURRENCY_SYMBOL = os.getenv("FINCORE_CURRENCY", "Kz")
LOG_LEVEL = os.getenv("FINCORE_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Budget utilization thresholds, in percent of the limit (strict >)
NEAR_LIMIT_PCT = 80.0
OVER_LIMIT_PCT = 100.0

# Alert derivation
TREND_WINDOW_DAYS = 30
TREND_INCREASE_PCT = 20.0
GOAL_DUE_WINDOW_DAYS = 30
GOAL_NEAR_DUE_PROGRESS_PCT = 80.0
INCOME_DROP_RATIO = 0.8

DASHBOARD_MONTHS = 6

TRANSACTION_KINDS = ("income", "expense")

BUDGET_CATEGORIES = (
    "Food",
    "Transport",
    "Housing",
    "Health",
    "Education",
    "Leisure",
    "Shopping",
    "Bills",
    "Other",
)

INCOME_CATEGORIES = ("Salary", "Freelance", "Investments", "Other")

INVESTMENT_KINDS = (
    "Treasury Bonds",
    "Certificates of Deposit",
    "Investment Funds",
    "Stocks",
    "ETFs",
    "Crypto",
    "Savings Account",
    "Other",
)

GOAL_CATEGORIES = ("savings", "investment", "debt_payment", "emergency_fund", "other")

REPORT_PERIODS = ("this_month", "last_3_months", "last_6_months", "this_year", "all")


def configure_logging(level: Optional[str] = None) -> None:
    """Install a root handler using ``level`` or ``FINCORE_LOG_LEVEL``."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
