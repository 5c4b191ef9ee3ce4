"""Data access: the record store interface and the per-user repository.

The hosted backend only offers record-level create/list/update, so that
is all ``RecordStore`` asks for. ``FinanceRepository`` is the single
place the app reads and writes through; everything it hands back is an
immutable ``Snapshot`` or record.
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from fincore.budgets import find_budget, period_spending, with_spent
from fincore.dates import month_key
from fincore.domain import (
    Budget,
    FinancialGoal,
    Investment,
    Notification,
    Snapshot,
    Transaction,
)
from fincore.errors import MissingUserError, ValidationError, validation_error
from fincore.events import GOAL_PROGRESS, TRANSACTION_ADDED, EventBus, register_default_handlers
from fincore.functional import Either, Maybe, find_first
from fincore.transforms import (
    contribute_to_goal,
    from_record,
    new_budget,
    new_goal,
    new_investment,
    new_transaction,
    to_record,
)

logger = logging.getLogger(__name__)

TRANSACTIONS = "transactions"
BUDGETS = "budgets"
INVESTMENTS = "investments"
GOALS = "goals"
NOTIFICATIONS = "notifications"

COLLECTIONS = (TRANSACTIONS, BUDGETS, INVESTMENTS, GOALS, NOTIFICATIONS)


class RecordStore(ABC):

    @abstractmethod
    def create(self, collection: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert ``record`` and return it with its new ``id``."""

    @abstractmethod
    def list(self, collection: str, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Records whose fields equal every value in ``filters``, in insertion order."""

    @abstractmethod
    def update(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply ``fields`` to one record and return the updated record."""


class InMemoryStore(RecordStore):

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def create(self, collection, record):
        stored = dict(record)
        stored["id"] = uuid4().hex
        self._collections.setdefault(collection, {})[stored["id"]] = stored
        return dict(stored)

    def list(self, collection, filters=None):
        filters = filters or {}
        return [
            copy.deepcopy(r)
            for r in self._collections.get(collection, {}).values()
            if all(r.get(k) == v for k, v in filters.items())
        ]

    def update(self, collection, record_id, fields):
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise KeyError(f"{collection} record {record_id} not found")
        records[record_id].update(fields)
        return dict(records[record_id])


def _ok(result: Either[dict, Any], what: str):
    if result.is_left():
        error = result.get_error()
        logger.warning("rejected %s: %s", what, error.get("message"))
        raise ValidationError.from_detail(error)
    return result.unwrap()


class FinanceRepository:
    """Per-user reads and validated writes against a ``RecordStore``."""

    def __init__(self, store: RecordStore, user_id: Optional[str], bus: Optional[EventBus] = None):
        if not user_id:
            raise MissingUserError("an authenticated user is required")
        self.store = store
        self.user_id = user_id
        self.bus = bus if bus is not None else register_default_handlers(EventBus())

    def _list(self, collection: str, record_type):
        rows = self.store.list(collection, {"user_id": self.user_id})
        return tuple(from_record(record_type, r) for r in rows)

    def _create(self, collection: str, item) -> Dict[str, Any]:
        record = to_record(item)
        record.pop("id", None)
        record["user_id"] = self.user_id
        created = self.store.create(collection, record)
        logger.info("created %s record %s", collection, created["id"])
        return created

    def transactions(self) -> Tuple[Transaction, ...]:
        return self._list(TRANSACTIONS, Transaction)

    def budgets(self) -> Tuple[Budget, ...]:
        return with_spent(self._list(BUDGETS, Budget), self.transactions())

    def investments(self) -> Tuple[Investment, ...]:
        return self._list(INVESTMENTS, Investment)

    def goals(self) -> Tuple[FinancialGoal, ...]:
        return self._list(GOALS, FinancialGoal)

    def notifications(self, unread_only: bool = False) -> Tuple[Notification, ...]:
        items = self._list(NOTIFICATIONS, Notification)
        if unread_only:
            items = tuple(n for n in items if not n.is_read)
        return tuple(sorted(items, key=lambda n: n.created_at, reverse=True))

    def snapshot(self) -> Snapshot:
        transactions = self.transactions()
        return Snapshot(
            transactions=transactions,
            budgets=with_spent(self._list(BUDGETS, Budget), transactions),
            investments=self.investments(),
            goals=self.goals(),
            user_id=self.user_id,
        )

    def add_transaction(self, values: Mapping[str, Any]) -> Transaction:
        t = _ok(new_transaction(values), "transaction")
        existing = self.transactions()
        created = from_record(Transaction, self._create(TRANSACTIONS, t))

        period = month_key(created.date)
        budget = find_budget(self._list(BUDGETS, Budget), created.category, period)
        results = self.bus.publish(TRANSACTION_ADDED, {
            "kind": created.kind,
            "amount": created.amount,
            "category": created.category,
            "budget_limit": budget.map(lambda b: b.limit).get_or_else(0),
            "current_spent": period_spending(existing, period).get(created.category, 0.0),
        })
        self._store_notifications(results)
        return created

    def add_budget(self, values: Mapping[str, Any]) -> Budget:
        b = _ok(new_budget(values, self._list(BUDGETS, Budget)), "budget")
        return from_record(Budget, self._create(BUDGETS, b))

    def add_investment(self, values: Mapping[str, Any]) -> Investment:
        i = _ok(new_investment(values), "investment")
        return from_record(Investment, self._create(INVESTMENTS, i))

    def add_goal(self, values: Mapping[str, Any]) -> FinancialGoal:
        g = _ok(new_goal(values), "goal")
        return from_record(FinancialGoal, self._create(GOALS, g))

    def find_goal(self, goal_id: str) -> Maybe[FinancialGoal]:
        return find_first(self.goals(), lambda g: g.id == goal_id)

    def contribute_to_goal(self, goal_id: str, amount) -> FinancialGoal:
        found = self.find_goal(goal_id)
        if found.is_none():
            raise ValidationError.from_detail(
                validation_error("goal_id", f"goal {goal_id} not found", goal_id=goal_id)
            )
        goal = found.get_or_else(None)
        updated = _ok(contribute_to_goal(goal, amount), "goal contribution")
        self.store.update(GOALS, goal_id, {"current_amount": updated.current_amount})
        logger.info("goal %s progress %.2f -> %.2f", goal_id, goal.current_amount, updated.current_amount)

        results = self.bus.publish(GOAL_PROGRESS, {
            "title": goal.title,
            "target_amount": goal.target_amount,
            "previous_amount": goal.current_amount,
            "current_amount": updated.current_amount,
        })
        self._store_notifications(results)
        return updated

    def mark_notification_read(self, notification_id: str) -> Notification:
        record = self.store.update(NOTIFICATIONS, notification_id, {"is_read": True})
        return from_record(Notification, record)

    def _store_notifications(self, results: List[dict]) -> None:
        for result in results:
            notification = result.get("notification") if result else None
            if not notification:
                continue
            record = dict(notification)
            record["user_id"] = self.user_id
            record["is_read"] = False
            record["created_at"] = datetime.now(timezone.utc).isoformat()
            created = self.store.create(NOTIFICATIONS, record)
            logger.info("stored %s notification %s", notification["kind"], created["id"])
