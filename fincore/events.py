from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'EventBus', 'Event', 'TRANSACTION_ADDED', 'GOAL_PROGRESS',
    'BUDGET_ALERT', 'GOAL_REMINDER', 'register_default_handlers',
]

TRANSACTION_ADDED = "TRANSACTION_ADDED"
GOAL_PROGRESS = "GOAL_PROGRESS"

# notification kinds
BUDGET_ALERT = "budget_alert"
GOAL_REMINDER = "goal_reminder"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        """Run every handler for ``name`` and return their results in subscription order."""
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]


def check_budget_handler(event: Event, payload: dict) -> dict:
    """Flag an expense that pushes its category past the month's budget.

    Payload: kind, amount, category, budget_limit (0 when no budget),
    current_spent (before this expense).
    """
    if payload.get("kind") != "expense":
        return {}
    limit = payload.get("budget_limit", 0)
    new_spent = payload.get("current_spent", 0) + payload.get("amount", 0)
    if limit > 0 and new_spent > limit:
        category = payload.get("category", "")
        return {
            "notification": {
                "kind": BUDGET_ALERT,
                "title": "Budget exceeded",
                "message": f"You went over the {category} budget. Limit: {limit:,.2f}, spent: {new_spent:,.2f}.",
            },
            "spent": new_spent,
            "limit": limit,
        }
    return {"spent": new_spent}


def goal_reached_handler(event: Event, payload: dict) -> dict:
    target = payload.get("target_amount", 0)
    before = payload.get("previous_amount", 0)
    after = payload.get("current_amount", 0)
    if target > 0 and before < target <= after:
        return {
            "notification": {
                "kind": GOAL_REMINDER,
                "title": "Goal reached",
                "message": f"You reached your goal \"{payload.get('title', '')}\".",
            },
        }
    return {}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(TRANSACTION_ADDED, check_budget_handler)
    bus.subscribe(GOAL_PROGRESS, goal_reached_handler)
    return bus
