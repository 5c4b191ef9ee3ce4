from datetime import datetime

from fincore.events import (
    BUDGET_ALERT,
    GOAL_PROGRESS,
    GOAL_REMINDER,
    TRANSACTION_ADDED,
    Event,
    EventBus,
    check_budget_handler,
    goal_reached_handler,
    register_default_handlers,
)


def make_event(name, payload):
    return Event(name=name, ts=datetime.now().isoformat(), payload=payload)


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(payload)
        return {"processed": True}

    bus.subscribe(TRANSACTION_ADDED, handler)
    results = bus.publish(TRANSACTION_ADDED, {"amount": 50})

    assert results == [{"processed": True}]
    assert seen == [{"amount": 50}]


def test_publish_without_subscribers():
    assert EventBus().publish("UNKNOWN", {}) == []


def test_results_keep_subscription_order_and_unsubscribe():
    bus = EventBus()

    def first(event, payload):
        return {"n": 1}

    def second(event, payload):
        return {"n": 2}

    bus.subscribe(TRANSACTION_ADDED, first)
    bus.subscribe(TRANSACTION_ADDED, second)
    assert [r["n"] for r in bus.publish(TRANSACTION_ADDED, {})] == [1, 2]

    bus.unsubscribe(TRANSACTION_ADDED, first)
    assert [r["n"] for r in bus.publish(TRANSACTION_ADDED, {})] == [2]


def test_check_budget_handler_over_limit():
    payload = {"kind": "expense", "amount": 50, "category": "Food",
               "budget_limit": 100, "current_spent": 60}
    result = check_budget_handler(make_event(TRANSACTION_ADDED, payload), payload)
    assert result["spent"] == 110
    assert result["limit"] == 100
    assert result["notification"]["kind"] == BUDGET_ALERT
    assert "Food" in result["notification"]["message"]


def test_check_budget_handler_at_limit_is_quiet():
    payload = {"kind": "expense", "amount": 40, "category": "Food",
               "budget_limit": 100, "current_spent": 60}
    result = check_budget_handler(make_event(TRANSACTION_ADDED, payload), payload)
    assert result == {"spent": 100}


def test_check_budget_handler_ignores_income_and_missing_budget():
    income = {"kind": "income", "amount": 5000, "category": "Salary"}
    assert check_budget_handler(make_event(TRANSACTION_ADDED, income), income) == {}

    no_budget = {"kind": "expense", "amount": 5000, "category": "Food",
                 "budget_limit": 0, "current_spent": 0}
    assert "notification" not in check_budget_handler(make_event(TRANSACTION_ADDED, no_budget), no_budget)


def test_goal_reached_handler_fires_once():
    crossing = {"title": "Trip", "target_amount": 1000, "previous_amount": 900, "current_amount": 1000}
    result = goal_reached_handler(make_event(GOAL_PROGRESS, crossing), crossing)
    assert result["notification"]["kind"] == GOAL_REMINDER

    already = {"title": "Trip", "target_amount": 1000, "previous_amount": 1000, "current_amount": 1000}
    assert goal_reached_handler(make_event(GOAL_PROGRESS, already), already) == {}

    short = {"title": "Trip", "target_amount": 1000, "previous_amount": 100, "current_amount": 200}
    assert goal_reached_handler(make_event(GOAL_PROGRESS, short), short) == {}


def test_register_default_handlers():
    bus = register_default_handlers(EventBus())
    payload = {"kind": "expense", "amount": 150, "category": "Food",
               "budget_limit": 100, "current_spent": 0}
    (result,) = bus.publish(TRANSACTION_ADDED, payload)
    assert "notification" in result
