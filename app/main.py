import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import asdict
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from fincore import config
from fincore.alerts import derive_alerts
from fincore.budgets import evaluate_budgets
from fincore.calculators import compute_goal, compute_growth, compute_loan, describe_error
from fincore.dates import month_key
from fincore.domain import DANGER, EXPENSE, INCOME
from fincore.errors import ValidationError
from fincore.formatting import format_currency, format_duration, format_percent
from fincore.frames import budget_frame, category_frame, transactions_frame
from fincore.services import dashboard_summary, default_report_service
from fincore.store import (
    BUDGETS, GOALS, INVESTMENTS, TRANSACTIONS, FinanceRepository, InMemoryStore,
)
from fincore.transforms import days_remaining, goal_progress, load_seed, portfolio_summary, to_record

config.configure_logging()
st.set_page_config(page_title="Finance Tracker", layout="wide")


def seeded_store(user_id: str) -> InMemoryStore:
    store = InMemoryStore()
    if config.SEED_PATH.exists():
        seed = load_seed(config.SEED_PATH)
        for collection, items in (
            (TRANSACTIONS, seed.transactions),
            (BUDGETS, seed.budgets),
            (INVESTMENTS, seed.investments),
            (GOALS, seed.goals),
        ):
            for item in items:
                record = to_record(item)
                record.pop("id")
                record.pop("spent", None)
                record["user_id"] = user_id
                store.create(collection, record)
    return store


st.sidebar.markdown("### 👤 Profile")
user_id = st.sidebar.text_input("User", value=st.session_state.get("user_id", "demo")).strip()
st.session_state["user_id"] = user_id
if not user_id:
    st.warning("Sign in to see your finances.")
    st.stop()

if "store" not in st.session_state:
    st.session_state.store = seeded_store(user_id)

repo = FinanceRepository(st.session_state.store, user_id)
snapshot = repo.snapshot()
today = date.today()

unread = len(repo.notifications(unread_only=True))
menu = st.sidebar.radio(
    "Menu",
    [
        "🏠 Dashboard", "🧾 Transactions", "💰 Budgets", "🎯 Goals", "📈 Investments",
        "🧮 Calculators", "⚠️ Alerts", "📑 Reports", f"🔔 Notifications ({unread})",
    ],
)


def show_error(exc: ValidationError) -> None:
    st.error(str(exc))


if menu == "🏠 Dashboard":
    summary = dashboard_summary(snapshot, today)
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", format_currency(summary["income"]))
    with k2:
        st.metric("Expenses", format_currency(summary["expenses"]))
    with k3:
        st.metric("Balance", format_currency(summary["net_balance"]))
    with k4:
        st.metric("Investments", format_currency(summary["investments_value"]))

    for status in summary["budget_warnings"]:
        st.warning(f"{status.budget.category}: {status.percentage:.1f}% of budget used")

    monthly = pd.DataFrame(summary["monthly"], columns=["month", "income", "expenses", "balance"])
    if not monthly.empty:
        fig = go.Figure()
        fig.add_bar(x=monthly["month"], y=monthly["income"], name="Income")
        fig.add_bar(x=monthly["month"], y=monthly["expenses"], name="Expenses")
        fig.update_layout(title="Income vs Expenses", barmode="group", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)

    cats = category_frame(snapshot.transactions)
    if not cats.empty:
        st.plotly_chart(px.pie(cats, values="amount", names="category", title="Expenses by Category"),
                        use_container_width=True)

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            kind = st.selectbox("Type", [EXPENSE, INCOME])
            amount = st.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
            tx_date = st.date_input("Date", value=today)
        with col2:
            category = st.selectbox("Category", config.BUDGET_CATEGORIES + config.INCOME_CATEGORIES)
            description = st.text_input("Description")
        if st.form_submit_button("Add Transaction"):
            try:
                repo.add_transaction({
                    "kind": kind, "amount": amount, "category": category,
                    "date": tx_date.isoformat(), "description": description,
                })
                st.success("Transaction added")
                st.rerun()
            except ValidationError as exc:
                show_error(exc)

    df = transactions_frame(snapshot.transactions)
    if df.empty:
        st.info("No transactions yet")
    else:
        st.dataframe(
            df.assign(
                date=df["date"].dt.strftime("%Y-%m-%d"),
                amount=df["amount"].map(format_currency),
            ),
            use_container_width=True,
        )

elif menu == "💰 Budgets":
    st.title("💰 Budgets")
    with st.form("budget_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            category = st.selectbox("Category", config.BUDGET_CATEGORIES)
        with col2:
            limit = st.number_input("Limit", min_value=0.0, step=1000.0)
        with col3:
            period = st.text_input("Month (YYYY-MM)", value=month_key(today))
        if st.form_submit_button("Create Budget"):
            try:
                repo.add_budget({"category": category, "limit": limit, "period": period})
                st.success(f"Budget of {format_currency(limit)} set for {category}")
                st.rerun()
            except ValidationError as exc:
                show_error(exc)

    current = [b for b in snapshot.budgets if b.period == month_key(today)]
    statuses = evaluate_budgets(current, snapshot.transactions)
    if not statuses:
        st.info("No budgets for this month")
    for s in statuses:
        st.metric(
            f"Budget: {s.budget.category}",
            f"{format_currency(s.spent)} / {format_currency(s.budget.limit)}",
            f"{format_currency(s.remaining)} remaining",
        )
        st.progress(s.progress / 100)
    with st.expander("All budgets"):
        st.dataframe(budget_frame(evaluate_budgets(snapshot.budgets, snapshot.transactions)),
                     use_container_width=True)

elif menu == "🎯 Goals":
    st.title("🎯 Financial Goals")
    with st.form("goal_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            title = st.text_input("Title")
            target = st.number_input("Target amount", min_value=0.0, step=1000.0)
            current = st.number_input("Saved so far", min_value=0.0, step=1000.0)
        with col2:
            target_date = st.date_input("Target date")
            goal_category = st.selectbox("Category", config.GOAL_CATEGORIES)
            goal_description = st.text_area("Description")
        if st.form_submit_button("Create Goal"):
            try:
                repo.add_goal({
                    "title": title, "target_amount": target, "current_amount": current,
                    "target_date": target_date.isoformat(), "category": goal_category,
                    "description": goal_description,
                })
                st.success(f"Goal \"{title}\" created")
                st.rerun()
            except ValidationError as exc:
                show_error(exc)

    for goal in snapshot.goals:
        with st.expander(f"{goal.title} ({goal.category})"):
            progress = goal_progress(goal)
            days = days_remaining(goal, today)
            c1, c2, c3 = st.columns(3)
            c1.metric("Target", format_currency(goal.target_amount))
            c2.metric("Saved", format_currency(goal.current_amount))
            c3.metric("Days left", days)
            st.progress(min(progress, 100.0) / 100)
            contribution = st.number_input("Contribution", min_value=0.0, step=500.0, key=f"contrib_{goal.id}")
            if st.button("Add contribution", key=f"btn_{goal.id}"):
                try:
                    repo.contribute_to_goal(goal.id, contribution)
                    st.rerun()
                except ValidationError as exc:
                    show_error(exc)

elif menu == "📈 Investments":
    st.title("📈 Investments")
    totals = portfolio_summary(snapshot.investments)
    k1, k2, k3 = st.columns(3)
    k1.metric("Invested", format_currency(totals["total_invested"]))
    k2.metric("Current value", format_currency(totals["total_current_value"]))
    k3.metric("Return", format_currency(totals["total_return"]), format_percent(totals["return_pct"], signed=True))

    with st.form("investment_form", clear_on_submit=True):
        kind = st.selectbox("Type", config.INVESTMENT_KINDS)
        principal = st.number_input("Amount", min_value=0.0, step=1000.0)
        rate = st.number_input("Expected annual return (%)", step=0.5)
        inv_date = st.date_input("Date", value=today)
        if st.form_submit_button("Add Investment"):
            try:
                repo.add_investment({
                    "kind": kind, "principal": principal,
                    "annual_return_rate": rate, "date": inv_date.isoformat(),
                })
                st.rerun()
            except ValidationError as exc:
                show_error(exc)

    if snapshot.investments:
        st.dataframe(pd.DataFrame([asdict(i) for i in snapshot.investments]), use_container_width=True)

elif menu == "🧮 Calculators":
    st.title("🧮 Calculators")
    loan_tab, growth_tab, goal_tab = st.tabs(["Loan", "Investment", "Savings goal"])

    with loan_tab:
        params = {
            "principal": st.text_input("Loan amount", key="loan_p"),
            "annual_rate": st.text_input("Annual interest (%)", key="loan_r"),
            "term_years": st.text_input("Term (years)", key="loan_t"),
        }
        if st.button("Calculate", key="loan_btn"):
            result = compute_loan(params)
            if result.is_left():
                st.error(describe_error(result.get_error()))
            else:
                loan = result.unwrap()
                st.metric("Monthly payment", format_currency(loan.monthly_payment))
                st.metric("Total paid", format_currency(loan.total_payment))
                st.metric("Total interest", format_currency(loan.total_interest))

    with growth_tab:
        params = {
            "initial": st.text_input("Initial amount", key="inv_p"),
            "monthly": st.text_input("Monthly contribution", key="inv_m"),
            "annual_rate": st.text_input("Annual return (%)", key="inv_r"),
            "years": st.text_input("Years", key="inv_y"),
        }
        if st.button("Calculate", key="inv_btn"):
            result = compute_growth(params)
            if result.is_left():
                st.error(describe_error(result.get_error()))
            else:
                growth = result.unwrap()
                st.metric("Final amount", format_currency(growth.final_amount))
                st.metric("Total contributed", format_currency(growth.total_contributed))
                st.metric("Returns", format_currency(growth.total_returns))

    with goal_tab:
        params = {
            "target": st.text_input("Target", key="sav_t"),
            "current": st.text_input("Saved so far", key="sav_c"),
            "monthly": st.text_input("Monthly deposit", key="sav_m"),
            "annual_rate": st.text_input("Annual return (%)", key="sav_r"),
        }
        if st.button("Calculate", key="sav_btn"):
            result = compute_goal(params)
            if result.is_left():
                st.error(describe_error(result.get_error()))
            else:
                projection = result.unwrap()
                st.metric("Time to goal", format_duration(projection.months))
                st.metric("Projected amount", format_currency(projection.final_amount))

elif menu == "⚠️ Alerts":
    st.title("⚠️ Alerts")
    alerts = derive_alerts(snapshot.transactions, snapshot.budgets, snapshot.goals, today)
    if not alerts:
        st.success("All good: no alerts right now")
    for alert in alerts:
        show = st.error if alert.severity == DANGER else st.warning
        show(f"**{alert.title}**: {alert.message}")
        st.progress(alert.progress / 100)

elif menu.startswith("📑"):
    st.title("📑 Reports")
    col1, col2 = st.columns(2)
    with col1:
        period = st.selectbox("Period", config.REPORT_PERIODS, index=2)
    with col2:
        categories = sorted({t.category for t in snapshot.transactions})
        category = st.selectbox("Category", ["all"] + categories)

    report = default_report_service().period_report(snapshot.transactions, period, category, today)
    result = report["result"]
    k1, k2, k3 = st.columns(3)
    k1.metric("Income", format_currency(result["income"]))
    k2.metric("Expenses", format_currency(result["expenses"]))
    k3.metric("Net", format_currency(result["net_balance"]))

    monthly = pd.DataFrame(result["monthly"], columns=["month", "income", "expenses", "balance"])
    if not monthly.empty:
        st.plotly_chart(
            px.line(monthly, x="month", y=["income", "expenses", "balance"], title="Monthly evolution"),
            use_container_width=True,
        )
    if result["categories"]:
        cats = pd.DataFrame({"category": list(result["categories"]), "amount": list(result["categories"].values())})
        st.plotly_chart(px.bar(cats, x="category", y="amount", title="Expenses by category"),
                        use_container_width=True)
    st.subheader("Top categories")
    for name, total in result["top_categories"]:
        st.write(f"{name}: {format_currency(total)}")

else:
    st.title("🔔 Notifications")
    notifications = repo.notifications()
    if not notifications:
        st.info("No notifications")
    for n in notifications:
        st.markdown(f"**{n.title}** {'' if n.is_read else '🆕'}")
        st.caption(n.message)
        if not n.is_read and st.button("Mark as read", key=f"read_{n.id}"):
            repo.mark_notification_read(n.id)
            st.rerun()
