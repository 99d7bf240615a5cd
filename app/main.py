import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from envelopes import config, transforms
from envelopes.events import STATE_CHANGED, EventBus
from envelopes.formatting import format_gbp, outcome_message
from envelopes.monthly import monthly_summary, owner_totals, remove_monthly_entry, upsert_monthly_entry
from envelopes.services import PlannerService
from envelopes.storage import export_json, load_state, make_persist_handler, parse_state

config.configure_logging()
st.set_page_config(page_title="Envelope Planner", layout="wide")

if "planner" not in st.session_state:
    bus = EventBus()
    bus.subscribe(STATE_CHANGED, make_persist_handler())
    st.session_state.planner = PlannerService(load_state(), bus=bus)

planner: PlannerService = st.session_state.planner


def flash(text: str, level: str) -> None:
    st.session_state.flash = (text, level)


def show_flash() -> None:
    text, level = st.session_state.pop("flash", (None, None))
    if text:
        (st.success if level == "success" else st.warning)(text)


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "💳 Accounts", "🎯 Goals", "🔀 Allocate", "📅 Monthly", "💾 Data"]
)

snap = planner.snapshot()
totals = snap.totals

if menu == "🏠 Overview":
    st.title("🏠 Household Overview")
    k1, k2, k3, k4, k5 = st.columns(5)
    k1.metric("Total Funds", format_gbp(totals.total_funds))
    k2.metric("Ready to Assign", format_gbp(totals.ready_to_assign))
    k3.metric("Assigned", format_gbp(totals.total_assigned))
    k4.metric("Under-funded", format_gbp(totals.under_funded))
    k5.metric("Funded", f"{totals.overall_progress}%")
    st.progress(totals.overall_progress / 100)
    if totals.ready_to_assign < 0:
        st.warning("More money is assigned than the accounts hold. Lower some allocations.")

    if snap.goals:
        df_goals = pd.DataFrame(
            [{"Goal": g.name, "Assigned": g.assigned, "Remaining": g.remaining} for g in snap.goals]
        )
        fig = px.bar(
            df_goals,
            x="Goal",
            y=["Assigned", "Remaining"],
            title="Goal Funding",
            labels={"value": f"Amount ({config.CURRENCY_SYMBOL})", "variable": ""},
            template="plotly_dark",
        )
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No goals yet. Add one and break it down into sub-goals.")

elif menu == "💳 Accounts":
    st.title("💳 Accounts")
    show_flash()
    if not snap.accounts:
        st.info("No accounts yet. Add one to start allocating funds.")

    for acc in snap.accounts:
        c1, c2, c3, c4, c5 = st.columns([3, 2, 2, 2, 1])
        name = c1.text_input("Name", acc.name, key=f"acc-name-{acc.id}")
        owner = c2.selectbox(
            "Owner",
            config.HOUSEHOLD_MEMBERS,
            index=config.HOUSEHOLD_MEMBERS.index(acc.owner),
            key=f"acc-owner-{acc.id}",
        )
        balance = c3.number_input("Balance", min_value=0, value=acc.balance, step=50, key=f"acc-bal-{acc.id}")
        c4.metric("Available", format_gbp(acc.available), f"{format_gbp(acc.assigned)} assigned", delta_color="off")
        if (name, owner, balance) != (acc.name, acc.owner, acc.balance):
            planner.edit(transforms.update_account, acc.id, name=name, owner=owner, balance=balance)
            st.rerun()
        if c5.button("Remove", key=f"acc-rm-{acc.id}"):
            planner.edit(transforms.remove_account, acc.id)
            st.rerun()

    if st.button("➕ Add account"):
        planner.edit(transforms.add_account)
        st.rerun()

elif menu == "🎯 Goals":
    st.title("🎯 Goals")
    for goal in snap.goals:
        with st.expander(f"{goal.name} ({goal.progress}% funded)", expanded=True):
            g1, g2 = st.columns([4, 1])
            goal_name = g1.text_input("Goal name", goal.name, key=f"goal-name-{goal.id}")
            if goal_name != goal.name:
                planner.edit(transforms.rename_goal, goal.id, goal_name)
                st.rerun()
            if g2.button("Remove goal", key=f"goal-rm-{goal.id}"):
                planner.edit(transforms.remove_goal, goal.id)
                st.rerun()
            st.caption(
                f"Target {format_gbp(goal.target)} · Assigned {format_gbp(goal.assigned)} · "
                f"Remaining {format_gbp(goal.remaining)}"
            )

            for sg_id in goal.sub_goal_ids:
                sg = snap.sub_goal_by_id[sg_id]
                s1, s2, s3, s4 = st.columns([3, 2, 3, 1])
                sg_name = s1.text_input("Sub-goal", sg.name, key=f"sg-name-{sg.id}")
                sg_target = s2.number_input("Target", min_value=0, value=sg.target, step=100, key=f"sg-target-{sg.id}")
                s3.progress(sg.progress / 100, text=f"{format_gbp(sg.assigned)} of {format_gbp(sg.target)}")
                if (sg_name, sg_target) != (sg.name, sg.target):
                    planner.edit(transforms.update_sub_goal, sg.id, name=sg_name, target=sg_target)
                    st.rerun()
                if s4.button("Remove", key=f"sg-rm-{sg.id}"):
                    planner.edit(transforms.remove_sub_goal, sg.id)
                    st.rerun()

            if st.button("➕ Add sub-goal", key=f"sg-add-{goal.id}"):
                planner.edit(transforms.add_sub_goal, goal.id)
                st.rerun()

    if st.button("➕ Add goal"):
        planner.edit(transforms.add_goal)
        st.rerun()

elif menu == "🔀 Allocate":
    st.title("🔀 Allocate Funds")
    show_flash()
    st.metric("Ready to Assign", format_gbp(totals.ready_to_assign))

    eligible = [a for a in snap.accounts if a.available > 0]
    open_goals = [s for s in snap.sub_goals if s.remaining > 0]
    with st.form("allocation_form", clear_on_submit=True):
        account = st.selectbox(
            "From account",
            eligible,
            format_func=lambda a: f"{a.owner} - {a.name} ({format_gbp(a.available)} available)",
            disabled=not eligible,
            placeholder="No account has available cash",
        )
        sub_goal = st.selectbox(
            "To sub-goal",
            open_goals,
            format_func=lambda s: f"{s.goal_name} -> {s.name} ({format_gbp(s.remaining)} left)",
            disabled=not open_goals,
            placeholder="All sub-goals are funded",
        )
        amount = st.number_input("Amount", min_value=0, step=50)
        if st.form_submit_button("Assign", disabled=not (eligible and open_goals)):
            outcome = planner.assign(
                account.id if account else "",
                sub_goal.id if sub_goal else "",
                amount,
            )
            label = f"{sub_goal.goal_name} -> {sub_goal.name}" if sub_goal else None
            flash(*outcome_message(outcome, label))
            st.rerun()

    if st.button("⚡ Auto-assign ready cash"):
        flash(*outcome_message(planner.auto_assign()))
        st.rerun()

    st.subheader("Allocations")
    if not planner.state.allocations:
        st.info("No allocations yet. Assign money from an account to a sub-goal.")
    for alloc in planner.state.allocations:
        acc = snap.account_by_id.get(alloc.account_id)
        sg = snap.sub_goal_by_id.get(alloc.sub_goal_id)
        if acc is None or sg is None:
            continue
        a1, a2, a3, a4 = st.columns([3, 3, 2, 1])
        a1.write(f"{acc.owner} - {acc.name}")
        a2.write(f"{sg.goal_name} -> {sg.name}")
        new_amount = a3.number_input("Amount", min_value=0, value=alloc.amount, step=50, key=f"alloc-{alloc.id}")
        if new_amount != alloc.amount:
            planner.edit(transforms.update_allocation, alloc.id, new_amount)
            st.rerun()
        if a4.button("Remove", key=f"alloc-rm-{alloc.id}"):
            planner.edit(transforms.remove_allocation, alloc.id)
            st.rerun()

elif menu == "📅 Monthly":
    st.title("📅 Monthly Savings")
    with st.form("monthly_form", clear_on_submit=True):
        m1, m2, m3, m4 = st.columns(4)
        month = m1.text_input("Month (YYYY-MM)", value=pd.Timestamp.today().strftime("%Y-%m"))
        owner = m2.selectbox("Owner", config.HOUSEHOLD_MEMBERS)
        planned = m3.number_input("Planned", min_value=0, step=50)
        actual = m4.number_input("Actual", min_value=0, step=50)
        if st.form_submit_button("Save"):
            planner.edit(upsert_monthly_entry, month, owner, planned=planned, actual=actual)
            st.rerun()

    summary = monthly_summary(planner.state)
    if summary:
        months = [s.month for s in summary]
        fig = go.Figure()
        fig.add_trace(go.Bar(x=months, y=[s.planned for s in summary], name="Planned"))
        fig.add_trace(go.Bar(x=months, y=[s.actual for s in summary], name="Actual"))
        fig.add_trace(go.Scatter(x=months, y=[s.cumulative_actual for s in summary], mode="lines+markers", name="Cumulative"))
        fig.update_layout(template="plotly_dark", barmode="group", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

        df_owner = pd.DataFrame(
            [
                {"Owner": name, "Planned": t.planned, "Actual": t.actual, "Variance": t.variance}
                for name, t in owner_totals(planner.state).items()
            ]
        )
        st.dataframe(df_owner, hide_index=True, use_container_width=True)

        for entry in planner.state.monthly:
            e1, e2 = st.columns([5, 1])
            e1.write(f"{entry.month} · {entry.owner}: planned {format_gbp(entry.planned)}, actual {format_gbp(entry.actual)}")
            if e2.button("Remove", key=f"month-rm-{entry.id}"):
                planner.edit(remove_monthly_entry, entry.id)
                st.rerun()
    else:
        st.info("No monthly savings recorded yet.")

elif menu == "💾 Data":
    st.title("💾 Data")
    st.download_button(
        "⬇ Export state",
        export_json(planner.state),
        file_name="envelopes.json",
        mime="application/json",
    )
    uploaded = st.file_uploader("Import state", type=["json"])
    if uploaded is not None and st.button("Replace current state"):
        result = parse_state(uploaded.getvalue().decode("utf-8", errors="replace"))
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            planner.replace(result.get_or_else(None))
            st.success("State imported.")
