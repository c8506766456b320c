import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import date

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go
import plotly.express as px

from budgetcore.buckets import top_categories
from budgetcore.categories import categories_for, can_delete_category, icon_for
from budgetcore.config import DEFAULT_NHF_RATE, STATE_PATH, configure_logging, ensure_data_directory
from budgetcore.domain import EntryType, IncomeMode, Scope, TaxInput, TaxRegime
from budgetcore.formatting import (
    amount_changed,
    format_ngn,
    format_plan_amount,
    month_label,
    parse_currency_input,
)
from budgetcore.plans import is_past_month, plan_months, plan_totals
from budgetcore.scope import shift_month
from budgetcore.services import BudgetService
from budgetcore.storage import JsonStateStore
from budgetcore.tax import compare_regimes
from budgetcore.transforms import search_transactions

configure_logging()
ensure_data_directory()
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Budget Planner", layout="wide")


if "service" not in st.session_state:
    st.session_state.service = BudgetService(store=JsonStateStore(STATE_PATH))
    st.session_state.selected_month = date.today().strftime("%Y-%m")

service: BudgetService = st.session_state.service
today = date.today()


def tx_to_df(tx_list):
    rows = [
        {
            "Date": t.date,
            "Type": t.type.value,
            "Category": f"{icon_for(t.category)} {t.category}",
            "Description": t.description,
            "Amount": t.amount if t.type == EntryType.INCOME else -t.amount,
            "Recurring": "🔁" if t.recurring else "",
            "id": t.id,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["Date", "Type", "Category", "Description", "Amount", "Recurring", "id"])


def show_error(result):
    st.error(result.get_error()["message"])


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "➕ Add Transaction", "🗓 Budget Planner", "🧮 Tax Calculator", "⚙️ Settings"]
)

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")

    nav1, nav2, nav3 = st.columns([1, 3, 1])
    with nav1:
        if st.button("◀", key="prev_month"):
            st.session_state.selected_month = shift_month(st.session_state.selected_month, -1)
            st.rerun()
    with nav3:
        if st.button("▶", key="next_month"):
            st.session_state.selected_month = shift_month(st.session_state.selected_month, 1)
            st.rerun()
    with nav2:
        scope = st.radio(
            "View",
            options=list(Scope),
            format_func=lambda s: {"monthly": "Month", "quarterly": "Quarter", "ytd": "YTD", "yearly": "Year"}[s.value],
            horizontal=True,
        )

    view = service.dashboard(scope, st.session_state.selected_month)
    result = view.aggregate
    st.subheader(result.label)
    anchor_label = month_label(st.session_state.selected_month)
    if view.anchor_plan is None:
        st.caption(f"No budget plan for {anchor_label} yet")
    elif view.anchor_plan.locked:
        st.caption(f"🔒 {anchor_label} plan is locked")
    else:
        st.caption(f"🔓 {anchor_label} plan is open for edits")

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", format_ngn(result.total_actual_income))
    with k2:
        st.metric("Expenses", format_ngn(result.total_actual_expense))
    with k3:
        st.metric("Net", format_ngn(result.net_actual))
    with k4:
        if result.has_plan:
            st.metric("Planned net", format_ngn(result.planned_net))
        else:
            st.metric("Planned net", "No plan")

    for alert in view.alerts:
        st.warning(f"⚠️ {alert}")

    chart_cols = st.columns(2)
    with chart_cols[0]:
        if result.pie:
            df_pie = pd.DataFrame([{"Category": s.name, "Amount": s.value} for s in result.pie])
            fig_pie = px.pie(df_pie, values="Amount", names="Category", title="Spending by category", hole=0.4)
            fig_pie.update_layout(height=320)
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("No expenses in this period")
    with chart_cols[1]:
        if result.expense_rows:
            fig_bar = go.Figure()
            names = [r.category for r in result.expense_rows]
            fig_bar.add_trace(go.Bar(x=names, y=[r.planned for r in result.expense_rows], name="Planned"))
            fig_bar.add_trace(go.Bar(x=names, y=[r.actual for r in result.expense_rows], name="Actual"))
            fig_bar.update_layout(barmode="group", title="Budget vs actual", height=320)
            st.plotly_chart(fig_bar, use_container_width=True)

    if result.has_plan:
        var_cols = st.columns(2)
        with var_cols[0]:
            st.markdown("**Expenses**")
            for row in result.expense_rows:
                sign = "+" if row.over else ""
                colour = "red" if row.over else "green"
                st.markdown(f"{icon_for(row.category)} {row.category} :{colour}[{sign}{format_ngn(abs(row.variance))}]")
                st.progress(row.bar_percent / 100)
                st.caption(f"{format_ngn(row.actual)} actual · {format_ngn(row.planned)} planned")
        with var_cols[1]:
            st.markdown("**Income**")
            for row in result.income_rows:
                colour = "red" if row.under else "green"
                st.markdown(f"{icon_for(row.category)} {row.category} :{colour}[{format_ngn(row.variance)}]")
                st.progress(row.bar_percent / 100)
                st.caption(f"{format_ngn(row.actual)} actual · {format_ngn(row.planned)} planned")

    st.subheader("🏆 Top spending")
    for name, total in top_categories(result.actual_expense, 3):
        st.markdown(f"- {icon_for(name)} {name}: {format_ngn(total)}")

    st.subheader(f"💸 Transactions · {month_label(st.session_state.selected_month)}")
    f1, f2 = st.columns([1, 3])
    with f1:
        filter_type = st.selectbox("Type", ["all", "income", "expense"])
    with f2:
        query = st.text_input("Search description or category")
    listed = search_transactions(
        view.month_transactions,
        None if filter_type == "all" else EntryType(filter_type),
        query,
    )
    if listed:
        df = tx_to_df(listed)
        disp = df.drop(columns=["id"])
        disp["Amount"] = disp["Amount"].map(lambda v: f"{v:,.0f}")
        st.dataframe(disp, use_container_width=True)
        to_delete = st.selectbox("Delete transaction", [""] + df["id"].tolist(),
                                 format_func=lambda i: "" if not i else df.loc[df["id"] == i, "Description"].iloc[0])
        if to_delete and st.button("🗑 Delete"):
            service.delete_transaction(to_delete)
            st.rerun()
    else:
        st.info("No transactions match the selected filters")

elif menu == "➕ Add Transaction":
    st.title("➕ Add Transaction")

    entry_type = st.radio("Type", list(EntryType), format_func=lambda t: t.value.title(), horizontal=True)
    options = categories_for(entry_type, service.state.custom_categories)

    with st.form("input_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            on = st.date_input("Date", value=today)
            amount = st.text_input("Amount (₦)")
        with col2:
            category = st.selectbox("Category", options, format_func=lambda c: f"{icon_for(c)} {c}")
            recurring = st.checkbox("Recurring")
        description = st.text_input("Description (optional)")
        notes = st.text_area("Notes (optional)")
        submitted = st.form_submit_button("Add Transaction")

        if submitted:
            result = service.add_transaction(
                entry_type.value,
                amount,
                category,
                on=on.isoformat(),
                description=description,
                recurring=recurring,
                notes=notes,
            )
            if result.is_left():
                show_error(result)
            else:
                st.session_state.selected_month = on.strftime("%Y-%m")
                st.success(f"Saved {format_ngn(parse_currency_input(amount))}")

    st.subheader("🏷 Custom categories")
    new_name = st.text_input("New category name")
    if st.button("Add category") and new_name:
        added = service.add_category(new_name, entry_type)
        if added.is_left():
            show_error(added)
        else:
            st.rerun()

    for custom in service.state.custom_categories:
        if custom.type != entry_type:
            continue
        c1, c2 = st.columns([4, 1])
        c1.markdown(f"{icon_for(custom.name)} {custom.name}")
        deletable = can_delete_category(service.state.transactions, custom.name, custom.type)
        if c2.button("🗑", key=f"del_{custom.type.value}_{custom.name}", disabled=not deletable):
            removed = service.delete_category(custom.name, custom.type)
            if removed.is_left():
                show_error(removed)
            else:
                st.rerun()

elif menu == "🗓 Budget Planner":
    st.title("🗓 Budget Planner")

    months = plan_months(service.state.plans) or (st.session_state.selected_month,)
    pick1, pick2 = st.columns(2)
    with pick1:
        year = st.number_input("Year", min_value=2000, max_value=2100, value=int(st.session_state.selected_month[:4]))
    with pick2:
        month_no = st.selectbox("Month", list(range(1, 13)), index=int(st.session_state.selected_month[5:]) - 1,
                                format_func=lambda m: month_label(f"2000-{m:02d}").split()[0])
    month = f"{int(year)}-{month_no:02d}"
    st.session_state.selected_month = month
    plan = service.open_plan(month)
    st.caption("Saved plans: " + ", ".join(month_label(m, short=True) for m in months))

    if is_past_month(month, today):
        st.info(f"{month_label(month)} is in the past")

    totals = plan_totals(plan)
    t1, t2, t3 = st.columns(3)
    t1.metric("Planned income", format_ngn(totals["income"] + totals["extras_income"]))
    t2.metric("Planned expenses", format_ngn(totals["expense"] + totals["extras_expense"]))
    t3.metric("Surplus", format_ngn(totals["surplus"]))

    if st.button("🔓 Unlock plan" if plan.locked else "🔒 Lock plan"):
        service.toggle_lock(month)
        st.rerun()
    if not plan.locked and st.button("✨ Fill suggested amounts"):
        service.apply_default_budgets(month)
        st.rerun()

    for section, title in ((EntryType.INCOME, "Income"), (EntryType.EXPENSE, "Expenses")):
        st.subheader(title)
        for cat, value in plan.section(section).items():
            raw = st.text_input(
                f"{icon_for(cat)} {cat}",
                value=format_plan_amount(value),
                key=f"{month}_{section.value}_{cat}",
                disabled=plan.locked,
            )
            if not plan.locked and amount_changed(raw, value):
                service.set_plan_amount(month, section, cat, raw)

    if plan.locked:
        st.subheader("Extra-budgetary entries")
        with st.form("extra_form", clear_on_submit=True):
            e1, e2, e3 = st.columns(3)
            with e1:
                extra_type = st.selectbox("Type", list(EntryType), index=1, format_func=lambda t: t.value.title())
            with e2:
                extra_category = st.selectbox("Category", categories_for(extra_type, service.state.custom_categories))
            with e3:
                extra_amount = st.text_input("Amount (₦)")
            extra_description = st.text_input("Description")
            if st.form_submit_button("Add extra"):
                added = service.add_extra(month, extra_type, extra_category, extra_amount, extra_description)
                if added.is_left():
                    show_error(added)
                else:
                    st.rerun()
        for extra in plan.extras:
            x1, x2 = st.columns([4, 1])
            sign = "+" if extra.type == EntryType.INCOME else "-"
            x1.markdown(f"{icon_for(extra.category)} {extra.description} · {sign}{format_ngn(extra.amount)}")
            if x2.button("🗑", key=f"extra_{extra.id}"):
                service.remove_extra(month, extra.id)
                st.rerun()

elif menu == "🧮 Tax Calculator":
    st.title("🧮 Tax Calculator")
    current = service.state.tax_input

    col1, col2 = st.columns(2)
    with col1:
        mode = st.radio("Gross income is", list(IncomeMode), index=list(IncomeMode).index(current.income_mode),
                        format_func=lambda m: m.value.title(), horizontal=True)
        gross = st.number_input(f"{mode.value.title()} gross (₦)", min_value=0.0, value=float(current.gross_income), step=10000.0)
        pension = st.number_input("Pension rate (%)", min_value=0.0, max_value=100.0, value=float(current.pension_rate))
    with col2:
        include_nhf = st.checkbox("Include NHF", value=current.include_nhf)
        nhf_rate = st.number_input("NHF rate (%)", min_value=0.0, max_value=100.0,
                                   value=float(current.nhf_rate or DEFAULT_NHF_RATE), disabled=not include_nhf)
        rent = st.number_input("Annual rent paid (₦)", min_value=0.0, value=float(current.annual_rent_paid), step=10000.0)

    tax_input = TaxInput(gross, mode, pension, include_nhf, nhf_rate, rent)
    if tax_input != current:
        service.set_tax_input(tax_input)

    regime = st.radio("Regime", list(TaxRegime), format_func=lambda r: {"current": "Tax Act 2025/26", "legacy": "Legacy (CRA)"}[r.value],
                      horizontal=True)
    results = compare_regimes(tax_input)
    res = results[regime]
    st.caption(f"Annual gross for tax: {format_ngn(res.gross)}")

    breakdown = pd.DataFrame([
        ("Gross income", res.gross),
        ("Pension", res.pension),
        ("NHF", res.nhf),
        ("CRA" if regime == TaxRegime.LEGACY else "Rent relief", res.relief),
        ("Taxable income", res.taxable_income),
        ("Annual tax", res.tax),
        ("Monthly tax", res.monthly_tax),
        ("Net monthly take-home", res.net_monthly),
    ], columns=["Item", "Amount"])
    breakdown["Amount"] = breakdown["Amount"].map(format_ngn)
    st.table(breakdown)
    st.metric("Effective rate", f"{res.effective_rate:.2%}")

    if res.bands:
        band_df = pd.DataFrame([
            {"Band": f"{c.rate:.0%}", "Taxable": c.taxable, "Tax": c.tax} for c in res.bands
        ])
        band_df["Cumulative tax"] = np.cumsum(band_df["Tax"].to_numpy())
        for col in ("Taxable", "Tax", "Cumulative tax"):
            band_df[col] = band_df[col].map(lambda v: f"{v:,.0f}")
        st.dataframe(band_df, use_container_width=True)

    fig_tax = px.bar(
        x=["Gross", "Deductions", "Taxable", "Tax", "Net"],
        y=[round(v) for v in (res.gross, res.total_deductions, res.taxable_income, res.tax, res.net_annual)],
        labels={"x": "", "y": "₦"},
        title="Annual breakdown",
    )
    st.plotly_chart(fig_tax, use_container_width=True)

    other = results[TaxRegime.LEGACY if regime == TaxRegime.CURRENT else TaxRegime.CURRENT]
    st.caption(f"Under the other regime the annual tax would be {format_ngn(other.tax)}")

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")

    st.subheader("📤 Export")
    st.download_button("⬇ Export all data (JSON)", service.export_json(),
                       file_name=f"planning-data-{today.isoformat()}.json", mime="application/json")
    st.download_button("⬇ Export transactions (CSV)", service.export_csv(),
                       file_name=f"transactions-{today.isoformat()}.csv", mime="text/csv")

    st.subheader("📥 Import")
    uploaded = st.file_uploader("Import data (JSON)", type=["json"])
    if uploaded is not None and st.button("Import"):
        imported = service.import_json(uploaded.getvalue().decode("utf-8", errors="replace"))
        if imported.is_left():
            show_error(imported)
        else:
            logger.info("Imported %s", uploaded.name)
            st.success("Data imported")

    st.subheader("🧹 Data")
    if st.button("Load demo transactions"):
        service.load_demo_data()
        st.rerun()
    confirm = st.checkbox("I understand this cannot be undone")
    r1, r2 = st.columns(2)
    if r1.button("Clear transactions", disabled=not confirm):
        service.reset_transactions()
        st.rerun()
    if r2.button("Clear budget plans", disabled=not confirm):
        service.reset_plans()
        st.rerun()
