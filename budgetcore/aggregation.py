"""Actual-vs-planned roll-ups over a month, quarter, year-to-date or year.

``aggregate`` is the entry point. It never mutates its inputs and returns a
fresh ``AggregateResult`` carrying category maps, totals, the pie buckets and
the variance rows the dashboard renders.
"""

from collections import defaultdict
from datetime import date
from typing import Iterable, Mapping

from budgetcore.buckets import pie_buckets
from budgetcore.categories import preset_categories
from budgetcore.config import PIE_MAX_SLICES
from budgetcore.domain import (
    AggregateResult,
    EntryType,
    FrozenMap,
    MonthBudgetPlan,
    Scope,
    Transaction,
    VarianceRow,
)
from budgetcore.scope import scope_label, scope_months, scope_transactions

PROGRESS_CAP = 150.0


def actual_by_category(trans: Iterable[Transaction], entry_type: EntryType) -> FrozenMap:
    totals: dict[str, float] = {c: 0.0 for c in preset_categories(entry_type)}
    for t in trans:
        if t.type == entry_type:
            totals[t.category] = totals.get(t.category, 0.0) + t.amount
    return FrozenMap(totals)


def planned_by_category(
    plans: Mapping[str, MonthBudgetPlan], months: Iterable[str], entry_type: EntryType
) -> FrozenMap:
    totals: dict[str, float] = {c: 0.0 for c in preset_categories(entry_type)}
    for month in months:
        plan = plans.get(month)
        if plan is None:
            continue
        for cat, amount in plan.section(entry_type).items():
            totals[cat] = totals.get(cat, 0.0) + amount
    return FrozenMap(totals)


def extras_total(
    plans: Mapping[str, MonthBudgetPlan], months: Iterable[str]
) -> dict[EntryType, float]:
    totals: dict[EntryType, float] = defaultdict(float)
    for month in months:
        plan = plans.get(month)
        if plan is None:
            continue
        for extra in plan.extras:
            totals[extra.type] += extra.amount
    return totals


def progress_percent(planned: float, actual: float) -> float:
    if planned > 0:
        return min(actual / planned * 100, PROGRESS_CAP)
    return 100.0 if actual > 0 else 0.0


def expense_variance(category: str, planned: float, actual: float) -> VarianceRow:
    return VarianceRow(
        category=category,
        type=EntryType.EXPENSE,
        planned=planned,
        actual=actual,
        variance=planned - actual,
        progress=progress_percent(planned, actual),
        unfavorable=actual > planned and planned > 0,
    )


def income_variance(category: str, planned: float, actual: float) -> VarianceRow:
    return VarianceRow(
        category=category,
        type=EntryType.INCOME,
        planned=planned,
        actual=actual,
        variance=actual - planned,
        progress=progress_percent(planned, actual),
        unfavorable=actual < planned and planned > 0,
    )


def variance_rows(
    planned: Mapping[str, float], actual: Mapping[str, float], entry_type: EntryType
) -> tuple[VarianceRow, ...]:
    build = income_variance if entry_type == EntryType.INCOME else expense_variance
    presets = preset_categories(entry_type)
    extra = [c for c in list(planned) + list(actual) if c not in presets]
    ordered = list(presets) + list(dict.fromkeys(extra))
    rows = []
    for cat in ordered:
        p = planned.get(cat, 0.0)
        a = actual.get(cat, 0.0)
        if p > 0 or a > 0:
            rows.append(build(cat, p, a))
    return tuple(rows)


def aggregate(
    transactions: Iterable[Transaction],
    plans: Mapping[str, MonthBudgetPlan],
    scope: Scope,
    anchor: str,
    today: date,
) -> AggregateResult:
    scope = Scope(scope)
    months = scope_months(scope, anchor, today)
    in_scope = scope_transactions(transactions, scope, anchor, today)

    actual_income = actual_by_category(in_scope, EntryType.INCOME)
    actual_expense = actual_by_category(in_scope, EntryType.EXPENSE)
    planned_income = planned_by_category(plans, months, EntryType.INCOME)
    planned_expense = planned_by_category(plans, months, EntryType.EXPENSE)
    extras = extras_total(plans, months)

    total_actual_income = sum(actual_income.values())
    total_actual_expense = sum(actual_expense.values())

    return AggregateResult(
        scope=scope,
        anchor=anchor,
        label=scope_label(scope, anchor),
        months=months,
        transactions=in_scope,
        actual_income=actual_income,
        actual_expense=actual_expense,
        planned_income=planned_income,
        planned_expense=planned_expense,
        total_actual_income=total_actual_income,
        total_actual_expense=total_actual_expense,
        total_planned_income=sum(planned_income.values()) + extras[EntryType.INCOME],
        total_planned_expense=sum(planned_expense.values()) + extras[EntryType.EXPENSE],
        net_actual=total_actual_income - total_actual_expense,
        has_plan=any(m in plans for m in months),
        pie=pie_buckets(actual_expense, PIE_MAX_SLICES),
        expense_rows=variance_rows(planned_expense, actual_expense, EntryType.EXPENSE),
        income_rows=variance_rows(planned_income, actual_income, EntryType.INCOME),
    )
