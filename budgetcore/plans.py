from dataclasses import replace
from datetime import date
from typing import Callable, Mapping
from uuid import uuid4

from budgetcore.categories import DEFAULT_BUDGETS, EXPENSE_CATEGORIES, INCOME_CATEGORIES
from budgetcore.domain import EntryType, ExtraEntry, FrozenMap, MonthBudgetPlan
from budgetcore.formatting import parse_currency_input


def empty_plan() -> MonthBudgetPlan:
    return MonthBudgetPlan(
        locked=False,
        income=FrozenMap((c, 0.0) for c in INCOME_CATEGORIES),
        expense=FrozenMap((c, 0.0) for c in EXPENSE_CATEGORIES),
        extras=(),
    )


def set_category_amount(
    plan: MonthBudgetPlan, section: EntryType, category: str, amount
) -> MonthBudgetPlan:
    """Return ``plan`` with one category amount replaced.

    ``amount`` is user text or a number; unparseable input stores 0. Locked
    plans are returned unchanged.
    """
    if plan.locked:
        return plan
    value = parse_currency_input(amount)
    if EntryType(section) == EntryType.INCOME:
        return replace(plan, income=plan.income.set(category, value))
    return replace(plan, expense=plan.expense.set(category, value))


def toggle_lock(plan: MonthBudgetPlan) -> MonthBudgetPlan:
    return replace(plan, locked=not plan.locked)


def add_extra(
    plan: MonthBudgetPlan,
    entry_type: EntryType,
    category: str,
    amount,
    description: str = "",
    id_factory: Callable[[], str] = lambda: str(uuid4()),
) -> MonthBudgetPlan:
    value = parse_currency_input(amount)
    if value <= 0:
        return plan
    entry = ExtraEntry(
        id=id_factory(),
        type=EntryType(entry_type),
        category=category,
        amount=value,
        description=(description or "").strip() or "Extra entry",
    )
    return replace(plan, extras=plan.extras + (entry,))


def remove_extra(plan: MonthBudgetPlan, extra_id: str) -> MonthBudgetPlan:
    kept = tuple(e for e in plan.extras if e.id != extra_id)
    if len(kept) == len(plan.extras):
        return plan
    return replace(plan, extras=kept)


def apply_default_budgets(plan: MonthBudgetPlan) -> MonthBudgetPlan:
    # only empty expense rows take the suggested amount
    if plan.locked:
        return plan
    expense = FrozenMap(
        (cat, amount or float(DEFAULT_BUDGETS.get(cat, 0)))
        for cat, amount in plan.expense.items()
    )
    return replace(plan, expense=expense)


def ensure_plan(
    plans: FrozenMap, month: str
) -> tuple[FrozenMap, MonthBudgetPlan]:
    """Lazily create the plan for ``month`` the first time it is referenced."""
    if month in plans:
        return plans, plans[month]
    plan = empty_plan()
    return plans.set(month, plan), plan


def update_plan(
    plans: FrozenMap,
    month: str,
    updater: Callable[[MonthBudgetPlan], MonthBudgetPlan],
) -> FrozenMap:
    plans, plan = ensure_plan(plans, month)
    return plans.set(month, updater(plan))


def plan_totals(plan: MonthBudgetPlan) -> dict[str, float]:
    income = sum(plan.income.values())
    expense = sum(plan.expense.values())
    extras_income = sum(e.amount for e in plan.extras if e.type == EntryType.INCOME)
    extras_expense = sum(e.amount for e in plan.extras if e.type == EntryType.EXPENSE)
    return {
        "income": income,
        "expense": expense,
        "extras_income": extras_income,
        "extras_expense": extras_expense,
        "surplus": income + extras_income - expense - extras_expense,
    }


def is_past_month(month: str, today: date) -> bool:
    return month < today.strftime("%Y-%m")


def plan_months(plans: Mapping[str, MonthBudgetPlan]) -> tuple[str, ...]:
    return tuple(sorted(plans))
