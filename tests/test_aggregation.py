from datetime import date

import pytest

from budgetcore.aggregation import (
    PROGRESS_CAP,
    aggregate,
    expense_variance,
    income_variance,
    progress_percent,
    variance_rows,
)
from budgetcore.domain import EntryType, FrozenMap, Scope, Transaction
from budgetcore.plans import add_extra, empty_plan, set_category_amount, toggle_lock


def tx(id, on, type, amount, category):
    return Transaction(id=id, date=on, type=type, amount=amount, category=category)


def sample():
    trans = (
        tx("1", "2024-05-01", EntryType.INCOME, 500_000, "Salary"),
        tx("2", "2024-05-03", EntryType.EXPENSE, 120_000, "Housing"),
        tx("3", "2024-05-05", EntryType.EXPENSE, 90_000, "Food"),
        tx("4", "2024-04-10", EntryType.EXPENSE, 30_000, "Food"),
        tx("5", "2024-05-07", EntryType.EXPENSE, 5_000, "Pets"),
    )
    plan = empty_plan()
    plan = set_category_amount(plan, EntryType.INCOME, "Salary", 600_000)
    plan = set_category_amount(plan, EntryType.EXPENSE, "Housing", 150_000)
    plan = set_category_amount(plan, EntryType.EXPENSE, "Food", 80_000)
    plan = add_extra(toggle_lock(plan), EntryType.EXPENSE, "Health", 10_000, id_factory=lambda: "x")
    return trans, FrozenMap({"2024-05": plan})


def test_monthly_aggregate():
    trans, plans = sample()

    result = aggregate(trans, plans, Scope.MONTHLY, "2024-05", date(2024, 5, 31))

    assert result.label == "May 2024"
    assert result.total_actual_income == 500_000
    assert result.total_actual_expense == 215_000
    assert result.net_actual == 285_000
    assert result.actual_expense["Pets"] == 5_000
    assert result.total_planned_income == 600_000
    assert result.total_planned_expense == 150_000 + 80_000 + 10_000
    assert result.planned_net == 600_000 - 240_000
    assert result.has_plan


def test_quarterly_aggregate_sums_months():
    trans, plans = sample()

    result = aggregate(trans, plans, Scope.QUARTERLY, "2024-05", date(2024, 6, 30))

    assert result.months == ("2024-04", "2024-05", "2024-06")
    assert result.actual_expense["Food"] == 120_000
    assert result.planned_expense["Food"] == 80_000


def test_no_plan_in_scope():
    trans, plans = sample()

    result = aggregate(trans, plans, Scope.MONTHLY, "2024-04", date(2024, 5, 31))

    assert not result.has_plan
    assert result.total_planned_expense == 0


def test_ytd_drops_future_transactions():
    trans, plans = sample()
    today = date(2024, 5, 4)

    ytd = aggregate(trans, plans, Scope.YTD, "2024-05", today)
    yearly = aggregate(trans, plans, Scope.YEARLY, "2024-05", today)

    assert ytd.actual_expense["Food"] == 30_000
    assert yearly.actual_expense["Food"] == 120_000


def test_variance_rows_flag_overspend_and_shortfall():
    trans, plans = sample()

    result = aggregate(trans, plans, Scope.MONTHLY, "2024-05", date(2024, 5, 31))
    rows = {r.category: r for r in result.expense_rows}
    salary = {r.category: r for r in result.income_rows}["Salary"]

    assert rows["Food"].over
    assert rows["Food"].variance == -10_000
    assert not rows["Housing"].over
    assert rows["Housing"].variance == 30_000
    # unplanned spend is shown but never flagged
    assert not rows["Pets"].over
    assert rows["Pets"].progress == 100
    assert salary.under
    assert salary.variance == -100_000


def test_variance_rows_skip_empty_and_order_presets_first():
    rows = variance_rows({"Food": 10, "Custom": 0}, {"Custom": 5, "Housing": 0}, EntryType.EXPENSE)

    assert [r.category for r in rows] == ["Food", "Custom"]


def test_planned_zero_never_flags():
    assert not expense_variance("Food", 0, 500).over
    assert not income_variance("Salary", 0, 0).under
    assert income_variance("Salary", 100, 50).under
    assert not income_variance("Salary", 100, 150).under


def test_progress_is_capped():
    assert progress_percent(100, 1000) == PROGRESS_CAP
    assert progress_percent(200, 50) == pytest.approx(25)
    assert progress_percent(0, 0) == 0
    assert expense_variance("Food", 100, 1000).bar_percent == 100


def test_pie_uses_expense_actuals():
    trans, plans = sample()

    result = aggregate(trans, plans, Scope.MONTHLY, "2024-05", date(2024, 5, 31))

    assert [s.name for s in result.pie] == ["Housing", "Food", "Pets"]


def test_aggregate_does_not_mutate_inputs():
    trans, plans = sample()
    before = (trans, dict(plans))

    aggregate(trans, plans, Scope.YEARLY, "2024-05", date(2024, 12, 31))

    assert (trans, dict(plans)) == before
