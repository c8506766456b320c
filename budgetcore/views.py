from datetime import date
from functools import lru_cache

from budgetcore.aggregation import aggregate
from budgetcore.config import VIEW_CACHE_SIZE
from budgetcore.domain import AppState, DashboardView, Scope
from budgetcore.formatting import format_ngn
from budgetcore.transforms import transactions_in_month


@lru_cache(maxsize=VIEW_CACHE_SIZE)
def recompute(state: AppState, scope: Scope, anchor: str, today: date) -> DashboardView:
    """Everything the dashboard shows for ``scope`` around ``anchor``.

    The snapshot is hashable, so identical (state, scope, anchor, today)
    requests share one cached view.
    """
    result = aggregate(state.transactions, state.plans, Scope(scope), anchor, today)
    alerts = tuple(
        f"{row.category} is over budget by {format_ngn(-row.variance)}"
        for row in result.expense_rows
        if row.over
    )
    return DashboardView(
        aggregate=result,
        month_transactions=transactions_in_month(state.transactions, anchor),
        anchor_plan=state.plans.get(anchor),
        alerts=alerts,
    )
