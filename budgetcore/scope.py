from datetime import date
from typing import Callable, Iterable, Iterator

from budgetcore.domain import EntryType, Scope, Transaction
from budgetcore.formatting import month_label


def _split(month: str) -> tuple[int, int]:
    year, mm = month.split("-")
    return int(year), int(mm)


def _key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def month_key(on: str) -> str:
    return on[:7]


def shift_month(month: str, delta: int) -> str:
    year, mm = _split(month)
    index = year * 12 + (mm - 1) + delta
    return _key(index // 12, index % 12 + 1)


def quarter_months(month: str) -> tuple[str, ...]:
    year, mm = _split(month)
    quarter = (mm - 1) // 3
    return tuple(_key(year, quarter * 3 + 1 + i) for i in range(3))


def yearly_months(month: str) -> tuple[str, ...]:
    year, _ = _split(month)
    return tuple(_key(year, m) for m in range(1, 13))


def ytd_months(month: str, today: date) -> tuple[str, ...]:
    year, _ = _split(month)
    last = today.month if year == today.year else 12
    return tuple(_key(year, m) for m in range(1, last + 1))


def scope_months(scope: Scope, anchor: str, today: date) -> tuple[str, ...]:
    scope = Scope(scope)
    if scope == Scope.QUARTERLY:
        return quarter_months(anchor)
    if scope == Scope.YTD:
        return ytd_months(anchor, today)
    if scope == Scope.YEARLY:
        return yearly_months(anchor)
    return (anchor,)


def scope_label(scope: Scope, anchor: str) -> str:
    scope = Scope(scope)
    year, mm = _split(anchor)
    if scope == Scope.QUARTERLY:
        return f"Q{(mm - 1) // 3 + 1} {year}"
    if scope == Scope.YTD:
        return f"YTD {year}"
    if scope == Scope.YEARLY:
        return f"Year {year}"
    return month_label(anchor)


# --- transaction predicates


def in_months(months: Iterable[str]):
    wanted = frozenset(months)

    def _filter(t: Transaction) -> bool:
        return t.month_key in wanted

    return _filter


def on_or_before(today: date):
    cutoff = today.isoformat()

    def _filter(t: Transaction) -> bool:
        return t.date <= cutoff

    return _filter


def of_type(entry_type: EntryType):
    def _filter(t: Transaction) -> bool:
        return t.type == entry_type

    return _filter


def matching(query: str):
    needle = query.strip().lower()

    def _filter(t: Transaction) -> bool:
        return needle in (t.description or "").lower() or needle in (t.category or "").lower()

    return _filter


def iter_transactions(
    trans: Iterable[Transaction], *preds: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if all(p(t) for p in preds):
            yield t


def scope_transactions(
    trans: Iterable[Transaction], scope: Scope, anchor: str, today: date
) -> tuple[Transaction, ...]:
    """Transactions counted by ``scope``.

    Year-to-date also drops anything dated after ``today`` even when its
    month is inside the range.
    """
    preds = [in_months(scope_months(scope, anchor, today))]
    if Scope(scope) == Scope.YTD:
        preds.append(on_or_before(today))
    return tuple(iter_transactions(trans, *preds))
