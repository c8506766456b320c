from datetime import date
from typing import Callable, Optional
from uuid import uuid4

from budgetcore.domain import EntryType, Transaction
from budgetcore.scope import iter_transactions, matching, month_key, of_type


def add_transaction(
    trans: tuple[Transaction, ...], t: Transaction
) -> tuple[Transaction, ...]:
    # newest first; equal dates keep the new entry on top
    return tuple(sorted((t,) + trans, key=lambda x: x.date, reverse=True))


def delete_transaction(
    trans: tuple[Transaction, ...], tx_id: str
) -> tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.id != tx_id, trans))


def transactions_in_month(
    trans: tuple[Transaction, ...], month: str
) -> tuple[Transaction, ...]:
    return tuple(t for t in trans if month_key(t.date) == month)


def search_transactions(
    trans: tuple[Transaction, ...],
    entry_type: Optional[EntryType] = None,
    query: str = "",
) -> tuple[Transaction, ...]:
    preds = []
    if entry_type is not None:
        preds.append(of_type(EntryType(entry_type)))
    if query.strip():
        preds.append(matching(query))
    return tuple(iter_transactions(trans, *preds))


_DEMO_ROWS = (
    # day, type, amount, category, description, recurring
    (1, EntryType.INCOME, 850000, "Salary", "Monthly salary", True),
    (3, EntryType.EXPENSE, 180000, "Housing", "Rent contribution", True),
    (5, EntryType.EXPENSE, 55000, "Food", "Groceries", False),
    (7, EntryType.EXPENSE, 25000, "Transport", "Fuel and ride-hailing", False),
    (10, EntryType.INCOME, 120000, "Freelance", "Design project", False),
    (12, EntryType.EXPENSE, 18000, "Subscriptions", "Software tools", True),
    (15, EntryType.EXPENSE, 32000, "Utilities", "Power and internet", True),
    (18, EntryType.EXPENSE, 45000, "Savings/Investment", "Mutual fund", True),
    (21, EntryType.EXPENSE, 22000, "Entertainment", "Outing", False),
    (24, EntryType.EXPENSE, 30000, "Family", "Support", False),
)


def seed_demo_transactions(
    today: date, id_factory: Callable[[], str] = lambda: str(uuid4())
) -> tuple[Transaction, ...]:
    """A month of sample activity dated in ``today``'s month."""
    base = today.strftime("%Y-%m")
    return tuple(
        Transaction(
            id=id_factory(),
            date=f"{base}-{day:02d}",
            type=kind,
            amount=float(amount),
            category=category,
            description=description,
            recurring=recurring,
        )
        for day, kind, amount, category, description, recurring in _DEMO_ROWS
    )
