from datetime import date

from budgetcore.domain import EntryType, Transaction
from budgetcore.transforms import (
    add_transaction,
    delete_transaction,
    search_transactions,
    seed_demo_transactions,
    transactions_in_month,
)


def tx(id, on, type=EntryType.EXPENSE, category="Food", description=""):
    return Transaction(id=id, date=on, type=type, amount=100.0, category=category, description=description)


def test_add_transaction_keeps_newest_first():
    trans = (tx("b", "2024-05-10"), tx("a", "2024-05-01"))

    added = add_transaction(trans, tx("c", "2024-05-05"))
    same_day = add_transaction(added, tx("d", "2024-05-10"))

    assert [t.id for t in added] == ["b", "c", "a"]
    assert [t.id for t in same_day][:2] == ["d", "b"]
    assert len(trans) == 2


def test_delete_transaction():
    trans = (tx("a", "2024-05-01"), tx("b", "2024-05-02"))

    assert [t.id for t in delete_transaction(trans, "a")] == ["b"]
    assert delete_transaction(trans, "zzz") == trans


def test_transactions_in_month():
    trans = (tx("a", "2024-05-01"), tx("b", "2024-06-02"))

    assert [t.id for t in transactions_in_month(trans, "2024-06")] == ["b"]


def test_search_transactions():
    trans = (
        tx("a", "2024-05-01", description="Groceries"),
        tx("b", "2024-05-02", type=EntryType.INCOME, category="Salary", description="May pay"),
        tx("c", "2024-05-03", category="Transport", description="Fuel"),
    )

    assert [t.id for t in search_transactions(trans, EntryType.INCOME)] == ["b"]
    assert [t.id for t in search_transactions(trans, query="transport")] == ["c"]
    assert [t.id for t in search_transactions(trans, EntryType.EXPENSE, "gro")] == ["a"]
    assert search_transactions(trans, query="   ") == trans


def test_seed_demo_transactions():
    counter = iter(range(100))
    demo = seed_demo_transactions(date(2024, 5, 20), id_factory=lambda: f"demo{next(counter)}")

    assert demo
    assert all(t.month_key == "2024-05" for t in demo)
    assert len({t.id for t in demo}) == len(demo)
    assert {t.type for t in demo} == {EntryType.INCOME, EntryType.EXPENSE}
