"""Preset category sets and custom category bookkeeping."""

from typing import Iterable

from budgetcore.domain import CustomCategory, EntryType, Transaction
from budgetcore.functional import Either, Left, Right

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Housing",
    "Food",
    "Transport",
    "Utilities",
    "Health",
    "Education",
    "Entertainment",
    "Family",
    "Savings/Investment",
    "Debt Repayment",
    "Subscriptions",
    "Misc",
)

INCOME_CATEGORIES: tuple[str, ...] = (
    "Salary",
    "Freelance",
    "Business",
    "Bonus",
    "Interest",
    "Gift",
    "Other",
)

# suggested monthly amounts offered when a plan is started from scratch
DEFAULT_BUDGETS: dict[str, float] = {
    "Housing": 150000,
    "Food": 80000,
    "Transport": 40000,
    "Utilities": 35000,
    "Health": 25000,
    "Education": 30000,
    "Entertainment": 20000,
    "Family": 30000,
    "Savings/Investment": 50000,
    "Debt Repayment": 30000,
    "Subscriptions": 10000,
    "Misc": 25000,
}

CATEGORY_ICONS: dict[str, str] = {
    "Housing": "🏠",
    "Food": "🍔",
    "Transport": "🚗",
    "Utilities": "💡",
    "Health": "🏥",
    "Education": "📚",
    "Entertainment": "🎬",
    "Family": "👨‍👩‍👧",
    "Savings/Investment": "💰",
    "Debt Repayment": "💳",
    "Subscriptions": "📱",
    "Misc": "📦",
    "Salary": "💼",
    "Freelance": "💻",
    "Business": "🏢",
    "Bonus": "🎁",
    "Interest": "📈",
    "Gift": "🎉",
    "Other": "📝",
}


def preset_categories(entry_type: EntryType) -> tuple[str, ...]:
    return INCOME_CATEGORIES if entry_type == EntryType.INCOME else EXPENSE_CATEGORIES


def categories_for(
    entry_type: EntryType, customs: Iterable[CustomCategory] = ()
) -> tuple[str, ...]:
    extra = tuple(c.name for c in customs if c.type == entry_type)
    return preset_categories(entry_type) + extra


def icon_for(category: str) -> str:
    return CATEGORY_ICONS.get(category, "🏷️")


def add_custom_category(
    customs: tuple[CustomCategory, ...], name: str, entry_type: EntryType
) -> Either[dict, tuple[CustomCategory, ...]]:
    name = (name or "").strip()
    if not name:
        return Left({
            "error": "blank_name",
            "message": "Category name cannot be empty",
        })

    existing = categories_for(entry_type, customs)
    if any(c.lower() == name.lower() for c in existing):
        return Left({
            "error": "duplicate_category",
            "message": f"{entry_type.value.title()} category {name} already exists",
            "name": name,
        })

    return Right(customs + (CustomCategory(name, entry_type),))


def category_references(
    transactions: Iterable[Transaction], name: str, entry_type: EntryType
) -> int:
    return sum(1 for t in transactions if t.category == name and t.type == entry_type)


def can_delete_category(
    transactions: Iterable[Transaction], name: str, entry_type: EntryType
) -> bool:
    return category_references(transactions, name, entry_type) == 0


def delete_custom_category(
    customs: tuple[CustomCategory, ...],
    transactions: tuple[Transaction, ...],
    name: str,
    entry_type: EntryType,
) -> Either[dict, tuple[CustomCategory, ...]]:
    """Remove a custom category unless a transaction still points at it.

    Referenced categories come back as a ``Left`` carrying
    ``category_in_use``; the caller decides how to tell the user.
    """
    target = CustomCategory(name, entry_type)
    if target not in customs:
        return Left({
            "error": "category_not_found",
            "message": f"Custom category {name} does not exist",
            "name": name,
        })

    references = category_references(transactions, name, entry_type)
    if references:
        return Left({
            "error": "category_in_use",
            "message": f"Category {name} is used by {references} transaction(s)",
            "name": name,
            "references": references,
        })

    return Right(tuple(c for c in customs if c != target))
