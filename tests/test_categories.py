from budgetcore.categories import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    add_custom_category,
    can_delete_category,
    categories_for,
    delete_custom_category,
    icon_for,
)
from budgetcore.domain import CustomCategory, EntryType, Transaction


def test_presets():
    assert categories_for(EntryType.INCOME) == INCOME_CATEGORIES
    assert categories_for(EntryType.EXPENSE) == EXPENSE_CATEGORIES


def test_add_custom_category():
    result = add_custom_category((), "  Pets ", EntryType.EXPENSE)

    assert result.is_right()
    customs = result.get_or_else(())
    assert customs == (CustomCategory("Pets", EntryType.EXPENSE),)
    assert categories_for(EntryType.EXPENSE, customs)[-1] == "Pets"
    assert "Pets" not in categories_for(EntryType.INCOME, customs)


def test_add_custom_category_rejects_blank_and_duplicates():
    assert add_custom_category((), "   ", EntryType.EXPENSE).get_error()["error"] == "blank_name"
    assert add_custom_category((), "food", EntryType.EXPENSE).get_error()["error"] == "duplicate_category"
    # same name is fine on the other side
    assert add_custom_category((), "Food", EntryType.INCOME).is_right()


def test_delete_guarded_by_references():
    customs = (CustomCategory("Pets", EntryType.EXPENSE),)
    trans = (Transaction("t1", "2024-05-01", EntryType.EXPENSE, 100.0, "Pets"),)

    assert not can_delete_category(trans, "Pets", EntryType.EXPENSE)
    refused = delete_custom_category(customs, trans, "Pets", EntryType.EXPENSE)
    assert refused.is_left()
    assert refused.get_error()["error"] == "category_in_use"
    assert refused.get_error()["references"] == 1

    removed = delete_custom_category(customs, (), "Pets", EntryType.EXPENSE)
    assert removed.get_or_else(None) == ()
    assert "Pets" not in categories_for(EntryType.EXPENSE, removed.get_or_else(None))


def test_reference_matches_type_too():
    trans = (Transaction("t1", "2024-05-01", EntryType.INCOME, 100.0, "Pets"),)

    assert can_delete_category(trans, "Pets", EntryType.EXPENSE)


def test_delete_unknown_category():
    result = delete_custom_category((), (), "Ghost", EntryType.EXPENSE)

    assert result.get_error()["error"] == "category_not_found"


def test_icon_fallback():
    assert icon_for("Food") == "🍔"
    assert icon_for("Something new") == "🏷️"
