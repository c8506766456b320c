from budgetcore.formatting import (
    amount_changed,
    format_amount_input,
    format_ngn,
    format_plan_amount,
    format_plain_number,
    month_label,
    parse_currency_input,
)


def test_parse_currency_input():
    assert parse_currency_input("₦1,500.50") == 1500.5
    assert parse_currency_input("  12 500 ") == 12500
    assert parse_currency_input(2500) == 2500.0


def test_parse_currency_input_degrades_to_zero():
    for raw in ("abc", "1.2.3", "", ".", None, -5, float("nan"), float("inf"), True):
        assert parse_currency_input(raw) == 0


def test_format_ngn():
    assert format_ngn(1234567) == "₦1,234,567"
    assert format_ngn(-2500.4) == "-₦2,500"
    assert format_ngn(None) == "₦0"


def test_format_amount_input():
    assert format_amount_input("0012500.5") == "12,500.5"
    assert format_amount_input("₦1000000") == "1,000,000"
    assert format_amount_input("") == ""


def test_format_plain_number():
    assert format_plain_number(1500.0) == "1500"
    assert format_plain_number(12.5) == "12.5"


def test_month_label():
    assert month_label("2024-05") == "May 2024"
    assert month_label("2024-12", short=True) == "Dec 2024"


def test_plan_amount_keeps_fractions():
    assert format_plan_amount(1500.5) == "1,500.5"
    assert format_plan_amount(80000.0) == "80,000"
    assert format_plan_amount(0.0) == ""


def test_unchanged_plan_amount_is_not_rewritten():
    for value in (0.0, 1500.5, 80000.0):
        assert not amount_changed(format_plan_amount(value), value)
    assert not amount_changed("1500.5", 1500.5)
    assert amount_changed("1,501", 1500.5)
    assert amount_changed("", 10.0)
