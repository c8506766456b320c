import math

import pytest

from budgetcore.config import DEFAULT_NHF_RATE
from budgetcore.domain import IncomeMode, TaxInput, TaxRegime
from budgetcore.tax import (
    CURRENT_BANDS,
    LEGACY_BANDS,
    annual_gross,
    band_charges,
    compare_regimes,
    compute_tax,
    consolidated_relief,
    progressive_tax,
    rent_relief,
)


def annual(gross, **kwargs):
    return TaxInput(gross_income=gross, income_mode=IncomeMode.ANNUAL, **kwargs)


def test_legacy_example():
    result = compute_tax(TaxRegime.LEGACY, annual(3_000_000, pension_rate=8))

    assert result.pension == pytest.approx(240_000)
    assert result.nhf == 0
    assert result.adjusted_gross == pytest.approx(2_760_000)
    assert result.cra == pytest.approx(752_000)
    assert result.taxable_income == pytest.approx(2_008_000)
    assert result.tax == pytest.approx(309_680)
    assert result.rent_relief == 0


def test_current_example():
    result = compute_tax(TaxRegime.CURRENT, annual(1_000_000))

    assert result.relief == 0
    assert result.taxable_income == pytest.approx(1_000_000)
    assert result.tax == pytest.approx(30_000)
    assert [c.rate for c in result.bands] == [0.0, 0.15]
    assert result.bands[-1].taxable == pytest.approx(200_000)


def test_zero_income_both_regimes():
    for regime in TaxRegime:
        result = compute_tax(regime, annual(0))
        assert result.tax == 0
        assert result.effective_rate == 0
        assert result.net_annual == 0


def test_tax_never_decreases_with_income():
    for bands in (LEGACY_BANDS, CURRENT_BANDS):
        previous = -1.0
        for amount in range(0, 60_000_001, 250_000):
            tax = progressive_tax(amount, bands)
            assert tax >= previous
            previous = tax


def test_tax_at_band_boundary_is_sum_of_lower_bands():
    for bands in (LEGACY_BANDS, CURRENT_BANDS):
        boundary = 0.0
        expected = 0.0
        for width, rate in bands:
            if math.isinf(width):
                break
            boundary += width
            expected += width * rate
            assert progressive_tax(boundary, bands) == pytest.approx(expected)


def test_band_charges_open_top_band():
    charges = band_charges(5_000_000, LEGACY_BANDS)

    assert charges[-1].upper is None
    assert charges[-1].rate == 0.24
    assert sum(c.taxable for c in charges) == pytest.approx(5_000_000)


def test_band_charges_nothing_taxable():
    assert band_charges(0, CURRENT_BANDS) == ()
    assert band_charges(-100, CURRENT_BANDS) == ()


def test_monthly_gross_is_annualised():
    monthly = compute_tax(TaxRegime.CURRENT, TaxInput(gross_income=250_000))
    yearly = compute_tax(TaxRegime.CURRENT, annual(3_000_000))

    assert monthly.gross == yearly.gross == 3_000_000
    assert monthly.tax == pytest.approx(yearly.tax)


def test_nhf_only_when_included():
    without = compute_tax(TaxRegime.CURRENT, annual(2_000_000, nhf_rate=2.5))
    with_nhf = compute_tax(TaxRegime.CURRENT, annual(2_000_000, include_nhf=True, nhf_rate=2.5))

    assert without.nhf == 0
    assert with_nhf.nhf == pytest.approx(50_000)
    assert with_nhf.taxable_income == pytest.approx(1_950_000)


def test_rent_relief_is_capped():
    assert rent_relief(1_000_000) == pytest.approx(200_000)
    assert rent_relief(10_000_000) == 500_000

    result = compute_tax(TaxRegime.CURRENT, annual(5_000_000, annual_rent_paid=10_000_000))
    assert result.relief == 500_000
    assert result.taxable_income == pytest.approx(4_500_000)


def test_consolidated_relief_floor():
    assert consolidated_relief(1_000_000) == pytest.approx(200_000 + 200_000)
    assert consolidated_relief(30_000_000) == pytest.approx(300_000 + 6_000_000)


def test_negative_and_nan_inputs_count_as_zero():
    result = compute_tax(TaxRegime.LEGACY, annual(float("nan"), pension_rate=-5))

    assert result.gross == 0
    assert result.pension == 0
    assert result.tax == 0


def test_net_figures_and_effective_rate():
    result = compute_tax(TaxRegime.CURRENT, annual(1_000_000))

    assert result.net_annual == pytest.approx(970_000)
    assert result.net_monthly == pytest.approx(970_000 / 12)
    assert result.monthly_tax == pytest.approx(2_500)
    assert result.effective_rate == pytest.approx(0.03)


def test_compare_regimes_returns_both():
    results = compare_regimes(annual(3_000_000, pension_rate=8))

    assert set(results) == {TaxRegime.LEGACY, TaxRegime.CURRENT}
    assert results[TaxRegime.LEGACY].tax == pytest.approx(309_680)


def test_gross_is_clamped_before_annualising():
    assert annual_gross(TaxInput(gross_income="100")) == 1200
    assert annual_gross(TaxInput(gross_income=-50)) == 0
    assert compute_tax(TaxRegime.CURRENT, TaxInput(gross_income="100")).gross == 1200


def test_nhf_rate_defaults_to_configured_rate():
    assert TaxInput().nhf_rate == DEFAULT_NHF_RATE
