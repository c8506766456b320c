"""Simplified Nigerian PAYE estimate.

Two rate regimes are supported:

* ``TaxRegime.LEGACY``: the PITA bands with the Consolidated Relief
  Allowance (CRA).
* ``TaxRegime.CURRENT``: the Nigeria Tax Act 2025/26 bands with rent relief.

Pension and NHF contributions come off gross income in both regimes. The
figures are for planning only.
"""

import math
from typing import Any

from budgetcore.domain import IncomeMode, TaxBandCharge, TaxInput, TaxRegime, TaxResult

INF = float("inf")

# (band width, rate), consumed in order
LEGACY_BANDS: tuple[tuple[float, float], ...] = (
    (300_000, 0.07),
    (300_000, 0.11),
    (500_000, 0.15),
    (500_000, 0.19),
    (1_600_000, 0.21),
    (INF, 0.24),
)

CURRENT_BANDS: tuple[tuple[float, float], ...] = (
    (800_000, 0.0),
    (2_200_000, 0.15),
    (9_000_000, 0.18),
    (13_000_000, 0.21),
    (25_000_000, 0.23),
    (INF, 0.25),
)

BANDS = {
    TaxRegime.LEGACY: LEGACY_BANDS,
    TaxRegime.CURRENT: CURRENT_BANDS,
}

CRA_FLOOR = 200_000
CRA_FLOOR_RATE = 0.01
CRA_RATE = 0.20
RENT_RELIEF_RATE = 0.20
RENT_RELIEF_CAP = 500_000


def _clamp(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or number < 0:
        return 0.0
    return number


def annual_gross(tax_input: TaxInput) -> float:
    """Gross income per year, clamped before it is annualised."""
    gross = _clamp(tax_input.gross_income)
    if tax_input.income_mode == IncomeMode.MONTHLY:
        return gross * 12
    return gross


def band_charges(
    amount: float, bands: tuple[tuple[float, float], ...]
) -> tuple[TaxBandCharge, ...]:
    """Split ``amount`` across the bands it reaches."""
    remaining = max(0.0, amount)
    lower = 0.0
    charges = []
    for width, rate in bands:
        if remaining <= 0:
            break
        taxable = remaining if width == INF else min(remaining, width)
        upper = None if width == INF else lower + width
        charges.append(TaxBandCharge(lower, upper, rate, taxable, taxable * rate))
        remaining -= taxable
        lower += taxable
    return tuple(charges)


def progressive_tax(amount: float, bands: tuple[tuple[float, float], ...]) -> float:
    return sum(c.tax for c in band_charges(amount, bands))


def consolidated_relief(adjusted_gross: float) -> float:
    return max(CRA_FLOOR, CRA_FLOOR_RATE * adjusted_gross) + CRA_RATE * adjusted_gross


def rent_relief(annual_rent_paid: float) -> float:
    return min(RENT_RELIEF_RATE * annual_rent_paid, RENT_RELIEF_CAP)


def compute_tax(regime: TaxRegime, tax_input: TaxInput) -> TaxResult:
    """Compute the annual tax breakdown for ``tax_input`` under ``regime``.

    Negative or NaN inputs count as zero, so the function never fails on
    numeric data. A zero gross gives zero everywhere, including the
    effective rate.
    """
    regime = TaxRegime(regime)
    gross = annual_gross(tax_input)
    pension = gross * _clamp(tax_input.pension_rate) / 100
    nhf = gross * _clamp(tax_input.nhf_rate) / 100 if tax_input.include_nhf else 0.0
    adjusted_gross = max(0.0, gross - pension - nhf)
    rent_paid = _clamp(tax_input.annual_rent_paid)

    if regime == TaxRegime.LEGACY:
        cra = consolidated_relief(adjusted_gross)
        relief_from_rent = 0.0
        relief = cra
    else:
        cra = 0.0
        relief_from_rent = rent_relief(rent_paid)
        relief = relief_from_rent

    taxable_income = max(0.0, gross - pension - nhf - relief)
    charges = band_charges(taxable_income, BANDS[regime])
    tax = sum(c.tax for c in charges)
    net_annual = gross - tax

    return TaxResult(
        regime=regime,
        gross=gross,
        pension=pension,
        nhf=nhf,
        adjusted_gross=adjusted_gross,
        cra=cra,
        rent_paid=rent_paid,
        rent_relief=relief_from_rent,
        relief=relief,
        taxable_income=taxable_income,
        tax=tax,
        effective_rate=tax / gross if gross > 0 else 0.0,
        net_annual=net_annual,
        net_monthly=net_annual / 12,
        monthly_tax=tax / 12,
        bands=charges,
    )


def compare_regimes(tax_input: TaxInput) -> dict[TaxRegime, TaxResult]:
    return {regime: compute_tax(regime, tax_input) for regime in TaxRegime}
