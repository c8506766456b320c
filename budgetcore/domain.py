from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from budgetcore.config import DEFAULT_NHF_RATE


class EntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Scope(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YTD = "ytd"
    YEARLY = "yearly"


class TaxRegime(str, Enum):
    LEGACY = "legacy"    # PITA bands with consolidated relief allowance
    CURRENT = "current"  # Nigeria Tax Act 2025/26 bands with rent relief


class IncomeMode(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class FrozenMap(Mapping):
    """Immutable, hashable mapping.

    Category maps and the month -> plan map are held in these so that whole
    state snapshots can be hashed and cached.
    """

    __slots__ = ("_data", "_hash")

    def __init__(self, *args, **kwargs):
        self._data = dict(*args, **kwargs)
        self._hash = None

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __hash__(self):
        if self._hash is None:
            self._hash = hash(frozenset(self._data.items()))
        return self._hash

    def __repr__(self) -> str:
        return f"FrozenMap({self._data!r})"

    def set(self, key, value) -> "FrozenMap":
        data = dict(self._data)
        data[key] = value
        return FrozenMap(data)


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str          # ISO calendar date, e.g. "2025-09-01"
    type: EntryType
    amount: float      # always > 0, direction comes from type
    category: str
    description: str = ""
    recurring: bool = False
    notes: str = ""

    @property
    def month_key(self) -> str:
        return self.date[:7]


@dataclass(frozen=True)
class ExtraEntry:
    id: str
    type: EntryType
    category: str
    amount: float
    description: str = ""


@dataclass(frozen=True)
class MonthBudgetPlan:
    locked: bool
    income: FrozenMap
    expense: FrozenMap
    extras: tuple[ExtraEntry, ...] = ()

    def section(self, entry_type: EntryType) -> FrozenMap:
        return self.income if entry_type == EntryType.INCOME else self.expense


@dataclass(frozen=True)
class CustomCategory:
    name: str
    type: EntryType


@dataclass(frozen=True)
class TaxInput:
    gross_income: float = 0.0
    income_mode: IncomeMode = IncomeMode.MONTHLY
    pension_rate: float = 0.0   # percent
    include_nhf: bool = False
    nhf_rate: float = DEFAULT_NHF_RATE  # percent
    annual_rent_paid: float = 0.0


@dataclass(frozen=True)
class TaxBandCharge:
    lower: float
    upper: Optional[float]  # None for the open-ended top band
    rate: float
    taxable: float
    tax: float


@dataclass(frozen=True)
class TaxResult:
    regime: TaxRegime
    gross: float
    pension: float
    nhf: float
    adjusted_gross: float
    cra: float
    rent_paid: float
    rent_relief: float
    relief: float
    taxable_income: float
    tax: float
    effective_rate: float
    net_annual: float
    net_monthly: float
    monthly_tax: float
    bands: tuple[TaxBandCharge, ...] = ()

    @property
    def total_deductions(self) -> float:
        return self.pension + self.nhf + self.relief


@dataclass(frozen=True)
class PieSlice:
    name: str
    value: float


@dataclass(frozen=True)
class VarianceRow:
    category: str
    type: EntryType
    planned: float
    actual: float
    variance: float      # positive is favourable for both types
    progress: float      # actual as % of planned, capped at 150
    unfavorable: bool

    @property
    def bar_percent(self) -> float:
        return min(self.progress, 100.0)

    @property
    def over(self) -> bool:
        return self.type == EntryType.EXPENSE and self.unfavorable

    @property
    def under(self) -> bool:
        return self.type == EntryType.INCOME and self.unfavorable


@dataclass(frozen=True)
class AggregateResult:
    scope: Scope
    anchor: str
    label: str
    months: tuple[str, ...]
    transactions: tuple[Transaction, ...]
    actual_income: FrozenMap
    actual_expense: FrozenMap
    planned_income: FrozenMap
    planned_expense: FrozenMap
    total_actual_income: float
    total_actual_expense: float
    total_planned_income: float
    total_planned_expense: float
    net_actual: float
    has_plan: bool
    pie: tuple[PieSlice, ...] = ()
    expense_rows: tuple[VarianceRow, ...] = ()
    income_rows: tuple[VarianceRow, ...] = ()

    @property
    def planned_net(self) -> float:
        return self.total_planned_income - self.total_planned_expense


@dataclass(frozen=True)
class DashboardView:
    aggregate: AggregateResult
    month_transactions: tuple[Transaction, ...] = ()
    anchor_plan: Optional[MonthBudgetPlan] = None
    alerts: tuple[str, ...] = ()


@dataclass(frozen=True)
class AppState:
    """Everything the app persists, as one hashable snapshot."""

    transactions: tuple[Transaction, ...] = ()
    plans: FrozenMap = FrozenMap()
    custom_categories: tuple[CustomCategory, ...] = ()
    tax_input: TaxInput = TaxInput()
