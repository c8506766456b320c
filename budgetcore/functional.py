from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Callable, Generic, Iterable, Mapping, Optional, TypeVar
from uuid import uuid4

from budgetcore.domain import CustomCategory, EntryType, MonthBudgetPlan, Transaction
from budgetcore.formatting import parse_currency_input

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


@dataclass(frozen=True)
class Some(Maybe[T]):
    value: T

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self.value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self.value)

    def get_or_else(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return self

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self.value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self.value)

    def get_or_else(self, default: T) -> T:
        return self.value

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self.error


def safe_plan(plans: Mapping[str, MonthBudgetPlan], month: str) -> Maybe[MonthBudgetPlan]:
    plan = plans.get(month)
    return Some(plan) if plan is not None else Nothing()


def safe_transaction(trans: Iterable[Transaction], tx_id: str) -> Maybe[Transaction]:
    for t in trans:
        if t.id == tx_id:
            return Some(t)
    return Nothing()


def validate_transaction(
    t: Transaction, customs: Iterable[CustomCategory] = ()
) -> Either[dict, Transaction]:
    # local import: categories depends on this module for Either
    from budgetcore.categories import categories_for

    if t.amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": "Amount must be greater than zero",
            "amount": t.amount,
        })

    try:
        date.fromisoformat(t.date)
    except (TypeError, ValueError):
        return Left({
            "error": "invalid_date",
            "message": f"Date {t.date!r} is not an ISO calendar date",
            "date": t.date,
        })

    if t.category not in categories_for(t.type, customs):
        return Left({
            "error": "unknown_category",
            "message": f"{t.type.value.title()} category {t.category} does not exist",
            "category": t.category,
            "type": t.type.value,
        })

    return Right(t)


def create_transaction(
    entry_type: str,
    amount,
    category: str,
    on: Optional[str] = None,
    description: str = "",
    recurring: bool = False,
    notes: str = "",
    customs: Iterable[CustomCategory] = (),
    today: Optional[date] = None,
    id_factory: Callable[[], str] = lambda: str(uuid4()),
) -> Either[dict, Transaction]:
    """Build a transaction from raw form values.

    ``amount`` may be user text ("12,500") or a number. A blank description
    falls back to "Income"/"Expense" and a missing date to today.
    """
    try:
        kind = EntryType(entry_type)
    except ValueError:
        return Left({
            "error": "invalid_type",
            "message": f"Transaction type {entry_type!r} must be income or expense",
            "type": entry_type,
        })

    value = parse_currency_input(amount)
    t = Transaction(
        id=id_factory(),
        date=on or (today or date.today()).isoformat(),
        type=kind,
        amount=value,
        category=category,
        description=(description or "").strip() or kind.value.title(),
        recurring=bool(recurring),
        notes=(notes or "").strip(),
    )
    return validate_transaction(t, customs)
