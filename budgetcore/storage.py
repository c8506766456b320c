"""JSON/CSV interchange and the local state file.

The JSON document keeps the client's camelCase layout::

    {"transactions": [...], "budgetPlans": {"2025-01": {...}}, "exportedAt": "..."}

Readers are forgiving: fields of the wrong shape fall back to defaults and
records that cannot be transactions at all are skipped. Only a document that
is not a JSON object raises ``DocumentError``.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional
from uuid import uuid4

from budgetcore.domain import (
    AppState,
    CustomCategory,
    EntryType,
    ExtraEntry,
    FrozenMap,
    IncomeMode,
    MonthBudgetPlan,
    TaxInput,
    Transaction,
)
from budgetcore.formatting import format_plain_number, parse_currency_input
from budgetcore.plans import empty_plan

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("id", "date", "type", "amount", "category", "description", "recurring", "notes")

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class DocumentError(ValueError):
    """Raised when an import document is not a JSON object."""


# --- records -> plain dicts


def transaction_to_dict(t: Transaction) -> dict[str, Any]:
    return {
        "id": t.id,
        "date": t.date,
        "type": t.type.value,
        "amount": t.amount,
        "category": t.category,
        "description": t.description,
        "recurring": t.recurring,
        "notes": t.notes,
    }


def extra_to_dict(e: ExtraEntry) -> dict[str, Any]:
    return {
        "id": e.id,
        "type": e.type.value,
        "category": e.category,
        "amount": e.amount,
        "description": e.description,
    }


def plan_to_dict(plan: MonthBudgetPlan) -> dict[str, Any]:
    return {
        "locked": plan.locked,
        "income": dict(plan.income),
        "expense": dict(plan.expense),
        "extras": [extra_to_dict(e) for e in plan.extras],
    }


def tax_input_to_dict(tax_input: TaxInput) -> dict[str, Any]:
    return {
        "grossIncome": tax_input.gross_income,
        "incomeMode": tax_input.income_mode.value,
        "pensionRate": tax_input.pension_rate,
        "includeNHF": tax_input.include_nhf,
        "nhfRate": tax_input.nhf_rate,
        "annualRentPaid": tax_input.annual_rent_paid,
    }


# --- plain dicts -> records


def _entry_type(raw: Any) -> Optional[EntryType]:
    try:
        return EntryType(raw)
    except ValueError:
        return None


def _text(raw: Any, default: str = "") -> str:
    return raw if isinstance(raw, str) else default


def transaction_from_dict(raw: Any) -> Optional[Transaction]:
    if not isinstance(raw, Mapping):
        return None
    kind = _entry_type(raw.get("type"))
    on = raw.get("date")
    amount = parse_currency_input(raw.get("amount"))
    if kind is None or not isinstance(on, str) or not on or amount <= 0:
        return None
    tx_id = raw.get("id")
    return Transaction(
        id=str(tx_id) if tx_id not in (None, "") else str(uuid4()),
        date=on[:10],
        type=kind,
        amount=amount,
        category=_text(raw.get("category")),
        description=_text(raw.get("description")),
        recurring=raw.get("recurring") is True,
        notes=_text(raw.get("notes")),
    )


def extra_from_dict(raw: Any) -> Optional[ExtraEntry]:
    if not isinstance(raw, Mapping):
        return None
    kind = _entry_type(raw.get("type"))
    amount = parse_currency_input(raw.get("amount"))
    if kind is None or amount <= 0:
        return None
    extra_id = raw.get("id")
    return ExtraEntry(
        id=str(extra_id) if extra_id not in (None, "") else str(uuid4()),
        type=kind,
        category=_text(raw.get("category")),
        amount=amount,
        description=_text(raw.get("description")),
    )


def _amounts(base: FrozenMap, raw: Any) -> FrozenMap:
    merged = dict(base)
    if isinstance(raw, Mapping):
        for cat, value in raw.items():
            if isinstance(cat, str):
                merged[cat] = parse_currency_input(value)
    return FrozenMap(merged)


def plan_from_dict(raw: Any) -> MonthBudgetPlan:
    plan = empty_plan()
    if not isinstance(raw, Mapping):
        return plan
    extras = raw.get("extras")
    return MonthBudgetPlan(
        locked=raw.get("locked") is True,
        income=_amounts(plan.income, raw.get("income")),
        expense=_amounts(plan.expense, raw.get("expense")),
        extras=tuple(
            e for e in (extra_from_dict(x) for x in (extras if isinstance(extras, list) else ()))
            if e is not None
        ),
    )


def plans_from_dict(raw: Any) -> FrozenMap:
    if not isinstance(raw, Mapping):
        return FrozenMap()
    return FrozenMap(
        (month, plan_from_dict(plan))
        for month, plan in raw.items()
        if isinstance(month, str) and _MONTH_KEY.match(month)
    )


def transactions_from_list(raw: Any) -> tuple[Transaction, ...]:
    if not isinstance(raw, list):
        return ()
    parsed = tuple(t for t in (transaction_from_dict(x) for x in raw) if t is not None)
    skipped = len(raw) - len(parsed)
    if skipped:
        logger.warning("Skipped %d malformed transaction record(s)", skipped)
    return parsed


def custom_categories_from_list(raw: Any) -> tuple[CustomCategory, ...]:
    if not isinstance(raw, list):
        return ()
    seen: list[CustomCategory] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        kind = _entry_type(item.get("type"))
        name = _text(item.get("name")).strip()
        if kind is None or not name:
            continue
        category = CustomCategory(name, kind)
        if category not in seen:
            seen.append(category)
    return tuple(seen)


def tax_input_from_dict(raw: Any) -> TaxInput:
    if not isinstance(raw, Mapping):
        return TaxInput()
    defaults = TaxInput()
    try:
        mode = IncomeMode(raw.get("incomeMode"))
    except ValueError:
        mode = defaults.income_mode
    return TaxInput(
        gross_income=parse_currency_input(raw.get("grossIncome")),
        income_mode=mode,
        pension_rate=parse_currency_input(raw.get("pensionRate")),
        include_nhf=raw.get("includeNHF") is True,
        nhf_rate=parse_currency_input(raw["nhfRate"]) if "nhfRate" in raw else defaults.nhf_rate,
        annual_rent_paid=parse_currency_input(raw.get("annualRentPaid")),
    )


# --- documents


def build_document(
    transactions: Iterable[Transaction],
    plans: Mapping[str, MonthBudgetPlan],
    exported_at: Optional[datetime] = None,
) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "transactions": [transaction_to_dict(t) for t in transactions],
        "budgetPlans": {month: plan_to_dict(plans[month]) for month in sorted(plans)},
    }
    if exported_at is not None:
        doc["exportedAt"] = exported_at.isoformat()
    return doc


def dumps_document(
    transactions: Iterable[Transaction],
    plans: Mapping[str, MonthBudgetPlan],
    exported_at: Optional[datetime] = None,
) -> str:
    return json.dumps(build_document(transactions, plans, exported_at), indent=2, ensure_ascii=False)


def parse_document(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise DocumentError(f"Not a valid JSON export: {e}") from e
    if not isinstance(data, dict):
        raise DocumentError("Export document must be a JSON object")
    return data


def import_document(
    text: str,
    transactions: tuple[Transaction, ...],
    plans: FrozenMap,
) -> tuple[tuple[Transaction, ...], FrozenMap]:
    """Apply an exported document on top of the current data.

    A ``transactions`` list replaces the current transactions; ``budgetPlans``
    are merged month by month with the document winning.
    """
    data = parse_document(text)
    if isinstance(data.get("transactions"), list):
        transactions = transactions_from_list(data["transactions"])
    if isinstance(data.get("budgetPlans"), Mapping):
        merged = dict(plans)
        merged.update(plans_from_dict(data["budgetPlans"]))
        plans = FrozenMap(merged)
    return transactions, plans


def state_to_dict(state: AppState) -> dict[str, Any]:
    doc = build_document(state.transactions, state.plans)
    doc["customCategories"] = [{"name": c.name, "type": c.type.value} for c in state.custom_categories]
    doc["taxInput"] = tax_input_to_dict(state.tax_input)
    return doc


def state_from_dict(data: Mapping[str, Any]) -> AppState:
    return AppState(
        transactions=transactions_from_list(data.get("transactions")),
        plans=plans_from_dict(data.get("budgetPlans")),
        custom_categories=custom_categories_from_list(data.get("customCategories")),
        tax_input=tax_input_from_dict(data.get("taxInput")),
    )


# --- csv


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, EntryType):
        return value.value
    if isinstance(value, float):
        return format_plain_number(value)
    return str(value)


def export_transactions_csv(transactions: Iterable[Transaction]) -> str:
    """One quoted row per transaction under a fixed header."""
    out = io.StringIO()
    out.write(",".join(CSV_COLUMNS) + "\n")
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for t in transactions:
        writer.writerow([_csv_value(getattr(t, col)) for col in CSV_COLUMNS])
    return out.getvalue().rstrip("\n")


# --- local state file


class JsonStateStore:
    """Persists the whole ``AppState`` as one JSON blob; last write wins.

    Writes go to a sibling temp file that then replaces the state file, so a
    crash mid-save leaves the previous file intact. A file that cannot be read
    is moved aside to ``<name>.corrupt`` before an empty state is returned, so
    the next save never overwrites it.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def _quarantine(self) -> None:
        try:
            os.replace(self.path, self.corrupt_path)
        except OSError as e:
            logger.error("Could not move unreadable state file %s aside: %s", self.path, e)
            raise
        logger.warning("Moved unreadable state file to %s", self.corrupt_path)

    def load(self) -> AppState:
        if not self.path.exists():
            logger.info("No state file at %s, starting empty", self.path)
            return AppState()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Could not read state file %s: %s", self.path, e)
            self._quarantine()
            return AppState()
        if not isinstance(data, dict):
            logger.error("State file %s does not hold a JSON object", self.path)
            self._quarantine()
            return AppState()
        return state_from_dict(data)

    def save(self, state: AppState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(state_to_dict(state), handle, indent=2, ensure_ascii=False)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, self.path)
        logger.debug("Saved state to %s", self.path)
