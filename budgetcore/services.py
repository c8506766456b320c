"""Application-state holder used by the presentation layer.

The engine functions stay pure and take state as parameters. ``BudgetService``
owns the current ``AppState`` snapshot, swaps in a new one on every change and
writes it through to an optional store.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from budgetcore import categories, plans, storage, transforms
from budgetcore.domain import (
    AppState,
    DashboardView,
    EntryType,
    FrozenMap,
    Scope,
    TaxInput,
    TaxRegime,
    TaxResult,
)
from budgetcore.functional import Either, Left, Right, create_transaction, safe_plan, safe_transaction
from budgetcore.tax import compute_tax
from budgetcore.views import recompute

logger = logging.getLogger(__name__)


class BudgetService:
    """Facade over the engine for one user's local data."""

    def __init__(
        self,
        state: Optional[AppState] = None,
        store: Optional[storage.JsonStateStore] = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.today = today
        if state is None:
            state = store.load() if store is not None else AppState()
        self.state = state

    def _commit(self, state: AppState, action: str) -> AppState:
        self.state = state
        logger.info("%s (transactions=%d, plans=%d)", action, len(state.transactions), len(state.plans))
        if self.store is not None:
            try:
                self.store.save(state)
            except OSError as e:
                logger.error("Could not persist state after %s: %s", action, e)
        return state

    # --- transactions

    def add_transaction(self, entry_type: str, amount, category: str, **fields) -> Either[dict, AppState]:
        result = create_transaction(
            entry_type,
            amount,
            category,
            customs=self.state.custom_categories,
            today=self.today(),
            **fields,
        )
        if result.is_left():
            logger.warning("Rejected transaction: %s", result.get_error()["message"])
            return result
        t = result.get_or_else(None)
        state = replace(self.state, transactions=transforms.add_transaction(self.state.transactions, t))
        return Right(self._commit(state, f"Added {t.type.value} {t.id}"))

    def delete_transaction(self, tx_id: str) -> AppState:
        if safe_transaction(self.state.transactions, tx_id).is_none():
            logger.warning("No transaction %s to delete", tx_id)
            return self.state
        state = replace(self.state, transactions=transforms.delete_transaction(self.state.transactions, tx_id))
        return self._commit(state, f"Deleted transaction {tx_id}")

    # --- custom categories

    def add_category(self, name: str, entry_type: EntryType) -> Either[dict, AppState]:
        result = categories.add_custom_category(self.state.custom_categories, name, EntryType(entry_type))
        return result.map(
            lambda customs: self._commit(replace(self.state, custom_categories=customs), f"Added category {name}")
        )

    def delete_category(self, name: str, entry_type: EntryType) -> Either[dict, AppState]:
        result = categories.delete_custom_category(
            self.state.custom_categories, self.state.transactions, name, EntryType(entry_type)
        )
        if result.is_left():
            logger.info("Category %s not deleted: %s", name, result.get_error()["error"])
        return result.map(
            lambda customs: self._commit(replace(self.state, custom_categories=customs), f"Deleted category {name}")
        )

    # --- plans

    def _update_plan(self, month: str, updater, action: str) -> AppState:
        new_plans = plans.update_plan(self.state.plans, month, updater)
        return self._commit(replace(self.state, plans=new_plans), action)

    def open_plan(self, month: str):
        new_plans, plan = plans.ensure_plan(self.state.plans, month)
        if new_plans is not self.state.plans:
            self._commit(replace(self.state, plans=new_plans), f"Created plan {month}")
        return plan

    def set_plan_amount(self, month: str, section: EntryType, category: str, amount) -> AppState:
        return self._update_plan(
            month,
            lambda p: plans.set_category_amount(p, section, category, amount),
            f"Set {month} {category}",
        )

    def apply_default_budgets(self, month: str) -> AppState:
        return self._update_plan(month, plans.apply_default_budgets, f"Applied default budgets to {month}")

    def toggle_lock(self, month: str) -> AppState:
        return self._update_plan(month, plans.toggle_lock, f"Toggled lock on {month}")

    def add_extra(
        self, month: str, entry_type: EntryType, category: str, amount, description: str = ""
    ) -> Either[dict, AppState]:
        locked = safe_plan(self.state.plans, month).map(lambda p: p.locked).get_or_else(False)
        if not locked:
            return Left({
                "error": "plan_not_locked",
                "message": f"Lock the {month} plan before recording extra entries",
                "month": month,
            })
        before = self.state.plans[month]
        after = plans.add_extra(before, entry_type, category, amount, description)
        if after is before:
            return Left({
                "error": "invalid_amount",
                "message": "Amount must be greater than zero",
                "amount": amount,
            })
        return Right(self._commit(
            replace(self.state, plans=self.state.plans.set(month, after)), f"Added extra to {month}"
        ))

    def remove_extra(self, month: str, extra_id: str) -> AppState:
        if month not in self.state.plans:
            return self.state
        return self._update_plan(month, lambda p: plans.remove_extra(p, extra_id), f"Removed extra {extra_id}")

    # --- tax

    def set_tax_input(self, tax_input: TaxInput) -> AppState:
        return self._commit(replace(self.state, tax_input=tax_input), "Updated tax input")

    def tax(self, regime: TaxRegime = TaxRegime.CURRENT) -> TaxResult:
        return compute_tax(regime, self.state.tax_input)

    # --- views

    def dashboard(self, scope: Scope, anchor: str) -> DashboardView:
        return recompute(self.state, Scope(scope), anchor, self.today())

    # --- import / export

    def export_json(self) -> str:
        return storage.dumps_document(self.state.transactions, self.state.plans, exported_at=datetime.now())

    def export_csv(self) -> str:
        return storage.export_transactions_csv(self.state.transactions)

    def import_json(self, text: str) -> Either[dict, AppState]:
        try:
            transactions, new_plans = storage.import_document(text, self.state.transactions, self.state.plans)
        except storage.DocumentError as e:
            logger.warning("Import failed: %s", e)
            return Left({
                "error": "invalid_document",
                "message": "Could not import file. Please upload a valid JSON export.",
                "detail": str(e),
            })
        state = replace(self.state, transactions=transactions, plans=new_plans)
        return Right(self._commit(state, "Imported JSON document"))

    def load_demo_data(self) -> AppState:
        demo = transforms.seed_demo_transactions(self.today())
        return self._commit(replace(self.state, transactions=demo), "Loaded demo transactions")

    def reset_transactions(self) -> AppState:
        return self._commit(replace(self.state, transactions=()), "Cleared transactions")

    def reset_plans(self) -> AppState:
        return self._commit(replace(self.state, plans=FrozenMap()), "Cleared budget plans")
