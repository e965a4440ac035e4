"""
Wallet Reports

DESIGN DECISION: Reports are read-only and computed on demand from the
operation list. Nothing here is cached or written back, so a report can
never disagree with the ledger it was built from.
"""

from decimal import Decimal
from typing import Iterable

from finance_manager.ledger import LedgerEngine
from finance_manager.models.reports import BudgetStatus, CategoryReport, WalletSummary
from finance_manager.models.wallet import Budget, OperationType, User


class WalletReporter:
    """
    Builds summaries of a user's wallet.

    GUARANTEES:
    - Only reports amounts present in the wallet
    - Clear "not found" for categories nothing uses
    """

    def __init__(self, engine: LedgerEngine):
        self._engine = engine

    def summary(self, user: User) -> WalletSummary:
        """Totals, per-category breakdowns and budget usage for a wallet."""
        operations = user.wallet.operations
        expense_by_category = self._engine.sum_by_category(operations, OperationType.EXPENSE)

        return WalletSummary(
            login=user.login,
            balance=user.wallet.balance,
            total_income=self._engine.total_income(user),
            total_expense=self._engine.total_expense(user),
            income_by_category=self._engine.sum_by_category(operations, OperationType.INCOME),
            expense_by_category=expense_by_category,
            budgets=[
                self._budget_status(budget, expense_by_category.get(category, Decimal("0")))
                for category, budget in sorted(user.wallet.budgets.items())
            ],
        )

    def category_report(self, user: User, categories: Iterable[str]) -> list[CategoryReport]:
        """One report per requested category, in the order requested."""
        operations = user.wallet.operations
        reports = []

        for category in categories:
            income = self._engine.sum_by_category(operations, OperationType.INCOME, category)
            expense = self._engine.sum_by_category(operations, OperationType.EXPENSE, category)
            budget = user.wallet.budgets.get(category)

            if not income and not expense and budget is None:
                reports.append(CategoryReport(category=category, found=False))
                continue

            spent = expense.get(category, Decimal("0"))
            reports.append(CategoryReport(
                category=category,
                found=True,
                income=income.get(category, Decimal("0")),
                expense=spent,
                budget=self._budget_status(budget, spent) if budget else None,
            ))

        return reports

    def _budget_status(self, budget: Budget, spent: Decimal) -> BudgetStatus:
        return BudgetStatus(
            category=budget.category,
            limit=budget.limit,
            spent=spent,
            remaining=budget.limit - spent,
        )
