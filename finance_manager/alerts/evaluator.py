"""
Budget Alert Evaluation

Runs after an operation has been applied and reports, without blocking:

BUDGET CHECK (expenses only, when the category has a budget):
- overrun: spent more than the limit, reports by how much
- near limit: what is left is within `limit * threshold`, reports what is left

NET WORTH CHECK (any operation):
- net negative: total expenses exceed total income, reports the deficit

IMPORTANT: "spent so far" is passed in by the caller, already including the
operation that was just applied. The evaluator never recomputes it.
"""

from decimal import Decimal
from typing import Optional

from finance_manager.config import get_settings
from finance_manager.models.alerts import Alert, AlertKind
from finance_manager.models.wallet import Operation, OperationType, WalletState


class AlertEvaluator:
    """
    Stateless evaluator; the only thing it holds is the near-limit threshold.
    """

    def __init__(self, threshold: Optional[float] = None):
        """
        Args:
            threshold: Near-limit fraction of a budget. Defaults to the
                       configured limit_threshold.
        """
        if threshold is None:
            threshold = get_settings().ledger.limit_threshold
        if not 0 <= threshold <= 1:
            raise ValueError(f"Threshold must be between 0 and 1, got {threshold}")
        self._threshold = Decimal(str(threshold))

    @property
    def threshold(self) -> Decimal:
        return self._threshold

    def evaluate(
        self,
        wallet: WalletState,
        operation: Operation,
        spent_in_category: Decimal,
        total_income: Decimal,
        total_expense: Decimal,
    ) -> list[Alert]:
        """Compute the alerts raised by a just-applied operation."""
        alerts = []

        budget_alert = self._check_budget(wallet, operation, spent_in_category)
        if budget_alert:
            alerts.append(budget_alert)

        if total_expense > total_income:
            alerts.append(Alert(
                kind=AlertKind.NET_NEGATIVE,
                amount=total_expense - total_income,
                total_income=total_income,
                total_expense=total_expense,
            ))

        return alerts

    def _check_budget(
        self,
        wallet: WalletState,
        operation: Operation,
        spent_in_category: Decimal,
    ) -> Optional[Alert]:
        if operation.type != OperationType.EXPENSE:
            return None

        budget = wallet.budgets.get(operation.category)
        if budget is None:
            return None

        remaining = budget.limit - spent_in_category
        if remaining < 0:
            return Alert(
                kind=AlertKind.OVERRUN,
                category=budget.category,
                amount=-remaining,
                limit=budget.limit,
            )
        if remaining <= budget.limit * self._threshold:
            return Alert(
                kind=AlertKind.NEAR_LIMIT,
                category=budget.category,
                amount=remaining,
                limit=budget.limit,
            )
        return None
