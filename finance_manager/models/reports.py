"""
Report Models

Read-only views computed from a wallet: overall summary, per-category
breakdown, and the outcome of a transfer.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from finance_manager.models.alerts import Alert
from finance_manager.models.wallet import Operation


class BudgetStatus(BaseModel):
    """How much of a budget has been used."""

    category: str
    limit: Decimal
    spent: Decimal
    remaining: Decimal

    @property
    def is_exceeded(self) -> bool:
        return self.remaining < 0


class WalletSummary(BaseModel):
    """Totals over the whole wallet."""

    login: str
    balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    income_by_category: dict[str, Decimal] = Field(default_factory=dict)
    expense_by_category: dict[str, Decimal] = Field(default_factory=dict)
    budgets: list[BudgetStatus] = Field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense


class CategoryReport(BaseModel):
    """Totals for a single category."""

    category: str
    found: bool = Field(
        ...,
        description="False when no operation or budget uses this category"
    )
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    budget: Optional[BudgetStatus] = None


class TransferReceipt(BaseModel):
    """Both sides of a completed transfer and the alerts each side raised."""

    expense: Operation
    income: Operation
    sender_alerts: list[Alert] = Field(default_factory=list)
    receiver_alerts: list[Alert] = Field(default_factory=list)
