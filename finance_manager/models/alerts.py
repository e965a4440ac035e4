"""
Alert Models

Alerts are informational. They are produced after a mutation has already
been applied and never block it.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AlertKind(str, Enum):
    """What the alert is about."""
    OVERRUN = "overrun"            # Spent more than the category budget
    NEAR_LIMIT = "near_limit"      # Remaining budget inside the threshold band
    NET_NEGATIVE = "net_negative"  # Total expenses exceed total income


class Alert(BaseModel):
    """A single budget or net-worth notification."""

    kind: AlertKind
    category: Optional[str] = Field(
        default=None,
        description="Category the alert concerns (budget alerts only)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Magnitude: overrun, remaining budget, or deficit"
    )
    limit: Optional[Decimal] = Field(
        default=None,
        description="Budget limit (budget alerts only)"
    )
    total_income: Optional[Decimal] = None
    total_expense: Optional[Decimal] = None

    @property
    def message(self) -> str:
        """Human-readable line for the operator."""
        if self.kind == AlertKind.OVERRUN:
            return f"Budget for category '{self.category}' exceeded by {self.amount:.2f}"
        if self.kind == AlertKind.NEAR_LIMIT:
            return (
                f"Budget for category '{self.category}' is close to its limit: "
                f"{self.amount:.2f} remaining"
            )
        return (
            f"Total expenses ({self.total_expense:.2f}) exceed total income "
            f"({self.total_income:.2f}): deficit of {self.amount:.2f}"
        )
