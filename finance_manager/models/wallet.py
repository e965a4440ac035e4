"""
Core Data Models for Finance Manager

These models define the strict schemas for a user's ledger.
They are designed to:
1. Enforce type safety at runtime
2. Keep the balance consistent with the operation history
3. Be serializable for the per-user wallet file
4. Reject malformed imports instead of half-loading them

DESIGN DECISION: Amounts are Decimal in memory. On disk an amount is a plain
JSON number when a float holds it exactly, and the exact decimal text (a JSON
string) otherwise. The wallet file stays readable by other tools and nothing
is rounded on the way through a save and load.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)


# Label given to operations recorded without a category.
UNCATEGORIZED = "Uncategorized"

# Largest drift between a stored balance and the operations it summarises
# that is still treated as floating-point residue from another writer.
BALANCE_TOLERANCE = Decimal("0.01")


def _amount_to_json(value: Decimal) -> Union[float, str]:
    """Float when it carries the value exactly, otherwise the decimal text."""
    as_float = float(value)
    if math.isfinite(as_float) and Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


Amount = Annotated[
    Decimal,
    PlainSerializer(_amount_to_json, return_type=Union[float, str], when_used="json"),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class OperationType(str, Enum):
    """Direction of a ledger entry."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


# =============================================================================
# LEDGER ENTRIES
# =============================================================================

class Operation(BaseModel):
    """
    One ledger entry.

    Created once by the ledger engine and appended to a wallet. The category
    is the only field that changes afterwards (category rename); everything
    else, including the timestamp, is fixed at construction.

    A blank or missing category becomes UNCATEGORIZED here, at the single
    point every operation passes through.
    """
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique operation ID"
    )
    type: OperationType = Field(
        ...,
        description="INCOME or EXPENSE"
    )
    amount: Amount = Field(
        ...,
        gt=0,
        description="Positive amount"
    )
    category: str = Field(
        default=UNCATEGORIZED,
        description="Free-text category label"
    )
    description: str = Field(
        default="",
        description="Free-text note"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the operation was created"
    )

    # Transfer provenance
    from_user: Optional[str] = Field(
        default=None,
        alias="fromUser",
        description="Login of the paying side"
    )
    to_user: Optional[str] = Field(
        default=None,
        alias="toUser",
        description="Login of the receiving side"
    )

    @field_validator('category', mode='before')
    @classmethod
    def default_blank_category(cls, v: Any) -> Any:
        """Blank or missing category falls back to the sentinel label."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNCATEGORIZED
        return v

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('timestamp', mode='before')
    @classmethod
    def epoch_seconds(cls, v: Any) -> Any:
        """Fractional epoch seconds arrive as Decimal from the wallet reader."""
        return float(v) if isinstance(v, Decimal) else v

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign it contributes to the balance."""
        return self.amount if self.type == OperationType.INCOME else -self.amount


class Budget(BaseModel):
    """
    A spending limit for one category.

    The limit is not range-checked (zero or negative limits are accepted),
    but the category must be present: it is also the key the budget is
    stored under.
    """
    model_config = ConfigDict(validate_assignment=True)

    category: str = Field(
        ...,
        description="Category this budget applies to"
    )
    limit: Amount = Field(
        ...,
        description="Spending ceiling for the category"
    )

    @field_validator('category')
    @classmethod
    def validate_category(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Budget category must not be blank")
        return v


# =============================================================================
# WALLET
# =============================================================================

class WalletState(BaseModel):
    """
    One user's full ledger: balance, operations and budgets.

    INVARIANT: balance == sum(INCOME amounts) - sum(EXPENSE amounts).
    append() keeps it true incrementally; decoding a stored wallet checks it.

    Operations are kept in the order they were applied.
    Budgets are keyed by category and each key matches its budget's category.
    """

    balance: Amount = Field(
        default=Decimal("0"),
        description="Running total"
    )
    operations: list[Operation] = Field(
        default_factory=list,
        description="Ledger entries in chronological order"
    )
    budgets: dict[str, Budget] = Field(
        default_factory=dict,
        description="Budgets keyed by category"
    )

    @model_validator(mode='after')
    def validate_consistency(self) -> 'WalletState':
        """Check budget keys and the balance against the operation history."""
        for key, budget in self.budgets.items():
            if key != budget.category:
                raise ValueError(
                    f"Budget stored under '{key}' belongs to category '{budget.category}'"
                )

        expected = self.computed_balance()
        if abs(self.balance - expected) > BALANCE_TOLERANCE:
            raise ValueError(
                f"Balance {self.balance} does not match operations total {expected}"
            )
        self.balance = expected
        return self

    def append(self, operation: Operation) -> None:
        """Append an operation and move the balance by its amount."""
        self.operations.append(operation)
        self.balance += operation.signed_amount

    def computed_balance(self) -> Decimal:
        """Balance derived from the operation history."""
        return sum((op.signed_amount for op in self.operations), Decimal("0"))

    def total(self, operation_type: OperationType) -> Decimal:
        """Sum of amounts over operations of one type."""
        return sum(
            (op.amount for op in self.operations if op.type == operation_type),
            Decimal("0"),
        )

    def uses_category(self, category: str) -> bool:
        """Is the category referenced by any operation or budget?"""
        if category in self.budgets:
            return True
        return any(op.category == category for op in self.operations)

    def snapshot(self) -> 'WalletState':
        """Deep copy, used to roll back a failed multi-wallet change."""
        return self.model_copy(deep=True)

    def to_storage_dict(self) -> dict:
        """
        Convert to the wallet file document.

        Returns {balance, operations, budgets} with camelCase provenance
        fields (fromUser, toUser) and JSON-native values.
        """
        return self.model_dump(mode="json", by_alias=True)


class User(BaseModel):
    """
    A user handle: login plus the wallet it exclusively owns while logged in.
    """

    login: str = Field(
        ...,
        min_length=1,
        description="Unique login"
    )
    password_hash: str = Field(
        ...,
        repr=False,
        description="SHA-256 hex digest of the password"
    )
    wallet: WalletState = Field(
        default_factory=WalletState,
        description="The user's ledger"
    )
