"""Ledger mutation engine package."""

from finance_manager.ledger.errors import (
    BudgetNotFoundError,
    CategoryNotFoundError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidImportSourceError,
    LedgerError,
    TransferFailedError,
    UserNotFoundError,
)
from finance_manager.ledger.engine import LedgerEngine

__all__ = [
    "BudgetNotFoundError",
    "CategoryNotFoundError",
    "InvalidAmountError",
    "InvalidCategoryError",
    "InvalidImportSourceError",
    "LedgerEngine",
    "LedgerError",
    "TransferFailedError",
    "UserNotFoundError",
]
