"""
Ledger error taxonomy.

Validation errors are raised before any wallet is touched, so a caller that
catches one can assume nothing changed.
"""

from finance_manager.services.storage.interface import PersistenceFailure


class LedgerError(Exception):
    """Base exception for rejected ledger operations."""
    pass


class InvalidAmountError(LedgerError):
    """Amount is not a positive number."""
    pass


class InvalidCategoryError(LedgerError):
    """Category is blank where one is required."""
    pass


class BudgetNotFoundError(LedgerError):
    """No budget exists for the category."""
    pass


class CategoryNotFoundError(LedgerError):
    """No operation or budget uses the category."""
    pass


class UserNotFoundError(LedgerError):
    """Login is not known to the user directory."""
    pass


class InvalidImportSourceError(LedgerError):
    """Import path is empty, has the wrong extension, or is not a regular file."""
    pass


class TransferFailedError(PersistenceFailure):
    """
    A transfer could not be persisted on both sides.

    Both wallets have been restored to their state before the transfer.
    """

    def __init__(self, from_login: str, to_login: str, message: str):
        self.from_login = from_login
        self.to_login = to_login
        super().__init__(message)
