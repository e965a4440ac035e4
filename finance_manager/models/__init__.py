"""
Data Models Package

This package contains all Pydantic models used in the Finance Manager system.
All data flowing through the system must conform to these schemas.
"""

from finance_manager.models.wallet import (
    UNCATEGORIZED,
    Budget,
    Operation,
    OperationType,
    User,
    WalletState,
)
from finance_manager.models.alerts import Alert, AlertKind
from finance_manager.models.reports import (
    BudgetStatus,
    CategoryReport,
    TransferReceipt,
    WalletSummary,
)
from finance_manager.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Wallet models
    "UNCATEGORIZED",
    "Budget",
    "Operation",
    "OperationType",
    "User",
    "WalletState",
    # Alerts
    "Alert",
    "AlertKind",
    # Reports
    "BudgetStatus",
    "CategoryReport",
    "TransferReceipt",
    "WalletSummary",
    # Events
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
