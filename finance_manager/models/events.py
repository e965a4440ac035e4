"""
Ledger Event Models for Finance Manager

Every significant action in the system emits an event to the structured log.
This provides:
1. Traceability of every wallet mutation
2. Debugging information when a save or load goes wrong
3. A visible channel for budget alerts

DESIGN DECISION: Events go to the log stream only. The ledger itself
(the operation list) is the record of what happened to the money.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """
    Types of events we log.

    Every ledger operation and every storage outcome has its own event type.
    """
    # Ledger mutations
    INCOME_ADDED = "income_added"
    EXPENSE_ADDED = "expense_added"
    TRANSFER_COMPLETED = "transfer_completed"
    TRANSFER_FAILED = "transfer_failed"

    # Budgets and categories
    BUDGET_SET = "budget_set"
    BUDGET_LIMIT_CHANGED = "budget_limit_changed"
    BUDGET_DELETED = "budget_deleted"
    CATEGORY_RENAMED = "category_renamed"

    # Alerts
    ALERT_RAISED = "alert_raised"

    # Persistence
    WALLET_LOADED = "wallet_loaded"
    WALLET_LOAD_FAILED = "wallet_load_failed"
    WALLET_SAVED = "wallet_saved"
    WALLET_SAVE_FAILED = "wallet_save_failed"
    WALLET_IMPORTED = "wallet_imported"

    # Users
    USER_REGISTERED = "user_registered"
    USER_LOGGED_IN = "user_logged_in"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class LedgerEvent(BaseModel):
    """
    A single ledger event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: EventSeverity = Field(
        default=EventSeverity.INFO,
        description="Event severity"
    )

    # Whose wallet is this about?
    login: Optional[str] = Field(
        default=None,
        description="Login of the wallet owner"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'operation', 'budget', 'wallet')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - both sides of a transfer share one
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "login": self.login,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.income_added(login, operation_id, amount, category)
        event = LedgerEventBuilder.wallet_save_failed(login, error)
    """

    @staticmethod
    def income_added(
        login: str,
        operation_id: UUID,
        amount: str,
        category: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INCOME_ADDED,
            login=login,
            entity_type="operation",
            entity_id=operation_id,
            description=f"Income added: {amount} ({category})",
            details={"amount": amount, "category": category},
        )

    @staticmethod
    def expense_added(
        login: str,
        operation_id: UUID,
        amount: str,
        category: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_ADDED,
            login=login,
            entity_type="operation",
            entity_id=operation_id,
            description=f"Expense added: {amount} ({category})",
            details={"amount": amount, "category": category},
        )

    @staticmethod
    def transfer_completed(
        from_login: str,
        to_login: str,
        amount: str,
        correlation_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSFER_COMPLETED,
            login=from_login,
            entity_type="transfer",
            correlation_id=correlation_id,
            description=f"Transfer of {amount} from {from_login} to {to_login}",
            details={"from": from_login, "to": to_login, "amount": amount},
        )

    @staticmethod
    def transfer_failed(
        from_login: str,
        to_login: str,
        amount: str,
        error_message: str,
        correlation_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSFER_FAILED,
            severity=EventSeverity.ERROR,
            login=from_login,
            entity_type="transfer",
            correlation_id=correlation_id,
            description=f"Transfer from {from_login} to {to_login} rolled back",
            details={"from": from_login, "to": to_login, "amount": amount},
            error_message=error_message,
        )

    @staticmethod
    def budget_changed(
        event_type: LedgerEventType,
        login: str,
        category: str,
        limit: Optional[str] = None,
    ) -> LedgerEvent:
        details: dict[str, Any] = {"category": category}
        if limit is not None:
            details["limit"] = limit
        return LedgerEvent(
            event_type=event_type,
            login=login,
            entity_type="budget",
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {category}",
            details=details,
        )

    @staticmethod
    def category_renamed(
        login: str,
        old_name: str,
        new_name: str,
        operations_retagged: int,
        budget_moved: bool,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.CATEGORY_RENAMED,
            login=login,
            entity_type="category",
            description=f"Category renamed: {old_name} -> {new_name}",
            details={
                "old_name": old_name,
                "new_name": new_name,
                "operations_retagged": operations_retagged,
                "budget_moved": budget_moved,
            },
        )

    @staticmethod
    def alert_raised(
        login: str,
        kind: str,
        message: str,
        category: Optional[str],
        amount: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ALERT_RAISED,
            severity=EventSeverity.WARNING,
            login=login,
            entity_type="alert",
            description=message,
            details={"kind": kind, "category": category, "amount": amount},
        )

    @staticmethod
    def wallet_loaded(login: str, operation_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WALLET_LOADED,
            severity=EventSeverity.DEBUG,
            login=login,
            entity_type="wallet",
            description=f"Wallet loaded with {operation_count} operations",
            details={"operation_count": operation_count},
        )

    @staticmethod
    def wallet_load_failed(login: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WALLET_LOAD_FAILED,
            severity=EventSeverity.WARNING,
            login=login,
            entity_type="wallet",
            description="Stored wallet could not be decoded, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def wallet_saved(login: str, path: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WALLET_SAVED,
            severity=EventSeverity.DEBUG,
            login=login,
            entity_type="wallet",
            description=f"Wallet saved to {path}",
            details={"path": path},
        )

    @staticmethod
    def wallet_save_failed(
        login: str,
        error_message: str,
        location: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WALLET_SAVE_FAILED,
            severity=EventSeverity.ERROR,
            login=login,
            entity_type="wallet",
            description="Wallet could not be saved",
            details={"location": location} if location else {},
            error_message=error_message,
        )

    @staticmethod
    def wallet_imported(login: str, source: str, operation_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WALLET_IMPORTED,
            login=login,
            entity_type="wallet",
            description=f"Wallet imported from {source}",
            details={"source": source, "operation_count": operation_count},
        )

    @staticmethod
    def user_registered(login: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.USER_REGISTERED,
            login=login,
            entity_type="user",
            description=f"User registered: {login}",
        )

    @staticmethod
    def user_logged_in(login: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.USER_LOGGED_IN,
            login=login,
            entity_type="user",
            description=f"User logged in: {login}",
        )
