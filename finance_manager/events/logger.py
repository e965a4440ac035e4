"""
Ledger Event Logger

DESIGN DECISION: Every wallet mutation and every storage outcome is logged.
This provides:
1. Traceability of what happened to a wallet and when
2. An operator-visible channel for persistence failures
3. An operator-visible channel for budget alerts

The event logger:
- Is synchronous, like the rest of the ledger
- Never raises into the caller (a broken log must not undo a committed change)
- Supports correlation IDs to tie both sides of a transfer together
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_manager.models.alerts import Alert
from finance_manager.models.events import EventSeverity, LedgerEvent, LedgerEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class EventLogger:
    """
    Central ledger event logging service.

    Writes every LedgerEvent to the structured log with a level
    matching its severity.
    """

    def __init__(self, logger_name: str = "finance_manager"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: LedgerEvent) -> bool:
        """
        Log a ledger event.

        Returns False if the log write itself failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (EventSeverity.ERROR, EventSeverity.CRITICAL):
                self._logger.error("ledger_event", **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception as e:
            print(f"WARNING: Failed to write ledger event: {e}", file=sys.stderr)
            return False

        return True

    def log_alerts(self, login: str, alerts: list[Alert]) -> None:
        """Report each alert on the operator channel."""
        for alert in alerts:
            self.log(LedgerEventBuilder.alert_raised(
                login=login,
                kind=alert.kind.value,
                message=alert.message,
                category=alert.category,
                amount=str(alert.amount),
            ))

    def log_save_failed(
        self,
        login: str,
        error_message: str,
        location: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a wallet that could not be written, with where it was headed."""
        event = LedgerEventBuilder.wallet_save_failed(login, error_message, location)
        event.correlation_id = correlation_id
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-wallet action (e.g., a transfer).
    Pass it through all subsequent events.
    """
    return uuid4()
