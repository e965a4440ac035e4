"""
Application Wiring for Finance Manager

This module ties together the components a driver (CLI, web handler, test)
needs:
1. Storage (JSON files under the data directory, or in memory)
2. The user directory, loaded from storage
3. The ledger engine and the reporter built on it

DESIGN DECISION: Wiring is explicit. The directory is a value returned from
here and passed around, not a module-level global, and it is flushed only
when the driver calls flush_all().
"""

from pathlib import Path
from typing import NamedTuple, Optional

from finance_manager.alerts import AlertEvaluator
from finance_manager.config import get_settings
from finance_manager.directory import UserDirectory
from finance_manager.events import EventLogger, configure_logging
from finance_manager.ledger import LedgerEngine
from finance_manager.queries import WalletReporter
from finance_manager.services.storage import (
    CredentialsStorageInterface,
    InMemoryCredentialsStorage,
    InMemoryWalletStorage,
    JsonFileCredentialsStorage,
    JsonFileWalletStorage,
    WalletStorageInterface,
)


class AppComponents(NamedTuple):
    """Everything a driver needs, already wired together."""
    engine: LedgerEngine
    directory: UserDirectory
    reporter: WalletReporter
    storage: WalletStorageInterface


def create_app_components(
    use_files: bool = True,
    data_dir: Optional[Path] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_files: Whether to persist to JSON files.
                   Set to False for an in-memory ledger (tests, demos).
        data_dir: Override the configured data directory.

    Returns:
        AppComponents(engine, directory, reporter, storage)
    """
    settings = get_settings()
    configure_logging(settings.logging.level)
    ledger_settings = settings.ledger
    event_logger = EventLogger()

    wallet_storage: WalletStorageInterface
    credentials_storage: CredentialsStorageInterface
    if use_files:
        root = Path(data_dir) if data_dir else ledger_settings.data_dir
        wallet_storage = JsonFileWalletStorage(
            data_dir=root,
            event_logger=event_logger,
            settings=ledger_settings,
        )
        credentials_storage = JsonFileCredentialsStorage(
            path=root / ledger_settings.credentials_filename,
            settings=ledger_settings,
        )
    else:
        wallet_storage = InMemoryWalletStorage(
            event_logger=event_logger,
            raise_on_save_failure=ledger_settings.raise_on_save_failure,
        )
        credentials_storage = InMemoryCredentialsStorage()

    directory = UserDirectory(wallet_storage, credentials_storage, event_logger)
    directory.load()

    engine = LedgerEngine(
        directory=directory,
        storage=wallet_storage,
        evaluator=AlertEvaluator(ledger_settings.limit_threshold),
        event_logger=event_logger,
        settings=ledger_settings,
    )

    return AppComponents(
        engine=engine,
        directory=directory,
        reporter=WalletReporter(engine),
        storage=wallet_storage,
    )
