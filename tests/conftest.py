"""Shared fixtures: an in-memory ledger with two registered users."""

import pytest

from finance_manager.alerts import AlertEvaluator
from finance_manager.config import LedgerSettings
from finance_manager.directory import UserDirectory
from finance_manager.ledger import LedgerEngine
from finance_manager.services.storage import (
    InMemoryCredentialsStorage,
    InMemoryWalletStorage,
)


class FlakyWalletStorage(InMemoryWalletStorage):
    """In-memory storage whose writes fail for selected logins."""

    def __init__(self):
        super().__init__()
        self.failing: set[str] = set()
        self.writes: list[str] = []

    def _write(self, login: str, payload: str) -> None:
        if login in self.failing:
            raise OSError(f"disk full while writing {login}")
        self.writes.append(login)
        super()._write(login, payload)


@pytest.fixture
def ledger_settings(tmp_path):
    return LedgerSettings(data_dir=tmp_path, save_retry_attempts=1)


@pytest.fixture
def storage():
    return FlakyWalletStorage()


@pytest.fixture
def directory(storage):
    directory = UserDirectory(storage, InMemoryCredentialsStorage())
    directory.register("alice", "alice-pw")
    directory.register("bob", "bob-pw")
    return directory


@pytest.fixture
def engine(directory, storage, ledger_settings):
    return LedgerEngine(
        directory=directory,
        storage=storage,
        evaluator=AlertEvaluator(threshold=0.2),
        settings=ledger_settings,
    )


@pytest.fixture
def alice(directory):
    return directory.find_user("alice")


@pytest.fixture
def bob(directory):
    return directory.find_user("bob")
