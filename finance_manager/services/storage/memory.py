"""
In-Memory Storage Implementation

Keeps encoded wallet documents in a dict, so a save/load cycle goes through
exactly the same encoding as the file backend. Used by tests and by
embedders that do not want files on disk.
"""

from pathlib import Path
from threading import Lock
from typing import Optional

from finance_manager.events import EventLogger
from finance_manager.models.events import LedgerEventBuilder
from finance_manager.models.wallet import WalletState
from finance_manager.services.storage.codec import decode_wallet, encode_wallet
from finance_manager.services.storage.interface import (
    CredentialsStorageInterface,
    PersistenceFailure,
    UnsupportedWalletFormatError,
    WalletStorageInterface,
)


class InMemoryWalletStorage(WalletStorageInterface):
    """Wallet documents held in memory, keyed by login."""

    def __init__(
        self,
        event_logger: Optional[EventLogger] = None,
        raise_on_save_failure: bool = False,
    ):
        self._documents: dict[str, str] = {}
        self._lock = Lock()
        self._events = event_logger or EventLogger()
        self._raise_on_save_failure = raise_on_save_failure

    def _write(self, login: str, payload: str) -> None:
        """Store an encoded wallet. Subclasses may raise OSError."""
        with self._lock:
            self._documents[login] = payload

    def load(self, login: str) -> WalletState:
        with self._lock:
            payload = self._documents.get(login)
        if payload is None:
            return WalletState()

        try:
            return decode_wallet(payload)
        except UnsupportedWalletFormatError as e:
            self._events.log(LedgerEventBuilder.wallet_load_failed(login, str(e)))
            return WalletState()

    def save(
        self,
        login: str,
        wallet: WalletState,
        strict: Optional[bool] = None,
    ) -> bool:
        if strict is None:
            strict = self._raise_on_save_failure

        try:
            self._write(login, encode_wallet(wallet))
        except OSError as e:
            self._events.log_save_failed(login, str(e), self.location(login))
            if strict:
                raise PersistenceFailure(f"Failed to save wallet for {login}: {e}") from e
            return False
        return True

    def import_from(self, source: Path) -> WalletState:
        try:
            payload = Path(source).read_bytes()
        except OSError as e:
            raise UnsupportedWalletFormatError(f"Cannot read wallet file {source}: {e}") from e
        return decode_wallet(payload)

    def location(self, login: str) -> str:
        return f"memory://{login}"

    def put_raw(self, login: str, payload: str) -> None:
        """Store a raw document as-is (for simulating corrupt data)."""
        with self._lock:
            self._documents[login] = payload

    def get_raw(self, login: str) -> Optional[str]:
        with self._lock:
            return self._documents.get(login)


class InMemoryCredentialsStorage(CredentialsStorageInterface):
    """Credentials mapping held in memory."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._credentials = dict(initial or {})

    def load_credentials(self) -> dict[str, str]:
        return dict(self._credentials)

    def save_credentials(self, credentials: dict[str, str]) -> bool:
        self._credentials = dict(credentials)
        return True
