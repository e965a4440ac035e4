"""
JSON File Storage Implementation

DESIGN DECISION: Each user's wallet is a single JSON file, <login>.json,
inside the data directory, next to a credentials.json mapping. Because:
1. Users can read, back up and hand-edit their own ledger
2. No database setup required
3. Importing a wallet is just pointing at another file

TRADEOFFS:
- Last writer wins on a given login (no cross-process locking)
- No multi-file transactions (the ledger engine rolls back in memory
  and rewrites snapshots instead)

Every write goes to a temporary file in the same directory and is then
renamed over the destination, so a reader never sees a half-written wallet.
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from finance_manager.config import LedgerSettings, get_settings
from finance_manager.events import EventLogger
from finance_manager.models.events import LedgerEventBuilder
from finance_manager.models.wallet import WalletState
from finance_manager.services.storage.codec import (
    decode_credentials,
    decode_wallet,
    encode_credentials,
    encode_wallet,
)
from finance_manager.services.storage.interface import (
    CredentialsStorageInterface,
    InvalidLoginError,
    PersistenceFailure,
    UnsupportedWalletFormatError,
    WalletStorageInterface,
)


def _write_atomic(path: Path, payload: str, attempts: int) -> None:
    """
    Write payload to path via a temp file + rename, retrying on OSError.
    """
    for attempt in Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.1, min=0, max=2),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    ):
        with attempt:
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise


class JsonFileWalletStorage(WalletStorageInterface):
    """
    File-per-login wallet storage.

    Load failures fall back to an empty wallet, save failures are logged
    and reported through the return value (or raised in strict mode).
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        event_logger: Optional[EventLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._settings = settings or get_settings().ledger
        self._data_dir = Path(data_dir) if data_dir else self._settings.data_dir
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._events = event_logger or EventLogger()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def wallet_path(self, login: str) -> Path:
        """
        Path of the wallet file for a login.

        Raises:
            InvalidLoginError: If the login would name a file outside
                               data_dir or the credentials file
        """
        self.check_login(login)
        return self._candidate_path(login)

    def check_login(self, login: str) -> None:
        super().check_login(login)

        path = self._candidate_path(login)
        if path.name == self._settings.credentials_filename:
            raise InvalidLoginError(f"Login {login!r} is reserved")
        if path.resolve().parent != self._data_dir.resolve():
            raise InvalidLoginError(f"Login {login!r} names a file outside {self._data_dir}")

    def load(self, login: str) -> WalletState:
        """Load a wallet; missing or broken files give an empty wallet."""
        try:
            path = self.wallet_path(login)
        except InvalidLoginError as e:
            self._events.log(LedgerEventBuilder.wallet_load_failed(login, str(e)))
            return WalletState()
        if not path.exists():
            return WalletState()

        try:
            wallet = decode_wallet(path.read_bytes())
        except (OSError, UnsupportedWalletFormatError) as e:
            self._events.log(LedgerEventBuilder.wallet_load_failed(login, str(e)))
            return WalletState()

        self._events.log(LedgerEventBuilder.wallet_loaded(login, len(wallet.operations)))
        return wallet

    def save(
        self,
        login: str,
        wallet: WalletState,
        strict: Optional[bool] = None,
    ) -> bool:
        """Overwrite the wallet file for a login."""
        if strict is None:
            strict = self._settings.raise_on_save_failure

        try:
            path = self.wallet_path(login)
            _write_atomic(path, encode_wallet(wallet), self._settings.save_retry_attempts)
        except (OSError, InvalidLoginError) as e:
            self._events.log_save_failed(login, str(e), self.location(login))
            if strict:
                raise PersistenceFailure(f"Failed to save wallet for {login}: {e}") from e
            return False

        self._events.log(LedgerEventBuilder.wallet_saved(login, str(path)))
        return True

    def import_from(self, source: Path) -> WalletState:
        """Decode an external wallet file without storing it."""
        try:
            payload = Path(source).read_bytes()
        except OSError as e:
            raise UnsupportedWalletFormatError(f"Cannot read wallet file {source}: {e}") from e
        return decode_wallet(payload)

    def location(self, login: str) -> str:
        return str(self._candidate_path(login))

    def _candidate_path(self, login: str) -> Path:
        return self._data_dir / f"{login}{self._settings.wallet_file_suffix}"


class JsonFileCredentialsStorage(CredentialsStorageInterface):
    """
    Credentials stored as one JSON object mapping login to password hash.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._settings = settings or get_settings().ledger
        self._path = Path(path) if path else self._settings.credentials_path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._logger = structlog.get_logger("finance_manager.credentials")

    def load_credentials(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            return decode_credentials(self._path.read_bytes())
        except (OSError, ValidationError) as e:
            self._logger.warning(
                "credentials_load_failed",
                path=str(self._path),
                error=str(e),
            )
            return {}

    def save_credentials(self, credentials: dict[str, str]) -> bool:
        try:
            _write_atomic(
                self._path,
                encode_credentials(credentials),
                self._settings.save_retry_attempts,
            )
            return True
        except OSError as e:
            # Don't raise - the in-memory directory stays authoritative
            self._logger.error(
                "credentials_save_failed",
                path=str(self._path),
                error=str(e),
            )
            return False
