"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger engine unaware of files and paths
2. Use in-memory storage for testing
3. Swap JSON files for a database later
4. Keep the failure policy (what raises, what is only logged) in one contract

The interface is intentionally small: load, save and import a wallet,
and read/write the credentials mapping.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from finance_manager.models.wallet import WalletState


_FORBIDDEN_LOGIN_CHARS = ("/", "\\", "\0")


class WalletStorageInterface(ABC):
    """
    Abstract interface for wallet storage operations.

    Any storage implementation (JSON files, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self, login: str) -> WalletState:
        """
        Load the stored wallet for a login.

        Args:
            login: The wallet owner's login

        Returns:
            The stored wallet, or an empty wallet if nothing is stored.
            A stored wallet that cannot be decoded is logged and replaced
            by an empty wallet; this method does not raise for it.
        """
        pass

    @abstractmethod
    def save(
        self,
        login: str,
        wallet: WalletState,
        strict: Optional[bool] = None,
    ) -> bool:
        """
        Overwrite the stored wallet for a login.

        Args:
            login: The wallet owner's login
            wallet: The wallet snapshot to store
            strict: Raise on failure instead of only logging it.
                    None means "use the configured default".

        Returns:
            True if saved, False if the write failed (non-strict mode)

        Raises:
            PersistenceFailure: If the write failed in strict mode
        """
        pass

    @abstractmethod
    def import_from(self, source: Path) -> WalletState:
        """
        Decode an external wallet file.

        Does not write anything: the caller stores the result under
        whichever login it belongs to.

        Args:
            source: Path to a wallet document

        Returns:
            The decoded wallet

        Raises:
            UnsupportedWalletFormatError: If the content is not a wallet
        """
        pass

    @abstractmethod
    def location(self, login: str) -> str:
        """
        Human-readable description of where a login's wallet is stored.
        """
        pass

    def check_login(self, login: str) -> None:
        """
        Refuse logins that cannot name a wallet.

        A login becomes part of a storage key (a file name for file-backed
        storage), so it must not contain path separators or start with a dot.
        Backends with further restrictions extend this.

        Raises:
            InvalidLoginError: If the login cannot be used
        """
        if login.startswith(".") or any(ch in login for ch in _FORBIDDEN_LOGIN_CHARS):
            raise InvalidLoginError(f"Login {login!r} cannot be used as a wallet name")


class CredentialsStorageInterface(ABC):
    """
    Abstract interface for the login -> password hash mapping.
    """

    @abstractmethod
    def load_credentials(self) -> dict[str, str]:
        """
        Load all stored credentials.

        Returns:
            Mapping of login to password hash; empty if nothing is stored
            or the store cannot be read
        """
        pass

    @abstractmethod
    def save_credentials(self, credentials: dict[str, str]) -> bool:
        """
        Overwrite the stored credentials.

        Returns:
            True if saved successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class UnsupportedWalletFormatError(StorageError):
    """Content could not be decoded as a wallet."""
    pass


class PersistenceFailure(StorageError):
    """A wallet or credentials write failed."""
    pass


class InvalidLoginError(StorageError):
    """Login cannot be used to name a stored wallet."""
    pass
