"""
User Directory

The process-wide registry of users and their wallets. It is created once,
populated from storage with load(), handed to whoever needs it, and flushed
explicitly with flush_all() on shutdown. Nothing else holds users globally.

The login -> user mapping is guarded by a lock, so a shutdown hook on one
thread can enumerate users while the command loop on another thread looks
them up or registers new ones.
"""

import hashlib
import hmac
from threading import RLock
from typing import Optional

from finance_manager.events import EventLogger
from finance_manager.ledger.errors import UserNotFoundError
from finance_manager.models.events import LedgerEventBuilder
from finance_manager.models.wallet import User, WalletState
from finance_manager.services.storage import (
    CredentialsStorageInterface,
    InvalidLoginError,
    WalletStorageInterface,
)


class IllegalCredentialsError(Exception):
    """Login or password missing, login taken, or wrong password."""
    pass


def hash_password(password: str) -> str:
    """SHA-256 hex digest of a password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class UserDirectory:
    """
    Registry of users keyed by login.

    Each login maps to exactly one User, which owns exactly one wallet.
    """

    def __init__(
        self,
        wallet_storage: WalletStorageInterface,
        credentials_storage: CredentialsStorageInterface,
        event_logger: Optional[EventLogger] = None,
    ):
        self._wallet_storage = wallet_storage
        self._credentials_storage = credentials_storage
        self._events = event_logger or EventLogger()
        self._lock = RLock()
        self._users: dict[str, User] = {}
        self._credentials: dict[str, str] = {}

    def load(self) -> int:
        """
        Populate the directory from stored credentials and wallets.

        Returns:
            Number of users loaded
        """
        credentials = self._credentials_storage.load_credentials()
        users = {
            login: User(
                login=login,
                password_hash=password_hash,
                wallet=self._wallet_storage.load(login),
            )
            for login, password_hash in credentials.items()
        }
        with self._lock:
            self._credentials.update(credentials)
            self._users.update(users)
        return len(users)

    def register(self, login: str, password: str) -> User:
        """
        Create a user with an empty wallet and persist both.

        Raises:
            IllegalCredentialsError: Blank login/password, a login that cannot
                name a wallet, or a login already taken
        """
        if _is_blank(login) or _is_blank(password):
            raise IllegalCredentialsError("Login or password not provided")

        try:
            self._wallet_storage.check_login(login)
        except InvalidLoginError as e:
            raise IllegalCredentialsError(str(e)) from e

        with self._lock:
            if login in self._credentials:
                raise IllegalCredentialsError(f"User {login} is already registered")

            password_hash = hash_password(password)
            self._credentials[login] = password_hash
            user = User(login=login, password_hash=password_hash, wallet=WalletState())
            self._users[login] = user
            credentials = dict(self._credentials)

        self._credentials_storage.save_credentials(credentials)
        self._wallet_storage.save(login, user.wallet)
        self._events.log(LedgerEventBuilder.user_registered(login))
        return user

    def login(self, login: str, password: str) -> User:
        """
        Authenticate and return the user handle.

        A user already held in memory keeps its in-memory wallet (it may have
        unsaved changes); otherwise the wallet is loaded from storage.

        Raises:
            IllegalCredentialsError: Blank login/password or wrong password
            UserNotFoundError: Unknown login
        """
        if _is_blank(login) or _is_blank(password):
            raise IllegalCredentialsError("Login or password not provided")

        with self._lock:
            stored_hash = self._credentials.get(login)
        if stored_hash is None:
            raise UserNotFoundError(f"User {login} not found")
        if not hmac.compare_digest(stored_hash, hash_password(password)):
            raise IllegalCredentialsError("Wrong password")

        with self._lock:
            user = self._users.get(login)
            if user is None:
                user = User(
                    login=login,
                    password_hash=stored_hash,
                    wallet=self._wallet_storage.load(login),
                )
                self._users[login] = user

        self._events.log(LedgerEventBuilder.user_logged_in(login))
        return user

    def find_user(self, login: str) -> Optional[User]:
        with self._lock:
            return self._users.get(login)

    def exists(self, login: str) -> bool:
        with self._lock:
            return login in self._users

    def all_users(self) -> list[User]:
        """Snapshot of all users, safe to iterate while others register."""
        with self._lock:
            return list(self._users.values())

    def flush_all(self) -> list[str]:
        """
        Save every user's wallet.

        Returns:
            Logins whose wallet could not be saved
        """
        failed = []
        for user in self.all_users():
            if not self._wallet_storage.save(user.login, user.wallet, strict=False):
                failed.append(user.login)
        return failed

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def __contains__(self, login: object) -> bool:
        with self._lock:
            return login in self._users
