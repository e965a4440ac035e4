"""
Storage Services Package

Provides abstract interfaces and concrete implementations for wallet storage.
Implements JSON files as the backend, plus an in-memory backend for tests.
"""

from finance_manager.services.storage.interface import (
    CredentialsStorageInterface,
    InvalidLoginError,
    PersistenceFailure,
    StorageError,
    UnsupportedWalletFormatError,
    WalletStorageInterface,
)
from finance_manager.services.storage.codec import decode_wallet, encode_wallet
from finance_manager.services.storage.json_files import (
    JsonFileCredentialsStorage,
    JsonFileWalletStorage,
)
from finance_manager.services.storage.memory import (
    InMemoryCredentialsStorage,
    InMemoryWalletStorage,
)

__all__ = [
    # Interfaces
    "CredentialsStorageInterface",
    "WalletStorageInterface",
    # Exceptions
    "InvalidLoginError",
    "PersistenceFailure",
    "StorageError",
    "UnsupportedWalletFormatError",
    # Encoding
    "decode_wallet",
    "encode_wallet",
    # JSON file implementation
    "JsonFileCredentialsStorage",
    "JsonFileWalletStorage",
    # In-memory implementation
    "InMemoryCredentialsStorage",
    "InMemoryWalletStorage",
]
