"""Services package."""

from finance_manager.services.storage import (
    CredentialsStorageInterface,
    InMemoryCredentialsStorage,
    InMemoryWalletStorage,
    JsonFileCredentialsStorage,
    JsonFileWalletStorage,
    PersistenceFailure,
    StorageError,
    UnsupportedWalletFormatError,
    WalletStorageInterface,
)

__all__ = [
    "CredentialsStorageInterface",
    "InMemoryCredentialsStorage",
    "InMemoryWalletStorage",
    "JsonFileCredentialsStorage",
    "JsonFileWalletStorage",
    "PersistenceFailure",
    "StorageError",
    "UnsupportedWalletFormatError",
    "WalletStorageInterface",
]
