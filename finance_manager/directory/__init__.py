"""User directory package."""

from finance_manager.directory.users import IllegalCredentialsError, UserDirectory, hash_password

__all__ = ["IllegalCredentialsError", "UserDirectory", "hash_password"]
