"""
Configuration Management for Finance Manager

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Where the wallets live, how close to a limit counts as "near", and whether
a failed save should be loud are all decided in one place and validated
at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger storage and budget alert configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding <login>.json wallets and the credentials file"
    )
    wallet_file_suffix: str = Field(
        default=".json",
        description="Extension of wallet files, also required for import sources"
    )
    credentials_filename: str = Field(
        default="credentials.json",
        description="Name of the credentials file inside data_dir"
    )
    
    # Budget alerts
    limit_threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Fraction of a budget limit under which remaining money triggers a near-limit alert"
    )
    
    # Durability
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a wallet write is attempted before giving up"
    )
    raise_on_save_failure: bool = Field(
        default=False,
        description="Propagate persistence failures instead of logging them"
    )
    
    @field_validator('wallet_file_suffix')
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Suffix must look like an extension."""
        v = v.strip().lower()
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Wallet file suffix must start with a dot: {v!r}")
        return v
    
    @property
    def credentials_path(self) -> Path:
        """Full path of the credentials file."""
        return self.data_dir / self.credentials_filename


class LoggingSettings(BaseSettings):
    """Structured logging configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="FINANCE_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    
    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()
    
    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.ledger
        results["ledger"] = True
    except Exception as e:
        results["ledger"] = False
        results["ledger_error"] = str(e)
    
    try:
        _ = settings.logging
        results["logging"] = True
    except Exception as e:
        results["logging"] = False
        results["logging_error"] = str(e)
    
    return results
