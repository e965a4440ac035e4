"""Wallet reporting package."""

from finance_manager.queries.summary import WalletReporter

__all__ = ["WalletReporter"]
