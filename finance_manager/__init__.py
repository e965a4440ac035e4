"""
Finance Manager - Source Package

A personal multi-user ledger: income and expense operations, per-category
budgets and account balances, one JSON wallet file per user.

DESIGN PRINCIPLES:
1. The ledger engine is the only thing that mutates a wallet
2. Fail early, before any state changes
3. Balance is maintained incrementally, never recomputed behind your back
4. Alerts inform, they never block
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Manager Team"
