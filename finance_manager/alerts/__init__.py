"""Budget alert evaluation package."""

from finance_manager.alerts.evaluator import AlertEvaluator

__all__ = ["AlertEvaluator"]
