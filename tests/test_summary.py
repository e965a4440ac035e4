"""Tests for wallet reports, application wiring and settings."""

import pytest
from decimal import Decimal

from pydantic import ValidationError

from finance_manager.config import LedgerSettings, LoggingSettings, get_settings, validate_all_settings
from finance_manager.orchestrator import create_app_components
from finance_manager.queries import WalletReporter


class TestWalletReporter:
    """Tests for summary and category reports."""

    def test_summary(self, engine, alice):
        """Test totals, breakdowns and budget usage."""
        engine.add_income(alice, 1000, "salary")
        engine.add_income(alice, 50, "gift")
        engine.add_expense(alice, 120, "food")
        engine.add_expense(alice, 30, "food")
        engine.add_expense(alice, 400, "rent")
        engine.set_budget(alice, "rent", 350)
        engine.set_budget(alice, "food", 200)

        summary = WalletReporter(engine).summary(alice)

        assert summary.login == "alice"
        assert summary.balance == Decimal("500")
        assert summary.total_income == Decimal("1050")
        assert summary.total_expense == Decimal("550")
        assert summary.net == summary.balance
        assert summary.income_by_category == {"salary": Decimal("1000"), "gift": Decimal("50")}
        assert summary.expense_by_category == {"food": Decimal("150"), "rent": Decimal("400")}
        assert [b.category for b in summary.budgets] == ["food", "rent"]
        food, rent = summary.budgets
        assert food.spent == Decimal("150")
        assert food.remaining == Decimal("50")
        assert not food.is_exceeded
        assert rent.remaining == Decimal("-50")
        assert rent.is_exceeded

    def test_summary_budget_without_spending(self, engine, alice):
        """Test a budget nobody spent against shows the full limit remaining."""
        engine.set_budget(alice, "travel", 500)
        status = WalletReporter(engine).summary(alice).budgets[0]
        assert status.spent == 0
        assert status.remaining == Decimal("500")

    def test_category_report(self, engine, alice):
        """Test per-category totals in the order requested."""
        engine.add_income(alice, 20, "food")
        engine.add_expense(alice, 70, "food")
        engine.set_budget(alice, "food", 100)
        engine.set_budget(alice, "travel", 300)

        reports = WalletReporter(engine).category_report(alice, ["travel", "food", "pets"])

        assert [r.category for r in reports] == ["travel", "food", "pets"]
        travel, food, pets = reports
        assert travel.found
        assert travel.expense == 0
        assert travel.budget.remaining == Decimal("300")
        assert food.found
        assert food.income == Decimal("20")
        assert food.expense == Decimal("70")
        assert food.budget.remaining == Decimal("30")
        assert not pets.found
        assert pets.budget is None


class TestAppComponents:
    """Tests for create_app_components."""

    def test_in_memory_components(self):
        """Test the in-memory wiring works end to end."""
        app = create_app_components(use_files=False)
        alice = app.directory.register("alice", "pw")
        app.directory.register("bob", "pw")

        app.engine.add_income(alice, 100, "salary")
        app.engine.transfer("alice", "bob", 40, "gift", "birthday")

        assert app.reporter.summary(alice).balance == Decimal("60")
        assert app.directory.find_user("bob").wallet.balance == Decimal("40")

    def test_files_survive_restart(self, tmp_path):
        """Test state written by one process is read by the next."""
        first = create_app_components(data_dir=tmp_path)
        alice = first.directory.register("alice", "pw")
        first.engine.add_income(alice, 250, "salary")
        first.engine.set_budget(alice, "food", 80)
        assert first.directory.flush_all() == []

        second = create_app_components(data_dir=tmp_path)
        restored = second.directory.login("alice", "pw")

        assert restored.wallet.balance == Decimal("250")
        assert restored.wallet.budgets["food"].limit == Decimal("80")
        assert second.storage.location("alice") == str(tmp_path / "alice.json")


class TestSettings:
    """Tests for configuration."""

    def test_defaults(self, monkeypatch):
        """Test default ledger settings."""
        monkeypatch.delenv("FINANCE_LIMIT_THRESHOLD", raising=False)
        settings = LedgerSettings()
        assert settings.limit_threshold == 0.2
        assert settings.wallet_file_suffix == ".json"
        assert settings.credentials_path.name == "credentials.json"

    def test_env_override(self, monkeypatch, tmp_path):
        """Test FINANCE_* variables override defaults."""
        monkeypatch.setenv("FINANCE_LIMIT_THRESHOLD", "0.35")
        monkeypatch.setenv("FINANCE_DATA_DIR", str(tmp_path))
        settings = get_settings().ledger
        assert settings.limit_threshold == 0.35
        assert settings.data_dir == tmp_path

    def test_threshold_out_of_range(self):
        """Test the threshold must be a fraction."""
        with pytest.raises(ValidationError):
            LedgerSettings(limit_threshold=1.5)

    @pytest.mark.parametrize("suffix", ["json", "", "."])
    def test_bad_suffix(self, suffix):
        """Test the wallet suffix must look like an extension."""
        with pytest.raises(ValidationError):
            LedgerSettings(wallet_file_suffix=suffix)

    def test_log_level(self, monkeypatch):
        """Test log levels are normalised and checked."""
        monkeypatch.setenv("FINANCE_LOG_LEVEL", "debug")
        assert LoggingSettings().level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingSettings(level="chatty")

    def test_validate_all_settings(self, monkeypatch):
        """Test the startup check reports a broken section."""
        monkeypatch.setenv("FINANCE_SAVE_RETRY_ATTEMPTS", "0")
        results = validate_all_settings()
        assert results["ledger"] is False
        assert "ledger_error" in results
        assert results["logging"] is True
