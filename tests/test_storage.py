"""Tests for wallet and credentials storage."""

import json
import pytest
from datetime import datetime, timezone
from decimal import Decimal

from finance_manager.config import LedgerSettings
from finance_manager.models.wallet import Budget, Operation, OperationType, WalletState
from finance_manager.services.storage import (
    InMemoryWalletStorage,
    InvalidLoginError,
    JsonFileCredentialsStorage,
    JsonFileWalletStorage,
    PersistenceFailure,
    UnsupportedWalletFormatError,
    decode_wallet,
    encode_wallet,
)


def sample_wallet() -> WalletState:
    wallet = WalletState(budgets={"food": Budget(category="food", limit=Decimal("300"))})
    wallet.append(Operation(
        type=OperationType.INCOME,
        amount=Decimal("1200.50"),
        category="salary",
        description="May",
        timestamp=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        to_user="alice",
    ))
    wallet.append(Operation(
        type=OperationType.EXPENSE,
        amount=Decimal("45.25"),
        category="food",
        description="market",
        timestamp=datetime(2024, 5, 2, 18, 0, tzinfo=timezone.utc),
        from_user="alice",
        to_user="bob",
    ))
    return wallet


@pytest.fixture
def file_storage(tmp_path):
    settings = LedgerSettings(data_dir=tmp_path, save_retry_attempts=1)
    return JsonFileWalletStorage(settings=settings)


class TestWalletCodec:
    """Tests for the wallet JSON document."""

    def test_document_shape(self):
        """Test the encoded document uses the on-disk field names."""
        doc = json.loads(encode_wallet(sample_wallet()))
        assert doc["balance"] == pytest.approx(1155.25)
        assert doc["budgets"] == {"food": {"category": "food", "limit": 300.0}}
        expense = doc["operations"][1]
        assert expense["type"] == "EXPENSE"
        assert expense["fromUser"] == "alice"
        assert expense["toUser"] == "bob"
        assert datetime.fromisoformat(expense["timestamp"]) == datetime(
            2024, 5, 2, 18, 0, tzinfo=timezone.utc,
        )

    def test_decode_keeps_identity_and_order(self):
        """Test ids, timestamps and operation order survive decoding."""
        wallet = sample_wallet()
        restored = decode_wallet(encode_wallet(wallet))
        assert [op.id for op in restored.operations] == [op.id for op in wallet.operations]
        assert [op.timestamp for op in restored.operations] == [
            op.timestamp for op in wallet.operations
        ]
        assert restored.operations[0].amount == Decimal("1200.5")
        assert restored.balance == Decimal("1155.25")

    def test_decode_numeric_timestamp(self):
        """Test epoch-second timestamps are accepted."""
        payload = json.dumps({
            "balance": 10,
            "operations": [{"type": "INCOME", "amount": 10, "timestamp": 1714560000}],
            "budgets": {},
        })
        wallet = decode_wallet(payload)
        assert wallet.operations[0].timestamp == datetime(2024, 5, 1, 10, 40, tzinfo=timezone.utc)

    def test_decode_defaults_missing_category(self):
        """Test old documents without category or description still load."""
        payload = json.dumps({
            "balance": -3,
            "operations": [{"type": "EXPENSE", "amount": 3}],
            "budgets": {},
        })
        op = decode_wallet(payload).operations[0]
        assert op.category == "Uncategorized"
        assert op.description == ""

    def test_high_precision_amounts_survive(self, file_storage):
        """Test amounts a float cannot hold are stored as exact decimal text."""
        wallet = WalletState()
        for amount in ("12345678901234567.89", "0.1234567890123456789"):
            wallet.append(Operation(type=OperationType.INCOME, amount=Decimal(amount)))
        wallet.budgets["x"] = Budget(category="x", limit=Decimal("1e400"))

        doc = wallet.to_storage_dict()
        assert doc["operations"][0]["amount"] == "12345678901234567.89"
        assert doc["budgets"]["x"]["limit"] == "1E+400"

        assert file_storage.save("alice", wallet) is True
        loaded = file_storage.load("alice")

        assert [op.amount for op in loaded.operations] == [
            Decimal("12345678901234567.89"),
            Decimal("0.1234567890123456789"),
        ]
        assert loaded.balance == wallet.balance
        assert loaded.budgets["x"].limit == Decimal("1e400")

    def test_decode_exact_numbers(self):
        """Test long JSON numbers written by other tools are not rounded."""
        payload = (
            '{"balance": 0.1234567890123456789, "budgets": {}, "operations": '
            '[{"type": "INCOME", "amount": 0.1234567890123456789}]}'
        )
        wallet = decode_wallet(payload)
        assert wallet.operations[0].amount == Decimal("0.1234567890123456789")
        assert wallet.balance == Decimal("0.1234567890123456789")

    def test_decode_fractional_timestamp(self):
        """Test fractional epoch seconds are accepted."""
        payload = json.dumps({
            "balance": 1,
            "operations": [{"type": "INCOME", "amount": 1, "timestamp": 1714560000.5}],
            "budgets": {},
        })
        wallet = decode_wallet(payload)
        assert wallet.operations[0].timestamp == datetime(
            2024, 5, 1, 10, 40, 0, 500000, tzinfo=timezone.utc,
        )

    @pytest.mark.parametrize("payload", [
        "",
        '{"balance": 0, "operations": [], "budgets": {"x": {"category": "x", "limit": Infinity}}}',
        "{",
        '"wallet"',
        '{"balance": 0, "operations": "none", "budgets": {}}',
        '{"balance": 0, "operations": [], "budgets": {"food": {"category": "rent", "limit": 1}}}',
        '{"balance": 100, "operations": [], "budgets": {}}',
    ])
    def test_decode_rejects(self, payload):
        """Test malformed or inconsistent documents are rejected."""
        with pytest.raises(UnsupportedWalletFormatError):
            decode_wallet(payload)


class TestJsonFileWalletStorage:
    """Tests for the file-per-login backend."""

    def test_save_and_load(self, file_storage):
        """Test a saved wallet loads back unchanged."""
        wallet = sample_wallet()
        assert file_storage.save("alice", wallet) is True
        assert file_storage.wallet_path("alice").name == "alice.json"

        loaded = file_storage.load("alice")
        assert loaded.model_dump() == wallet.model_dump()

    def test_missing_file_gives_empty_wallet(self, file_storage):
        """Test an unknown login has an empty wallet."""
        wallet = file_storage.load("nobody")
        assert wallet.operations == []
        assert wallet.balance == 0
        assert not file_storage.wallet_path("nobody").exists()

    def test_corrupt_file_gives_empty_wallet(self, file_storage):
        """Test an unreadable wallet does not prevent loading."""
        file_storage.wallet_path("alice").write_text("{broken", encoding="utf-8")
        wallet = file_storage.load("alice")
        assert wallet.operations == []

    def test_save_overwrites(self, file_storage):
        """Test the file holds the latest state only."""
        file_storage.save("alice", sample_wallet())
        file_storage.save("alice", WalletState())
        assert file_storage.load("alice").operations == []

    def test_no_temp_files_left(self, file_storage, tmp_path):
        """Test atomic writes clean up after themselves."""
        file_storage.save("alice", sample_wallet())
        file_storage.save("alice", sample_wallet())
        assert sorted(p.name for p in tmp_path.iterdir()) == ["alice.json"]

    def test_save_failure_returns_false(self, tmp_path):
        """Test a write error is reported, not raised, by default."""
        settings = LedgerSettings(data_dir=tmp_path, save_retry_attempts=1)
        storage = JsonFileWalletStorage(settings=settings)
        storage.wallet_path("alice").mkdir()

        assert storage.save("alice", sample_wallet()) is False

    def test_save_failure_strict(self, tmp_path):
        """Test strict mode turns a write error into PersistenceFailure."""
        settings = LedgerSettings(data_dir=tmp_path, save_retry_attempts=1)
        storage = JsonFileWalletStorage(settings=settings)
        storage.wallet_path("alice").mkdir()

        with pytest.raises(PersistenceFailure):
            storage.save("alice", sample_wallet(), strict=True)

    def test_save_failure_raises_when_configured(self, tmp_path):
        """Test raise_on_save_failure makes strict the default."""
        settings = LedgerSettings(
            data_dir=tmp_path,
            save_retry_attempts=1,
            raise_on_save_failure=True,
        )
        storage = JsonFileWalletStorage(settings=settings)
        storage.wallet_path("alice").mkdir()

        with pytest.raises(PersistenceFailure):
            storage.save("alice", sample_wallet())
        assert storage.save("alice", sample_wallet(), strict=False) is False

    def test_import_from_reads_without_storing(self, file_storage, tmp_path):
        """Test import_from only decodes."""
        source = tmp_path / "elsewhere.json"
        source.write_text(encode_wallet(sample_wallet()), encoding="utf-8")

        wallet = file_storage.import_from(source)

        assert len(wallet.operations) == 2
        assert not file_storage.wallet_path("elsewhere").exists()

    def test_location(self, file_storage, tmp_path):
        """Test location is the wallet path."""
        assert file_storage.location("alice") == str(tmp_path / "alice.json")

    @pytest.mark.parametrize("login", ["../outside", "a/b", "a\\b", ".hidden", "..", "credentials"])
    def test_login_cannot_escape_wallet_namespace(self, file_storage, tmp_path, login):
        """Test logins that would not name a wallet file are refused."""
        with pytest.raises(InvalidLoginError):
            file_storage.check_login(login)
        with pytest.raises(InvalidLoginError):
            file_storage.wallet_path(login)

        assert file_storage.save(login, sample_wallet()) is False
        with pytest.raises(PersistenceFailure):
            file_storage.save(login, sample_wallet(), strict=True)
        assert file_storage.load(login).operations == []
        assert not (tmp_path.parent / "outside.json").exists()
        assert not (tmp_path / "credentials.json").exists()

    def test_save_failure_event_names_location(self, tmp_path, monkeypatch):
        """Test a failed save reports where the wallet was going."""
        settings = LedgerSettings(data_dir=tmp_path, save_retry_attempts=1)
        storage = JsonFileWalletStorage(settings=settings)
        storage.wallet_path("alice").mkdir()
        logged = []
        monkeypatch.setattr(storage._events, "log", logged.append)

        storage.save("alice", sample_wallet())

        assert logged[-1].details == {"location": str(tmp_path / "alice.json")}


class TestInMemoryWalletStorage:
    """Tests for the in-memory backend."""

    def test_round_trip_through_encoding(self):
        """Test the stored value is the encoded document."""
        storage = InMemoryWalletStorage()
        storage.save("alice", sample_wallet())
        assert json.loads(storage.get_raw("alice"))["balance"] == pytest.approx(1155.25)
        assert storage.load("alice").balance == Decimal("1155.25")
        assert storage.location("alice") == "memory://alice"

    def test_corrupt_document_gives_empty_wallet(self):
        """Test a bad stored document loads as empty."""
        storage = InMemoryWalletStorage()
        storage.put_raw("alice", "garbage")
        assert storage.load("alice").operations == []


class TestJsonFileCredentialsStorage:
    """Tests for the credentials file."""

    def test_round_trip(self, tmp_path):
        """Test credentials survive a save/load cycle."""
        storage = JsonFileCredentialsStorage(path=tmp_path / "credentials.json")
        assert storage.save_credentials({"bob": "h2", "alice": "h1"}) is True
        assert storage.load_credentials() == {"alice": "h1", "bob": "h2"}

    def test_missing_file(self, tmp_path):
        """Test no file means no users."""
        storage = JsonFileCredentialsStorage(path=tmp_path / "credentials.json")
        assert storage.load_credentials() == {}

    def test_corrupt_file(self, tmp_path):
        """Test a broken credentials file loads as empty."""
        path = tmp_path / "credentials.json"
        path.write_text('{"alice": 5}', encoding="utf-8")
        assert JsonFileCredentialsStorage(path=path).load_credentials() == {}

    def test_save_failure(self, tmp_path):
        """Test a write error is reported through the return value."""
        path = tmp_path / "credentials.json"
        path.mkdir()
        settings = LedgerSettings(data_dir=tmp_path, save_retry_attempts=1)
        storage = JsonFileCredentialsStorage(path=path, settings=settings)
        assert storage.save_credentials({"alice": "h1"}) is False
