"""
Ledger Engine

DESIGN DECISION: The engine is the only code that mutates a WalletState.
Every operation follows the same order:

1. Validate inputs (amount, category, logins) - raise before touching anything
2. Build the Operation (category defaulting happens in the model)
3. Apply it to the wallet, moving the balance incrementally
4. Evaluate alerts against the new state and report them

Persistence is explicit: callers save when they want to, except for
transfers and imports, which are durable as soon as they return.

TRANSFERS: both wallets are changed in memory, then both are saved in
strict mode. If either save fails, both wallets are restored from
snapshots, any file already written is rewritten from its snapshot,
and TransferFailedError is raised.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

from finance_manager.alerts import AlertEvaluator
from finance_manager.config import LedgerSettings, get_settings
from finance_manager.events import EventLogger, create_correlation_id
from finance_manager.ledger.errors import (
    BudgetNotFoundError,
    CategoryNotFoundError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidImportSourceError,
    TransferFailedError,
    UserNotFoundError,
)
from finance_manager.models.alerts import Alert
from finance_manager.models.events import LedgerEventBuilder, LedgerEventType
from finance_manager.models.reports import TransferReceipt
from finance_manager.models.wallet import (
    UNCATEGORIZED,
    Budget,
    Operation,
    OperationType,
    User,
    WalletState,
)
from finance_manager.services.storage import PersistenceFailure, WalletStorageInterface

if TYPE_CHECKING:
    from finance_manager.directory import UserDirectory


AmountLike = Union[Decimal, int, float, str]


def _to_decimal(value: Any, what: str) -> Decimal:
    """Convert user input to a finite Decimal or raise InvalidAmountError."""
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"{what} must be a number, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"{what} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise InvalidAmountError(f"{what} must be finite, got {value!r}")
    return result


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class LedgerEngine:
    """
    Applies income, expenses, transfers and budget changes to wallets.

    GUARANTEES:
    - balance == total income - total expense after every call
    - A rejected call leaves every wallet exactly as it was
    - Alerts never block a change; they are computed after it is applied
    """

    def __init__(
        self,
        directory: "UserDirectory",
        storage: WalletStorageInterface,
        evaluator: Optional[AlertEvaluator] = None,
        event_logger: Optional[EventLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._directory = directory
        self._storage = storage
        self._settings = settings or get_settings().ledger
        self._evaluator = evaluator or AlertEvaluator(self._settings.limit_threshold)
        self._events = event_logger or EventLogger()

    # -------------------------------------------------------------------------
    # Income and expenses
    # -------------------------------------------------------------------------

    def add_income(
        self,
        user: User,
        amount: AmountLike,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> list[Alert]:
        """
        Record money coming in.

        Raises:
            InvalidAmountError: If amount <= 0
        """
        value = self._validate_amount(amount)
        operation = Operation(
            type=OperationType.INCOME,
            amount=value,
            category=category,
            description=description,
            to_user=user.login,
        )
        user.wallet.append(operation)

        self._events.log(LedgerEventBuilder.income_added(
            login=user.login,
            operation_id=operation.id,
            amount=str(operation.amount),
            category=operation.category,
        ))
        return self._evaluate(user, operation)

    def add_expense(
        self,
        user: User,
        amount: AmountLike,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> list[Alert]:
        """
        Record money going out. A blank category becomes UNCATEGORIZED.

        Raises:
            InvalidAmountError: If amount <= 0
        """
        value = self._validate_amount(amount)
        operation = Operation(
            type=OperationType.EXPENSE,
            amount=value,
            category=category,
            description=description,
            from_user=user.login,
        )
        user.wallet.append(operation)

        self._events.log(LedgerEventBuilder.expense_added(
            login=user.login,
            operation_id=operation.id,
            amount=str(operation.amount),
            category=operation.category,
        ))
        return self._evaluate(user, operation)

    # -------------------------------------------------------------------------
    # Transfers
    # -------------------------------------------------------------------------

    def transfer(
        self,
        from_login: str,
        to_login: str,
        amount: AmountLike,
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> TransferReceipt:
        """
        Move money from one user's wallet to another's.

        The sender gets an EXPENSE, the receiver an INCOME; both carry the
        same category, description and from/to logins. Both wallets are
        saved before this returns.

        Raises:
            InvalidAmountError: If amount <= 0
            UserNotFoundError: If either login is unknown
            TransferFailedError: If either wallet could not be saved
                                 (both are rolled back)
        """
        value = self._validate_amount(amount)

        sender = self._directory.find_user(from_login)
        if sender is None:
            raise UserNotFoundError(f"Sender not found: {from_login}")
        receiver = self._directory.find_user(to_login)
        if receiver is None:
            raise UserNotFoundError(f"Receiver not found: {to_login}")

        expense = Operation(
            type=OperationType.EXPENSE,
            amount=value,
            category=category,
            description=description,
            from_user=from_login,
            to_user=to_login,
        )
        income = Operation(
            type=OperationType.INCOME,
            amount=value,
            category=expense.category,
            description=expense.description,
            from_user=from_login,
            to_user=to_login,
        )

        correlation_id = create_correlation_id()
        sender_snapshot = sender.wallet.snapshot()
        receiver_snapshot = receiver.wallet.snapshot()

        sender.wallet.append(expense)
        receiver.wallet.append(income)

        participants = [sender] if sender is receiver else [sender, receiver]
        written: list[User] = []
        try:
            for participant in participants:
                self._storage.save(participant.login, participant.wallet, strict=True)
                written.append(participant)
        except PersistenceFailure as e:
            sender.wallet = sender_snapshot
            receiver.wallet = receiver_snapshot
            for participant in written:
                self._storage.save(participant.login, participant.wallet, strict=False)

            self._events.log(LedgerEventBuilder.transfer_failed(
                from_login=from_login,
                to_login=to_login,
                amount=str(value),
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            raise TransferFailedError(
                from_login,
                to_login,
                f"Transfer from {from_login} to {to_login} was rolled back: {e}",
            ) from e

        self._events.log(LedgerEventBuilder.transfer_completed(
            from_login=from_login,
            to_login=to_login,
            amount=str(value),
            correlation_id=correlation_id,
        ))

        return TransferReceipt(
            expense=expense,
            income=income,
            sender_alerts=self._evaluate(sender, expense),
            receiver_alerts=self._evaluate(receiver, income),
        )

    # -------------------------------------------------------------------------
    # Budgets and categories
    # -------------------------------------------------------------------------

    def set_budget(self, user: User, category: str, limit: AmountLike) -> Budget:
        """
        Create or replace the budget for a category.

        Raises:
            InvalidCategoryError: If category is blank
            InvalidAmountError: If limit is not a number
        """
        self._require_category(category)
        value = _to_decimal(limit, "Budget limit")

        budget = Budget(category=category, limit=value)
        user.wallet.budgets[category] = budget

        self._events.log(LedgerEventBuilder.budget_changed(
            LedgerEventType.BUDGET_SET, user.login, category, str(value),
        ))
        return budget

    def change_budget_limit(self, user: User, category: str, limit: AmountLike) -> Budget:
        """
        Change the limit of an existing budget.

        Raises:
            InvalidCategoryError: If category is blank
            BudgetNotFoundError: If the category has no budget
        """
        self._require_category(category)
        value = _to_decimal(limit, "Budget limit")

        budget = user.wallet.budgets.get(category)
        if budget is None:
            raise BudgetNotFoundError(f"No budget for category {category}")
        budget.limit = value

        self._events.log(LedgerEventBuilder.budget_changed(
            LedgerEventType.BUDGET_LIMIT_CHANGED, user.login, category, str(value),
        ))
        return budget

    def delete_budget(self, user: User, category: str) -> Budget:
        """
        Remove the budget for a category.

        Raises:
            InvalidCategoryError: If category is blank
            BudgetNotFoundError: If the category has no budget
        """
        self._require_category(category)

        budget = user.wallet.budgets.pop(category, None)
        if budget is None:
            raise BudgetNotFoundError(f"No budget for category {category}")

        self._events.log(LedgerEventBuilder.budget_changed(
            LedgerEventType.BUDGET_DELETED, user.login, category,
        ))
        return budget

    def rename_category(self, user: User, old_name: str, new_name: str) -> int:
        """
        Retag every operation in old_name and move its budget to new_name.

        A budget already stored under new_name is replaced by the moved one.

        Returns:
            Number of operations retagged

        Raises:
            InvalidCategoryError: If new_name is blank
            CategoryNotFoundError: If no operation or budget uses old_name
        """
        self._require_category(new_name)

        wallet = user.wallet
        if not wallet.uses_category(old_name):
            raise CategoryNotFoundError(f"Category {old_name} not found")

        matching = [op for op in wallet.operations if op.category == old_name]
        has_budget = old_name in wallet.budgets
        for operation in matching:
            operation.category = new_name
        if has_budget:
            budget = wallet.budgets.pop(old_name)
            budget.category = new_name
            wallet.budgets[new_name] = budget

        self._events.log(LedgerEventBuilder.category_renamed(
            login=user.login,
            old_name=old_name,
            new_name=new_name,
            operations_retagged=len(matching),
            budget_moved=has_budget,
        ))
        return len(matching)

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def total_income(self, user: User) -> Decimal:
        return user.wallet.total(OperationType.INCOME)

    def total_expense(self, user: User) -> Decimal:
        return user.wallet.total(OperationType.EXPENSE)

    @staticmethod
    def sum_by_category(
        operations: Iterable[Operation],
        operation_type: OperationType,
        category: Optional[str] = None,
    ) -> dict[str, Decimal]:
        """
        Sum amounts per category for operations of one type.

        Args:
            operations: Operations to aggregate
            operation_type: Only operations of this type are counted
            category: If given, only this category is counted

        Returns:
            Mapping category -> total; empty if nothing matches
        """
        totals: dict[str, Decimal] = {}
        for operation in operations:
            if operation.type != operation_type:
                continue
            if category is not None and operation.category != category:
                continue
            key = operation.category or UNCATEGORIZED
            totals[key] = totals.get(key, Decimal("0")) + operation.amount
        return totals

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save_user_wallet(self, user: User, strict: Optional[bool] = None) -> bool:
        """Save the user's wallet; see WalletStorageInterface.save."""
        return self._storage.save(user.login, user.wallet, strict=strict)

    def import_wallet_for_user(self, source: Union[str, Path], user: User) -> WalletState:
        """
        Replace the user's wallet with one read from a file.

        The file is decoded and written under the user's login first; the
        in-memory wallet is only replaced once that write succeeded.

        Raises:
            InvalidImportSourceError: Empty path, wrong extension, missing
                                      or not a regular file
            UnsupportedWalletFormatError: The file is not a wallet
            PersistenceFailure: The imported wallet could not be stored
        """
        if source is None or not str(source).strip():
            raise InvalidImportSourceError("Import path is empty")

        source_str = str(source).strip()
        suffix = self._settings.wallet_file_suffix
        if not source_str.endswith(suffix):
            raise InvalidImportSourceError(
                f"File {source_str} has an unsupported extension. Allowed: {suffix}"
            )

        path = Path(source_str).expanduser().absolute()
        if not path.exists() or not path.is_file():
            raise InvalidImportSourceError(f"File not found or not a regular file: {path}")

        wallet = self._storage.import_from(path)
        self._storage.save(user.login, wallet, strict=True)
        user.wallet = wallet

        self._events.log(LedgerEventBuilder.wallet_imported(
            login=user.login,
            source=str(path),
            operation_count=len(wallet.operations),
        ))
        return wallet

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _validate_amount(self, amount: AmountLike) -> Decimal:
        value = _to_decimal(amount, "Amount")
        if value <= 0:
            raise InvalidAmountError(f"Amount must be greater than 0, got {value}")
        return value

    def _require_category(self, category: Optional[str]) -> None:
        if _is_blank(category):
            raise InvalidCategoryError("Category is required")

    def _evaluate(self, user: User, operation: Operation) -> list[Alert]:
        """Run the alert evaluator on the state after `operation` was applied."""
        spent = self.sum_by_category(
            user.wallet.operations, OperationType.EXPENSE, operation.category,
        ).get(operation.category, Decimal("0"))

        alerts = self._evaluator.evaluate(
            user.wallet,
            operation,
            spent,
            self.total_income(user),
            self.total_expense(user),
        )
        self._events.log_alerts(user.login, alerts)
        return alerts
