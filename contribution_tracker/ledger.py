"""
Household Ledger

This module ties together storage, validation and the calculator and
defines the flows a household goes through:
1. Registering a user and, optionally, a spouse sharing the login
2. Entering limits from a Notice of Assessment
3. Adding accounts and recording transactions against them
4. Summarising the portfolio and suggesting where new money should go

DESIGN DECISION: The ledger enforces the boundaries:
- Storage is injected; the ledger never builds a global client
- Every transaction is validated before it is recorded
- Contribution room that depends on other figures is recomputed,
  never copied

Every state change is logged as a structured event.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from contribution_tracker.calculations import (
    calculate_optimal_contribution,
    format_currency,
    get_marginal_tax_rate,
)
from contribution_tracker.config import Settings, get_settings
from contribution_tracker.limits import (
    default_limits,
    limits_from_notice,
    remaining_rrsp_room,
    with_contribution,
)
from contribution_tracker.logs import configure_logging, get_logger
from contribution_tracker.models import (
    Account,
    AccountType,
    AllocationResult,
    Couple,
    Goal,
    NoticeOfAssessment,
    PortfolioSummary,
    RelationshipStatus,
    Transaction,
    TransactionType,
    User,
    ValidationResult,
    account_row_to_account,
    account_to_account_row,
    couple_row_to_couple,
    couple_to_couple_row,
    goal_row_to_goal,
    goal_to_goal_row,
    transaction_row_to_transaction,
    transaction_to_transaction_row,
    user_row_to_user,
    user_to_user_row,
)
from contribution_tracker.services.storage import (
    HouseholdStoreInterface,
    InMemoryHouseholdStore,
    NotFoundError,
)
from contribution_tracker.validation import TransactionValidator


DEFAULT_CATEGORY = "Manual Entry"

# Account types whose contributions draw on the holder's own CRA room
PER_PERSON_ROOM = {AccountType.RRSP, AccountType.TFSA, AccountType.FHSA}


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class TransactionRejectedError(LedgerError):
    """A transaction failed validation and was not recorded."""

    def __init__(self, message: str, result: ValidationResult):
        super().__init__(message)
        self.result = result


def describe_transaction(
    transaction_type: TransactionType,
    account_type: AccountType,
    amount: Decimal,
) -> str:
    """Default description, e.g. "RRSP contribution of $1,000.00"."""
    return f"{account_type.value} {transaction_type.value} of {format_currency(amount)}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HouseholdLedger:
    """
    Orchestrates users, accounts, goals and transactions for one household.

    Not thread-safe; one caller at a time.
    """

    def __init__(
        self,
        store: HouseholdStoreInterface,
        settings: Optional[Settings] = None,
        validator: Optional[TransactionValidator] = None,
    ):
        settings = settings or get_settings()
        self._store = store
        self._app_settings = settings.app
        self._limit_defaults = settings.limits
        self._validator = validator or TransactionValidator(self._app_settings)
        self._logger = get_logger(__name__)

    # =========================================================================
    # Users
    # =========================================================================

    def register_user(self, user: User) -> User:
        """Store a new user. Raises DuplicateError if the id is taken."""
        self._store.insert_user(user_to_user_row(user))
        self._logger.info(
            "user_registered",
            user_id=str(user.id),
            is_primary=user.is_primary,
            province=user.province,
        )
        return user

    def get_user(self, user_id: UUID) -> User:
        """Raises NotFoundError if the user doesn't exist."""
        row = self._store.get_user(str(user_id))
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user_row_to_user(row)

    def update_user(self, user: User) -> User:
        updated = user.model_copy(update={"updated_at": _now()})
        self._store.update_user(user_to_user_row(updated))
        return updated

    def update_contribution_limits(
        self,
        user_id: UUID,
        notice: NoticeOfAssessment,
    ) -> User:
        """Replace a user's limits with the figures from a Notice of Assessment."""
        user = self.get_user(user_id)
        limits = limits_from_notice(notice, self._limit_defaults)
        updated = self.update_user(user.model_copy(update={"contribution_limits": limits}))

        self._logger.info(
            "contribution_limits_updated",
            user_id=str(user_id),
            tax_year=notice.tax_year,
            rrsp_available=str(limits.rrsp.available_contribution_room),
        )
        return updated

    # =========================================================================
    # Spouse / partner
    # =========================================================================

    def add_spouse(
        self,
        primary_id: UUID,
        name: str,
        date_of_birth: Optional[date] = None,
        email: Optional[str] = None,
        province: Optional[str] = None,
        relationship_status: RelationshipStatus = RelationshipStatus.MARRIED,
    ) -> User:
        """
        Add a non-primary user who shares the primary user's login.

        The spouse starts with default CRA limits until their own Notice
        of Assessment is entered.

        Raises:
            LedgerError: If the user isn't primary or already has a partner
        """
        primary = self.get_user(primary_id)
        if not primary.is_primary:
            raise LedgerError("Only the primary user can add a spouse")
        if self._store.get_couple_for_user(str(primary_id)) is not None:
            raise LedgerError("User already has a spouse")

        spouse = User(
            name=name,
            # Same login, so same email unless one is given
            email=email or primary.email,
            date_of_birth=date_of_birth or primary.date_of_birth,
            province=province or primary.province,
            relationship_status=relationship_status,
            contribution_limits=default_limits(self._limit_defaults),
            is_primary=False,
        )
        couple = Couple(partner1_id=primary.id, partner2_id=spouse.id)

        self._store.insert_couple(couple_to_couple_row(couple))
        self.register_user(spouse.model_copy(update={"couple_id": couple.id}))
        self.update_user(primary.model_copy(update={
            "couple_id": couple.id,
            "relationship_status": relationship_status,
        }))

        self._logger.info(
            "spouse_added",
            primary_id=str(primary.id),
            spouse_id=str(spouse.id),
            couple_id=str(couple.id),
        )
        return self.get_user(spouse.id)

    def get_spouse(self, user_id: UUID) -> Optional[User]:
        row = self._store.get_couple_for_user(str(user_id))
        if row is None:
            return None
        partner_id = couple_row_to_couple(row).partner_of(user_id)
        return self.get_user(partner_id) if partner_id else None

    def remove_spouse(self, primary_id: UUID) -> bool:
        """
        Remove the spouse, their accounts, transactions and goals, and the
        couple link.

        Returns False if the user has no spouse.

        Raises:
            LedgerError: If the user isn't the primary user
        """
        primary = self.get_user(primary_id)
        if not primary.is_primary:
            raise LedgerError("Only the primary user can remove a spouse")

        row = self._store.get_couple_for_user(str(primary_id))
        if row is None:
            return False

        couple = couple_row_to_couple(row)
        spouse_id = couple.partner_of(primary_id)

        for account in self.list_accounts(spouse_id):
            self.delete_account(account.id)
        for goal in self.list_goals(spouse_id):
            self._store.delete_goal(str(goal.id))
        self._store.delete_user(str(spouse_id))
        self._store.delete_couple(str(couple.id))

        primary = self.get_user(primary_id)
        self.update_user(primary.model_copy(update={
            "couple_id": None,
            "relationship_status": RelationshipStatus.SINGLE,
        }))

        self._logger.info(
            "spouse_removed",
            primary_id=str(primary_id),
            spouse_id=str(spouse_id),
        )
        return True

    # =========================================================================
    # Accounts
    # =========================================================================

    def add_account(self, account: Account) -> Account:
        """Store a new account. Raises NotFoundError if the owner doesn't exist."""
        self.get_user(account.user_id)
        self._store.insert_account(account_to_account_row(account))

        self._logger.info(
            "account_added",
            account_id=str(account.id),
            user_id=str(account.user_id),
            account_type=account.type.value,
            institution=account.institution_name,
        )
        return account

    def get_account(self, account_id: UUID) -> Account:
        """Raises NotFoundError if the account doesn't exist."""
        row = self._store.get_account(str(account_id))
        if row is None:
            raise NotFoundError(f"Account not found: {account_id}")
        return account_row_to_account(row)

    def update_account(self, account: Account) -> Account:
        """
        Replace an account's details, e.g. a corrected balance or room.

        Raises NotFoundError if the account doesn't exist.
        """
        self.get_account(account.id)
        updated = account.model_copy(update={"updated_at": _now()})
        self._store.update_account(account_to_account_row(updated))

        self._logger.info(
            "account_updated",
            account_id=str(account.id),
            balance=str(updated.current_balance),
            contribution_room=str(updated.contribution_room),
        )
        return updated

    def list_accounts(self, user_id: Optional[UUID] = None) -> list[Account]:
        """Accounts, newest first, optionally for one user."""
        rows = self._store.list_accounts(str(user_id) if user_id else None)
        return [account_row_to_account(row) for row in rows]

    def delete_account(self, account_id: UUID) -> bool:
        """Delete an account and every transaction recorded against it."""
        for row in self._store.list_transactions(account_id=str(account_id)):
            self._store.delete_transaction(row.id)

        deleted = self._store.delete_account(str(account_id))
        if deleted:
            self._logger.info("account_deleted", account_id=str(account_id))
        return deleted

    def accounts_by_type(
        self,
        user_id: Optional[UUID] = None,
    ) -> dict[AccountType, list[Account]]:
        grouped: dict[AccountType, list[Account]] = {}
        for account in self.list_accounts(user_id):
            grouped.setdefault(account.type, []).append(account)
        return grouped

    def portfolio_summary(self, user_id: Optional[UUID] = None) -> PortfolioSummary:
        """
        Totals across accounts, for one user or the whole household.

        remaining_room is total room minus contributions and goes
        negative when the accounts are over-contributed.
        """
        accounts = self.list_accounts(user_id)

        total_balance = sum((a.current_balance for a in accounts), Decimal("0"))
        total_contributions = sum(
            (a.year_to_date_contributions for a in accounts), Decimal("0")
        )
        total_room = sum((a.contribution_room for a in accounts), Decimal("0"))

        balances_by_type: dict[AccountType, Decimal] = {}
        for account in accounts:
            balances_by_type[account.type] = (
                balances_by_type.get(account.type, Decimal("0")) + account.current_balance
            )

        return PortfolioSummary(
            account_count=len(accounts),
            total_balance=total_balance,
            total_contributions=total_contributions,
            total_room=total_room,
            remaining_room=total_room - total_contributions,
            balances_by_type=balances_by_type,
        )

    # =========================================================================
    # Transactions
    # =========================================================================

    def record_transaction(
        self,
        transaction: Transaction,
    ) -> tuple[Transaction, ValidationResult]:
        """
        Validate, store and apply a transaction to its account.

        Over-contribution is advisory unless block_over_contribution is
        set; any other validation error always rejects the transaction.

        Returns:
            (stored transaction, validation result)

        Raises:
            NotFoundError: If the account or its owner doesn't exist
            TransactionRejectedError: If validation rejects it
        """
        account = self.get_account(transaction.account_id)
        owner = self.get_user(account.user_id)

        result = self._validator.validate(transaction, account, owner)
        self._enforce(transaction, result)

        transaction = self._with_defaults(transaction, account)
        self._store.insert_transaction(transaction_to_transaction_row(transaction))
        self._apply_effects(transaction, sign=1)

        self._logger.info(
            "transaction_recorded",
            transaction_id=str(transaction.id),
            account_id=str(account.id),
            transaction_type=transaction.type.value,
            amount=str(transaction.amount),
            warnings=len(result.warnings),
        )
        return transaction, result

    def update_transaction(
        self,
        transaction: Transaction,
    ) -> tuple[Transaction, ValidationResult]:
        """
        Correct a recorded transaction.

        The stored version's effect on balances and room is backed out
        before the new version is validated, so a corrected amount is
        checked against the room it actually has. If the new version is
        rejected the stored one is left exactly as it was.

        Raises:
            NotFoundError: If the transaction, account or owner doesn't exist
            TransactionRejectedError: If validation rejects the new version
        """
        previous = self._get_transaction(transaction.id)
        self.get_account(transaction.account_id)

        self._apply_effects(previous, sign=-1)
        account = self.get_account(transaction.account_id)
        owner = self.get_user(account.user_id)

        result = self._validator.validate(transaction, account, owner)
        try:
            self._enforce(transaction, result)
        except TransactionRejectedError:
            self._apply_effects(previous, sign=1)
            raise

        transaction = self._with_defaults(transaction, account).model_copy(update={
            "created_at": previous.created_at,
            "updated_at": _now(),
        })
        self._store.update_transaction(transaction_to_transaction_row(transaction))
        self._apply_effects(transaction, sign=1)

        self._logger.info(
            "transaction_updated",
            transaction_id=str(transaction.id),
            previous_amount=str(previous.amount),
            amount=str(transaction.amount),
        )
        return transaction, result

    def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction and back out its effect on the account
        balance, year-to-date contributions and the owner's room.

        Returns False if there was nothing to delete.
        """
        row = self._store.get_transaction(str(transaction_id))
        if row is None:
            return False

        transaction = transaction_row_to_transaction(row)
        self._apply_effects(transaction, sign=-1)
        self._store.delete_transaction(row.id)

        self._logger.info(
            "transaction_deleted",
            transaction_id=str(transaction_id),
            account_id=str(transaction.account_id),
            amount=str(transaction.amount),
        )
        return True

    def _get_transaction(self, transaction_id: UUID) -> Transaction:
        row = self._store.get_transaction(str(transaction_id))
        if row is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        return transaction_row_to_transaction(row)

    @staticmethod
    def _with_defaults(transaction: Transaction, account: Account) -> Transaction:
        if not transaction.description:
            transaction = transaction.model_copy(update={
                "description": describe_transaction(
                    transaction.type, account.type, transaction.amount
                ),
            })
        if transaction.category is None:
            transaction = transaction.model_copy(update={"category": DEFAULT_CATEGORY})
        return transaction

    def _enforce(self, transaction: Transaction, result: ValidationResult) -> None:
        errors = [issue for issue in result.issues if issue.severity == "error"]
        if not errors:
            return

        over_room = [issue for issue in errors if issue.issue_type == "over_contribution"]
        if over_room:
            self._logger.warning(
                "contribution_over_room",
                transaction_id=str(transaction.id),
                messages=[issue.message for issue in over_room],
                blocked=self._app_settings.block_over_contribution,
            )

        if len(over_room) < len(errors) or self._app_settings.block_over_contribution:
            self._logger.error(
                "transaction_rejected",
                transaction_id=str(transaction.id),
                issues=[issue.issue_type for issue in errors],
            )
            raise TransactionRejectedError(
                "; ".join(issue.message for issue in errors),
                result,
            )

    def _apply_effects(self, transaction: Transaction, sign: int) -> None:
        """
        Apply (sign=1) or back out (sign=-1) a transaction's effect.

        Withdrawals lower the balance; contributions and transfers raise
        it. Contributions also count toward the account's year-to-date
        total and the owner's per-person room.
        """
        account = self.get_account(transaction.account_id)
        amount = transaction.amount * sign
        is_contribution = transaction.type == TransactionType.CONTRIBUTION

        balance_change = -amount if transaction.type == TransactionType.WITHDRAWAL else amount
        year_to_date = account.year_to_date_contributions
        if is_contribution:
            year_to_date = max(Decimal("0"), year_to_date + amount)

        self._store.update_account(account_to_account_row(account.model_copy(update={
            "current_balance": account.current_balance + balance_change,
            "year_to_date_contributions": year_to_date,
            "updated_at": _now(),
        })))

        if is_contribution and account.type in PER_PERSON_ROOM:
            owner = self.get_user(account.user_id)
            limits = with_contribution(
                owner.contribution_limits, account.type, amount, transaction.date
            )
            self.update_user(owner.model_copy(update={"contribution_limits": limits}))

    def list_transactions(
        self,
        user_id: Optional[UUID] = None,
        account_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """Transactions, most recent date first."""
        rows = self._store.list_transactions(
            user_id=str(user_id) if user_id else None,
            account_id=str(account_id) if account_id else None,
        )
        return [transaction_row_to_transaction(row) for row in rows]

    # =========================================================================
    # Goals
    # =========================================================================

    def add_goal(self, goal: Goal) -> Goal:
        self.get_user(goal.user_id)
        self._store.insert_goal(goal_to_goal_row(goal))
        self._logger.info(
            "goal_added",
            goal_id=str(goal.id),
            user_id=str(goal.user_id),
            target=str(goal.target_amount),
        )
        return goal

    def update_goal(self, goal: Goal) -> Goal:
        """Replace a goal, e.g. to record progress. Raises NotFoundError if missing."""
        if self._store.get_goal(str(goal.id)) is None:
            raise NotFoundError(f"Goal not found: {goal.id}")
        updated = goal.model_copy(update={"updated_at": _now()})
        self._store.update_goal(goal_to_goal_row(updated))
        self._logger.info(
            "goal_updated",
            goal_id=str(goal.id),
            progress_percent=updated.progress_percent,
        )
        return updated

    def delete_goal(self, goal_id: UUID) -> bool:
        deleted = self._store.delete_goal(str(goal_id))
        if deleted:
            self._logger.info("goal_deleted", goal_id=str(goal_id))
        return deleted

    def list_goals(self, user_id: Optional[UUID] = None) -> list[Goal]:
        rows = self._store.list_goals(str(user_id) if user_id else None)
        return [goal_row_to_goal(row) for row in rows]

    # =========================================================================
    # Planning
    # =========================================================================

    def suggest_allocation(
        self,
        user_id: UUID,
        available_funds: Decimal,
        income: Decimal,
    ) -> AllocationResult:
        """
        Suggest how to split new money across the user's FHSA, RRSP and TFSA.

        Uses the marginal rate for the user's province at the given income
        and the room left on file.
        """
        user = self.get_user(user_id)
        limits = user.contribution_limits
        marginal_rate = get_marginal_tax_rate(user.province, income)

        return calculate_optimal_contribution(
            rrsp_room=remaining_rrsp_room(limits),
            tfsa_room=limits.tfsa.available_room,
            fhsa_room=limits.fhsa.available_room if limits.fhsa else Decimal("0"),
            available_funds=available_funds,
            marginal_tax_rate=marginal_rate,
        )


def create_ledger(
    store: Optional[HouseholdStoreInterface] = None,
    settings: Optional[Settings] = None,
) -> HouseholdLedger:
    """
    Factory function to configure logging and build a ledger.

    Args:
        store: Storage backend. Defaults to a fresh in-memory store.
        settings: Settings to use instead of the cached environment settings.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(level=app_settings.log_level, json_output=app_settings.log_json)

    return HouseholdLedger(
        store=store if store is not None else InMemoryHouseholdStore(),
        settings=settings,
    )
