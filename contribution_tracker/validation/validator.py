"""
Transaction Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - STRUCTURAL CHECKS:
- Transaction targets the account it claims to
- Transaction belongs to the account's owner

STAGE 2 - CONTRIBUTION RULES:
- Contribution fits the account's remaining room
- RRSP, TFSA and FHSA contributions fit the owner's CRA room
- Withdrawal doesn't exceed the balance
- Date is not in the future

IMPORTANT: Validation NEVER blocks or fixes anything by itself.
It reports issues; the ledger decides what to do with them.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from contribution_tracker.calculations import (
    calculate_remaining_room,
    format_currency,
    validate_contribution,
)
from contribution_tracker.config import AppSettings, get_settings
from contribution_tracker.limits import remaining_rrsp_room
from contribution_tracker.models import (
    Account,
    AccountType,
    Transaction,
    TransactionType,
    User,
    ValidationIssue,
    ValidationResult,
)


EMPLOYER_PLANS = {AccountType.RPP, AccountType.DPSP}


class TransactionValidator:
    """
    Validates a transaction against its account and owner.

    Stage 2 only runs when stage 1 finds no errors, since room checks
    against the wrong account would be meaningless.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate(
        self,
        transaction: Transaction,
        account: Account,
        owner: Optional[User] = None,
    ) -> ValidationResult:
        """
        Run both stages and collect every issue found.

        Args:
            transaction: The transaction about to be recorded
            account: The account it targets
            owner: The account holder; needed for CRA room checks
        """
        issues = self._validate_structure(transaction, account)

        if not any(issue.severity == "error" for issue in issues):
            issues.extend(self._validate_rules(transaction, account, owner))

        return ValidationResult(transaction_id=transaction.id, issues=issues)

    def _validate_structure(
        self,
        transaction: Transaction,
        account: Account,
    ) -> list[ValidationIssue]:
        issues = []

        if transaction.account_id != account.id:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="account_mismatch",
                message="Transaction does not target this account",
                severity="error",
            ))

        if transaction.user_id != account.user_id:
            issues.append(ValidationIssue(
                field="user_id",
                issue_type="owner_mismatch",
                message="Transaction owner does not hold this account",
                severity="error",
                suggested_fix="Record the transaction against the account holder",
            ))

        return issues

    def _validate_rules(
        self,
        transaction: Transaction,
        account: Account,
        owner: Optional[User],
    ) -> list[ValidationIssue]:
        issues = []

        if transaction.type == TransactionType.CONTRIBUTION:
            issues.extend(self._check_contribution(transaction, account, owner))

        if (
            transaction.type == TransactionType.WITHDRAWAL
            and transaction.amount > account.current_balance
        ):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="insufficient_balance",
                message=(
                    f"Withdrawal of {format_currency(transaction.amount)} is more than "
                    f"the balance of {format_currency(account.current_balance)}"
                ),
                severity="warning",
                suggested_fix="Check the amount or update the account balance first",
            ))

        max_future_date = date.today() + timedelta(
            days=self._settings.future_date_tolerance_days
        )
        if transaction.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Transaction date ({transaction.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return issues

    def _check_contribution(
        self,
        transaction: Transaction,
        account: Account,
        owner: Optional[User],
    ) -> list[ValidationIssue]:
        issues = []

        if account.type in EMPLOYER_PLANS:
            issues.append(ValidationIssue(
                field="type",
                issue_type="employer_plan",
                message=(
                    f"{account.type.value} contributions reduce next year's RRSP room "
                    "through the pension adjustment"
                ),
                severity="info",
            ))

        account_room = calculate_remaining_room(
            account.contribution_room,
            account.year_to_date_contributions,
        )
        check = validate_contribution(transaction.amount, account_room)
        if not check.is_valid:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="over_contribution",
                message=check.message,
                severity="error",
                suggested_fix=f"Contribute at most {format_currency(account_room)} to this account",
            ))

        owner_room = self._owner_room(account.type, owner)
        if owner_room is not None:
            check = validate_contribution(transaction.amount, owner_room)
            if not check.is_valid:
                issues.append(ValidationIssue(
                    field="contribution_limits",
                    issue_type="over_contribution",
                    message=f"{account.type.value}: {check.message}",
                    severity="error",
                    suggested_fix="Update the limits from the latest Notice of Assessment",
                ))

        return issues

    @staticmethod
    def _owner_room(account_type: AccountType, owner: Optional[User]) -> Optional[Decimal]:
        """CRA room left for the owner, for account types whose room is per person."""
        if owner is None:
            return None
        limits = owner.contribution_limits
        if account_type == AccountType.RRSP:
            return remaining_rrsp_room(limits)
        if account_type == AccountType.TFSA:
            return limits.tfsa.available_room
        if account_type == AccountType.FHSA and limits.fhsa is not None:
            return limits.fhsa.available_room
        return None
