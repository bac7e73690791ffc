"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Use in-memory storage for tests and local runs
2. Swap in a hosted database later without touching the ledger
3. Keep business logic decoupled from storage implementation

The store is constructed explicitly and handed to whatever needs it;
there is no module-level client. It deals only in row models; mapping
to domain models is the caller's job.
"""

from abc import ABC, abstractmethod
from typing import Optional

from contribution_tracker.models.rows import (
    AccountRow,
    CoupleRow,
    GoalRow,
    TransactionRow,
    UserRow,
)


class HouseholdStoreInterface(ABC):
    """
    Abstract interface for household record storage.

    Any storage implementation must implement these methods.
    Updates replace the whole row.
    """

    # -- Users -------------------------------------------------------------

    @abstractmethod
    def insert_user(self, row: UserRow) -> UserRow:
        """
        Insert a new user row.

        Raises:
            DuplicateError: If a user with the same id exists
        """

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserRow]:
        """Return the user row, or None if it doesn't exist."""

    @abstractmethod
    def update_user(self, row: UserRow) -> UserRow:
        """
        Replace an existing user row.

        Raises:
            NotFoundError: If the user doesn't exist
        """

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """Delete a user. Returns False if there was nothing to delete."""

    # -- Accounts ----------------------------------------------------------

    @abstractmethod
    def insert_account(self, row: AccountRow) -> AccountRow:
        """Insert a new account row. Raises DuplicateError on id clash."""

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[AccountRow]:
        """Return the account row, or None if it doesn't exist."""

    @abstractmethod
    def update_account(self, row: AccountRow) -> AccountRow:
        """Replace an existing account row. Raises NotFoundError if missing."""

    @abstractmethod
    def delete_account(self, account_id: str) -> bool:
        """Delete an account. Returns False if there was nothing to delete."""

    @abstractmethod
    def list_accounts(self, user_id: Optional[str] = None) -> list[AccountRow]:
        """
        List accounts, newest first.

        Args:
            user_id: Only return this user's accounts
        """

    # -- Transactions ------------------------------------------------------

    @abstractmethod
    def insert_transaction(self, row: TransactionRow) -> TransactionRow:
        """Insert a new transaction row. Raises DuplicateError on id clash."""

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[TransactionRow]:
        """Get a transaction by id, or None."""

    @abstractmethod
    def update_transaction(self, row: TransactionRow) -> TransactionRow:
        """Replace a transaction row. Raises NotFoundError if it doesn't exist."""

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction. Returns False if there was nothing to delete."""

    @abstractmethod
    def list_transactions(
        self,
        user_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> list[TransactionRow]:
        """
        List transactions, most recent date first.

        Args:
            user_id: Only return this user's transactions
            account_id: Only return transactions against this account
        """

    # -- Goals -------------------------------------------------------------

    @abstractmethod
    def insert_goal(self, row: GoalRow) -> GoalRow:
        """Insert a new goal row. Raises DuplicateError on id clash."""

    @abstractmethod
    def get_goal(self, goal_id: str) -> Optional[GoalRow]:
        """Get a goal by id, or None."""

    @abstractmethod
    def update_goal(self, row: GoalRow) -> GoalRow:
        """Replace a goal row. Raises NotFoundError if it doesn't exist."""

    @abstractmethod
    def delete_goal(self, goal_id: str) -> bool:
        """Delete a goal. Returns False if there was nothing to delete."""

    @abstractmethod
    def list_goals(self, user_id: Optional[str] = None) -> list[GoalRow]:
        """List goals, newest first."""

    # -- Couples -----------------------------------------------------------

    @abstractmethod
    def insert_couple(self, row: CoupleRow) -> CoupleRow:
        """Insert a new couple row. Raises DuplicateError on id clash."""

    @abstractmethod
    def get_couple_for_user(self, user_id: str) -> Optional[CoupleRow]:
        """Return the couple either partner belongs to, or None."""

    @abstractmethod
    def delete_couple(self, couple_id: str) -> bool:
        """Delete a couple. Returns False if there was nothing to delete."""


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
