"""
In-Memory Storage Implementation

Keeps rows in plain dicts keyed by id. Nothing survives the process,
which is all a single session or a test needs.

TRADEOFFS:
- No durability
- No locking; one caller at a time
- Filtering and ordering are done in Python

Rows are copied on the way in and on the way out so callers can't
mutate stored state behind the store's back.
"""

from typing import Optional, TypeVar

from pydantic import BaseModel

from contribution_tracker.models.rows import (
    AccountRow,
    CoupleRow,
    GoalRow,
    TransactionRow,
    UserRow,
)
from contribution_tracker.services.storage.interface import (
    DuplicateError,
    HouseholdStoreInterface,
    NotFoundError,
)


RowT = TypeVar("RowT", bound=BaseModel)


def _newest_first(rows: list[RowT], key: str) -> list[RowT]:
    # ISO strings sort chronologically; rows without a value go last
    return sorted(rows, key=lambda row: getattr(row, key) or "", reverse=True)


class InMemoryHouseholdStore(HouseholdStoreInterface):
    """Dict-backed store for users, accounts, transactions, goals and couples."""

    def __init__(self):
        self._users: dict[str, UserRow] = {}
        self._accounts: dict[str, AccountRow] = {}
        self._transactions: dict[str, TransactionRow] = {}
        self._goals: dict[str, GoalRow] = {}
        self._couples: dict[str, CoupleRow] = {}

    @staticmethod
    def _insert(table: dict[str, RowT], row: RowT, entity: str) -> RowT:
        if row.id in table:
            raise DuplicateError(f"{entity} already exists: {row.id}")
        table[row.id] = row.model_copy(deep=True)
        return row.model_copy(deep=True)

    @staticmethod
    def _update(table: dict[str, RowT], row: RowT, entity: str) -> RowT:
        if row.id not in table:
            raise NotFoundError(f"{entity} not found: {row.id}")
        table[row.id] = row.model_copy(deep=True)
        return row.model_copy(deep=True)

    @staticmethod
    def _get(table: dict[str, RowT], row_id: str) -> Optional[RowT]:
        row = table.get(row_id)
        return row.model_copy(deep=True) if row is not None else None

    @staticmethod
    def _delete(table: dict[str, RowT], row_id: str) -> bool:
        return table.pop(row_id, None) is not None

    # -- Users -------------------------------------------------------------

    def insert_user(self, row: UserRow) -> UserRow:
        return self._insert(self._users, row, "User")

    def get_user(self, user_id: str) -> Optional[UserRow]:
        return self._get(self._users, user_id)

    def update_user(self, row: UserRow) -> UserRow:
        return self._update(self._users, row, "User")

    def delete_user(self, user_id: str) -> bool:
        return self._delete(self._users, user_id)

    # -- Accounts ----------------------------------------------------------

    def insert_account(self, row: AccountRow) -> AccountRow:
        return self._insert(self._accounts, row, "Account")

    def get_account(self, account_id: str) -> Optional[AccountRow]:
        return self._get(self._accounts, account_id)

    def update_account(self, row: AccountRow) -> AccountRow:
        return self._update(self._accounts, row, "Account")

    def delete_account(self, account_id: str) -> bool:
        return self._delete(self._accounts, account_id)

    def list_accounts(self, user_id: Optional[str] = None) -> list[AccountRow]:
        rows = [
            row.model_copy(deep=True)
            for row in self._accounts.values()
            if user_id is None or row.user_id == user_id
        ]
        return _newest_first(rows, "created_at")

    # -- Transactions ------------------------------------------------------

    def insert_transaction(self, row: TransactionRow) -> TransactionRow:
        return self._insert(self._transactions, row, "Transaction")

    def get_transaction(self, transaction_id: str) -> Optional[TransactionRow]:
        return self._get(self._transactions, transaction_id)

    def update_transaction(self, row: TransactionRow) -> TransactionRow:
        return self._update(self._transactions, row, "Transaction")

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._delete(self._transactions, transaction_id)

    def list_transactions(
        self,
        user_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> list[TransactionRow]:
        rows = [
            row.model_copy(deep=True)
            for row in self._transactions.values()
            if (user_id is None or row.user_id == user_id)
            and (account_id is None or row.account_id == account_id)
        ]
        return _newest_first(rows, "date")

    # -- Goals -------------------------------------------------------------

    def insert_goal(self, row: GoalRow) -> GoalRow:
        return self._insert(self._goals, row, "Goal")

    def get_goal(self, goal_id: str) -> Optional[GoalRow]:
        return self._get(self._goals, goal_id)

    def update_goal(self, row: GoalRow) -> GoalRow:
        return self._update(self._goals, row, "Goal")

    def delete_goal(self, goal_id: str) -> bool:
        return self._delete(self._goals, goal_id)

    def list_goals(self, user_id: Optional[str] = None) -> list[GoalRow]:
        rows = [
            row.model_copy(deep=True)
            for row in self._goals.values()
            if user_id is None or row.user_id == user_id
        ]
        return _newest_first(rows, "created_at")

    # -- Couples -----------------------------------------------------------

    def insert_couple(self, row: CoupleRow) -> CoupleRow:
        return self._insert(self._couples, row, "Couple")

    def get_couple_for_user(self, user_id: str) -> Optional[CoupleRow]:
        for row in self._couples.values():
            if user_id in (row.partner1_id, row.partner2_id):
                return row.model_copy(deep=True)
        return None

    def delete_couple(self, couple_id: str) -> bool:
        return self._delete(self._couples, couple_id)
