"""
Storage Row Models and Mappers

Rows are the flat shape records take in storage:
- ids are strings
- money is a plain number
- dates are ISO "YYYY-MM-DD" strings
- enums are their string values
- contribution_limits is a JSON object keyed in camelCase

DESIGN DECISION: Each entity has exactly one pair of mapping functions
(row -> domain, domain -> row). Business logic only ever sees domain
models; storage only ever sees rows.
"""

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from contribution_tracker.models.accounts import (
    Account,
    ContributionLimits,
    Couple,
    Goal,
    Transaction,
    User,
)


class UserRow(BaseModel):
    id: str
    name: str
    email: str
    date_of_birth: str
    province: str
    relationship_status: str
    couple_id: Optional[str] = None
    contribution_limits: dict[str, Any] = Field(default_factory=dict)
    is_primary: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AccountRow(BaseModel):
    id: str
    user_id: str
    type: str
    institution_name: str
    account_number: str = ""
    current_balance: float = 0.0
    contribution_room: float = 0.0
    year_to_date_contributions: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TransactionRow(BaseModel):
    id: str
    user_id: str
    account_id: str
    type: str
    amount: float
    date: str
    description: str = ""
    category: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class GoalRow(BaseModel):
    id: str
    user_id: str
    title: str
    target_amount: float
    current_amount: float = 0.0
    target_date: str
    account_types: list[str] = Field(default_factory=list)
    priority: str = "medium"
    is_shared: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CoupleRow(BaseModel):
    id: str
    partner1_id: str
    partner2_id: str
    marriage_date: Optional[str] = None
    shared_goals: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =============================================================================
# Field helpers
# =============================================================================

def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _uuid(value: Optional[str]) -> Optional[UUID]:
    return UUID(value) if value else None


def _str(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value is not None else None


# =============================================================================
# Users
# =============================================================================

def user_row_to_user(row: UserRow) -> User:
    return User(
        id=UUID(row.id),
        name=row.name,
        email=row.email,
        date_of_birth=date.fromisoformat(row.date_of_birth),
        province=row.province,
        relationship_status=row.relationship_status,
        couple_id=_uuid(row.couple_id),
        contribution_limits=ContributionLimits.model_validate(row.contribution_limits),
        is_primary=row.is_primary,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def user_to_user_row(user: User) -> UserRow:
    return UserRow(
        id=str(user.id),
        name=user.name,
        email=user.email,
        date_of_birth=user.date_of_birth.isoformat(),
        province=user.province,
        relationship_status=user.relationship_status.value,
        couple_id=_str(user.couple_id),
        # Derived room is written too, for readers of the raw row
        contribution_limits=user.contribution_limits.model_dump(
            mode="json", by_alias=True, exclude_none=True
        ),
        is_primary=user.is_primary,
        created_at=_iso(user.created_at),
        updated_at=_iso(user.updated_at),
    )


# =============================================================================
# Accounts
# =============================================================================

def account_row_to_account(row: AccountRow) -> Account:
    return Account(
        id=UUID(row.id),
        user_id=UUID(row.user_id),
        type=row.type,
        institution_name=row.institution_name,
        account_number=row.account_number,
        current_balance=row.current_balance,
        contribution_room=row.contribution_room,
        year_to_date_contributions=row.year_to_date_contributions,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def account_to_account_row(account: Account) -> AccountRow:
    return AccountRow(
        id=str(account.id),
        user_id=str(account.user_id),
        type=account.type.value,
        institution_name=account.institution_name,
        account_number=account.account_number,
        current_balance=float(account.current_balance),
        contribution_room=float(account.contribution_room),
        year_to_date_contributions=float(account.year_to_date_contributions),
        created_at=_iso(account.created_at),
        updated_at=_iso(account.updated_at),
    )


# =============================================================================
# Transactions
# =============================================================================

def transaction_row_to_transaction(row: TransactionRow) -> Transaction:
    return Transaction(
        id=UUID(row.id),
        user_id=UUID(row.user_id),
        account_id=UUID(row.account_id),
        type=row.type,
        amount=row.amount,
        date=date.fromisoformat(row.date),
        description=row.description,
        category=row.category,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def transaction_to_transaction_row(transaction: Transaction) -> TransactionRow:
    return TransactionRow(
        id=str(transaction.id),
        user_id=str(transaction.user_id),
        account_id=str(transaction.account_id),
        type=transaction.type.value,
        amount=float(transaction.amount),
        date=transaction.date.isoformat(),
        description=transaction.description,
        category=transaction.category,
        created_at=_iso(transaction.created_at),
        updated_at=_iso(transaction.updated_at),
    )


# =============================================================================
# Goals
# =============================================================================

def goal_row_to_goal(row: GoalRow) -> Goal:
    return Goal(
        id=UUID(row.id),
        user_id=UUID(row.user_id),
        title=row.title,
        target_amount=row.target_amount,
        current_amount=row.current_amount,
        target_date=date.fromisoformat(row.target_date),
        account_types=row.account_types,
        priority=row.priority,
        is_shared=row.is_shared,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def goal_to_goal_row(goal: Goal) -> GoalRow:
    return GoalRow(
        id=str(goal.id),
        user_id=str(goal.user_id),
        title=goal.title,
        target_amount=float(goal.target_amount),
        current_amount=float(goal.current_amount),
        target_date=goal.target_date.isoformat(),
        account_types=[t.value for t in goal.account_types],
        priority=goal.priority.value,
        is_shared=goal.is_shared,
        created_at=_iso(goal.created_at),
        updated_at=_iso(goal.updated_at),
    )


# =============================================================================
# Couples
# =============================================================================

def couple_row_to_couple(row: CoupleRow) -> Couple:
    return Couple(
        id=UUID(row.id),
        partner1_id=UUID(row.partner1_id),
        partner2_id=UUID(row.partner2_id),
        marriage_date=date.fromisoformat(row.marriage_date) if row.marriage_date else None,
        shared_goals=[UUID(goal_id) for goal_id in row.shared_goals],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def couple_to_couple_row(couple: Couple) -> CoupleRow:
    return CoupleRow(
        id=str(couple.id),
        partner1_id=str(couple.partner1_id),
        partner2_id=str(couple.partner2_id),
        marriage_date=_iso(couple.marriage_date),
        shared_goals=[str(goal_id) for goal_id in couple.shared_goals],
        created_at=_iso(couple.created_at),
        updated_at=_iso(couple.updated_at),
    )
