"""
Data Models Package

This package contains all Pydantic models used in Contribution Tracker.
All data flowing through the system must conform to these schemas.
"""

from contribution_tracker.models.accounts import (
    Account,
    AccountType,
    ContributionLimits,
    Couple,
    FHSALimits,
    Goal,
    GoalPriority,
    Money,
    RelationshipStatus,
    RRSPLimits,
    TFSALimits,
    Transaction,
    TransactionType,
    User,
)
from contribution_tracker.models.results import (
    AllocationResult,
    ContributionCheck,
    NoticeOfAssessment,
    PortfolioSummary,
    TaxBracket,
    ValidationIssue,
    ValidationResult,
)
from contribution_tracker.models.rows import (
    AccountRow,
    CoupleRow,
    GoalRow,
    TransactionRow,
    UserRow,
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

__all__ = [
    # Domain models
    "Account",
    "AccountType",
    "ContributionLimits",
    "Couple",
    "FHSALimits",
    "Goal",
    "GoalPriority",
    "Money",
    "RelationshipStatus",
    "RRSPLimits",
    "TFSALimits",
    "Transaction",
    "TransactionType",
    "User",
    # Result models
    "AllocationResult",
    "ContributionCheck",
    "NoticeOfAssessment",
    "PortfolioSummary",
    "TaxBracket",
    "ValidationIssue",
    "ValidationResult",
    # Rows and mappers
    "AccountRow",
    "CoupleRow",
    "GoalRow",
    "TransactionRow",
    "UserRow",
    "account_row_to_account",
    "account_to_account_row",
    "couple_row_to_couple",
    "couple_to_couple_row",
    "goal_row_to_goal",
    "goal_to_goal_row",
    "transaction_row_to_transaction",
    "transaction_to_transaction_row",
    "user_row_to_user",
    "user_to_user_row",
]
