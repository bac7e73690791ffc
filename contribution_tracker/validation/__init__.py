"""Transaction validation package."""

from contribution_tracker.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
