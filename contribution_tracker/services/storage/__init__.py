"""
Storage Services Package

Provides the abstract storage interface and an in-memory implementation.
"""

from contribution_tracker.services.storage.interface import (
    DuplicateError,
    HouseholdStoreInterface,
    NotFoundError,
    StorageError,
)
from contribution_tracker.services.storage.memory import InMemoryHouseholdStore

__all__ = [
    # Interface
    "HouseholdStoreInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryHouseholdStore",
]
