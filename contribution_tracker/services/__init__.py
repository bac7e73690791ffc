"""Services package."""

from contribution_tracker.services.storage import (
    DuplicateError,
    HouseholdStoreInterface,
    InMemoryHouseholdStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    "DuplicateError",
    "HouseholdStoreInterface",
    "InMemoryHouseholdStore",
    "NotFoundError",
    "StorageError",
]
