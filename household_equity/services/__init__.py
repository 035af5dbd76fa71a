"""Services package."""

from household_equity.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsHouseholdStorage,
    HouseholdStorageInterface,
    InMemoryAuditStorage,
    InMemoryHouseholdStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsHouseholdStorage",
    "HouseholdStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryHouseholdStorage",
    "NotFoundError",
    "StorageError",
]
