"""
Storage Services Package

Provides abstract interfaces and concrete implementations for household records.
The in-memory backend needs no configuration; Google Sheets is the shared,
persistent backend.
"""

from household_equity.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    HouseholdStorageInterface,
    NotFoundError,
    StorageError,
)
from household_equity.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryHouseholdStorage,
)
from household_equity.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsHouseholdStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "HouseholdStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryHouseholdStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsHouseholdStorage",
]
