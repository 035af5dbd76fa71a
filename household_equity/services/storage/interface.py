"""
Abstract Storage Interface

DESIGN DECISION: The engine never touches storage. The orchestrator loads
records through this interface, hands them to the engine, and persists any
change before the next computation. This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the equity engine decoupled from persistence

The interface is intentionally simple - just the operations the household
ledger needs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from household_equity.models.audit import AuditEvent
from household_equity.models.household import (
    HouseholdMember,
    SavingsGoal,
    SharedExpenseRecord,
    UserMonthlyFinances,
)


class HouseholdStorageInterface(ABC):
    """
    Abstract interface for household record storage.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    # -- Members ---------------------------------------------------------------

    @abstractmethod
    async def save_member(self, member: HouseholdMember) -> bool:
        """
        Add a household member.

        Raises:
            DuplicateError: If a member with the same user_id exists
        """
        pass

    @abstractmethod
    async def list_members(self) -> list[HouseholdMember]:
        """List members in the order they were added (first is user 1)."""
        pass

    # -- Monthly finances ------------------------------------------------------

    @abstractmethod
    async def save_monthly_finances(self, finances: UserMonthlyFinances) -> bool:
        """
        Insert or replace a member's finances for one period.

        There is at most one record per (user_id, year, month).
        """
        pass

    @abstractmethod
    async def get_monthly_finances(
        self,
        year: int,
        month: int,
    ) -> list[UserMonthlyFinances]:
        """All finance records stored for a period."""
        pass

    # -- Expenses --------------------------------------------------------------

    @abstractmethod
    async def save_expense(self, expense: SharedExpenseRecord) -> bool:
        """
        Save a new expense. Expenses are never updated in place.

        Raises:
            DuplicateError: If the expense id already exists
        """
        pass

    @abstractmethod
    async def get_expense_by_id(self, expense_id: UUID) -> Optional[SharedExpenseRecord]:
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: UUID) -> bool:
        """
        Delete an expense by ID.

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def list_expenses(self, year: int, month: int) -> list[SharedExpenseRecord]:
        """
        Expenses whose stored period is (year, month), newest first.

        The stored period is used, not the expense date.
        """
        pass

    # -- Savings goals ---------------------------------------------------------

    @abstractmethod
    async def save_goal(self, goal: SavingsGoal) -> bool:
        """
        Save a new goal.

        Raises:
            DuplicateError: If the goal id already exists
        """
        pass

    @abstractmethod
    async def update_goal(self, goal: SavingsGoal) -> bool:
        """
        Replace a stored goal with a new version of it.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        pass

    @abstractmethod
    async def get_goal_by_id(self, goal_id: UUID) -> Optional[SavingsGoal]:
        pass

    @abstractmethod
    async def list_goals(self, include_completed: bool = False) -> list[SavingsGoal]:
        """Goals ordered by current target date (soonest first)."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """All events for one correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """All events for one entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
