"""
In-Memory Storage Implementation

Keeps everything in process dictionaries. Used for tests and for running the
ledger without any external service configured. Nothing survives a restart.
"""

from typing import Optional
from uuid import UUID

from household_equity.models.audit import AuditEvent
from household_equity.models.household import (
    HouseholdMember,
    SavingsGoal,
    SharedExpenseRecord,
    UserMonthlyFinances,
)
from household_equity.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    HouseholdStorageInterface,
    NotFoundError,
)


class InMemoryHouseholdStorage(HouseholdStorageInterface):
    """Dictionary-backed household storage. Records are immutable, so no copies are needed."""

    def __init__(self):
        self._members: dict[str, HouseholdMember] = {}
        self._finances: dict[tuple[str, int, int], UserMonthlyFinances] = {}
        self._expenses: dict[UUID, SharedExpenseRecord] = {}
        self._goals: dict[UUID, SavingsGoal] = {}

    async def save_member(self, member: HouseholdMember) -> bool:
        if member.user_id in self._members:
            raise DuplicateError(f"Member already exists: {member.user_id}")
        self._members[member.user_id] = member
        return True

    async def list_members(self) -> list[HouseholdMember]:
        # dicts keep insertion order
        return list(self._members.values())

    async def save_monthly_finances(self, finances: UserMonthlyFinances) -> bool:
        key = (finances.user_id, finances.year, finances.month)
        self._finances[key] = finances
        return True

    async def get_monthly_finances(
        self,
        year: int,
        month: int,
    ) -> list[UserMonthlyFinances]:
        return [
            finances
            for (_, f_year, f_month), finances in self._finances.items()
            if f_year == year and f_month == month
        ]

    async def save_expense(self, expense: SharedExpenseRecord) -> bool:
        if expense.id in self._expenses:
            raise DuplicateError(f"Expense already exists: {expense.id}")
        self._expenses[expense.id] = expense
        return True

    async def get_expense_by_id(self, expense_id: UUID) -> Optional[SharedExpenseRecord]:
        return self._expenses.get(expense_id)

    async def delete_expense(self, expense_id: UUID) -> bool:
        return self._expenses.pop(expense_id, None) is not None

    async def list_expenses(self, year: int, month: int) -> list[SharedExpenseRecord]:
        expenses = [e for e in self._expenses.values() if e.period == (year, month)]
        expenses.sort(key=lambda e: (e.expense_date, e.created_at), reverse=True)
        return expenses

    async def save_goal(self, goal: SavingsGoal) -> bool:
        if goal.id in self._goals:
            raise DuplicateError(f"Goal already exists: {goal.id}")
        self._goals[goal.id] = goal
        return True

    async def update_goal(self, goal: SavingsGoal) -> bool:
        if goal.id not in self._goals:
            raise NotFoundError(f"Goal not found: {goal.id}")
        self._goals[goal.id] = goal
        return True

    async def get_goal_by_id(self, goal_id: UUID) -> Optional[SavingsGoal]:
        return self._goals.get(goal_id)

    async def list_goals(self, include_completed: bool = False) -> list[SavingsGoal]:
        goals = [
            g for g in self._goals.values()
            if include_completed or not g.is_completed
        ]
        goals.sort(key=lambda g: g.current_target_date)
        return goals


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
