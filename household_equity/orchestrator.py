"""
Main Orchestrator for the Household Ledger

This module ties storage, validation, auditing and the equity engine together
and defines the end-to-end flows:
1. Monthly finances entry (income and fixed personal expenses per member)
2. Expense entry and deletion
3. Savings goal creation and contributions
4. Monthly status (participation -> settlement -> savings projections)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Records are validated before they are persisted
- Every write is persisted before the engine is asked to recompute
- The engine only ever sees snapshots loaded from storage
- Every step is audited
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog

from household_equity.audit import AuditLogger, create_correlation_id
from household_equity.config import EngineSettings, get_settings
from household_equity.engine import compute_monthly_status, get_allocation_strategy
from household_equity.models.household import (
    Contribution,
    ExpenseCategory,
    HouseholdMember,
    SavingsGoal,
    SharedExpenseRecord,
    SplitType,
    UserMonthlyFinances,
    ValidationResult,
)
from household_equity.models.results import MonthlyStatus
from household_equity.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsHouseholdStorage,
    HouseholdStorageInterface,
    InMemoryAuditStorage,
    InMemoryHouseholdStorage,
    NotFoundError,
    StorageError,
)
from household_equity.validation import HouseholdRecordValidator, RecordRejectedError

logger = structlog.get_logger(__name__)


class HouseholdNotConfiguredError(Exception):
    """The household does not have its two members yet."""
    pass


class HouseholdLedger:
    """
    Orchestrates every flow of the household ledger.

    Flow for the monthly status:
    1. Resolve the two members (first two stored)
    2. Load both members' finances for the period (missing = zero)
    3. Load the period's expenses and the open savings goals
    4. Run the engine and audit the outcome
    """

    def __init__(
        self,
        storage: HouseholdStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        engine_settings: Optional[EngineSettings] = None,
        validator_factory=HouseholdRecordValidator,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._engine_settings = engine_settings or get_settings().engine
        self._validator_factory = validator_factory

    # -- Members ---------------------------------------------------------------

    async def add_member(self, user_id: str, name: str, email: Optional[str] = None) -> HouseholdMember:
        """Register a household member. Only the first two take part in calculations."""
        member = HouseholdMember(user_id=user_id, name=name, email=email)
        await self._storage.save_member(member)
        return member

    async def get_members(self) -> tuple[HouseholdMember, HouseholdMember]:
        """
        The two household members, in the order they were added.

        Raises:
            HouseholdNotConfiguredError: fewer than two members are stored
        """
        members = await self._storage.list_members()
        if len(members) < 2:
            raise HouseholdNotConfiguredError(
                f"A household needs 2 members, found {len(members)}"
            )
        return members[0], members[1]

    async def _validator(self) -> HouseholdRecordValidator:
        return self._validator_factory(await self.get_members())

    async def _reject_if_invalid(
        self,
        result: ValidationResult,
        correlation_id: UUID,
    ) -> None:
        if not result.has_errors:
            return
        if self._audit_logger:
            await self._audit_logger.log_validation_failed(
                entity_type=result.entity_type,
                entity_id=result.entity_id,
                issues=[
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in result.issues
                ],
                correlation_id=correlation_id,
            )
        raise RecordRejectedError(result)

    async def _persist(self, operation: str, write, correlation_id: UUID):
        """Run a storage write; storage failures are audited and re-raised."""
        try:
            return await write
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

    # -- Monthly finances ------------------------------------------------------

    async def save_monthly_finances(
        self,
        user_id: str,
        year: int,
        month: int,
        total_income: Decimal,
        fixed_personal_expenses: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[UserMonthlyFinances, ValidationResult]:
        """
        Record (or replace) one member's finances for a period.

        Returns:
            (saved_finances, validation_result) - the result carries warnings
        """
        correlation_id = correlation_id or create_correlation_id()
        members = await self.get_members()
        user_name = next((m.name for m in members if m.user_id == user_id), user_id)

        finances = UserMonthlyFinances(
            user_id=user_id,
            user_name=user_name,
            total_income=total_income,
            fixed_personal_expenses=fixed_personal_expenses,
            year=year,
            month=month,
        )

        result = self._validator_factory(members).validate_finances(finances)
        await self._reject_if_invalid(result, correlation_id)

        await self._persist(
            "save_monthly_finances",
            self._storage.save_monthly_finances(finances),
            correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_finances_updated(
                user_id=user_id,
                year=year,
                month=month,
                total_income=str(finances.total_income),
                fixed_personal_expenses=str(finances.fixed_personal_expenses),
                correlation_id=correlation_id,
            )

        return finances, result

    async def get_monthly_finances(
        self,
        year: int,
        month: int,
    ) -> tuple[UserMonthlyFinances, UserMonthlyFinances]:
        """Both members' finances for a period; a member with no entry counts as zero."""
        user1, user2 = await self.get_members()
        stored = {f.user_id: f for f in await self._storage.get_monthly_finances(year, month)}

        def for_member(member: HouseholdMember) -> UserMonthlyFinances:
            found = stored.get(member.user_id)
            if found is not None:
                return found
            return UserMonthlyFinances(
                user_id=member.user_id,
                user_name=member.name,
                year=year,
                month=month,
            )

        return for_member(user1), for_member(user2)

    # -- Expenses --------------------------------------------------------------

    async def record_expense(
        self,
        description: str,
        amount: Decimal,
        paid_by_user_id: str,
        split_type: SplitType = SplitType.SHARED,
        category: ExpenseCategory = ExpenseCategory.OTHER,
        beneficiary_user_id: Optional[str] = None,
        expense_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SharedExpenseRecord, ValidationResult]:
        """
        Log a new expense. Its period is taken from the expense date (default today).

        Raises:
            RecordRejectedError: the expense failed household validation
        """
        correlation_id = correlation_id or create_correlation_id()

        expense = SharedExpenseRecord(
            description=description,
            amount=amount,
            paid_by_user_id=paid_by_user_id,
            split_type=split_type,
            category=category,
            beneficiary_user_id=beneficiary_user_id,
            expense_date=expense_date or date.today(),
        )

        validator = await self._validator()
        result = validator.validate_expense(expense)
        await self._reject_if_invalid(result, correlation_id)

        await self._persist("save_expense", self._storage.save_expense(expense), correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_expense_recorded(
                expense_id=expense.id,
                paid_by_user_id=expense.paid_by_user_id,
                amount=str(expense.amount),
                split_type=expense.split_type.value,
                period=expense.period,
                correlation_id=correlation_id,
            )

        return expense, result

    async def delete_expense(
        self,
        expense_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Delete an expense.

        Raises:
            NotFoundError: no expense with that id
        """
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._storage.delete_expense(expense_id)
        if not deleted:
            raise NotFoundError(f"Expense not found: {expense_id}")

        if self._audit_logger:
            await self._audit_logger.log_expense_deleted(
                expense_id=expense_id,
                correlation_id=correlation_id,
            )

    async def list_expenses(self, year: int, month: int) -> list[SharedExpenseRecord]:
        """Expenses of a period, newest first."""
        return await self._storage.list_expenses(year, month)

    # -- Savings goals ---------------------------------------------------------

    async def create_goal(
        self,
        name: str,
        target_amount: Decimal,
        target_date: date,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SavingsGoal, ValidationResult]:
        """Create a savings goal; its current target date starts at the target date."""
        correlation_id = correlation_id or create_correlation_id()

        goal = SavingsGoal(
            name=name,
            target_amount=target_amount,
            original_target_date=target_date,
        )

        validator = await self._validator()
        result = validator.validate_goal(goal)
        await self._reject_if_invalid(result, correlation_id)

        await self._persist("save_goal", self._storage.save_goal(goal), correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_goal_created(
                goal_id=goal.id,
                name=goal.name,
                target_amount=str(goal.target_amount),
                target_date=goal.original_target_date.isoformat(),
                correlation_id=correlation_id,
            )

        return goal, result

    async def contribute_to_goal(
        self,
        goal_id: UUID,
        amount: Decimal,
        user_id: str,
        contribution_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SavingsGoal, ValidationResult]:
        """
        Add a contribution to a goal and persist the updated goal.

        Raises:
            NotFoundError: no goal with that id
            RecordRejectedError: the contribution failed validation
        """
        correlation_id = correlation_id or create_correlation_id()

        goal = await self._storage.get_goal_by_id(goal_id)
        if goal is None:
            raise NotFoundError(f"Goal not found: {goal_id}")

        contribution = Contribution(
            contribution_date=contribution_date or date.today(),
            amount=amount,
            contributing_user_id=user_id,
        )

        validator = await self._validator()
        result = validator.validate_contribution(goal, contribution)
        await self._reject_if_invalid(result, correlation_id)

        updated = goal.with_contribution(contribution)
        await self._persist("update_goal", self._storage.update_goal(updated), correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_contribution_recorded(
                goal_id=updated.id,
                user_id=user_id,
                amount=str(contribution.amount),
                new_total=str(updated.current_amount),
                correlation_id=correlation_id,
            )
            if updated.is_completed:
                await self._audit_logger.log_goal_completed(
                    goal_id=updated.id,
                    name=updated.name,
                    correlation_id=correlation_id,
                )

        return updated, result

    async def list_goals(self, include_completed: bool = False) -> list[SavingsGoal]:
        """Goals ordered by current target date."""
        return await self._storage.list_goals(include_completed=include_completed)

    # -- Monthly status --------------------------------------------------------

    async def get_monthly_status(
        self,
        year: int,
        month: int,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlyStatus:
        """
        Compute the monthly snapshot for a period from freshly loaded records.

        Raises:
            ValueError: month outside 1..12
            HouseholdNotConfiguredError: fewer than two members
        """
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")

        correlation_id = correlation_id or create_correlation_id()

        user1, user2 = await self.get_monthly_finances(year, month)
        expenses = await self._storage.list_expenses(year, month)
        goals = await self._storage.list_goals(include_completed=False)

        status = compute_monthly_status(
            user1,
            user2,
            expenses,
            goals,
            year=year,
            month=month,
            today=today,
            allocation=get_allocation_strategy(self._engine_settings.allocation_strategy),
            tolerance=self._engine_settings.settlement_tolerance,
            currency_symbol=self._engine_settings.currency_symbol,
        )

        if self._audit_logger:
            await self._audit_logger.log_monthly_status(
                year=year,
                month=month,
                settlement_message=status.summary.who_owes_whom,
                goal_count=len(status.savings_projections),
                delayed_goal_count=sum(1 for p in status.savings_projections if p.is_delayed),
                correlation_id=correlation_id,
            )

        return status


def create_app_components(
    use_storage: bool = True,
) -> tuple[HouseholdLedger, Optional[GoogleSheetsClient]]:
    """
    Factory function to create the ledger with its collaborators.

    Args:
        use_storage: Whether to use the configured persistent backend.
                    False always uses in-memory storage.

    Returns:
        (ledger, sheets_client) - sheets_client is None unless Google Sheets is used
    """
    settings = get_settings()
    sheets_client = None

    if use_storage and settings.app.storage_backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient()
            storage = GoogleSheetsHouseholdStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            storage = InMemoryHouseholdStorage()
            audit_logger = AuditLogger(InMemoryAuditStorage())
    else:
        storage = InMemoryHouseholdStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    ledger = HouseholdLedger(
        storage=storage,
        audit_logger=audit_logger,
        engine_settings=settings.engine,
    )

    return ledger, sheets_client
