"""Integration tests for the ledger flows (in-memory storage)."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio

from household_equity.audit import AuditLogger
from household_equity.config import AppSettings, EngineSettings, get_settings
from household_equity.models.audit import AuditEventType
from household_equity.models.household import SplitType
from household_equity.orchestrator import (
    HouseholdLedger,
    HouseholdNotConfiguredError,
    create_app_components,
)
from household_equity.services.storage import (
    InMemoryAuditStorage,
    InMemoryHouseholdStorage,
    NotFoundError,
    StorageError,
)
from household_equity.validation import HouseholdRecordValidator, RecordRejectedError

from tests.conftest import TODAY


def _validator(members):
    return HouseholdRecordValidator(members, settings=AppSettings())


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def storage():
    return InMemoryHouseholdStorage()


@pytest.fixture
def ledger(storage, audit_storage):
    return HouseholdLedger(
        storage=storage,
        audit_logger=AuditLogger(audit_storage),
        engine_settings=EngineSettings(),
        validator_factory=_validator,
    )


@pytest_asyncio.fixture
async def household(ledger):
    await ledger.add_member("u1", "Alice")
    await ledger.add_member("u2", "Bob")
    await ledger.save_monthly_finances("u1", 2024, 1, Decimal("3500"), Decimal("500"))
    await ledger.save_monthly_finances("u2", 2024, 1, Decimal("1200"), Decimal("200"))
    return ledger


async def _event_types(audit_storage):
    return [e.event_type for e in await audit_storage.get_recent_events()]


class TestMembers:
    """Tests for household membership."""

    @pytest.mark.asyncio
    async def test_requires_two_members(self, ledger):
        await ledger.add_member("u1", "Alice")
        with pytest.raises(HouseholdNotConfiguredError):
            await ledger.get_members()

    @pytest.mark.asyncio
    async def test_first_two_members(self, ledger):
        await ledger.add_member("u1", "Alice")
        await ledger.add_member("u2", "Bob")
        await ledger.add_member("u3", "Carol")

        user1, user2 = await ledger.get_members()
        assert (user1.user_id, user2.user_id) == ("u1", "u2")


class TestMonthlyFinances:
    """Tests for saving and loading monthly finances."""

    @pytest.mark.asyncio
    async def test_missing_member_counts_as_zero(self, ledger):
        await ledger.add_member("u1", "Alice")
        await ledger.add_member("u2", "Bob")
        await ledger.save_monthly_finances("u1", 2024, 1, Decimal("2000"), Decimal("0"))

        user1, user2 = await ledger.get_monthly_finances(2024, 1)
        assert user1.net_available == Decimal("2000")
        assert user2.user_name == "Bob"
        assert user2.net_available == Decimal("0")

    @pytest.mark.asyncio
    async def test_replaces_existing_entry(self, household):
        await household.save_monthly_finances("u1", 2024, 1, Decimal("5000"), Decimal("0"))

        user1, _ = await household.get_monthly_finances(2024, 1)
        assert user1.net_available == Decimal("5000")

    @pytest.mark.asyncio
    async def test_unknown_member_rejected(self, household):
        with pytest.raises(RecordRejectedError):
            await household.save_monthly_finances("u9", 2024, 1, Decimal("1"), Decimal("0"))

    @pytest.mark.asyncio
    async def test_audited(self, household, audit_storage):
        assert AuditEventType.FINANCES_UPDATED in await _event_types(audit_storage)


class TestExpenses:
    """Tests for recording and deleting expenses."""

    @pytest.mark.asyncio
    async def test_record_expense(self, household, audit_storage):
        expense, result = await household.record_expense(
            description="Groceries",
            amount=Decimal("400"),
            paid_by_user_id="u1",
            expense_date=date(2024, 1, 10),
        )

        assert result.is_valid
        assert expense.period == (2024, 1)
        assert await household.list_expenses(2024, 1) == [expense]

        events = await audit_storage.get_events_by_entity("expense", str(expense.id))
        assert events[0].event_type == AuditEventType.EXPENSE_RECORDED

    @pytest.mark.asyncio
    async def test_rejected_expense_not_saved(self, household, audit_storage):
        with pytest.raises(RecordRejectedError) as exc_info:
            await household.record_expense(
                description="Gift",
                amount=Decimal("50"),
                paid_by_user_id="u1",
                split_type=SplitType.PAID_FOR_OTHER,
                beneficiary_user_id="u1",
                expense_date=date(2024, 1, 10),
            )

        assert exc_info.value.result.has_errors
        assert await household.list_expenses(2024, 1) == []
        assert AuditEventType.VALIDATION_FAILED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_delete_expense(self, household):
        expense, _ = await household.record_expense(
            description="Rent",
            amount=Decimal("1200"),
            paid_by_user_id="u2",
            expense_date=date(2024, 1, 1),
        )
        await household.delete_expense(expense.id)

        assert await household.list_expenses(2024, 1) == []

    @pytest.mark.asyncio
    async def test_delete_missing_expense(self, household):
        with pytest.raises(NotFoundError):
            await household.delete_expense(uuid4())


class TestSavingsGoals:
    """Tests for goals and contributions."""

    @pytest.mark.asyncio
    async def test_create_goal(self, household):
        goal, _ = await household.create_goal("Holiday", Decimal("6000"), date(2030, 7, 15))

        assert goal.current_target_date == date(2030, 7, 15)
        assert await household.list_goals() == [goal]

    @pytest.mark.asyncio
    async def test_contribute(self, household):
        goal, _ = await household.create_goal("Holiday", Decimal("6000"), date(2030, 7, 15))

        updated, _ = await household.contribute_to_goal(goal.id, Decimal("500"), "u2")

        assert updated.current_amount == Decimal("500")
        assert (await household.list_goals())[0].current_amount == Decimal("500")

    @pytest.mark.asyncio
    async def test_completing_goal(self, household, audit_storage):
        goal, _ = await household.create_goal("Bike", Decimal("300"), date(2030, 1, 1))

        updated, _ = await household.contribute_to_goal(goal.id, Decimal("300"), "u1")

        assert updated.is_completed
        assert await household.list_goals() == []
        assert len(await household.list_goals(include_completed=True)) == 1
        assert AuditEventType.GOAL_COMPLETED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_contribute_to_missing_goal(self, household):
        with pytest.raises(NotFoundError):
            await household.contribute_to_goal(uuid4(), Decimal("10"), "u1")

    @pytest.mark.asyncio
    async def test_contribution_from_stranger_rejected(self, household):
        goal, _ = await household.create_goal("Holiday", Decimal("6000"), date(2030, 7, 15))
        with pytest.raises(RecordRejectedError):
            await household.contribute_to_goal(goal.id, Decimal("10"), "u9")


class TestMonthlyStatus:
    """End-to-end monthly status."""

    @pytest.mark.asyncio
    async def test_monthly_status(self, household, audit_storage):
        await household.record_expense(
            description="Groceries",
            amount=Decimal("400"),
            paid_by_user_id="u1",
            expense_date=date(2024, 1, 10),
        )
        await household.record_expense(
            description="Next month",
            amount=Decimal("999"),
            paid_by_user_id="u2",
            expense_date=date(2024, 2, 10),
        )
        await household.create_goal("Holiday", Decimal("12000"), date(2030, 7, 15))

        status = await household.get_monthly_status(2024, 1, today=TODAY)

        assert status.debt.total_shared_expenses == Decimal("400.00")
        assert status.summary.who_owes_whom == "Bob owes $100.00 to Alice"
        assert status.summary.available_for_savings == Decimal("3600.00")
        assert len(status.savings_projections) == 1
        assert AuditEventType.MONTHLY_STATUS_COMPUTED in await _event_types(audit_storage)

    @pytest.mark.asyncio
    async def test_invalid_month(self, household):
        with pytest.raises(ValueError):
            await household.get_monthly_status(2024, 13)

    @pytest.mark.asyncio
    async def test_settings_flow_into_engine(self, storage):
        ledger = HouseholdLedger(
            storage=storage,
            engine_settings=EngineSettings(currency_symbol="€", settlement_tolerance=Decimal("5")),
            validator_factory=_validator,
        )
        await ledger.add_member("u1", "Alice")
        await ledger.add_member("u2", "Bob")
        await ledger.save_monthly_finances("u1", 2024, 1, Decimal("1000"), Decimal("0"))
        await ledger.save_monthly_finances("u2", 2024, 1, Decimal("1000"), Decimal("0"))
        await ledger.record_expense("Snacks", Decimal("8"), "u1", expense_date=date(2024, 1, 5))
        await ledger.record_expense("Taxi", Decimal("40"), "u1", expense_date=date(2024, 1, 6))

        status = await ledger.get_monthly_status(2024, 1, today=TODAY)

        assert status.summary.who_owes_whom == "Bob owes €24.00 to Alice"


class FailingStorage(InMemoryHouseholdStorage):
    async def save_expense(self, expense):
        raise StorageError("sheet unavailable")


class TestStorageFailures:
    """Storage failures are audited and re-raised."""

    @pytest.mark.asyncio
    async def test_storage_error_audited(self, audit_storage):
        ledger = HouseholdLedger(
            storage=FailingStorage(),
            audit_logger=AuditLogger(audit_storage),
            engine_settings=EngineSettings(),
            validator_factory=_validator,
        )
        await ledger.add_member("u1", "Alice")
        await ledger.add_member("u2", "Bob")

        with pytest.raises(StorageError):
            await ledger.record_expense("Rent", Decimal("10"), "u1", expense_date=date(2024, 1, 1))

        assert AuditEventType.STORAGE_ERROR in await _event_types(audit_storage)


class TestCreateAppComponents:
    """Tests for the application factory."""

    def test_memory_backend_by_default(self, monkeypatch):
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        get_settings.cache_clear()

        ledger, sheets_client = create_app_components()

        assert isinstance(ledger, HouseholdLedger)
        assert sheets_client is None

    def test_unconfigured_sheets_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        get_settings.cache_clear()

        _, sheets_client = create_app_components()

        assert sheets_client is None
        get_settings.cache_clear()
