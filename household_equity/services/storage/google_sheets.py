"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the shared backend because:
1. Both members can look at the raw numbers directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (a household logs a few hundred rows a month)
- No transactions (writes are ordered so a failure leaves a consistent sheet)
- Limited query capabilities (we filter in Python)

Money is written as plain decimal strings so nothing goes through floats.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from household_equity.config import get_settings
from household_equity.models.audit import AuditEvent, AuditEventType, AuditSeverity
from household_equity.models.household import (
    Contribution,
    ExpenseCategory,
    HouseholdMember,
    SavingsGoal,
    SharedExpenseRecord,
    SplitType,
    UserMonthlyFinances,
)
from household_equity.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    HouseholdStorageInterface,
    NotFoundError,
    StorageError,
)

logger = structlog.get_logger(__name__)


MEMBER_COLUMNS = ["user_id", "name", "email"]

FINANCES_COLUMNS = [
    "user_id",
    "user_name",
    "year",
    "month",
    "total_income",
    "fixed_personal_expenses",
    "net_available",
]

EXPENSE_COLUMNS = [
    "id",
    "created_at",
    "description",
    "amount",
    "category",
    "paid_by_user_id",
    "split_type",
    "beneficiary_user_id",
    "expense_date",
    "year",
    "month",
]

GOAL_COLUMNS = [
    "id",
    "created_at",
    "name",
    "target_amount",
    "current_amount",
    "original_target_date",
    "current_target_date",
    "contributions_json",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "user_id",
]

_RETRY = dict(
    retry=retry_if_not_exception_type((DuplicateError, NotFoundError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def _cell(row: list, index: int, default: str = "") -> str:
    """Read a cell, tolerating short rows."""
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(**_RETRY)
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self._settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(columns))
            sheet.append_row(columns)
        return sheet

    def get_members_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.members_sheet_name, MEMBER_COLUMNS, rows=10)

    def get_finances_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.finances_sheet_name, FINANCES_COLUMNS)

    def get_expenses_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.expenses_sheet_name, EXPENSE_COLUMNS)

    def get_goals_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.goals_sheet_name, GOAL_COLUMNS, rows=200)

    def get_audit_sheet(self) -> gspread.Worksheet:
        # More rows for audit log
        return self._get_or_create(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsHouseholdStorage(HouseholdStorageInterface):
    """
    Google Sheets implementation of household storage.

    One worksheet per record type, one record per row. A goal's contribution
    history is JSON-serialized into a single cell.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -- Row conversion --------------------------------------------------------

    def _member_to_row(self, member: HouseholdMember) -> list:
        return [member.user_id, member.name, member.email or ""]

    def _row_to_member(self, row: list) -> HouseholdMember:
        return HouseholdMember(
            user_id=_cell(row, 0),
            name=_cell(row, 1),
            email=_cell(row, 2) or None,
        )

    def _finances_to_row(self, finances: UserMonthlyFinances) -> list:
        return [
            finances.user_id,
            finances.user_name,
            str(finances.year),
            str(finances.month),
            str(finances.total_income),
            str(finances.fixed_personal_expenses),
            # Informational copy for people reading the sheet; never read back
            str(finances.net_available),
        ]

    def _row_to_finances(self, row: list) -> UserMonthlyFinances:
        return UserMonthlyFinances(
            user_id=_cell(row, 0),
            user_name=_cell(row, 1),
            year=int(_cell(row, 2)),
            month=int(_cell(row, 3)),
            total_income=Decimal(_cell(row, 4, "0")),
            fixed_personal_expenses=Decimal(_cell(row, 5, "0")),
        )

    def _expense_to_row(self, expense: SharedExpenseRecord) -> list:
        return [
            str(expense.id),
            expense.created_at.isoformat(),
            expense.description,
            str(expense.amount),
            expense.category.value,
            expense.paid_by_user_id,
            expense.split_type.value,
            expense.beneficiary_user_id or "",
            expense.expense_date.isoformat(),
            str(expense.year),
            str(expense.month),
        ]

    def _row_to_expense(self, row: list) -> SharedExpenseRecord:
        return SharedExpenseRecord(
            id=UUID(_cell(row, 0)),
            created_at=datetime.fromisoformat(_cell(row, 1)),
            description=_cell(row, 2),
            amount=Decimal(_cell(row, 3)),
            category=ExpenseCategory(_cell(row, 4, ExpenseCategory.OTHER.value)),
            paid_by_user_id=_cell(row, 5),
            split_type=SplitType(_cell(row, 6, SplitType.SHARED.value)),
            beneficiary_user_id=_cell(row, 7) or None,
            expense_date=date.fromisoformat(_cell(row, 8)),
            year=int(_cell(row, 9)),
            month=int(_cell(row, 10)),
        )

    def _goal_to_row(self, goal: SavingsGoal) -> list:
        return [
            str(goal.id),
            goal.created_at.isoformat(),
            goal.name,
            str(goal.target_amount),
            str(goal.current_amount),
            goal.original_target_date.isoformat(),
            goal.current_target_date.isoformat(),
            json.dumps([c.model_dump(mode="json") for c in goal.contributions]),
        ]

    def _row_to_goal(self, row: list) -> SavingsGoal:
        contributions_json = _cell(row, 7)
        contributions = tuple(
            Contribution(**item) for item in json.loads(contributions_json)
        ) if contributions_json else ()

        return SavingsGoal(
            id=UUID(_cell(row, 0)),
            created_at=datetime.fromisoformat(_cell(row, 1)),
            name=_cell(row, 2),
            target_amount=Decimal(_cell(row, 3)),
            current_amount=Decimal(_cell(row, 4, "0")),
            original_target_date=date.fromisoformat(_cell(row, 5)),
            current_target_date=date.fromisoformat(_cell(row, 6)) if _cell(row, 6) else None,
            contributions=contributions,
        )

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> Optional[int]:
        """1-based sheet row number whose first column equals key (row 1 is the header)."""
        for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
            if row and row[0] == key:
                return idx
        return None

    # -- Members ---------------------------------------------------------------

    @retry(**_RETRY)
    async def save_member(self, member: HouseholdMember) -> bool:
        try:
            sheet = self._client.get_members_sheet()
            if self._find_row(sheet, member.user_id) is not None:
                raise DuplicateError(f"Member already exists: {member.user_id}")
            sheet.append_row(self._member_to_row(member), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save member: {e}")

    async def list_members(self) -> list[HouseholdMember]:
        try:
            sheet = self._client.get_members_sheet()
            return [
                self._row_to_member(row)
                for row in sheet.get_all_values()[1:]
                if row and row[0]
            ]
        except Exception as e:
            raise StorageError(f"Failed to list members: {e}")

    # -- Monthly finances ------------------------------------------------------

    @retry(**_RETRY)
    async def save_monthly_finances(self, finances: UserMonthlyFinances) -> bool:
        """Upsert: the row for (user_id, year, month) is replaced if present."""
        try:
            sheet = self._client.get_finances_sheet()
            new_row = self._finances_to_row(finances)

            for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
                if (
                    len(row) >= 4
                    and row[0] == finances.user_id
                    and row[2] == str(finances.year)
                    and row[3] == str(finances.month)
                ):
                    sheet.update(f"A{idx}", [new_row], value_input_option="RAW")
                    return True

            sheet.append_row(new_row, value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save monthly finances: {e}")

    async def get_monthly_finances(
        self,
        year: int,
        month: int,
    ) -> list[UserMonthlyFinances]:
        try:
            sheet = self._client.get_finances_sheet()
            return [
                self._row_to_finances(row)
                for row in sheet.get_all_values()[1:]
                if len(row) >= 4 and row[2] == str(year) and row[3] == str(month)
            ]
        except Exception as e:
            raise StorageError(f"Failed to get monthly finances: {e}")

    # -- Expenses --------------------------------------------------------------

    @retry(**_RETRY)
    async def save_expense(self, expense: SharedExpenseRecord) -> bool:
        try:
            sheet = self._client.get_expenses_sheet()
            if self._find_row(sheet, str(expense.id)) is not None:
                raise DuplicateError(f"Expense already exists: {expense.id}")
            sheet.append_row(self._expense_to_row(expense), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    async def get_expense_by_id(self, expense_id: UUID) -> Optional[SharedExpenseRecord]:
        try:
            sheet = self._client.get_expenses_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == str(expense_id):
                    return self._row_to_expense(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get expense: {e}")

    async def delete_expense(self, expense_id: UUID) -> bool:
        try:
            sheet = self._client.get_expenses_sheet()
            idx = self._find_row(sheet, str(expense_id))
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")

    async def list_expenses(self, year: int, month: int) -> list[SharedExpenseRecord]:
        try:
            sheet = self._client.get_expenses_sheet()
            expenses = []
            for row in sheet.get_all_values()[1:]:
                if not row or not row[0]:
                    continue
                if _cell(row, 9) != str(year) or _cell(row, 10) != str(month):
                    continue
                try:
                    expenses.append(self._row_to_expense(row))
                except ValueError as e:
                    logger.warning("skipping_malformed_expense_row", row_id=row[0], error=str(e))

            expenses.sort(key=lambda e: (e.expense_date, e.created_at), reverse=True)
            return expenses
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")

    # -- Savings goals ---------------------------------------------------------

    @retry(**_RETRY)
    async def save_goal(self, goal: SavingsGoal) -> bool:
        try:
            sheet = self._client.get_goals_sheet()
            if self._find_row(sheet, str(goal.id)) is not None:
                raise DuplicateError(f"Goal already exists: {goal.id}")
            sheet.append_row(self._goal_to_row(goal), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save goal: {e}")

    async def update_goal(self, goal: SavingsGoal) -> bool:
        try:
            sheet = self._client.get_goals_sheet()
            idx = self._find_row(sheet, str(goal.id))
            if idx is None:
                raise NotFoundError(f"Goal not found: {goal.id}")
            sheet.update(f"A{idx}", [self._goal_to_row(goal)], value_input_option="RAW")
            return True
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update goal: {e}")

    async def get_goal_by_id(self, goal_id: UUID) -> Optional[SavingsGoal]:
        try:
            sheet = self._client.get_goals_sheet()
            for row in sheet.get_all_values()[1:]:
                if row and row[0] == str(goal_id):
                    return self._row_to_goal(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get goal: {e}")

    async def list_goals(self, include_completed: bool = False) -> list[SavingsGoal]:
        try:
            sheet = self._client.get_goals_sheet()
            goals = []
            for row in sheet.get_all_values()[1:]:
                if not row or not row[0]:
                    continue
                try:
                    goal = self._row_to_goal(row)
                except ValueError as e:
                    logger.warning("skipping_malformed_goal_row", row_id=row[0], error=str(e))
                    continue
                if include_completed or not goal.is_completed:
                    goals.append(goal)

            goals.sort(key=lambda g: g.current_target_date)
            return goals
        except Exception as e:
            raise StorageError(f"Failed to list goals: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        return AuditEvent(
            event_id=UUID(_cell(row, 0)),
            timestamp=datetime.fromisoformat(_cell(row, 1)),
            event_type=AuditEventType(_cell(row, 2)),
            severity=AuditSeverity(_cell(row, 3)),
            entity_type=_cell(row, 4) or None,
            entity_id=_cell(row, 5) or None,
            correlation_id=UUID(_cell(row, 6)) if _cell(row, 6) else None,
            description=_cell(row, 7),
            details=json.loads(_cell(row, 8)) if _cell(row, 8) else {},
            error_message=_cell(row, 9) or None,
            user_id=_cell(row, 10) or None,
        )

    def _read_events(self, predicate) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0] or not predicate(row):
                continue
            try:
                events.append(self._row_to_event(row))
            except ValueError as e:
                logger.warning("skipping_malformed_audit_row", row_id=row[0], error=str(e))
        return events

    @retry(**_RETRY)
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Failures are logged, never raised."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            logger.warning(
                "audit_event_write_failed",
                event_id=str(event.event_id),
                error=str(e),
            )
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            events = self._read_events(
                lambda row: _cell(row, 6) == str(correlation_id)
            )
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        try:
            events = self._read_events(
                lambda row: _cell(row, 4) == entity_type and _cell(row, 5) == entity_id
            )
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            events = self._read_events(lambda row: True)
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
