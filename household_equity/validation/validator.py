"""
Household Record Validation

DESIGN DECISION: The equity engine assumes well-formed input and does not
defend against malformed records. Validation is the caller's job and happens
here, before anything is persisted:

SCHEMA checks are done by the pydantic models themselves
(non-positive amounts, missing beneficiary, month out of range).

HOUSEHOLD checks are done here, because they need to know who the two
members are:
- Payer, beneficiary and contributor must belong to the household
- A paid_for_other beneficiary must be the OTHER member
- Suspiciously large amounts and far-future dates are flagged

IMPORTANT: Validation NEVER silently fixes issues.
Errors block the record; warnings are reported for human review.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from household_equity.config import AppSettings, get_settings
from household_equity.models.household import (
    Contribution,
    HouseholdMember,
    SavingsGoal,
    SharedExpenseRecord,
    SplitType,
    UserMonthlyFinances,
    ValidationIssue,
    ValidationResult,
)
from household_equity.periods import months_between


class RecordRejectedError(Exception):
    """A household record failed validation and was not saved."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"{result.entity_type.capitalize()} rejected: {messages}")


class HouseholdRecordValidator:
    """
    Validates household records against the two members of the household.

    All methods are synchronous and side-effect free.
    """

    def __init__(
        self,
        members: Sequence[HouseholdMember],
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize validator.

        Args:
            members: The household members (only the first two count).
            settings: Thresholds; loaded from the environment if None.
        """
        self._member_ids = [m.user_id for m in members[:2]]
        self._settings = settings or get_settings().app

    def _is_member(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id in self._member_ids

    def _not_member_issue(self, field: str, user_id: Optional[str]) -> ValidationIssue:
        return ValidationIssue(
            field=field,
            issue_type="not_a_member",
            message=f"User {user_id} is not a member of this household",
            severity="error",
            suggested_fix="Pick one of the two household members",
        )

    def validate_expense(
        self,
        expense: SharedExpenseRecord,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Check an expense before it is logged.

        Checks:
        - payer is a member
        - paid_for_other beneficiary is the other member
        - amount sanity
        - expense date not too far in the future
        """
        today = today or date.today()
        issues = []

        if not self._is_member(expense.paid_by_user_id):
            issues.append(self._not_member_issue("paid_by_user_id", expense.paid_by_user_id))

        if expense.split_type == SplitType.PAID_FOR_OTHER:
            if not self._is_member(expense.beneficiary_user_id):
                issues.append(
                    self._not_member_issue("beneficiary_user_id", expense.beneficiary_user_id)
                )
            elif expense.beneficiary_user_id == expense.paid_by_user_id:
                issues.append(ValidationIssue(
                    field="beneficiary_user_id",
                    issue_type="self_beneficiary",
                    message="An expense paid for the other member cannot benefit the payer",
                    severity="error",
                    suggested_fix="Use a personal expense instead",
                ))

        if expense.amount > self._settings.max_expense_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({expense.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if expense.expense_date > max_future_date:
            issues.append(ValidationIssue(
                field="expense_date",
                issue_type="future_date",
                message=f"Expense date ({expense.expense_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return ValidationResult(
            entity_type="expense",
            entity_id=str(expense.id),
            issues=issues,
        )

    def validate_finances(self, finances: UserMonthlyFinances) -> ValidationResult:
        """Check a member's monthly income/fixed-expenses entry."""
        issues = []

        if not self._is_member(finances.user_id):
            issues.append(self._not_member_issue("user_id", finances.user_id))

        if finances.year is None or finances.month is None:
            issues.append(ValidationIssue(
                field="period",
                issue_type="missing",
                message="Monthly finances need a year and month",
                severity="error",
            ))

        if finances.fixed_personal_expenses > finances.total_income:
            issues.append(ValidationIssue(
                field="fixed_personal_expenses",
                issue_type="exceeds_income",
                message=(
                    "Fixed personal expenses exceed income; "
                    "net available will be counted as zero"
                ),
                severity="warning",
            ))

        return ValidationResult(
            entity_type="finances",
            entity_id=finances.user_id,
            issues=issues,
        )

    def validate_goal(
        self,
        goal: SavingsGoal,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Check a new savings goal."""
        today = today or date.today()
        issues = []

        if months_between(today, goal.original_target_date) <= 0:
            issues.append(ValidationIssue(
                field="original_target_date",
                issue_type="past_date",
                message=(
                    f"Target date ({goal.original_target_date}) is not after the "
                    "current month; the full amount will be due in one month"
                ),
                severity="warning",
                suggested_fix="Pick a target date in a later month",
            ))

        return ValidationResult(
            entity_type="goal",
            entity_id=str(goal.id),
            issues=issues,
        )

    def validate_contribution(
        self,
        goal: SavingsGoal,
        contribution: Contribution,
    ) -> ValidationResult:
        """Check a contribution against the goal it is meant for."""
        issues = []

        if not self._is_member(contribution.contributing_user_id):
            issues.append(
                self._not_member_issue("contributing_user_id", contribution.contributing_user_id)
            )

        if goal.is_completed:
            issues.append(ValidationIssue(
                field="goal",
                issue_type="goal_completed",
                message=f"Goal '{goal.name}' is already completed",
                severity="error",
            ))
        elif contribution.amount > goal.remaining:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="overshoot",
                message=(
                    f"Contribution ({contribution.amount:,.2f}) is more than the "
                    f"remaining {goal.remaining:,.2f}"
                ),
                severity="warning",
            ))

        return ValidationResult(
            entity_type="contribution",
            entity_id=str(goal.id),
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Plain-language summary of a validation result."""
        if not result.issues:
            return "All checks passed."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        if errors:
            lines.append("This entry can't be saved:")
            for issue in errors:
                lines.append(f"   - {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     Hint: {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        return "\n".join(lines)
