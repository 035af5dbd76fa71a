"""
Household Records

These models define the plain records the equity engine consumes:
1. Monthly finances of each member
2. Logged shared expenses
3. Savings goals and their contributions

DESIGN DECISION: Records are loaded from storage by the caller and handed to
the engine as immutable snapshots. Expenses and goals are frozen; a goal
"changes" by producing a new instance, which the caller then persists.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from household_equity.money import ZERO, round_half_up
from household_equity.periods import months_between, period_of


# =============================================================================
# ENUMS
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Expense categories.

    Informational only: the category never affects any calculation.
    """
    RENT = "rent"
    GROCERIES = "groceries"
    UTILITIES = "utilities"  # power, water, gas, internet
    TRANSPORT = "transport"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    RESTAURANTS = "restaurants"
    OTHER = "other"


class SplitType(str, Enum):
    """
    How an expense is attributed between the two members.

    CRITICAL: Only SHARED expenses make up the pool that is divided by
    participation percentage.
    """
    SHARED = "shared"                          # Divided by participation
    PERSONAL = "personal"                      # Only affects the payer
    PAID_FOR_OTHER = "paid_for_other"          # Payer covered the other member
    FULL_REIMBURSEMENT = "full_reimbursement"  # Other member repays everything


# =============================================================================
# MEMBERS & MONTHLY FINANCES
# =============================================================================

class HouseholdMember(BaseModel):
    """One of the two people sharing the household."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None


def calculate_net_available(
    total_income: Decimal,
    fixed_personal_expenses: Decimal,
) -> Decimal:
    """Net Available = income - fixed personal expenses, floored at zero."""
    return max(ZERO, total_income - fixed_personal_expenses)


class UserMonthlyFinances(BaseModel):
    """
    Income and fixed personal expenses of one member for one period.

    net_available is computed from its inputs on every access, so it can never
    be stored out of sync with income or fixed expenses.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    user_id: str = Field(..., min_length=1)
    user_name: str = Field(..., min_length=1)
    total_income: Decimal = Field(
        default=ZERO,
        ge=0,
        description="Total monthly income"
    )
    fixed_personal_expenses: Decimal = Field(
        default=ZERO,
        ge=0,
        description="Fixed expenses only this member carries"
    )
    year: Optional[int] = Field(default=None, ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    @computed_field
    @property
    def net_available(self) -> Decimal:
        return calculate_net_available(self.total_income, self.fixed_personal_expenses)


# =============================================================================
# SHARED EXPENSES
# =============================================================================

class SharedExpenseRecord(BaseModel):
    """
    A logged household expense.

    Records are created once and never updated in place, only deleted.
    The (year, month) period is taken from expense_date at construction;
    copying the record with a different date keeps the original period.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount paid"
    )
    category: ExpenseCategory = ExpenseCategory.OTHER
    paid_by_user_id: str = Field(..., min_length=1)
    split_type: SplitType = SplitType.SHARED
    beneficiary_user_id: Optional[str] = Field(
        default=None,
        description="Member the expense was paid for (paid_for_other only)"
    )
    expense_date: date = Field(default_factory=date.today)
    year: int = Field(default=0, ge=0, le=9999)
    month: int = Field(default=0, ge=0, le=12)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="before")
    @classmethod
    def derive_period(cls, data: Any) -> Any:
        """Fill year/month from the expense date when not given explicitly."""
        if not isinstance(data, dict):
            return data
        if data.get("year") and data.get("month"):
            return data
        raw_date = data.get("expense_date") or date.today()
        if isinstance(raw_date, str):
            raw_date = date.fromisoformat(raw_date)
        if isinstance(raw_date, datetime):
            raw_date = raw_date.date()
        year, month = period_of(raw_date)
        return {**data, "expense_date": raw_date, "year": year, "month": month}

    @model_validator(mode="after")
    def validate_beneficiary(self) -> "SharedExpenseRecord":
        """A beneficiary is required for paid_for_other and only allowed there."""
        if self.split_type == SplitType.PAID_FOR_OTHER:
            if not self.beneficiary_user_id:
                raise ValueError("paid_for_other expenses require a beneficiary")
        elif self.beneficiary_user_id:
            raise ValueError(
                "Beneficiary is only allowed for paid_for_other expenses"
            )
        if self.month < 1:
            raise ValueError("Expense period month must be between 1 and 12")
        return self

    @property
    def period(self) -> tuple[int, int]:
        return self.year, self.month


# =============================================================================
# SAVINGS GOALS
# =============================================================================

class Contribution(BaseModel):
    """A single deposit towards a savings goal."""
    model_config = ConfigDict(frozen=True)

    contribution_date: date = Field(default_factory=date.today)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    contributing_user_id: str = Field(..., min_length=1)


class SavingsGoal(BaseModel):
    """
    A household savings goal.

    original_target_date is fixed at creation. current_target_date defaults
    to it; a different value only comes from storage.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(..., gt=0, decimal_places=2)
    current_amount: Decimal = Field(default=ZERO, ge=0)
    original_target_date: date
    current_target_date: Optional[date] = None
    contributions: tuple[Contribution, ...] = ()
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="before")
    @classmethod
    def default_current_target(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("current_target_date"):
            return {**data, "current_target_date": data.get("original_target_date")}
        return data

    @property
    def remaining(self) -> Decimal:
        return max(ZERO, self.target_amount - self.current_amount)

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def progress_percentage(self) -> int:
        """Whole-percent progress towards the target."""
        ratio = self.current_amount / self.target_amount * 100
        return int(round_half_up(ratio, 0))

    def monthly_contribution_target(self, today: Optional[date] = None) -> Decimal:
        """Monthly deposit needed to reach the target by the current target date."""
        today = today or date.today()
        months = max(1, months_between(today, self.current_target_date))
        return round_half_up(self.remaining / months)

    def with_contribution(self, contribution: Contribution) -> "SavingsGoal":
        """Return a copy with the contribution appended and the amount raised."""
        return self.model_copy(update={
            "current_amount": self.current_amount + contribution.amount,
            "contributions": self.contributions + (contribution,),
        })


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'not_a_member', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating one household record before it is persisted.

    Errors block the record; warnings are shown but do not block.
    """

    entity_type: str = Field(
        ...,
        description="Kind of record validated (expense, finances, goal, contribution)"
    )
    entity_id: Optional[str] = None
    validated_at: datetime = Field(default_factory=datetime.utcnow)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
