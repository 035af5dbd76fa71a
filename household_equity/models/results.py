"""
Engine Result Models

Derived, never persisted. Each engine step returns one of these and no step
mutates another's output, so every model here is frozen.

Amounts are Decimals rounded to 2 places; percentages are 0-100 with 2 places.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# PARTICIPATION
# =============================================================================

class MemberParticipation(_Result):
    """One member's share of the household's combined net available income."""

    user_id: str
    user_name: str
    net_available: Decimal
    participation_percentage: Decimal = Field(..., ge=0, le=100)


class ParticipationResult(_Result):
    """
    The proportional-responsibility split for one period.

    The same percentages weight shared expenses and savings contributions.
    """

    user1: MemberParticipation
    user2: MemberParticipation
    total_net_available: Decimal

    @property
    def members(self) -> tuple[MemberParticipation, MemberParticipation]:
        return self.user1, self.user2

    def member(self, user_id: str) -> Optional[MemberParticipation]:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def other_member(self, user_id: str) -> Optional[MemberParticipation]:
        """The member who is not user_id, or None if user_id is not in the household."""
        if user_id == self.user1.user_id:
            return self.user2
        if user_id == self.user2.user_id:
            return self.user1
        return None


# =============================================================================
# DEBT SETTLEMENT
# =============================================================================

class MemberBalance(_Result):
    """What one member should have paid versus what they did pay."""

    user_id: str
    user_name: str
    should_pay: Decimal
    actually_paid: Decimal
    difference: Decimal = Field(
        ...,
        description="actually_paid - should_pay; positive means overpaid"
    )


class Settlement(_Result):
    """The single net payment that squares the period."""

    debtor_user_id: str
    debtor_user_name: str
    creditor_user_id: str
    creditor_user_name: str
    amount: Decimal = Field(..., gt=0)


class DebtResult(_Result):
    """Outcome of proportional debt settlement for one period."""

    total_shared_expenses: Decimal
    user1: MemberBalance
    user2: MemberBalance
    settlement: Optional[Settlement] = None

    @property
    def is_balanced(self) -> bool:
        return self.settlement is None


# =============================================================================
# SAVINGS
# =============================================================================

class MemberContribution(_Result):
    """A member's monthly share of a savings contribution."""

    user_id: str
    user_name: str
    amount: Decimal


class SavingsProjection(_Result):
    """
    Re-projection of a savings goal under the funding actually available.

    is_stalled marks a goal with money still to save but nothing available
    this month: no date stretch can be computed for it.
    """

    goal_id: UUID
    goal_name: str
    target_amount: Decimal
    current_amount: Decimal
    remaining: Decimal
    original_target_date: date
    new_target_date: date
    monthly_contribution_available: Decimal
    monthly_contribution_needed: Decimal
    user1_contribution: MemberContribution
    user2_contribution: MemberContribution
    is_completed: bool = False
    is_delayed: bool = False
    is_stalled: bool = False
    months_delayed: int = Field(default=0, ge=0)


# =============================================================================
# MONTHLY SNAPSHOT
# =============================================================================

class MonthlySummary(_Result):
    """Headline figures for the monthly snapshot."""

    user1_name: str
    user2_name: str
    user1_percentage: Decimal
    user2_percentage: Decimal
    available_for_savings: Decimal
    who_owes_whom: str


class MonthlyStatus(_Result):
    """Everything the engine knows about one (year, month) period."""

    year: Optional[int] = None
    month: Optional[int] = None
    computed_at: datetime = Field(default_factory=datetime.utcnow)
    participation: ParticipationResult
    debt: DebtResult
    savings_projections: list[SavingsProjection] = Field(default_factory=list)
    summary: MonthlySummary
