"""
Savings Goal Projector

Re-projects a savings goal against what the household can actually set aside
this month. If the affordable amount is below the ideal monthly deposit, the
target date is stretched instead of creating a debt.

Monthly funds are divided between goals by an AllocationStrategy. The default
is an equal split that ignores deadlines and shortfalls.
"""

import math
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence
from uuid import UUID

from household_equity.money import HUNDRED, ZERO, round_half_up
from household_equity.periods import add_months, month_index, months_between
from household_equity.models.household import SavingsGoal
from household_equity.models.results import (
    MemberContribution,
    MemberParticipation,
    ParticipationResult,
    SavingsProjection,
)


# =============================================================================
# ALLOCATION STRATEGIES
# =============================================================================

class AllocationStrategy(ABC):
    """Divides the month's funds available for savings between open goals."""

    name: str = ""

    @abstractmethod
    def allocate(
        self,
        available: Decimal,
        goals: Sequence[SavingsGoal],
    ) -> dict[UUID, Decimal]:
        """Return the monthly amount assigned to each goal id."""
        pass


class EqualSplitAllocation(AllocationStrategy):
    """Every open goal receives the same share, regardless of urgency."""

    name = "equal"

    def allocate(
        self,
        available: Decimal,
        goals: Sequence[SavingsGoal],
    ) -> dict[UUID, Decimal]:
        if not goals:
            return {}
        share = available / len(goals)
        return {goal.id: share for goal in goals}


_STRATEGIES: dict[str, type[AllocationStrategy]] = {
    EqualSplitAllocation.name: EqualSplitAllocation,
}


def get_allocation_strategy(name: str) -> AllocationStrategy:
    """Look up an allocation strategy by its configured name."""
    try:
        return _STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown allocation strategy: {name}. Available: {sorted(_STRATEGIES)}"
        )


# =============================================================================
# PROJECTION
# =============================================================================

def _split(
    member: MemberParticipation,
    monthly_amount: Decimal,
) -> MemberContribution:
    return MemberContribution(
        user_id=member.user_id,
        user_name=member.user_name,
        amount=round_half_up(member.participation_percentage / HUNDRED * monthly_amount),
    )


def recalculate_savings_goal(
    goal: SavingsGoal,
    monthly_contribution_available: Decimal,
    participation: ParticipationResult,
    today: Optional[date] = None,
) -> SavingsProjection:
    """
    Project whether a goal still reaches its original target date.

    Branches:
    - nothing remaining: completed, no contribution needed
    - 0 < available < ideal: delayed, date stretched to today + months needed
    - available >= ideal: on schedule, original date holds
    - available == 0: same as on schedule (original date, ideal contribution)
      but flagged as stalled, since no date stretch can be computed
    """
    today = today or date.today()
    available = max(ZERO, monthly_contribution_available)
    remaining = goal.remaining

    if remaining == ZERO:
        return SavingsProjection(
            goal_id=goal.id,
            goal_name=goal.name,
            target_amount=goal.target_amount,
            current_amount=goal.current_amount,
            remaining=ZERO,
            original_target_date=goal.original_target_date,
            new_target_date=goal.current_target_date,
            monthly_contribution_available=round_half_up(available),
            monthly_contribution_needed=ZERO,
            user1_contribution=_split(participation.user1, ZERO),
            user2_contribution=_split(participation.user2, ZERO),
            is_completed=True,
        )

    # Past or current-month targets clamp to one month
    original_months_remaining = max(1, months_between(today, goal.original_target_date))
    ideal_monthly = remaining / original_months_remaining

    is_delayed = False
    is_stalled = False
    months_delayed = 0

    if ZERO < available < ideal_monthly:
        months_needed = math.ceil(remaining / available)
        new_target_date = add_months(today, months_needed)
        monthly_needed = available
        is_delayed = True
        months_delayed = max(
            0, month_index(new_target_date) - month_index(goal.original_target_date)
        )
    else:
        new_target_date = goal.original_target_date
        monthly_needed = ideal_monthly
        is_stalled = available == ZERO

    return SavingsProjection(
        goal_id=goal.id,
        goal_name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        remaining=round_half_up(remaining),
        original_target_date=goal.original_target_date,
        new_target_date=new_target_date,
        monthly_contribution_available=round_half_up(available),
        monthly_contribution_needed=round_half_up(monthly_needed),
        user1_contribution=_split(participation.user1, monthly_needed),
        user2_contribution=_split(participation.user2, monthly_needed),
        is_delayed=is_delayed,
        is_stalled=is_stalled,
        months_delayed=months_delayed,
    )
