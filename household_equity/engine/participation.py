"""
Participation Calculator

Turns each member's net available income into a percentage share of the
household's combined net available income.

When neither member has anything available the split is 50/50: equal
responsibility when nobody has disposable income.
"""

from decimal import Decimal

from household_equity.money import HUNDRED, ZERO, round_half_up
from household_equity.models.household import UserMonthlyFinances
from household_equity.models.results import MemberParticipation, ParticipationResult

EQUAL_SHARE = Decimal("50")


def _member(finances: UserMonthlyFinances, percentage: Decimal) -> MemberParticipation:
    return MemberParticipation(
        user_id=finances.user_id,
        user_name=finances.user_name,
        net_available=round_half_up(finances.net_available),
        participation_percentage=percentage,
    )


def calculate_participation(
    user1: UserMonthlyFinances,
    user2: UserMonthlyFinances,
) -> ParticipationResult:
    """
    Compute both members' participation percentages for one period.

    Each percentage is rounded half up to 2 places independently, so the pair
    sums to 100 within 0.01.
    """
    total = user1.net_available + user2.net_available

    if total == ZERO:
        return ParticipationResult(
            user1=_member(user1, EQUAL_SHARE),
            user2=_member(user2, EQUAL_SHARE),
            total_net_available=ZERO,
        )

    user1_pct = round_half_up(user1.net_available / total * HUNDRED)
    user2_pct = round_half_up(user2.net_available / total * HUNDRED)

    return ParticipationResult(
        user1=_member(user1, user1_pct),
        user2=_member(user2, user2_pct),
        total_net_available=round_half_up(total),
    )
