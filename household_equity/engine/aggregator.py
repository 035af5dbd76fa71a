"""
Monthly Status Aggregator

Chains the engine for one (year, month) period:

    finances -> participation -> debt settlement -> residual -> projections

Participation is computed once and reused for both settlement and savings.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from household_equity.money import ZERO, round_half_up
from household_equity.engine.participation import calculate_participation
from household_equity.engine.savings import (
    AllocationStrategy,
    EqualSplitAllocation,
    recalculate_savings_goal,
)
from household_equity.engine.settlement import (
    SETTLEMENT_TOLERANCE,
    calculate_proportional_debt,
)
from household_equity.models.household import (
    SavingsGoal,
    SharedExpenseRecord,
    UserMonthlyFinances,
)
from household_equity.models.results import DebtResult, MonthlyStatus, MonthlySummary

BALANCED_MESSAGE = "All square, nobody owes anything this month"


def describe_settlement(debt: DebtResult, currency_symbol: str = "$") -> str:
    """One-line, human-readable settlement instruction."""
    settlement = debt.settlement
    if settlement is None:
        return BALANCED_MESSAGE
    return (
        f"{settlement.debtor_user_name} owes "
        f"{currency_symbol}{settlement.amount:,.2f} to {settlement.creditor_user_name}"
    )


def compute_monthly_status(
    user1: UserMonthlyFinances,
    user2: UserMonthlyFinances,
    expenses: Iterable[SharedExpenseRecord],
    goals: Iterable[SavingsGoal],
    *,
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Optional[date] = None,
    allocation: Optional[AllocationStrategy] = None,
    tolerance: Decimal = SETTLEMENT_TOLERANCE,
    currency_symbol: str = "$",
) -> MonthlyStatus:
    """
    Build the monthly financial snapshot.

    Completed goals are skipped. The residual (net available minus shared
    spend, floored at zero) is divided between the remaining goals by the
    allocation strategy, equal split by default.
    """
    allocation = allocation or EqualSplitAllocation()

    participation = calculate_participation(user1, user2)
    debt = calculate_proportional_debt(participation, list(expenses), tolerance=tolerance)

    available_for_savings = max(
        ZERO, participation.total_net_available - debt.total_shared_expenses
    )

    open_goals = [goal for goal in goals if not goal.is_completed]
    shares = allocation.allocate(available_for_savings, open_goals)

    projections = [
        recalculate_savings_goal(
            goal,
            shares.get(goal.id, ZERO),
            participation,
            today=today,
        )
        for goal in open_goals
    ]

    summary = MonthlySummary(
        user1_name=participation.user1.user_name,
        user2_name=participation.user2.user_name,
        user1_percentage=participation.user1.participation_percentage,
        user2_percentage=participation.user2.participation_percentage,
        available_for_savings=round_half_up(available_for_savings),
        who_owes_whom=describe_settlement(debt, currency_symbol),
    )

    return MonthlyStatus(
        year=year,
        month=month,
        participation=participation,
        debt=debt,
        savings_projections=projections,
        summary=summary,
    )
