"""
Debt Settlement Engine

Crosses what each member actually paid against what their participation
percentage says they should have paid, and reduces the imbalance to a single
net payment instruction.

ATTRIBUTION RULES (by split type):
- shared: counts towards the shared pool and is credited to the payer
- personal: ignored entirely
- paid_for_other: credited to the payer only when the beneficiary is the
  other member; otherwise ignored
- full_reimbursement: handled exactly like shared (pool and payer credit)

KNOWN INCONSISTENCY: full_reimbursement means "the other member repays
everything", yet it is split by participation like any shared expense.

All sums are kept in integer cents; rounding happens only on output.
"""

from decimal import Decimal
from typing import Iterable, Optional

from household_equity.money import HUNDRED, from_cents, round_half_up, to_cents
from household_equity.models.household import SharedExpenseRecord, SplitType
from household_equity.models.results import (
    DebtResult,
    MemberBalance,
    MemberParticipation,
    ParticipationResult,
    Settlement,
)

SETTLEMENT_TOLERANCE = Decimal("0.01")


def _credited_payer(
    expense: SharedExpenseRecord,
    participation: ParticipationResult,
) -> Optional[str]:
    """Return the member whose actually-paid total this expense raises, if any."""
    payer = participation.member(expense.paid_by_user_id)
    if payer is None:
        return None

    if expense.split_type in (SplitType.SHARED, SplitType.FULL_REIMBURSEMENT):
        return payer.user_id

    if expense.split_type == SplitType.PAID_FOR_OTHER:
        other = participation.other_member(payer.user_id)
        if other is not None and expense.beneficiary_user_id == other.user_id:
            return payer.user_id
        return None

    # personal
    return None


def _balance(member: MemberParticipation, should_pay: Decimal, paid_cents: int) -> MemberBalance:
    return MemberBalance(
        user_id=member.user_id,
        user_name=member.user_name,
        should_pay=from_cents(should_pay),
        actually_paid=from_cents(paid_cents),
        difference=from_cents(paid_cents - should_pay),
    )


def _settlement(
    participation: ParticipationResult,
    user1_difference_cents: Decimal,
    tolerance: Decimal,
) -> Optional[Settlement]:
    """
    Build the net settlement from user 1's imbalance.

    User 1 overpaid: user 2 owes user 1. User 1 underpaid: user 1 owes user 2.
    """
    imbalance = abs(user1_difference_cents) / HUNDRED
    if imbalance <= tolerance:
        return None

    if user1_difference_cents > 0:
        creditor, debtor = participation.user1, participation.user2
    else:
        creditor, debtor = participation.user2, participation.user1

    return Settlement(
        debtor_user_id=debtor.user_id,
        debtor_user_name=debtor.user_name,
        creditor_user_id=creditor.user_id,
        creditor_user_name=creditor.user_name,
        amount=round_half_up(imbalance),
    )


def calculate_proportional_debt(
    participation: ParticipationResult,
    expenses: Iterable[SharedExpenseRecord],
    tolerance: Decimal = SETTLEMENT_TOLERANCE,
) -> DebtResult:
    """
    Settle one period's expenses between the two members.

    Expects validated records; the engine does not re-check them.
    """
    total_shared_cents = 0
    paid_cents = {
        participation.user1.user_id: 0,
        participation.user2.user_id: 0,
    }

    for expense in expenses:
        amount_cents = to_cents(expense.amount)
        if expense.split_type in (SplitType.SHARED, SplitType.FULL_REIMBURSEMENT):
            total_shared_cents += amount_cents

        payer_id = _credited_payer(expense, participation)
        if payer_id is not None:
            paid_cents[payer_id] += amount_cents

    # Fractional cents are kept until output
    user1_should = Decimal(total_shared_cents) * participation.user1.participation_percentage / HUNDRED
    user2_should = Decimal(total_shared_cents) * participation.user2.participation_percentage / HUNDRED

    user1_paid = paid_cents[participation.user1.user_id]
    user2_paid = paid_cents[participation.user2.user_id]

    return DebtResult(
        total_shared_expenses=from_cents(total_shared_cents),
        user1=_balance(participation.user1, user1_should, user1_paid),
        user2=_balance(participation.user2, user2_should, user2_paid),
        settlement=_settlement(participation, user1_paid - user1_should, tolerance),
    )
