"""Tests for savings goal projection and allocation."""

from datetime import date
from decimal import Decimal

import pytest

from household_equity.engine import (
    EqualSplitAllocation,
    calculate_participation,
    get_allocation_strategy,
    recalculate_savings_goal,
)
from household_equity.models.household import SavingsGoal

from tests.conftest import TODAY


def _goal(target="12000", current="0", target_date=date(2024, 7, 15), **kwargs) -> SavingsGoal:
    return SavingsGoal(
        name="Emergency fund",
        target_amount=Decimal(target),
        current_amount=Decimal(current),
        original_target_date=target_date,
        **kwargs,
    )


@pytest.fixture
def participation(alice, bob):
    return calculate_participation(alice, bob)


class TestRecalculateSavingsGoal:
    """Tests for recalculate_savings_goal."""

    def test_delayed_goal(self, participation):
        """12000 over 6 months needs 2000/month; 1000 available takes 12 months."""
        projection = recalculate_savings_goal(
            _goal(), Decimal("1000"), participation, today=TODAY
        )

        assert projection.is_delayed
        assert not projection.is_stalled
        assert projection.new_target_date == date(2025, 1, 15)
        assert projection.months_delayed == 6
        assert projection.monthly_contribution_needed == Decimal("1000.00")
        assert projection.monthly_contribution_available == Decimal("1000.00")
        assert projection.user1_contribution.amount == Decimal("750.00")
        assert projection.user2_contribution.amount == Decimal("250.00")

    def test_on_schedule_keeps_original_date(self, participation):
        projection = recalculate_savings_goal(
            _goal(target="6000"), Decimal("2000"), participation, today=TODAY
        )

        assert not projection.is_delayed
        assert projection.new_target_date == date(2024, 7, 15)
        assert projection.months_delayed == 0
        assert projection.monthly_contribution_needed == Decimal("1000.00")
        assert projection.user1_contribution.amount == Decimal("750.00")
        assert projection.user2_contribution.amount == Decimal("250.00")

    def test_exactly_ideal_is_on_schedule(self, participation):
        projection = recalculate_savings_goal(
            _goal(target="6000"), Decimal("1000"), participation, today=TODAY
        )
        assert not projection.is_delayed
        assert projection.new_target_date == projection.original_target_date

    def test_on_schedule_restores_original_after_earlier_delay(self, participation):
        goal = _goal(target="6000", current_target_date=date(2024, 12, 15))
        projection = recalculate_savings_goal(goal, Decimal("5000"), participation, today=TODAY)
        assert projection.new_target_date == date(2024, 7, 15)

    @pytest.mark.parametrize("available", ["0", "500", "1000000"])
    def test_completed_goal(self, participation, available):
        """Nothing left to save: never delayed, nothing needed."""
        projection = recalculate_savings_goal(
            _goal(target="5000", current="5000"), Decimal(available), participation, today=TODAY
        )

        assert projection.is_completed
        assert not projection.is_delayed
        assert projection.remaining == Decimal("0")
        assert projection.monthly_contribution_needed == Decimal("0")
        assert projection.user1_contribution.amount == Decimal("0.00")
        assert projection.user2_contribution.amount == Decimal("0.00")

    def test_nothing_available_is_stalled(self, participation):
        goal = _goal(target="6000")
        projection = recalculate_savings_goal(goal, Decimal("0"), participation, today=TODAY)

        assert projection.is_stalled
        assert not projection.is_delayed
        assert projection.new_target_date == date(2024, 7, 15)
        assert projection.monthly_contribution_needed == Decimal("1000.00")

    def test_stalled_goal_keeps_original_date(self, participation):
        """Nothing available behaves like on schedule: the original date holds."""
        goal = _goal(target="6000", current_target_date=date(2024, 12, 15))
        projection = recalculate_savings_goal(goal, Decimal("0"), participation, today=TODAY)

        assert projection.is_stalled
        assert projection.new_target_date == date(2024, 7, 15)
        assert projection.user1_contribution.amount == Decimal("750.00")

    def test_negative_available_treated_as_zero(self, participation):
        projection = recalculate_savings_goal(
            _goal(target="6000"), Decimal("-50"), participation, today=TODAY
        )
        assert projection.is_stalled
        assert projection.monthly_contribution_available == Decimal("0.00")

    def test_past_target_clamps_to_one_month(self, participation):
        """A target already behind us needs the full remaining amount now."""
        goal = _goal(target="1000", target_date=date(2023, 12, 15))
        projection = recalculate_savings_goal(goal, Decimal("400"), participation, today=TODAY)

        assert projection.is_delayed
        assert projection.new_target_date == date(2024, 4, 15)
        assert projection.months_delayed == 4

    def test_target_this_month_clamps_to_one_month(self, participation):
        goal = _goal(target="1000", target_date=date(2024, 1, 31))
        projection = recalculate_savings_goal(goal, Decimal("1000"), participation, today=TODAY)

        assert not projection.is_delayed
        assert projection.monthly_contribution_needed == Decimal("1000.00")

    def test_partial_progress_counts(self, participation):
        projection = recalculate_savings_goal(
            _goal(target="12000", current="6000"), Decimal("1000"), participation, today=TODAY
        )
        assert projection.remaining == Decimal("6000.00")
        assert not projection.is_delayed

    def test_goal_not_mutated(self, participation):
        goal = _goal()
        recalculate_savings_goal(goal, Decimal("1000"), participation, today=TODAY)
        assert goal.current_target_date == date(2024, 7, 15)


class TestAllocation:
    """Tests for allocation strategies."""

    def test_equal_split(self):
        goals = [_goal(), _goal(), _goal()]
        shares = EqualSplitAllocation().allocate(Decimal("900"), goals)

        assert set(shares) == {g.id for g in goals}
        assert all(share == Decimal("300") for share in shares.values())

    def test_equal_split_no_goals(self):
        assert EqualSplitAllocation().allocate(Decimal("900"), []) == {}

    def test_lookup_by_name(self):
        assert isinstance(get_allocation_strategy("equal"), EqualSplitAllocation)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown allocation strategy"):
            get_allocation_strategy("deadline_first")
