"""Tests for proportional debt settlement."""

from decimal import Decimal

from household_equity.engine import calculate_participation, calculate_proportional_debt
from household_equity.models.household import SplitType

from tests.conftest import make_expense, make_finances


class TestCalculateProportionalDebt:
    """Tests for calculate_proportional_debt."""

    def test_single_shared_expense(self, alice, bob):
        """400 shared, paid by Alice at 75/25: Bob owes Alice 100."""
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(participation, [make_expense("400")])

        assert debt.total_shared_expenses == Decimal("400.00")
        assert debt.user1.should_pay == Decimal("300.00")
        assert debt.user2.should_pay == Decimal("100.00")
        assert debt.user1.actually_paid == Decimal("400.00")
        assert debt.user2.actually_paid == Decimal("0.00")
        assert debt.user1.difference == Decimal("100.00")
        assert debt.user2.difference == Decimal("-100.00")

        assert debt.settlement is not None
        assert debt.settlement.debtor_user_id == "u2"
        assert debt.settlement.creditor_user_id == "u1"
        assert debt.settlement.debtor_user_name == "Bob"
        assert debt.settlement.amount == Decimal("100.00")

    def test_user1_underpaid_owes_user2(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(participation, [make_expense("400", paid_by="u2")])

        assert debt.settlement.debtor_user_id == "u1"
        assert debt.settlement.creditor_user_id == "u2"
        assert debt.settlement.amount == Decimal("300.00")

    def test_exact_split_has_no_settlement(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(
            participation,
            [make_expense("300", paid_by="u1"), make_expense("100", paid_by="u2")],
        )

        assert debt.settlement is None
        assert debt.is_balanced

    def test_half_cent_imbalance_within_tolerance(self):
        participation = calculate_participation(
            make_finances("u1", "Alice", "1000"),
            make_finances("u2", "Bob", "1000"),
        )
        debt = calculate_proportional_debt(
            participation,
            [make_expense("100.01", paid_by="u1"), make_expense("100.00", paid_by="u2")],
        )

        assert debt.settlement is None

    def test_custom_tolerance(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(
            participation,
            [make_expense("400")],
            tolerance=Decimal("100"),
        )
        assert debt.settlement is None

    def test_no_expenses(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(participation, [])

        assert debt.total_shared_expenses == Decimal("0.00")
        assert debt.user1.should_pay == Decimal("0.00")
        assert debt.settlement is None

    def test_should_pay_sums_to_total(self):
        """33.33/66.67 of 100 still adds back up to 100."""
        participation = calculate_participation(
            make_finances("u1", "Alice", "1000"),
            make_finances("u2", "Bob", "2000"),
        )
        debt = calculate_proportional_debt(participation, [make_expense("100")])

        assert debt.user1.should_pay + debt.user2.should_pay == Decimal("100.00")
        assert abs(debt.user1.difference + debt.user2.difference) <= Decimal("0.01")

    def test_settlement_matches_difference(self):
        participation = calculate_participation(
            make_finances("u1", "Alice", "1000"),
            make_finances("u2", "Bob", "2000"),
        )
        debt = calculate_proportional_debt(
            participation,
            [make_expense("57.10", paid_by="u2"), make_expense("12.99", paid_by="u1")],
        )

        assert debt.settlement.amount == abs(debt.user1.difference)

    def test_personal_expense_ignored(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(
            participation,
            [make_expense("250", split_type=SplitType.PERSONAL)],
        )

        assert debt.total_shared_expenses == Decimal("0.00")
        assert debt.user1.actually_paid == Decimal("0.00")
        assert debt.user2.actually_paid == Decimal("0.00")
        assert debt.settlement is None

    def test_paid_for_other_credited_to_payer(self, alice, bob):
        """200 paid by Alice for Bob: credited to Alice, not part of the shared pool."""
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(
            participation,
            [make_expense("200", split_type=SplitType.PAID_FOR_OTHER, beneficiary="u2")],
        )

        assert debt.total_shared_expenses == Decimal("0.00")
        assert debt.user1.actually_paid == Decimal("200.00")
        assert debt.settlement.debtor_user_id == "u2"
        assert debt.settlement.amount == Decimal("200.00")

    def test_paid_for_other_with_wrong_beneficiary_ignored(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(
            participation,
            [
                make_expense("200", split_type=SplitType.PAID_FOR_OTHER, beneficiary="u1"),
                make_expense("80", split_type=SplitType.PAID_FOR_OTHER, beneficiary="stranger"),
            ],
        )

        assert debt.user1.actually_paid == Decimal("0.00")
        assert debt.user2.actually_paid == Decimal("0.00")
        assert debt.settlement is None

    def test_full_reimbursement_treated_as_shared(self, alice, bob):
        """full_reimbursement is split by participation exactly like shared."""
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(
            participation,
            [make_expense("300", split_type=SplitType.FULL_REIMBURSEMENT)],
        )

        assert debt.total_shared_expenses == Decimal("300.00")
        assert debt.user1.should_pay == Decimal("225.00")
        assert debt.user2.should_pay == Decimal("75.00")
        assert debt.user1.actually_paid == Decimal("300.00")
        assert debt.settlement.debtor_user_id == "u2"
        assert debt.settlement.amount == Decimal("75.00")

    def test_full_reimbursement_matches_shared_result(self):
        participation = calculate_participation(
            make_finances("u1", "Alice", "1000"),
            make_finances("u2", "Bob", "1000"),
        )
        shared = calculate_proportional_debt(participation, [make_expense("100")])
        reimbursed = calculate_proportional_debt(
            participation,
            [make_expense("100", split_type=SplitType.FULL_REIMBURSEMENT)],
        )

        assert reimbursed.total_shared_expenses == shared.total_shared_expenses == Decimal("100.00")
        assert reimbursed.settlement.amount == shared.settlement.amount == Decimal("50.00")
        assert reimbursed.user1 == shared.user1
        assert reimbursed.user2 == shared.user2

    def test_unknown_payer_counts_towards_pool_only(self, alice, bob):
        participation = calculate_participation(alice, bob)
        debt = calculate_proportional_debt(participation, [make_expense("100", paid_by="stranger")])

        assert debt.total_shared_expenses == Decimal("100.00")
        assert debt.user1.actually_paid == Decimal("0.00")
        assert debt.user2.actually_paid == Decimal("0.00")
        assert debt.settlement.debtor_user_id == "u1"
        assert debt.settlement.amount == Decimal("75.00")

    def test_zero_income_household_splits_equally(self):
        """Both at zero net: 100 paid by Alice means Bob owes 50."""
        participation = calculate_participation(
            make_finances("u1", "Alice", "0"),
            make_finances("u2", "Bob", "0"),
        )
        debt = calculate_proportional_debt(participation, [make_expense("100")])

        assert debt.user1.should_pay == Decimal("50.00")
        assert debt.settlement.debtor_user_id == "u2"
        assert debt.settlement.amount == Decimal("50.00")
