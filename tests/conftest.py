"""Shared fixtures for the household ledger tests."""

from datetime import date
from decimal import Decimal

import pytest

from household_equity.models.household import (
    HouseholdMember,
    SharedExpenseRecord,
    SplitType,
    UserMonthlyFinances,
)

TODAY = date(2024, 1, 15)


def make_finances(user_id: str, name: str, income: str, fixed: str = "0") -> UserMonthlyFinances:
    return UserMonthlyFinances(
        user_id=user_id,
        user_name=name,
        total_income=Decimal(income),
        fixed_personal_expenses=Decimal(fixed),
        year=TODAY.year,
        month=TODAY.month,
    )


def make_expense(
    amount: str,
    paid_by: str = "u1",
    split_type: SplitType = SplitType.SHARED,
    beneficiary: str = None,
    expense_date: date = TODAY,
) -> SharedExpenseRecord:
    return SharedExpenseRecord(
        description="Test expense",
        amount=Decimal(amount),
        paid_by_user_id=paid_by,
        split_type=split_type,
        beneficiary_user_id=beneficiary,
        expense_date=expense_date,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def members():
    return [
        HouseholdMember(user_id="u1", name="Alice"),
        HouseholdMember(user_id="u2", name="Bob"),
    ]


@pytest.fixture
def alice():
    """Alice: 3000 net available."""
    return make_finances("u1", "Alice", "3500", "500")


@pytest.fixture
def bob():
    """Bob: 1000 net available."""
    return make_finances("u2", "Bob", "1200", "200")
