"""Validation package."""

from household_equity.validation.validator import (
    HouseholdRecordValidator,
    RecordRejectedError,
)

__all__ = ["HouseholdRecordValidator", "RecordRejectedError"]
