"""
Data Models Package

This package contains all Pydantic models used by the household ledger.
Records flow in, derived results flow out; all data conforms to these schemas.
"""

from household_equity.models.household import (
    Contribution,
    ExpenseCategory,
    HouseholdMember,
    SavingsGoal,
    SharedExpenseRecord,
    SplitType,
    UserMonthlyFinances,
    ValidationIssue,
    ValidationResult,
    calculate_net_available,
)
from household_equity.models.results import (
    DebtResult,
    MemberBalance,
    MemberContribution,
    MemberParticipation,
    MonthlyStatus,
    MonthlySummary,
    ParticipationResult,
    SavingsProjection,
    Settlement,
)
from household_equity.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Household records
    "Contribution",
    "ExpenseCategory",
    "HouseholdMember",
    "SavingsGoal",
    "SharedExpenseRecord",
    "SplitType",
    "UserMonthlyFinances",
    "ValidationIssue",
    "ValidationResult",
    "calculate_net_available",
    # Engine results
    "DebtResult",
    "MemberBalance",
    "MemberContribution",
    "MemberParticipation",
    "MonthlyStatus",
    "MonthlySummary",
    "ParticipationResult",
    "SavingsProjection",
    "Settlement",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
