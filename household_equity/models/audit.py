"""
Audit Models for the Household Ledger

Every change to household records, and every monthly snapshot computed from
them, is recorded as an audit event. This provides:
1. Traceability of who logged which expense or contribution
2. The inputs behind each settlement the household acted on
3. Debugging information when numbers look wrong

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Monthly finances
    FINANCES_UPDATED = "finances_updated"

    # Expenses
    EXPENSE_RECORDED = "expense_recorded"
    EXPENSE_DELETED = "expense_deleted"

    # Savings
    GOAL_CREATED = "goal_created"
    CONTRIBUTION_RECORDED = "contribution_recorded"
    GOAL_COMPLETED = "goal_completed"

    # Engine
    MONTHLY_STATUS_COMPUTED = "monthly_status_computed"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'goal', 'finances', 'period')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    # Which member triggered this, when known
    user_id: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "user_id": self.user_id,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, user_id]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            self.user_id or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_recorded(expense_id, ...)
        event = AuditEventBuilder.goal_completed(goal_id, name, correlation_id)
    """

    @staticmethod
    def finances_updated(
        user_id: str,
        year: int,
        month: int,
        total_income: str,
        fixed_personal_expenses: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FINANCES_UPDATED,
            entity_type="finances",
            entity_id=f"{user_id}:{year}-{month:02d}",
            correlation_id=correlation_id,
            description=f"Monthly finances updated for {year}-{month:02d}",
            details={
                "total_income": total_income,
                "fixed_personal_expenses": fixed_personal_expenses,
            },
            user_id=user_id,
        )

    @staticmethod
    def expense_recorded(
        expense_id: UUID,
        paid_by_user_id: str,
        amount: str,
        split_type: str,
        period: tuple[int, int],
        correlation_id: UUID,
    ) -> AuditEvent:
        year, month = period
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_RECORDED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description=f"Expense recorded: {amount} ({split_type})",
            details={
                "amount": amount,
                "split_type": split_type,
                "period": f"{year}-{month:02d}",
            },
            user_id=paid_by_user_id,
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description="Expense deleted",
        )

    @staticmethod
    def goal_created(
        goal_id: UUID,
        name: str,
        target_amount: str,
        target_date: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=str(goal_id),
            correlation_id=correlation_id,
            description=f"Savings goal created: {name}",
            details={
                "target_amount": target_amount,
                "target_date": target_date,
            },
        )

    @staticmethod
    def contribution_recorded(
        goal_id: UUID,
        user_id: str,
        amount: str,
        new_total: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONTRIBUTION_RECORDED,
            entity_type="goal",
            entity_id=str(goal_id),
            correlation_id=correlation_id,
            description=f"Contribution of {amount} recorded",
            details={
                "amount": amount,
                "current_amount": new_total,
            },
            user_id=user_id,
        )

    @staticmethod
    def goal_completed(
        goal_id: UUID,
        name: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_COMPLETED,
            entity_type="goal",
            entity_id=str(goal_id),
            correlation_id=correlation_id,
            description=f"Savings goal completed: {name}",
        )

    @staticmethod
    def monthly_status_computed(
        year: int,
        month: int,
        settlement_message: str,
        goal_count: int,
        delayed_goal_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTHLY_STATUS_COMPUTED,
            entity_type="period",
            entity_id=f"{year}-{month:02d}",
            correlation_id=correlation_id,
            description=f"Monthly status computed for {year}-{month:02d}",
            details={
                "settlement": settlement_message,
                "goal_count": goal_count,
                "delayed_goal_count": delayed_goal_count,
            },
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        entity_id: Optional[str],
        issues: list[dict],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
