"""
Audit Logger

DESIGN DECISION: Every change to household records is logged.
This provides:
1. Complete traceability of expenses and contributions
2. Debugging capability when a settlement looks wrong
3. Both members can see the history of the shared ledger

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash a flow if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from household_equity.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from household_equity.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and visibility to both members)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_finances_updated(
        self,
        user_id: str,
        year: int,
        month: int,
        total_income: str,
        fixed_personal_expenses: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.finances_updated(
            user_id=user_id,
            year=year,
            month=month,
            total_income=total_income,
            fixed_personal_expenses=fixed_personal_expenses,
            correlation_id=correlation_id,
        ))

    async def log_expense_recorded(
        self,
        expense_id: UUID,
        paid_by_user_id: str,
        amount: str,
        split_type: str,
        period: tuple[int, int],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.expense_recorded(
            expense_id=expense_id,
            paid_by_user_id=paid_by_user_id,
            amount=amount,
            split_type=split_type,
            period=period,
            correlation_id=correlation_id,
        ))

    async def log_expense_deleted(
        self,
        expense_id: UUID,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    async def log_goal_created(
        self,
        goal_id: UUID,
        name: str,
        target_amount: str,
        target_date: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_created(
            goal_id=goal_id,
            name=name,
            target_amount=target_amount,
            target_date=target_date,
            correlation_id=correlation_id,
        ))

    async def log_contribution_recorded(
        self,
        goal_id: UUID,
        user_id: str,
        amount: str,
        new_total: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.contribution_recorded(
            goal_id=goal_id,
            user_id=user_id,
            amount=amount,
            new_total=new_total,
            correlation_id=correlation_id,
        ))

    async def log_goal_completed(
        self,
        goal_id: UUID,
        name: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_completed(
            goal_id=goal_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_monthly_status(
        self,
        year: int,
        month: int,
        settlement_message: str,
        goal_count: int,
        delayed_goal_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.monthly_status_computed(
            year=year,
            month=month,
            settlement_message=settlement_message,
            goal_count=goal_count,
            delayed_goal_count=delayed_goal_count,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        entity_type: str,
        entity_id: Optional[str],
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            entity_type=entity_type,
            entity_id=entity_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., logging an expense).
    Pass it through all subsequent operations.
    """
    return uuid4()
