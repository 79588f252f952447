"""
Audit Logger

DESIGN DECISION: Every change to the box collection is logged.
This provides:
1. Traceability of box creation and edits
2. A visible record whenever a save fails and memory runs ahead of storage
3. Debugging capability

The audit logger:
- Is async, like the storage it writes to
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from classfund.models.audit import AuditEvent, AuditEventBuilder
from classfund.models.box import Box
from classfund.services.storage import AuditStorageInterface


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


def _box_fields(box: Box) -> dict:
    return {
        "name": box.name,
        "balance": _amount_text(box.balance),
    }


def _amount_text(amount: Optional[Decimal]) -> Optional[str]:
    return None if amount is None else str(amount)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
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
        self._logger = structlog.get_logger("classfund.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
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

    async def log_ledger_loaded(
        self,
        box_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful ledger load."""
        await self.log(AuditEventBuilder.ledger_loaded(
            box_count=box_count,
            correlation_id=correlation_id,
        ))

    async def log_ledger_load_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed load (the ledger continues empty)."""
        await self.log(AuditEventBuilder.ledger_load_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_box_created(
        self,
        box: Box,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log box creation."""
        await self.log(AuditEventBuilder.box_created(
            box_id=box.id,
            name=box.name,
            balance=_amount_text(box.balance),
            correlation_id=correlation_id,
        ))

    async def log_box_updated(
        self,
        previous: Box,
        current: Box,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an in-place box edit."""
        await self.log(AuditEventBuilder.box_updated(
            box_id=current.id,
            previous=_box_fields(previous),
            current=_box_fields(current),
            correlation_id=correlation_id,
        ))

    async def log_edit_target_missing(
        self,
        box_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an edit that matched no box."""
        await self.log(AuditEventBuilder.box_edit_target_missing(
            box_id=box_id,
            correlation_id=correlation_id,
        ))

    async def log_box_rejected(
        self,
        box_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a box the ledger refused to add."""
        await self.log(AuditEventBuilder.box_rejected(
            box_id=box_id,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_ledger_saved(
        self,
        box_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful save."""
        await self.log(AuditEventBuilder.ledger_saved(
            box_count=box_count,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        box_count: int,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed save (memory is now ahead of storage)."""
        await self.log(AuditEventBuilder.save_failed(
            box_count=box_count,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_registration_validated(
        self,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a registration form that passed validation."""
        await self.log(AuditEventBuilder.registration_validated(
            email=email,
            correlation_id=correlation_id,
        ))

    async def log_registration_rejected(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a registration form that failed validation."""
        await self.log(AuditEventBuilder.registration_rejected(
            issues=issues,
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

    Use this at the start of a new user action (e.g., saving a box form).
    Pass it through all subsequent operations.
    """
    return uuid4()
