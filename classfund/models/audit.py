"""
Audit Models for the Class Fund Ledger

Every change to the box collection, and every time memory and storage
drift apart, is recorded as an audit event.
This provides:
1. Traceability of who changed which box and when
2. Debugging information when a save fails
3. A way to see which changes may not have survived a restart

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Ledger lifecycle
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"

    # Box mutations
    BOX_CREATED = "box_created"
    BOX_UPDATED = "box_updated"
    BOX_EDIT_TARGET_MISSING = "box_edit_target_missing"
    BOX_REJECTED = "box_rejected"

    # Persistence
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"

    # Registration gate
    REGISTRATION_VALIDATED = "registration_validated"
    REGISTRATION_REJECTED = "registration_rejected"

    # System events
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
    Every significant action creates one of these.
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
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'box', 'ledger', 'registration')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one edit and its save)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
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
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """
        Convert to a single line of JSON for the append-only audit file.
        """
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)


def _label(text: Optional[str], limit: int = 120) -> str:
    """Shorten free text for the description; details keep the full value."""
    text = text or ""
    return text if len(text) <= limit else text[:limit - 1] + "…"


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.box_created(box_id, name, balance, correlation_id)
        event = AuditEventBuilder.save_failed(box_count, error, correlation_id)
    """

    @staticmethod
    def ledger_loaded(
        box_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger loaded with {box_count} boxes",
            details={
                "box_count": box_count,
            },
        )

    @staticmethod
    def ledger_load_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="Could not load boxes; starting with an empty ledger",
            error_message=error_message,
        )

    @staticmethod
    def box_created(
        box_id: str,
        name: str,
        balance: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOX_CREATED,
            entity_type="box",
            entity_id=box_id,
            correlation_id=correlation_id,
            description=f"Box created: {_label(name)}",
            details={
                "name": name,
                "balance": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def box_updated(
        box_id: str,
        previous: dict,
        current: dict,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOX_UPDATED,
            entity_type="box",
            entity_id=box_id,
            correlation_id=correlation_id,
            description=f"Box updated: {_label(current.get('name'))}",
            details={
                "previous": previous,
                "current": current,
            },
            is_user_action=True,
        )

    @staticmethod
    def box_edit_target_missing(
        box_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOX_EDIT_TARGET_MISSING,
            severity=AuditSeverity.WARNING,
            entity_type="box",
            entity_id=box_id,
            correlation_id=correlation_id,
            description="Edit ignored: no box with this id",
            is_user_action=True,
        )

    @staticmethod
    def box_rejected(
        box_id: str,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOX_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="box",
            entity_id=box_id,
            correlation_id=correlation_id,
            description=f"Box rejected: {_label(reason)}",
            details={
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def ledger_saved(
        box_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Saved {box_count} boxes",
            details={
                "box_count": box_count,
            },
        )

    @staticmethod
    def save_failed(
        box_count: int,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description="Save failed; changes are kept in memory only",
            error_message=error_message,
            details={
                "box_count": box_count,
            },
        )

    @staticmethod
    def registration_validated(
        email: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_VALIDATED,
            entity_type="registration",
            correlation_id=correlation_id,
            description="Registration form passed validation",
            details={
                "email": email,
            },
            is_user_action=True,
        )

    @staticmethod
    def registration_rejected(
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="registration",
            correlation_id=correlation_id,
            description=f"Registration rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
