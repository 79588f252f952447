"""
Data Models Package

This package contains all Pydantic models used by the class fund ledger.
All data flowing through the system must conform to these schemas.
"""

from classfund.models.box import (
    Box,
    BoxDecodeError,
    SyncStatus,
    create_box_id,
    deserialize_boxes,
    serialize_boxes,
)
from classfund.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from classfund.models.forms import BoxForm, RegistrationForm
from classfund.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Box models
    "Box",
    "BoxDecodeError",
    "SyncStatus",
    "create_box_id",
    "deserialize_boxes",
    "serialize_boxes",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Form models
    "BoxForm",
    "RegistrationForm",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
