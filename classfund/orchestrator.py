"""
Main Orchestrator for the Class Fund Ledger

This module ties together all the components:
1. Storage (key-value medium → box store adapter)
2. Ledger and the selection view model on top of it
3. Registration gate (form validation before the identity provider)

DESIGN DECISION: The application root owns the storage handle.
Nothing in the ledger reaches for a global store; everything is built
here from settings and passed down.
"""

from typing import Optional
from uuid import UUID

from classfund.audit import AuditLogger, create_correlation_id
from classfund.config import Settings, get_settings
from classfund.ledger import BoxLedger
from classfund.models.forms import RegistrationForm
from classfund.models.validation import ValidationResult
from classfund.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStore,
    JsonLinesAuditStorage,
    KeyValueBoxStorage,
    KeyValueStorageInterface,
    LocalKeyValueStore,
    LocalStorageClient,
)
from classfund.validation import RegistrationValidator, get_user_friendly_summary
from classfund.viewmodels import BoxSelectionVM


class RegistrationFlow:
    """
    Gates registration on the form rules.

    Flow:
    1. Validate the form (terms accepted, passwords match, fields filled)
    2. Audit the outcome (never the password)
    3. Only a valid form may be passed on to the identity provider

    Creating the account itself is the identity provider's job.
    """

    def __init__(
        self,
        validator: Optional[RegistrationValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._validator = validator or RegistrationValidator()
        self._audit_logger = audit_logger

    async def validate(
        self,
        form: RegistrationForm,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ValidationResult, str]:
        """
        Validate a registration form.

        Returns:
            (validation_result, user_message)
        """
        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate(form)
        message = get_user_friendly_summary(result)

        if self._audit_logger:
            if result.is_valid:
                await self._audit_logger.log_registration_validated(
                    email=form.email.strip(),
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_registration_rejected(
                    issues=[
                        {"field": i.field, "type": i.issue_type}
                        for i in result.issues
                    ],
                    correlation_id=correlation_id,
                )

        return result, message


def create_app_components(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> tuple[BoxSelectionVM, RegistrationFlow, BoxLedger]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the configured backend.
                    Set to False to keep everything in memory.
        settings: Settings to build from (defaults to get_settings())

    Returns:
        (box_view_model, registration_flow, ledger)

    The ledger still needs `await box_view_model.load()` before use.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    store: KeyValueStorageInterface
    audit_storage: Optional[AuditStorageInterface] = None

    if use_storage and storage_settings.backend == "file":
        client = LocalStorageClient(storage_settings)
        store = LocalKeyValueStore(client)
        if settings.audit.enabled:
            audit_storage = JsonLinesAuditStorage(settings.audit.log_file_name, client)
    else:
        store = InMemoryKeyValueStore()

    audit_logger = AuditLogger(audit_storage)

    ledger = BoxLedger(
        storage=KeyValueBoxStorage(store, key=storage_settings.boxes_key),
        audit_logger=audit_logger,
    )

    box_view_model = BoxSelectionVM(
        ledger,
        currency_symbol=settings.app.currency_symbol,
    )

    registration_flow = RegistrationFlow(
        validator=RegistrationValidator(settings.app),
        audit_logger=audit_logger,
    )

    return box_view_model, registration_flow, ledger
