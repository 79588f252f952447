"""
Form Validation

DESIGN DECISION: Forms are validated before anything reaches the ledger
or the identity provider.

- BoxFormValidator: the add/edit box form (name, balance)
- RegistrationValidator: the registration screen, including the
  terms-of-service gate

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the form.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from classfund.config import AppSettings, get_settings
from classfund.models.forms import BoxForm, RegistrationForm
from classfund.models.validation import ValidationIssue, ValidationResult


_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Largest balance the box form accepts, in either direction.
MAX_BALANCE = Decimal("1000000000000")


def parse_balance(text: str) -> Optional[Decimal]:
    """
    Parse a balance as typed in the form.

    Empty text means "no balance". A single comma is read as the
    decimal separator ("12,50") when there is no dot.

    Raises:
        ValueError: If the text is not a finite number
    """
    cleaned = text.strip()
    if not cleaned:
        return None
    if "," in cleaned and "." not in cleaned and cleaned.count(",") == 1:
        cleaned = cleaned.replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {text!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not a finite number: {text!r}")
    return value


class BoxFormValidator:
    """Validates the add/edit box form."""

    def validate(self, form: BoxForm) -> ValidationResult:
        issues = []

        if not form.name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Box name is required",
                severity="error",
                suggested_fix="Give the box a name, e.g. 'Graduation Trip'",
            ))
        elif len(form.name) > 200:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message="Box name must be at most 200 characters",
                severity="error",
            ))

        try:
            balance = parse_balance(form.balance)
        except ValueError:
            issues.append(ValidationIssue(
                field="balance",
                issue_type="invalid_format",
                message=f"Balance '{form.balance}' is not a valid amount",
                severity="error",
                suggested_fix="Use digits with an optional decimal part, e.g. 150.00",
            ))
        else:
            if balance is not None and abs(balance) >= MAX_BALANCE:
                issues.append(ValidationIssue(
                    field="balance",
                    issue_type="out_of_range",
                    message=f"Balance must be smaller than {MAX_BALANCE:,}",
                    severity="error",
                ))
            elif balance is not None and balance < 0:
                issues.append(ValidationIssue(
                    field="balance",
                    issue_type="suspicious_value",
                    message="Balance is negative",
                    severity="warning",
                ))
            if balance is not None and balance.as_tuple().exponent < -2:
                issues.append(ValidationIssue(
                    field="balance",
                    issue_type="precision",
                    message="Balance has more than two decimal places; it will be shown rounded",
                    severity="warning",
                ))

        return ValidationResult(
            form="box",
            is_valid=not any(i.severity == "error" for i in issues),
            issues=issues,
        )


class RegistrationValidator:
    """
    Validates the registration form.

    The terms-of-service checkbox gates everything: an unaccepted form
    is never valid, whatever else it contains.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def validate(self, form: RegistrationForm) -> ValidationResult:
        issues = []

        if not form.terms_accepted:
            issues.append(ValidationIssue(
                field="terms_accepted",
                issue_type="terms_not_accepted",
                message="You must accept the Terms & Services",
                severity="error",
                suggested_fix="Read the terms and tick the checkbox",
            ))

        if form.password != form.password_repeat:
            issues.append(ValidationIssue(
                field="password_repeat",
                issue_type="mismatch",
                message="Passwords do not match",
                severity="error",
            ))

        missing = [
            field
            for field, value in (
                ("name", form.name),
                ("email", form.email),
                ("password", form.password),
                ("school", form.school),
            )
            if not value.strip()
        ]
        for field in missing:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.capitalize()} is required",
                severity="error",
                suggested_fix="All fields must be filled in",
            ))

        if form.email.strip() and not _EMAIL_PATTERN.match(form.email.strip()):
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Email address looks invalid",
                severity="error",
            ))

        min_length = self._settings.min_password_length
        if form.password and len(form.password) < min_length:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_short",
                message=f"Password must be at least {min_length} characters",
                severity="error",
            ))

        return ValidationResult(
            form="registration",
            is_valid=not any(i.severity == "error" for i in issues),
            issues=issues,
        )


def get_user_friendly_summary(result: ValidationResult) -> str:
    """
    Generate a user-friendly summary of validation results.

    This is what we show above the form.
    """
    if result.is_valid and not result.issues:
        return "✅ All checks passed!"

    lines = []

    errors = [i for i in result.issues if i.severity == "error"]
    warnings = [i for i in result.issues if i.severity == "warning"]

    if errors:
        lines.append("❌ Please fix the following:")
        for issue in errors:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")

    if warnings:
        if lines:
            lines.append("")
        lines.append("⚠️ Please verify the following:")
        for issue in warnings:
            lines.append(f"   • {issue.message}")

    return "\n".join(lines)
