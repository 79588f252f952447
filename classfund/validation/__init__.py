"""Form validation package."""

from classfund.validation.validator import (
    BoxFormValidator,
    RegistrationValidator,
    get_user_friendly_summary,
    parse_balance,
)

__all__ = [
    "BoxFormValidator",
    "RegistrationValidator",
    "get_user_friendly_summary",
    "parse_balance",
]
