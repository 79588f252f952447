"""
Form Input Models

Raw values as typed by the user. Everything is text (or a checkbox)
and may be empty; validators decide what is acceptable.
"""

from pydantic import BaseModel, ConfigDict, Field


class BoxForm(BaseModel):
    """Values from the add/edit box form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    balance: str = Field(
        default="",
        description="Balance as typed; empty means no balance"
    )


class RegistrationForm(BaseModel):
    """
    Values from the registration screen.

    CRITICAL: Passwords are only compared here, never stored or logged.
    Not whitespace-stripped: passwords must reach the validator as typed.
    """

    name: str = ""
    email: str = ""
    password: str = Field(default="", repr=False)
    password_repeat: str = Field(default="", repr=False)
    school: str = ""
    terms_accepted: bool = False
