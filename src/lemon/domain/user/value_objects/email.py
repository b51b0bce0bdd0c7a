"""Email value object.

Provides validated, normalized email addresses for user identification.
Syntax checks are done by ``email-validator``, the same library behind
pydantic's ``EmailStr``; no DNS lookups are made.
"""

from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from lemon.domain.user.exceptions import InvalidEmailError


@dataclass(frozen=True)
class Email:
    """Value object representing a validated email address."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            msg = "Email cannot be empty"
            raise InvalidEmailError(msg)

        try:
            validated = validate_email(self.value.strip(), check_deliverability=False)
        except EmailNotValidError as e:
            msg = f"Invalid email format: {self.value}"
            raise InvalidEmailError(msg) from e

        # Addresses are compared case-insensitively
        normalized = validated.normalized.lower()

        # Replace value with normalized version (frozen dataclass workaround)
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Email('{self.value}')"
