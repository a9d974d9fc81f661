"""
Domain exceptions - Semantic error types for user accounts.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class UserError(Exception):
    """Base class for user account domain errors."""

    pass


class UserInvalid(UserError):
    """
    User failed validation.

    Carries field-level messages in the shape rendered to clients:
    {"email": ["has already been taken"], ...}
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__("; ".join(self.full_messages()))

    def full_messages(self) -> list[str]:
        """Messages prefixed with the humanized field name, e.g. "Email can't be blank"."""
        return [
            f"{field.replace('_', ' ').capitalize()} {message}"
            for field, messages in self.errors.items()
            for message in messages
        ]


class LocationQueryError(UserError):
    """Location count requested without any usable location criteria."""

    pass


class IdentityVerificationError(UserError):
    """Identity provider returned no usable verification result."""

    pass
