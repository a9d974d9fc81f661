"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from .user import User


class UserRepository(Protocol):
    """Port interface for user persistence."""

    def count(self) -> int:
        """Return the number of stored users."""
        ...

    def count_by_location(self, states: Sequence[str], zips: Sequence[str]) -> int:
        """
        Count users located in any of the given states or zip codes.

        Args:
            states: Upper-cased state codes (may be empty)
            zips: Zip codes (may be empty)
        """
        ...

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by email, case-insensitively."""
        ...

    def find_by_token(self, token: str) -> User | None:
        """Look up a user by session token."""
        ...

    def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        """Return True if another user already holds this email."""
        ...

    def create(self, user: User) -> User:
        """
        Insert a new user.

        Returns:
            The stored user with id and timestamps populated

        Raises:
            UserInvalid: If the email is already taken
        """
        ...

    def update(self, user: User) -> User:
        """
        Persist every attribute of an existing user.

        Raises:
            UserInvalid: If the new email is already taken
        """
        ...

    def update_verified(self, user_id: int, verified: bool) -> None:
        """Set only the verified flag, leaving other columns untouched."""
        ...

    def record_sign_in(self, user_id: int) -> datetime:
        """
        Track a sign-in: bump the counter and rotate sign-in timestamps.

        Returns:
            The new current_sign_in_at (database time)
        """
        ...


class Mailer(Protocol):
    """Port interface for outbound email."""

    def send_welcome(self, email: str, first_name: str | None) -> None:
        """Send the welcome email to a newly registered user."""
        ...


class IdentityVerifier(Protocol):
    """Port interface for third-party identity verification."""

    def verify(self, access_token: str | None) -> bool:
        """
        Exchange an access token for the user's verification status.

        Raises:
            Exception: Any failure talking to the provider
        """
        ...
