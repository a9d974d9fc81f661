"""
User account domain service.

This module contains the business logic behind the users API:
registration, profile updates, social login, sign-in tracking and
identity verification.

Validation
==========

Errors are collected per field with short messages, so clients can render
them next to form inputs:

    {"email": ["has already been taken"], "password": ["can't be blank"]}

- email: required, unique (case-insensitive)
- password: required on registration, minimum length on any change

Social Login Redirects
======================

- existing user     -> /profile
- new user (social) -> /signup-info   (finish the profile)
- unknown email     -> /social_login  (lookup only, nothing created)
"""

import logging
import secrets
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import bcrypt

from .exceptions import UserInvalid
from .location import UsersByLocation
from .ports import IdentityVerifier, Mailer, UserRepository
from .user import BOOLEAN_FIELDS, PERMITTED_FIELDS, Session, User

logger = logging.getLogger(__name__)

PROFILE_PATH = "/profile"
SOCIAL_LOGIN_PATH = "/social_login"
SIGNUP_INFO_PATH = "/signup-info"

# Provider payloads may prefill the profile but never set credentials or verification.
SOCIAL_FIELDS = tuple(name for name in PERMITTED_FIELDS if name not in ("password", "verified"))


@dataclass
class UserAccountService:
    """
    Domain service for user accounts.

    Orchestrates validation, password hashing, token issuing and
    persistence for every users API action.
    """

    repository: UserRepository
    mailer: Mailer
    identity_verifier: IdentityVerifier
    password_min_length: int = 6
    bcrypt_rounds: int = 10

    def count(self) -> int:
        """Return the current number of users (never cached)."""
        return self.repository.count()

    def count_by_location(self, params: Mapping[str, str]) -> int:
        """Count users matching the state/zip query parameters."""
        return UsersByLocation(params, self.repository).count()

    def register(self, attributes: Mapping[str, Any]) -> User:
        """
        Create a new user from permitted attributes.

        Args:
            attributes: Request attributes; keys outside the allow-list are ignored

        Returns:
            The persisted user, including its session token

        Raises:
            UserInvalid: If validation fails
        """
        user = User()
        password = attributes.get("password")
        self._assign(user, attributes, PERMITTED_FIELDS)
        self._check(user, password=password, require_password=True)
        self._set_password(user, password)
        user.token = self._generate_token()
        return self.repository.create(user)

    def update_profile(self, user: User, attributes: Mapping[str, Any]) -> User:
        """
        Apply permitted attributes to an existing user and persist them.

        Raises:
            UserInvalid: If validation fails
        """
        password = attributes.get("password")
        self._assign(user, attributes, PERMITTED_FIELDS)
        self._check(user, password=password, require_password=False)
        if password:
            self._set_password(user, password)
        return self.repository.update(user)

    def social_redirect_path(self, email: str | None) -> str:
        """Return where the frontend should send a social login for this email."""
        if email and self.repository.find_by_email(self._normalize_email(email)):
            return PROFILE_PATH
        return SOCIAL_LOGIN_PATH

    def fetch_social_user(self, payload: Mapping[str, Any]) -> tuple[User, str]:
        """
        Resolve the user for a social provider payload.

        Returns:
            (existing user, "/profile") or (new unsaved user, "/signup-info")
        """
        email = self._normalize_email(payload.get("email") or "")
        existing = self.repository.find_by_email(email) if email else None
        if existing is not None:
            return existing, PROFILE_PATH

        user = User()
        self._assign(user, payload, SOCIAL_FIELDS)
        # Social users never type a password; store an unguessable one.
        self._set_password(user, secrets.token_urlsafe(24))
        user.token = self._generate_token()
        return user, SIGNUP_INFO_PATH

    def social_login(self, payload: Mapping[str, Any]) -> tuple[User, str]:
        """
        Resolve or create the user behind a social login.

        Raises:
            UserInvalid: If a new user cannot be saved
        """
        user, redirect_path = self.fetch_social_user(payload)
        if user.persisted:
            return user, redirect_path

        self._check(user, password=None, require_password=False)
        return self.repository.create(user), redirect_path

    def sign_in(self, user: User, event: str = "authentication") -> Session:
        """Record a sign-in and return the session for this request."""
        signed_in_at = self.repository.record_sign_in(user.id)
        user.last_sign_in_at = user.current_sign_in_at
        user.current_sign_in_at = signed_in_at
        user.sign_in_count += 1
        return Session(user=user, event=event, signed_in_at=signed_in_at)

    def authenticate(self, token: str | None) -> User | None:
        """Resolve a bearer token to its user, or None."""
        if not token:
            return None
        return self.repository.find_by_token(token)

    def verify_identity(self, user: User, access_token: str | None) -> bool:
        """
        Ask the identity provider whether the user is verified and store the answer.

        Raises:
            Exception: Whatever the identity verifier raises
        """
        verified = bool(self.identity_verifier.verify(access_token))
        logger.debug("Got verified status '%s'", verified)
        logger.debug("Updating user %s", user.id)
        self.repository.update_verified(user.id, verified)
        user.verified = verified
        return verified

    def send_welcome(self, user: User) -> None:
        """
        Deliver the welcome email.

        Runs after the response has been sent; a delivery failure is logged
        and does not affect the registration.
        """
        try:
            self.mailer.send_welcome(user.email, user.first_name)
        except Exception:
            logger.exception("Welcome email delivery failed for user %s", user.id)

    def _assign(self, user: User, attributes: Mapping[str, Any], allowed: tuple[str, ...]) -> None:
        for name, value in attributes.items():
            if name not in allowed or name == "password":
                continue
            if name == "email":
                value = self._normalize_email(value or "")
            elif name in BOOLEAN_FIELDS:
                value = bool(value)
            elif name == "interests":
                value = [str(interest) for interest in value or []]
            setattr(user, name, value)

    def _check(self, user: User, password: str | None, require_password: bool) -> None:
        errors: dict[str, list[str]] = defaultdict(list)

        if not user.email:
            errors["email"].append("can't be blank")
        elif self.repository.email_taken(user.email, exclude_id=user.id):
            errors["email"].append("has already been taken")

        if not password:
            if require_password:
                errors["password"].append("can't be blank")
        elif len(password) < self.password_min_length:
            errors["password"].append(
                f"is too short (minimum is {self.password_min_length} characters)"
            )

        if errors:
            raise UserInvalid(dict(errors))

    def _set_password(self, user: User, password: str) -> None:
        user.password_hash = bcrypt.hashpw(
            password.encode(), bcrypt.gensalt(rounds=self.bcrypt_rounds)
        ).decode()

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _generate_token(self) -> str:
        return secrets.token_urlsafe(32)
