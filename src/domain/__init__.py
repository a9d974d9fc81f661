"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for user accounts. It
defines its own port interfaces for infrastructure abstraction, ensuring
true hexagonal architecture decoupling.
"""

from .accounts import UserAccountService
from .exceptions import IdentityVerificationError, LocationQueryError, UserError, UserInvalid
from .location import UsersByLocation
from .ports import IdentityVerifier, Mailer, UserRepository
from .user import PERMITTED_FIELDS, Session, User

__all__ = [
    "IdentityVerificationError",
    "IdentityVerifier",
    "LocationQueryError",
    "Mailer",
    "PERMITTED_FIELDS",
    "Session",
    "User",
    "UserAccountService",
    "UserError",
    "UserInvalid",
    "UserRepository",
    "UsersByLocation",
]
