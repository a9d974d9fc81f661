"""
User and Session domain models.

The User is the single persistent entity of the service. A Session is
derived from a User at sign-in and lives only for the current request.
"""

from dataclasses import dataclass, field
from datetime import datetime

# Attributes a client may set on register / profile update, in request order.
PERMITTED_FIELDS = (
    "email",
    "zip",
    "password",
    "mentor",
    "slack_name",
    "first_name",
    "last_name",
    "bio",
    "verified",
    "state",
    "address1",
    "address2",
    "username",
    "volunteer",
    "branch_of_service",
    "years_of_service",
    "pay_grade",
    "military_occupational_specialty",
    "github",
    "twitter",
    "linked_in",
    "employment_status",
    "education",
    "company_role",
    "company_name",
    "education_level",
    "scholarship_info",
    "interests",
)

BOOLEAN_FIELDS = frozenset({"mentor", "verified", "volunteer"})

# Permitted fields stored as-is on the user (password is hashed instead).
PROFILE_FIELDS = tuple(name for name in PERMITTED_FIELDS if name not in ("email", "password"))


@dataclass
class User:
    """
    Registered user.

    `token` is the opaque bearer token issued at creation; it identifies
    the user on authenticated requests and never changes afterwards.
    """

    email: str = ""
    password_hash: str = ""
    token: str = ""
    zip: str | None = None
    mentor: bool = False
    slack_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    verified: bool = False
    state: str | None = None
    address1: str | None = None
    address2: str | None = None
    username: str | None = None
    volunteer: bool = False
    branch_of_service: str | None = None
    years_of_service: float | None = None
    pay_grade: str | None = None
    military_occupational_specialty: str | None = None
    github: str | None = None
    twitter: str | None = None
    linked_in: str | None = None
    employment_status: str | None = None
    education: str | None = None
    company_role: str | None = None
    company_name: str | None = None
    education_level: str | None = None
    scholarship_info: str | None = None
    interests: list[str] = field(default_factory=list)
    id: int | None = None
    sign_in_count: int = 0
    current_sign_in_at: datetime | None = None
    last_sign_in_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def persisted(self) -> bool:
        return self.id is not None


@dataclass(frozen=True)
class Session:
    """Authenticated identity established by signing a user in."""

    user: User
    event: str
    signed_in_at: datetime
