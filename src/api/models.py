"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserParams(BaseModel):
    """
    Permitted user attributes for registration, profile update and social login.

    Unknown keys are dropped; only fields the client actually sent are applied.
    """

    model_config = ConfigDict(extra="ignore")

    email: EmailStr | None = None
    zip: str | None = None
    password: str | None = None
    mentor: bool | None = None
    slack_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    verified: bool | None = None
    state: str | None = None
    address1: str | None = None
    address2: str | None = None
    username: str | None = None
    volunteer: bool | None = None
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
    interests: list[str] | None = None


class UserRequest(BaseModel):
    """Request body wrapping user attributes: {"user": {...}}."""

    user: UserParams


class SocialLoginRequest(BaseModel):
    """
    Request body for social login.

    Attributes stay unvalidated here so the route can answer a bad payload
    with the registration redirect instead of a 422.
    """

    user: dict[str, Any] = Field(default_factory=dict)


class EmailLookup(BaseModel):
    email: str | None = None


class EmailLookupRequest(BaseModel):
    """Request body for the social redirect lookup: {"user": {"email": ...}}."""

    user: EmailLookup | None = None


class VerifyRequest(BaseModel):
    """Request body for identity verification."""

    access_token: str | None = Field(default=None, description="ID.me OAuth access token")


class UserResponse(BaseModel):
    """Serialized user. Never exposes the password hash or session token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
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
    interests: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenResponse(BaseModel):
    """Response model for successful registration."""

    token: str


class UserCountResponse(BaseModel):
    user_count: int


class RedirectPathResponse(BaseModel):
    redirect_to: str


class SocialLoginResponse(BaseModel):
    """Response model for a successful social login."""

    token: str
    user: UserResponse
    redirect_to: str


class VerifyResponse(BaseModel):
    status: str
    verified: bool


class VerifyFailedResponse(BaseModel):
    status: str


class ErrorsResponse(BaseModel):
    """Action-level failure: {"errors": "<message>"}."""

    errors: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
