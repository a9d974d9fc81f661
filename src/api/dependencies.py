"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from src.adapters.idme import IdMeClient
from src.adapters.repository.postgres import PostgresUserRepository
from src.adapters.smtp import ConsoleMailer, SmtpMailer
from src.config.settings import get_settings
from src.domain.accounts import UserAccountService
from src.domain.ports import Mailer
from src.domain.user import User

# Module-level singleton - ConsoleMailer is stateless
_console_mailer = ConsoleMailer()

SIGN_IN_REQUIRED = "You need to sign in or sign up before continuing."


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresUserRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresUserRepository(pool)


def get_mailer() -> Mailer:
    """Select the mailer configured by MAILER_BACKEND."""
    settings = get_settings()
    if settings.mailer_backend == "smtp":
        return SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_from,
            username=settings.smtp_username,
            password=settings.smtp_password,
            starttls=settings.smtp_starttls,
        )
    return _console_mailer


def get_identity_verifier() -> IdMeClient:
    settings = get_settings()
    return IdMeClient(settings.idme_base_url, timeout=settings.idme_timeout_seconds)


def get_user_service(request: Request) -> UserAccountService:
    """
    Create user account service with injected dependencies.

    Wires together the repository, mailer and identity verifier.
    """
    settings = get_settings()
    return UserAccountService(
        repository=get_repository(request),
        mailer=get_mailer(),
        identity_verifier=get_identity_verifier(),
        password_min_length=settings.password_min_length,
        bcrypt_rounds=settings.bcrypt_cost,
    )


# Bearer token scheme; auto_error is off so a missing header gets our own 401 message
http_bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: UserAccountService = Depends(get_user_service),
) -> User:
    """
    Resolve the signed-in user from the Authorization: Bearer header.

    Raises:
        HTTPException: 401 when the token is missing or unknown
    """
    token = credentials.credentials if credentials else None
    user = service.authenticate(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SIGN_IN_REQUIRED,
        )
    return user
