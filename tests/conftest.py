"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Building domain users without a database
- Mocked ports for the account service
- A real PostgreSQL pool for integration and adversarial tests
  (skipped when DATABASE_URL is not reachable)
"""

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings
from src.domain.accounts import UserAccountService
from src.domain.user import User


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for database tests, with migrations applied."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not available")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean users table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM users")
        conn.commit()
    yield


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Factory for persisted-looking users."""

    def _make_user(**overrides) -> User:
        values = {
            "id": 1,
            "email": "user@example.com",
            "password_hash": "$2b$04$storedhashvalue",
            "token": "session-token-123",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "zip": "78701",
            "state": "TX",
            "interests": ["python"],
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        values.update(overrides)
        return User(**values)

    return _make_user


@pytest.fixture
def repository() -> Mock:
    """Repository mock that accepts any new email and echoes writes back."""
    repo = Mock()
    repo.email_taken.return_value = False
    repo.find_by_email.return_value = None
    repo.create.side_effect = lambda user: user
    repo.update.side_effect = lambda user: user
    repo.record_sign_in.return_value = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    return repo


@pytest.fixture
def mailer() -> Mock:
    return Mock()


@pytest.fixture
def identity_verifier() -> Mock:
    return Mock()


@pytest.fixture
def service(repository: Mock, mailer: Mock, identity_verifier: Mock) -> UserAccountService:
    """Account service wired to mocks; bcrypt at minimum cost to keep tests fast."""
    return UserAccountService(
        repository=repository,
        mailer=mailer,
        identity_verifier=identity_verifier,
        password_min_length=6,
        bcrypt_rounds=4,
    )
