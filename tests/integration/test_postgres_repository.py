"""
Integration tests for PostgresUserRepository.

Tests repository operations against a real PostgreSQL database.
Requires PostgreSQL to be running (via docker-compose).
"""

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresUserRepository
from src.domain.exceptions import UserInvalid
from src.domain.user import User

pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("clean_database")]


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresUserRepository:
    """Create repository instance for each test."""
    return PostgresUserRepository(pool)


def new_user(email: str, token: str | None = None, **fields) -> User:
    return User(
        email=email,
        password_hash="$2b$04$hashedpasswordvalue",
        token=token or f"token-{email}",
        **fields,
    )


class TestCreate:
    """Tests for create method."""

    def test_create_returns_stored_user(self, repository: PostgresUserRepository) -> None:
        """Created user comes back with id and timestamps."""
        user = repository.create(
            new_user("ada@example.com", first_name="Ada", interests=["python", "devops"])
        )

        assert user.id is not None
        assert user.persisted
        assert user.created_at is not None
        assert user.first_name == "Ada"
        assert user.interests == ["python", "devops"]
        assert user.sign_in_count == 0

    def test_create_defaults_flags_to_false(self, repository: PostgresUserRepository) -> None:
        user = repository.create(new_user("flags@example.com"))
        assert user.mentor is False
        assert user.volunteer is False
        assert user.verified is False

    def test_duplicate_email_raises_field_error(self, repository: PostgresUserRepository) -> None:
        """Unique index violation surfaces as a domain validation error."""
        repository.create(new_user("dup@example.com", token="t1"))

        with pytest.raises(UserInvalid) as exc_info:
            repository.create(new_user("DUP@example.com", token="t2"))

        assert exc_info.value.errors == {"email": ["has already been taken"]}

    def test_duplicate_token_is_not_an_email_error(self, repository: PostgresUserRepository) -> None:
        """Only the email index maps to a field error."""
        repository.create(new_user("one@example.com", token="same"))

        with pytest.raises(Exception) as exc_info:
            repository.create(new_user("two@example.com", token="same"))

        assert not isinstance(exc_info.value, UserInvalid)


class TestLookups:
    """Tests for find_by_email, find_by_token and email_taken."""

    def test_find_by_email_case_insensitive(self, repository: PostgresUserRepository) -> None:
        created = repository.create(new_user("grace@example.com"))

        found = repository.find_by_email("Grace@Example.com")

        assert found is not None
        assert found.id == created.id

    def test_find_by_email_missing(self, repository: PostgresUserRepository) -> None:
        assert repository.find_by_email("nobody@example.com") is None

    def test_find_by_token(self, repository: PostgresUserRepository) -> None:
        created = repository.create(new_user("tok@example.com", token="abc"))

        assert repository.find_by_token("abc").id == created.id
        assert repository.find_by_token("other") is None

    def test_email_taken(self, repository: PostgresUserRepository) -> None:
        created = repository.create(new_user("taken@example.com"))

        assert repository.email_taken("TAKEN@example.com") is True
        assert repository.email_taken("free@example.com") is False
        assert repository.email_taken("taken@example.com", exclude_id=created.id) is False


class TestUpdate:
    """Tests for update and update_verified."""

    def test_update_persists_profile(self, repository: PostgresUserRepository) -> None:
        user = repository.create(new_user("upd@example.com"))
        user.bio = "Marine, now a backend dev"
        user.years_of_service = 8.0
        user.mentor = True

        updated = repository.update(user)
        reloaded = repository.find_by_email("upd@example.com")

        assert updated.bio == "Marine, now a backend dev"
        assert reloaded.years_of_service == 8.0
        assert reloaded.mentor is True
        assert reloaded.updated_at >= reloaded.created_at

    def test_update_to_taken_email_raises(self, repository: PostgresUserRepository) -> None:
        repository.create(new_user("first@example.com"))
        second = repository.create(new_user("second@example.com"))
        second.email = "first@example.com"

        with pytest.raises(UserInvalid):
            repository.update(second)

    def test_update_verified_only_touches_flag(self, repository: PostgresUserRepository) -> None:
        user = repository.create(new_user("ver@example.com", first_name="Ver"))

        repository.update_verified(user.id, True)
        reloaded = repository.find_by_email("ver@example.com")

        assert reloaded.verified is True
        assert reloaded.first_name == "Ver"


class TestSignIn:
    """Tests for record_sign_in."""

    def test_record_sign_in_tracks_counts_and_times(self, repository: PostgresUserRepository) -> None:
        user = repository.create(new_user("signin@example.com"))

        first = repository.record_sign_in(user.id)
        second = repository.record_sign_in(user.id)
        reloaded = repository.find_by_email("signin@example.com")

        assert reloaded.sign_in_count == 2
        assert reloaded.current_sign_in_at == second
        assert reloaded.last_sign_in_at == first


class TestCounts:
    """Tests for count and count_by_location."""

    def test_count_reflects_rows(self, repository: PostgresUserRepository) -> None:
        assert repository.count() == 0
        repository.create(new_user("c1@example.com"))
        repository.create(new_user("c2@example.com"))
        assert repository.count() == 2

    def test_count_by_location(self, repository: PostgresUserRepository) -> None:
        repository.create(new_user("tx1@example.com", state="tx", zip="78701"))
        repository.create(new_user("tx2@example.com", state="TX", zip="78702"))
        repository.create(new_user("ca@example.com", state="CA", zip="90210"))
        repository.create(new_user("none@example.com"))

        assert repository.count_by_location(["TX"], []) == 2
        assert repository.count_by_location(["TX", "CA"], []) == 3
        assert repository.count_by_location([], ["90210"]) == 1
        # Users matching both criteria are counted once
        assert repository.count_by_location(["TX"], ["78701", "90210"]) == 3
        assert repository.count_by_location(["NY"], []) == 0
