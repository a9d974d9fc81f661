"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with SQL composed via psycopg.sql.

Email uniqueness is enforced by the unique index on LOWER(email). The
service checks for duplicates before writing, and the index catches
concurrent registrations that slip past that check; both paths surface
as the same field error.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import UserInvalid
from src.domain.user import PROFILE_FIELDS, User

logger = logging.getLogger(__name__)

EMAIL_INDEX = "idx_users_email_lower"

# Columns written from the domain model
_WRITABLE_COLUMNS = ("email", "password_hash", "token", *PROFILE_FIELDS)
# Columns read back into the domain model
_READ_COLUMNS = (
    "id",
    *_WRITABLE_COLUMNS,
    "sign_in_count",
    "current_sign_in_at",
    "last_sign_in_at",
    "created_at",
    "updated_at",
)

_SELECT_LIST = sql.SQL(", ").join(map(sql.Identifier, _READ_COLUMNS))

_INSERT_SQL = sql.SQL("INSERT INTO users ({columns}) VALUES ({values}) RETURNING {returning}").format(
    columns=sql.SQL(", ").join(map(sql.Identifier, _WRITABLE_COLUMNS)),
    values=sql.SQL(", ").join(sql.Placeholder() * len(_WRITABLE_COLUMNS)),
    returning=_SELECT_LIST,
)

_UPDATE_SQL = sql.SQL(
    "UPDATE users SET {assignments}, updated_at = NOW() WHERE id = %s RETURNING {returning}"
).format(
    assignments=sql.SQL(", ").join(
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in _WRITABLE_COLUMNS
    ),
    returning=_SELECT_LIST,
)

_FIND_BY_EMAIL_SQL = sql.SQL("SELECT {columns} FROM users WHERE LOWER(email) = LOWER(%s)").format(
    columns=_SELECT_LIST
)

_FIND_BY_TOKEN_SQL = sql.SQL("SELECT {columns} FROM users WHERE token = %s").format(
    columns=_SELECT_LIST
)


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def count(self) -> int:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM users")
            return cursor.fetchone()[0]

    def count_by_location(self, states: Sequence[str], zips: Sequence[str]) -> int:
        """
        Count users whose state or zip is in the given lists.

        Empty lists match nothing, so a state-only query ignores zip and
        vice versa.
        """
        query = """
            SELECT COUNT(*) FROM users
            WHERE UPPER(state) = ANY(%s::text[])
               OR zip = ANY(%s::text[])
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(query, (list(states), list(zips)))
            return cursor.fetchone()[0]

    def find_by_email(self, email: str) -> User | None:
        return self._fetch_one(_FIND_BY_EMAIL_SQL, (email,))

    def find_by_token(self, token: str) -> User | None:
        return self._fetch_one(_FIND_BY_TOKEN_SQL, (token,))

    def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        query = "SELECT 1 FROM users WHERE LOWER(email) = LOWER(%s)"
        params: tuple = (email,)
        if exclude_id is not None:
            query += " AND id <> %s"
            params = (email, exclude_id)

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchone() is not None

    def create(self, user: User) -> User:
        """
        Insert a new user row.

        Returns:
            A new User built from the stored row (id, timestamps populated)

        Raises:
            UserInvalid: If the email unique index rejects the row
        """
        return self._write(_INSERT_SQL, self._values(user))

    def update(self, user: User) -> User:
        """
        Write every writable column of an existing user.

        Raises:
            UserInvalid: If the email unique index rejects the change
        """
        return self._write(_UPDATE_SQL, (*self._values(user), user.id))

    def update_verified(self, user_id: int, verified: bool) -> None:
        with self._pool.connection() as conn:
            conn.execute(
                "UPDATE users SET verified = %s, updated_at = NOW() WHERE id = %s",
                (verified, user_id),
            )
            conn.commit()

    def record_sign_in(self, user_id: int) -> datetime:
        """
        Track a sign-in in one statement.

        SET expressions see the pre-update row, so last_sign_in_at takes
        the previous current_sign_in_at.
        """
        query = """
            UPDATE users
            SET sign_in_count = sign_in_count + 1,
                last_sign_in_at = current_sign_in_at,
                current_sign_in_at = NOW()
            WHERE id = %s
            RETURNING current_sign_in_at
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(query, (user_id,))
            row = cursor.fetchone()
            conn.commit()
            return row[0]

    def _fetch_one(self, query: sql.Composable, params: tuple) -> User | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return User(**row) if row is not None else None

    def _write(self, query: sql.Composable, params: tuple) -> User:
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            if e.diag.constraint_name != EMAIL_INDEX:
                raise
            raise UserInvalid({"email": ["has already been taken"]}) from None
        return User(**row)

    @staticmethod
    def _values(user: User) -> tuple:
        return tuple(getattr(user, column) for column in _WRITABLE_COLUMNS)


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
