"""
PostgreSQL repository adapter - Implements RecordStore and UserDirectory protocols.

This module provides the PostgreSQL implementation of the domain's
storage ports using psycopg3 with raw SQL.

Uniqueness Design:
-----------------
The domain never locks. Email and invite-code uniqueness rest on the
UNIQUE constraints declared in migrations/001_create_waitlist.sql. A
violation surfaces here as psycopg.errors.UniqueViolation and is
translated into the domain's DuplicateRecord, naming the field whose
constraint fired, so the domain can decide which collisions are
expected (a racing join on the same email) and which are conflicts.

All identifiers are composed with psycopg.sql and checked against the
known column list; all values are passed as parameters.
"""

import logging
from pathlib import Path
from typing import Any

from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import DuplicateRecord, RecordConflict
from src.domain.ports import SortDirection

logger = logging.getLogger(__name__)

# Created by migrations/001_create_waitlist.sql
WAITLIST_TABLE = "waitlist"

WAITLIST_COLUMNS = frozenset(
    {
        "id",
        "email",
        "status",
        "invite_code",
        "invite_expires_at",
        "position",
        "referred_by",
        "metadata",
        "approved_at",
        "rejected_at",
        "registered_at",
        "created_at",
        "updated_at",
    }
)

# Constraint name -> field, as declared in the migrations
_UNIQUE_CONSTRAINTS = {
    "uq_waitlist_email": "email",
    "uq_waitlist_invite_code": "invite_code",
}


class PostgresRecordStore:
    """
    Implements RecordStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        columns: frozenset[str] = WAITLIST_COLUMNS,
    ) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            columns: Columns that may appear in filters, sorts and writes
        """
        self._pool = pool
        self._table = sql.Identifier(WAITLIST_TABLE)
        self._columns = columns

    def find_one(self, where: dict[str, Any]) -> dict[str, Any] | None:
        query = sql.SQL("SELECT * FROM {} {} LIMIT 1").format(
            self._table, self._where_clause(where)
        )
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, list(where.values()))
            return cursor.fetchone()

    def find_many(
        self,
        where: dict[str, Any] | None = None,
        sort_by: str | None = None,
        direction: SortDirection = SortDirection.ASC,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        where = where or {}
        parts = [
            sql.SQL("SELECT * FROM {}").format(self._table),
            self._where_clause(where),
        ]
        params: list[Any] = list(where.values())
        if sort_by is not None:
            order = sql.SQL("DESC") if direction == SortDirection.DESC else sql.SQL("ASC")
            parts.append(
                sql.SQL("ORDER BY {} {} NULLS LAST").format(self._column(sort_by), order)
            )
        if limit is not None:
            parts.append(sql.SQL("LIMIT %s"))
            params.append(limit)
        if offset:
            parts.append(sql.SQL("OFFSET %s"))
            params.append(offset)

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql.SQL(" ").join(parts), params)
            return cursor.fetchall()

    def count(self, where: dict[str, Any] | None = None) -> int:
        where = where or {}
        query = sql.SQL("SELECT COUNT(*) FROM {} {}").format(
            self._table, self._where_clause(where)
        )
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(query, list(where.values()))
            return cursor.fetchone()[0]

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        columns = [self._column(name) for name in data]
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            self._table,
            sql.SQL(", ").join(columns),
            sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        )
        return self._write(query, list(data.values()))

    def update(self, where: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any] | None:
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(self._column(name)) for name in patch
        )
        query = sql.SQL("UPDATE {} SET {} {} RETURNING *").format(
            self._table, assignments, self._where_clause(where)
        )
        return self._write(query, [*patch.values(), *where.values()])

    def _write(self, query: sql.Composable, params: list[Any]) -> dict[str, Any] | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            try:
                cursor.execute(query, params)
            except errors.UniqueViolation as e:
                conn.rollback()
                field = _UNIQUE_CONSTRAINTS.get(e.diag.constraint_name or "")
                if field is None:
                    raise RecordConflict(str(e)) from e
                raise DuplicateRecord(field) from e
            row = cursor.fetchone()
            conn.commit()
            return row

    def _where_clause(self, where: dict[str, Any]) -> sql.Composable:
        if not where:
            return sql.SQL("")
        predicates = sql.SQL(" AND ").join(
            sql.SQL("{} = %s").format(self._column(name)) for name in where
        )
        return sql.SQL("WHERE {}").format(predicates)

    def _column(self, name: str) -> sql.Identifier:
        if name not in self._columns:
            raise ValueError(f"Unknown column: {name}")
        return sql.Identifier(name)


class PostgresUserDirectory:
    """Implements UserDirectory protocol against the host's user table."""

    def __init__(
        self, pool: ConnectionPool, table: str = "users", email_column: str = "email"
    ) -> None:
        self._pool = pool
        self._query = sql.SQL("SELECT 1 FROM {} WHERE lower({}) = %s LIMIT 1").format(
            sql.Identifier(table), sql.Identifier(email_column)
        )

    def user_exists(self, email: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(self._query, (email.lower(),))
            return cursor.fetchone() is not None


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
