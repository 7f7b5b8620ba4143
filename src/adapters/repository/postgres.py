"""
PostgreSQL repository adapter - Implements VerificationStore protocol.

This module provides the PostgreSQL implementation of the domain's
store port using psycopg3 with raw SQL.

Atomicity:
----------
The verified_emails table has a PRIMARY KEY on email. insert() uses
INSERT ... ON CONFLICT DO NOTHING, so the membership check and the
write are a single statement and concurrent confirmations for the same
email (from any number of processes) produce exactly one row.
"""

import logging
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.exceptions import StorageError
from src.domain.ports import InsertResult

logger = logging.getLogger(__name__)


class PostgresVerificationStore:
    """
    Implements VerificationStore protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool, timeout: float = 5.0) -> None:
        """
        Initialize store with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            timeout: Seconds to wait for a pooled connection
        """
        self._pool = pool
        self._timeout = timeout

    def contains(self, email: str) -> bool:
        sql = "SELECT 1 FROM verified_emails WHERE email = %s"

        try:
            with self._pool.connection(timeout=self._timeout) as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email,))
                return cursor.fetchone() is not None
        except psycopg.Error as e:
            logger.error("Failed to query verified_emails for %s: %s", email, e)
            raise StorageError(f"Failed to read verification store: {e}") from e

    def insert(self, email: str) -> InsertResult:
        """
        Atomically insert a verification record if absent.

        Returns:
            INSERTED if a row was created, ALREADY_PRESENT if the
            primary key already existed
        """
        sql = """
            INSERT INTO verified_emails (email, verified_at)
            VALUES (%s, NOW())
            ON CONFLICT (email) DO NOTHING
        """

        try:
            with self._pool.connection(timeout=self._timeout) as conn, conn.cursor() as cursor:
                cursor.execute(sql, (email,))
                conn.commit()
                # rowcount is 0 when ON CONFLICT skipped the insert
                inserted = cursor.rowcount == 1
        except psycopg.Error as e:
            logger.error("Failed to insert %s into verified_emails: %s", email, e)
            raise StorageError(f"Failed to write verification store: {e}") from e

        return InsertResult.INSERTED if inserted else InsertResult.ALREADY_PRESENT

    def ping(self) -> None:
        try:
            with self._pool.connection(timeout=self._timeout) as conn:
                conn.execute("SELECT 1")
        except psycopg.Error as e:
            raise StorageError(f"Verification store unreachable: {e}") from e


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
