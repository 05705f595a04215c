"""Tests for lazy creation and additive migration of archive tables."""

import pytest
from sqlalchemy import Column, MetaData, Table, inspect
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.db.models import ArchivedUserDB
from eventdesk.services.archive_schema import (
    ARCHIVED_REGISTRATIONS,
    ARCHIVED_USERS,
    ColumnMigration,
    add_column_if_missing,
    ensure_archive_table,
    is_duplicate_column_error,
)


def _column_names(connection, table_name: str) -> list[str]:
    return [col["name"] for col in inspect(connection).get_columns(table_name)]


def _table_names(connection) -> list[str]:
    return inspect(connection).get_table_names()


def _legacy_archived_users(connection) -> None:
    """Replace archived_users with the layout used before credentials were captured."""
    ArchivedUserDB.__table__.drop(connection)
    legacy = Table(
        "archived_users",
        MetaData(),
        *[
            Column(c.name, c.type, primary_key=c.primary_key, nullable=c.nullable)
            for c in ArchivedUserDB.__table__.columns
            if c.name != "password_hash"
        ],
    )
    legacy.create(connection)


class TestEnsureArchiveTable:
    """Tests for ensure_archive_table."""

    async def test_creates_missing_table(self, test_session: AsyncSession):
        conn = await test_session.connection()
        await conn.run_sync(lambda c: ARCHIVED_REGISTRATIONS.table.drop(c))
        assert "archived_registrations" not in await conn.run_sync(_table_names)

        await ensure_archive_table(test_session, ARCHIVED_REGISTRATIONS)

        assert "archived_registrations" in await conn.run_sync(_table_names)

    async def test_repeated_calls_are_harmless(self, test_session: AsyncSession):
        await ensure_archive_table(test_session, ARCHIVED_USERS)
        await ensure_archive_table(test_session, ARCHIVED_USERS)
        await ensure_archive_table(test_session, ARCHIVED_REGISTRATIONS)
        await ensure_archive_table(test_session, ARCHIVED_REGISTRATIONS)

        conn = await test_session.connection()
        columns = await conn.run_sync(_column_names, "archived_users")
        assert columns.count("password_hash") == 1

    async def test_adds_password_hash_to_legacy_table(self, test_session: AsyncSession):
        conn = await test_session.connection()
        await conn.run_sync(_legacy_archived_users)
        assert "password_hash" not in await conn.run_sync(_column_names, "archived_users")

        await ensure_archive_table(test_session, ARCHIVED_USERS)

        assert "password_hash" in await conn.run_sync(_column_names, "archived_users")


class TestAddColumnIfMissing:
    """Tests for the duplicate-tolerant column migration."""

    async def test_reports_added_then_present(self, test_session: AsyncSession):
        conn = await test_session.connection()
        await conn.run_sync(_legacy_archived_users)
        migration = ARCHIVED_USERS.migrations[0]

        assert await add_column_if_missing(test_session, "archived_users", migration) is True
        assert await add_column_if_missing(test_session, "archived_users", migration) is False

    async def test_other_failures_propagate(self, test_session: AsyncSession):
        migration = ColumnMigration("password_hash", ArchivedUserDB.__table__.c.email.type)

        with pytest.raises(DBAPIError):
            await add_column_if_missing(test_session, "no_such_table", migration)


class _PgError(Exception):
    pgcode = "42701"


class _AsyncpgError(Exception):
    sqlstate = "42701"


class _OtherPgError(Exception):
    pgcode = "42P01"


class TestIsDuplicateColumnError:
    """Driver error classification."""

    def _wrap(self, orig: Exception) -> DBAPIError:
        return DBAPIError("ALTER TABLE archived_users ADD COLUMN password_hash", {}, orig)

    def test_postgres_pgcode(self):
        assert is_duplicate_column_error(self._wrap(_PgError("column exists")))

    def test_postgres_sqlstate(self):
        assert is_duplicate_column_error(self._wrap(_AsyncpgError("column exists")))

    def test_mysql_error_number(self):
        err = Exception(1060, "Duplicate column name 'password_hash'")
        assert is_duplicate_column_error(self._wrap(err))

    def test_sqlite_message(self):
        err = Exception("duplicate column name: password_hash")
        assert is_duplicate_column_error(self._wrap(err))

    def test_unrelated_errors(self):
        assert not is_duplicate_column_error(self._wrap(_OtherPgError("no such table")))
        assert not is_duplicate_column_error(self._wrap(Exception(1146, "Table doesn't exist")))
        assert not is_duplicate_column_error(self._wrap(Exception("no such table: x")))
