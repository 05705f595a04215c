"""Idempotent creation and additive migration of archive tables.

Archive tables are created lazily by the archive engine rather than by a
migration run, so every archive, restore, purge or listing operation calls
``ensure_archive_table`` first. The guard is forward-only: it creates missing
tables and indexes and adds missing columns. It never drops or renames.
"""

import logging
from dataclasses import dataclass, field

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Column, Connection, String, Table
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import TypeEngine

from eventdesk.db.models import ArchivedRegistrationDB, ArchivedUserDB

logger = logging.getLogger(__name__)

# PostgreSQL duplicate_column
_PG_DUPLICATE_COLUMN = "42701"
# MySQL ER_DUP_FIELDNAME
_MYSQL_DUPLICATE_COLUMN = 1060


@dataclass(frozen=True)
class ColumnMigration:
    """A column that may be missing from archive tables created by older releases."""

    name: str
    type_: TypeEngine
    nullable: bool = True

    def to_column(self) -> Column:
        # A Column can only belong to one Table, so build a fresh one per attempt
        return Column(self.name, self.type_, nullable=self.nullable)


@dataclass(frozen=True)
class ArchiveTableSpec:
    """Archive table definition plus the additive migrations applied to it."""

    table: Table
    migrations: tuple[ColumnMigration, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.table.name


ARCHIVED_USERS = ArchiveTableSpec(
    table=ArchivedUserDB.__table__,
    migrations=(
        # Archive rows written before credential capture have no password_hash
        ColumnMigration("password_hash", String(255)),
    ),
)

ARCHIVED_REGISTRATIONS = ArchiveTableSpec(table=ArchivedRegistrationDB.__table__)


def is_duplicate_column_error(exc: DBAPIError) -> bool:
    """Return True if the driver reported that the column already exists."""
    orig = exc.orig
    if getattr(orig, "pgcode", None) == _PG_DUPLICATE_COLUMN:
        return True
    if getattr(orig, "sqlstate", None) == _PG_DUPLICATE_COLUMN:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == _MYSQL_DUPLICATE_COLUMN:
        return True
    # SQLite only reports the condition in its message
    return "duplicate column name" in str(orig).lower()


def _add_column(connection: Connection, table_name: str, column: Column) -> bool:
    """Add ``column`` to ``table_name``; return False if it was already there."""
    operations = Operations(MigrationContext.configure(connection))
    try:
        if connection.dialect.name == "postgresql":
            # A failed statement aborts the whole PostgreSQL transaction,
            # so the attempt has to be isolated in a savepoint.
            with connection.begin_nested():
                operations.add_column(table_name, column)
        else:
            operations.add_column(table_name, column)
    except DBAPIError as exc:
        if is_duplicate_column_error(exc):
            return False
        raise
    return True


async def add_column_if_missing(
    session: AsyncSession, table_name: str, migration: ColumnMigration
) -> bool:
    """Add a column to an existing table, tolerating the column already existing.

    Returns:
        True if the column was added, False if it already existed.

    Raises:
        DBAPIError: For any failure other than a duplicate column.
    """
    connection = await session.connection()
    added = await connection.run_sync(_add_column, table_name, migration.to_column())
    if added:
        logger.info("Added column %s.%s", table_name, migration.name)
    return added


async def ensure_archive_table(session: AsyncSession, spec: ArchiveTableSpec) -> None:
    """Create the archive table and its indexes if absent, then apply migrations.

    Safe to call on every operation. Runs on the caller's transaction.
    """
    connection = await session.connection()
    await connection.run_sync(lambda sync_conn: spec.table.create(sync_conn, checkfirst=True))
    for migration in spec.migrations:
        await add_column_if_missing(session, spec.name, migration)
