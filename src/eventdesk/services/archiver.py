"""Snapshot archiver: move live users and registrations into archive tables.

Each function captures the selected live rows, writes them to the archive
table in a single multi-row INSERT and deletes the live rows, all on the
session the caller passes in. The caller owns the transaction, so a failure
at any step rolls the whole operation back when the caller's session does.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import ColumnElement, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.db.models import ArchivedRegistrationDB, ArchivedUserDB, RegistrationDB, UserDB
from eventdesk.services.archive_schema import (
    ARCHIVED_REGISTRATIONS,
    ARCHIVED_USERS,
    ensure_archive_table,
)
from eventdesk.services.snapshots import (
    RegistrationSnapshot,
    UserSnapshot,
    registration_snapshot_query,
)

logger = logging.getLogger(__name__)


class EmptySelectionError(ValueError):
    """Raised when a bulk operation is called without any identifiers."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires at least one id")


@dataclass
class ArchiveResult:
    """Outcome of one archive call."""

    entity_type: str
    source_ids: list[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.source_ids)


def require_ids(ids: Sequence[int], operation: str) -> list[int]:
    """Return ``ids`` de-duplicated in order, rejecting an empty selection."""
    unique = list(dict.fromkeys(ids))
    if not unique:
        raise EmptySelectionError(operation)
    return unique


async def _archive_registrations_where(
    session: AsyncSession,
    condition: ColumnElement[bool],
    deleted_by: int | None,
    deletion_source: str,
) -> ArchiveResult:
    await ensure_archive_table(session, ARCHIVED_REGISTRATIONS)

    result = await session.execute(
        registration_snapshot_query().where(condition).with_for_update(of=RegistrationDB)
    )
    snapshots = [RegistrationSnapshot.from_row(row) for row in result.all()]
    if not snapshots:
        return ArchiveResult(entity_type="registration")

    deleted_at = datetime.now(UTC)
    await session.execute(
        insert(ArchivedRegistrationDB).values(
            [s.archive_values(deleted_at, deleted_by, deletion_source) for s in snapshots]
        )
    )
    registration_ids = [s.registration_id for s in snapshots]
    await _delete_live_rows(session, RegistrationDB, registration_ids)

    logger.info(
        "Archived %d registration(s) (source=%s, actor=%s)",
        len(registration_ids),
        deletion_source,
        deleted_by,
    )
    return ArchiveResult(entity_type="registration", source_ids=registration_ids)


async def _delete_live_rows(
    session: AsyncSession, model: type[UserDB] | type[RegistrationDB], ids: list[int]
) -> None:
    await session.execute(delete(model).where(model.id.in_(ids)))


async def archive_registrations_by_ids(
    session: AsyncSession,
    registration_ids: Sequence[int],
    deleted_by: int | None,
    deletion_source: str,
) -> ArchiveResult:
    """Archive registrations by their own ids."""
    ids = require_ids(registration_ids, "archive_registrations_by_ids")
    return await _archive_registrations_where(
        session, RegistrationDB.id.in_(ids), deleted_by, deletion_source
    )


async def archive_registrations_by_event_ids(
    session: AsyncSession,
    event_ids: Sequence[int],
    deleted_by: int | None,
    deletion_source: str,
) -> ArchiveResult:
    """Archive every registration for the given events."""
    ids = require_ids(event_ids, "archive_registrations_by_event_ids")
    return await _archive_registrations_where(
        session, RegistrationDB.event_id.in_(ids), deleted_by, deletion_source
    )


async def archive_registrations_by_user_ids(
    session: AsyncSession,
    user_ids: Sequence[int],
    deleted_by: int | None,
    deletion_source: str,
) -> ArchiveResult:
    """Archive every registration held by the given users."""
    ids = require_ids(user_ids, "archive_registrations_by_user_ids")
    return await _archive_registrations_where(
        session, RegistrationDB.user_id.in_(ids), deleted_by, deletion_source
    )


async def archive_users_by_ids(
    session: AsyncSession,
    user_ids: Sequence[int],
    deleted_by: int | None,
    deletion_source: str,
) -> ArchiveResult:
    """Archive users, including their credential hash, and delete the live rows.

    Registrations referencing these users must be archived first (see
    ``archive_registrations_by_user_ids``); the live foreign keys would
    otherwise block the delete.
    """
    ids = require_ids(user_ids, "archive_users_by_ids")
    await ensure_archive_table(session, ARCHIVED_USERS)

    result = await session.execute(
        select(UserDB).where(UserDB.id.in_(ids)).order_by(UserDB.id).with_for_update()
    )
    snapshots = [UserSnapshot.from_model(user) for user in result.scalars().all()]
    if not snapshots:
        return ArchiveResult(entity_type="user")

    deleted_at = datetime.now(UTC)
    await session.execute(
        insert(ArchivedUserDB).values(
            [s.archive_values(deleted_at, deleted_by, deletion_source) for s in snapshots]
        )
    )
    archived_ids = [s.user_id for s in snapshots]
    await _delete_live_rows(session, UserDB, archived_ids)

    logger.info(
        "Archived %d user(s) (source=%s, actor=%s)",
        len(archived_ids),
        deletion_source,
        deleted_by,
    )
    return ArchiveResult(entity_type="user", source_ids=archived_ids)
