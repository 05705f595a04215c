"""Bulk archive, restore and purge for each entity family.

These are the operations behind the admin bulk endpoints. Like the archiver
and restorer they run on the caller's session and never commit.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.db.models import ArchivedRegistrationDB, ArchivedUserDB, EventDB
from eventdesk.db.queries import active_events, archived_events
from eventdesk.models.enums import DeletionSource, EntityFamily
from eventdesk.services.archive_schema import (
    ARCHIVED_REGISTRATIONS,
    ARCHIVED_USERS,
    ArchiveTableSpec,
    ensure_archive_table,
)
from eventdesk.services.archiver import (
    archive_registrations_by_event_ids,
    archive_registrations_by_ids,
    archive_registrations_by_user_ids,
    archive_users_by_ids,
    require_ids,
)
from eventdesk.services.restorer import (
    RestoreReport,
    restore_events,
    restore_registrations,
    restore_users,
)

logger = logging.getLogger(__name__)


@dataclass
class ArchiveSummary:
    """Result of archiving a set of live rows of one family."""

    family: EntityFamily
    archived_ids: list[int] = field(default_factory=list)
    # Dependent registrations archived along with users
    cascaded_registration_ids: list[int] = field(default_factory=list)

    @property
    def archived_count(self) -> int:
        return len(self.archived_ids)


@dataclass(frozen=True)
class PurgedEvent:
    id: int
    title: str


@dataclass
class PurgeResult:
    """Result of permanently deleting archived rows of one family."""

    family: EntityFamily
    deleted_ids: list[int] = field(default_factory=list)
    events: list[PurgedEvent] = field(default_factory=list)
    cascaded_registration_ids: list[int] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_ids)


async def soft_delete_events(
    session: AsyncSession, event_ids: Sequence[int], actor_id: int | None
) -> list[int]:
    """Mark live events as deleted in place; already-deleted events are left alone."""
    ids = require_ids(event_ids, "soft_delete_events")
    result = await session.execute(
        active_events().where(EventDB.id.in_(ids)).order_by(EventDB.id).with_for_update()
    )
    events = result.scalars().all()
    deleted_at = datetime.now(UTC)
    for event in events:
        event.deleted_at = deleted_at
        event.deleted_by = actor_id
    await session.flush()
    logger.info("Soft-deleted %d event(s) (actor=%s)", len(events), actor_id)
    return [event.id for event in events]


async def purge_events(
    session: AsyncSession, event_ids: Sequence[int], actor_id: int | None
) -> PurgeResult:
    """Permanently delete soft-deleted events.

    Registrations of the purged events are archived first, with their event
    snapshot, so they stay visible in the registration archive.
    """
    ids = require_ids(event_ids, "purge_events")
    result = await session.execute(
        archived_events().where(EventDB.id.in_(ids)).order_by(EventDB.id).with_for_update()
    )
    events = [PurgedEvent(id=e.id, title=e.title) for e in result.scalars().all()]
    purge = PurgeResult(family=EntityFamily.EVENTS, events=events)
    if not events:
        return purge

    purge.deleted_ids = [event.id for event in events]
    archived = await archive_registrations_by_event_ids(
        session, purge.deleted_ids, actor_id, DeletionSource.EVENT_BULK_DELETE_PERMANENT
    )
    purge.cascaded_registration_ids = archived.source_ids
    await session.execute(delete(EventDB).where(EventDB.id.in_(purge.deleted_ids)))

    logger.info(
        "Purged %d event(s) and archived %d registration(s) (actor=%s)",
        purge.deleted_count,
        archived.count,
        actor_id,
    )
    return purge


async def _purge_archive_rows(
    session: AsyncSession,
    spec: ArchiveTableSpec,
    model: type[ArchivedUserDB] | type[ArchivedRegistrationDB],
    archive_ids: Sequence[int],
) -> list[int]:
    ids = require_ids(archive_ids, f"purge {spec.name}")
    await ensure_archive_table(session, spec)
    result = await session.execute(
        select(model.id).where(model.id.in_(ids)).order_by(model.id).with_for_update()
    )
    found = list(result.scalars().all())
    if found:
        await session.execute(delete(model).where(model.id.in_(found)))
    logger.info("Purged %d row(s) from %s", len(found), spec.name)
    return found


async def bulk_archive(
    session: AsyncSession, family: EntityFamily, ids: Sequence[int], actor_id: int | None
) -> ArchiveSummary:
    """Take live rows out of service: archive users/registrations, soft-delete events."""
    if family == EntityFamily.REGISTRATIONS:
        result = await archive_registrations_by_ids(
            session, ids, actor_id, DeletionSource.REGISTRATION_BULK_DELETE
        )
        return ArchiveSummary(family=family, archived_ids=result.source_ids)

    if family == EntityFamily.USERS:
        # Registrations first: they reference the users being removed
        registrations = await archive_registrations_by_user_ids(
            session, ids, actor_id, DeletionSource.USER_BULK_DELETE
        )
        users = await archive_users_by_ids(session, ids, actor_id, DeletionSource.USER_BULK_DELETE)
        return ArchiveSummary(
            family=family,
            archived_ids=users.source_ids,
            cascaded_registration_ids=registrations.source_ids,
        )

    return ArchiveSummary(
        family=family, archived_ids=await soft_delete_events(session, ids, actor_id)
    )


async def bulk_restore(
    session: AsyncSession, family: EntityFamily, ids: Sequence[int], actor_id: int | None
) -> RestoreReport:
    """Restore archived rows of one family, skipping rows that no longer fit."""
    if family == EntityFamily.REGISTRATIONS:
        return await restore_registrations(session, ids, actor_id)
    if family == EntityFamily.USERS:
        return await restore_users(session, ids, actor_id)
    return await restore_events(session, ids, actor_id)


async def bulk_purge(
    session: AsyncSession, family: EntityFamily, ids: Sequence[int], actor_id: int | None
) -> PurgeResult:
    """Permanently delete archived rows of one family."""
    if family == EntityFamily.REGISTRATIONS:
        deleted = await _purge_archive_rows(session, ARCHIVED_REGISTRATIONS, ArchivedRegistrationDB, ids)
        return PurgeResult(family=family, deleted_ids=deleted)
    if family == EntityFamily.USERS:
        deleted = await _purge_archive_rows(session, ARCHIVED_USERS, ArchivedUserDB, ids)
        return PurgeResult(family=family, deleted_ids=deleted)
    return await purge_events(session, ids, actor_id)
