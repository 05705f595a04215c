"""Conflict-aware restore of archived rows back into live storage.

Every requested id gets exactly one outcome: ``Restored`` or
``Skipped(reason)``. A skipped row is a normal result, not an error; the
batch is committed by the caller whatever the mix of outcomes. Only an
unexpected storage error aborts the batch, in which case the caller's
session rolls everything back.

Rows are processed one at a time in ascending archive id order. Each check
reads its target rows with ``SELECT ... FOR UPDATE`` so that a concurrent
restore or delete cannot slip in between the check and the insert.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.db.models import (
    ArchivedRegistrationDB,
    ArchivedUserDB,
    EventDB,
    RegistrationDB,
    UserDB,
)
from eventdesk.db.queries import active_events
from eventdesk.models.enums import SkipReason, UserRole
from eventdesk.services.archive_schema import (
    ARCHIVED_REGISTRATIONS,
    ARCHIVED_USERS,
    ensure_archive_table,
)
from eventdesk.services.archiver import require_ids
from eventdesk.services.credentials import reconstitute_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Restored:
    """The row is live again under ``entity_id``."""

    archive_id: int
    entity_id: int


@dataclass(frozen=True)
class Skipped:
    """The row was left where it was."""

    archive_id: int
    reason: SkipReason


RowOutcome = Restored | Skipped


@dataclass
class RestoreReport:
    """Aggregate result of a restore batch."""

    entity_type: str
    requested: int
    outcomes: list[RowOutcome] = field(default_factory=list)

    @property
    def restored_ids(self) -> list[int]:
        return [o.entity_id for o in self.outcomes if isinstance(o, Restored)]

    @property
    def restored(self) -> int:
        return len(self.restored_ids)

    @property
    def skipped(self) -> list[Skipped]:
        return [o for o in self.outcomes if isinstance(o, Skipped)]

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def summary(self) -> dict[str, Any]:
        """Plain representation used for audit details."""
        return {
            "requested": self.requested,
            "restored": self.restored,
            "skipped": [{"id": s.archive_id, "reason": str(s.reason)} for s in self.skipped],
        }


def _log_report(report: RestoreReport, actor_id: int | None) -> None:
    logger.info(
        "Restored %d of %d archived %s row(s) (actor=%s)",
        report.restored,
        report.requested,
        report.entity_type,
        actor_id,
    )
    for skip in report.skipped:
        logger.warning(
            "Skipped restore of %s %d: %s", report.entity_type, skip.archive_id, skip.reason
        )


async def _restore_registration(
    session: AsyncSession, archived: ArchivedRegistrationDB
) -> RowOutcome:
    event_id = await session.scalar(
        active_events()
        .with_only_columns(EventDB.id)
        .where(EventDB.id == archived.event_id)
        .with_for_update()
    )
    if event_id is None:
        return Skipped(archived.id, SkipReason.EVENT_MISSING_OR_ARCHIVED)

    user_id = await session.scalar(
        select(UserDB.id).where(UserDB.id == archived.user_id).with_for_update()
    )
    if user_id is None:
        return Skipped(archived.id, SkipReason.USER_MISSING)

    existing = await session.scalar(
        select(RegistrationDB.id)
        .where(RegistrationDB.event_id == archived.event_id)
        .where(RegistrationDB.user_id == archived.user_id)
        .with_for_update()
    )
    if existing is not None:
        return Skipped(archived.id, SkipReason.ALREADY_EXISTS)

    registration = RegistrationDB(
        event_id=archived.event_id,
        user_id=archived.user_id,
        status=archived.status,
        registered_at=archived.registered_at,
    )
    # Keep the original id unless another registration has taken it since
    if archived.registration_id is not None:
        taken = await session.scalar(
            select(RegistrationDB.id)
            .where(RegistrationDB.id == archived.registration_id)
            .with_for_update()
        )
        if taken is None:
            registration.id = archived.registration_id

    session.add(registration)
    await session.delete(archived)
    await session.flush()
    return Restored(archived.id, registration.id)


async def _restore_user(session: AsyncSession, archived: ArchivedUserDB) -> RowOutcome:
    taken_id = await session.scalar(
        select(UserDB.id).where(UserDB.id == archived.user_id).with_for_update()
    )
    if taken_id is not None:
        return Skipped(archived.id, SkipReason.USER_ID_EXISTS)

    taken_email = await session.scalar(
        select(UserDB.id).where(UserDB.email == archived.email).with_for_update()
    )
    if taken_email is not None:
        return Skipped(archived.id, SkipReason.EMAIL_EXISTS)

    password_hash, reset_required = reconstitute_password_hash(archived.password_hash)
    user = UserDB(
        id=archived.user_id,
        name=archived.name,
        email=archived.email,
        password_hash=password_hash,
        role=archived.role or UserRole.ATTENDEE,
        company=archived.company,
        phone=archived.phone,
        bio=archived.bio,
        password_reset_required=reset_required,
        created_at=archived.created_at_original or datetime.now(UTC),
    )
    session.add(user)
    await session.delete(archived)
    await session.flush()
    return Restored(archived.id, user.id)


async def restore_registrations(
    session: AsyncSession, archive_ids: Sequence[int], actor_id: int | None
) -> RestoreReport:
    """Restore archived registrations whose event and user are still live."""
    ids = require_ids(archive_ids, "restore_registrations")
    await ensure_archive_table(session, ARCHIVED_REGISTRATIONS)

    result = await session.execute(
        select(ArchivedRegistrationDB)
        .where(ArchivedRegistrationDB.id.in_(ids))
        .order_by(ArchivedRegistrationDB.id)
        .with_for_update()
    )
    archived_rows = {row.id: row for row in result.scalars().all()}

    report = RestoreReport(entity_type="registration", requested=len(ids))
    for archive_id in sorted(ids):
        archived = archived_rows.get(archive_id)
        if archived is None:
            report.outcomes.append(Skipped(archive_id, SkipReason.NOT_FOUND))
            continue
        report.outcomes.append(await _restore_registration(session, archived))

    _log_report(report, actor_id)
    return report


async def restore_users(
    session: AsyncSession, archive_ids: Sequence[int], actor_id: int | None
) -> RestoreReport:
    """Restore archived users whose original id and email are still free."""
    ids = require_ids(archive_ids, "restore_users")
    await ensure_archive_table(session, ARCHIVED_USERS)

    result = await session.execute(
        select(ArchivedUserDB)
        .where(ArchivedUserDB.id.in_(ids))
        .order_by(ArchivedUserDB.id)
        .with_for_update()
    )
    archived_rows = {row.id: row for row in result.scalars().all()}

    report = RestoreReport(entity_type="user", requested=len(ids))
    for archive_id in sorted(ids):
        archived = archived_rows.get(archive_id)
        if archived is None:
            report.outcomes.append(Skipped(archive_id, SkipReason.NOT_FOUND))
            continue
        report.outcomes.append(await _restore_user(session, archived))

    _log_report(report, actor_id)
    return report


async def restore_events(
    session: AsyncSession, event_ids: Sequence[int], actor_id: int | None
) -> RestoreReport:
    """Clear the soft-delete marker on events.

    Events are archived in place, so the archive id is the event id.
    """
    ids = require_ids(event_ids, "restore_events")

    result = await session.execute(
        select(EventDB).where(EventDB.id.in_(ids)).order_by(EventDB.id).with_for_update()
    )
    events = {event.id: event for event in result.scalars().all()}

    report = RestoreReport(entity_type="event", requested=len(ids))
    for event_id in sorted(ids):
        event = events.get(event_id)
        if event is None:
            report.outcomes.append(Skipped(event_id, SkipReason.NOT_FOUND))
        elif event.deleted_at is None:
            report.outcomes.append(Skipped(event_id, SkipReason.ALREADY_EXISTS))
        else:
            event.deleted_at = None
            event.deleted_by = None
            report.outcomes.append(Restored(event_id, event_id))
    await session.flush()

    _log_report(report, actor_id)
    return report
