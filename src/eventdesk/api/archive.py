"""Admin archive listing endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.api.auth import Admin
from eventdesk.db import ArchivedRegistrationDB, ArchivedUserDB, EventDB, get_session
from eventdesk.db.queries import archived_events
from eventdesk.models import (
    ArchivedEvent,
    ArchivedEventList,
    ArchivedRegistration,
    ArchivedRegistrationList,
    ArchivedUser,
    ArchivedUserList,
)
from eventdesk.services.archive_schema import (
    ARCHIVED_REGISTRATIONS,
    ARCHIVED_USERS,
    ensure_archive_table,
)

router = APIRouter()


@router.get("/users", response_model=ArchivedUserList)
async def list_archived_users(
    admin: Admin,
    session: AsyncSession = Depends(get_session),
) -> ArchivedUserList:
    """List archived users, most recently archived first."""
    await ensure_archive_table(session, ARCHIVED_USERS)
    result = await session.execute(
        select(ArchivedUserDB).order_by(ArchivedUserDB.deleted_at.desc(), ArchivedUserDB.id.desc())
    )
    return ArchivedUserList(
        users=[ArchivedUser.model_validate(row) for row in result.scalars().all()]
    )


@router.get("/registrations", response_model=ArchivedRegistrationList)
async def list_archived_registrations(
    admin: Admin,
    session: AsyncSession = Depends(get_session),
) -> ArchivedRegistrationList:
    """List archived registrations with their user and event snapshot."""
    await ensure_archive_table(session, ARCHIVED_REGISTRATIONS)
    result = await session.execute(
        select(ArchivedRegistrationDB).order_by(
            ArchivedRegistrationDB.deleted_at.desc(), ArchivedRegistrationDB.id.desc()
        )
    )
    return ArchivedRegistrationList(
        registrations=[ArchivedRegistration.model_validate(row) for row in result.scalars().all()]
    )


@router.get("/events", response_model=ArchivedEventList)
async def list_archived_events(
    admin: Admin,
    session: AsyncSession = Depends(get_session),
) -> ArchivedEventList:
    """List soft-deleted events, most recently deleted first."""
    result = await session.execute(
        archived_events().order_by(EventDB.deleted_at.desc(), EventDB.id.desc())
    )
    return ArchivedEventList(
        events=[ArchivedEvent.model_validate(event) for event in result.scalars().all()]
    )
