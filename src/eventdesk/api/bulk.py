"""Admin bulk archive, restore and purge endpoints.

Each handler runs its operation in the request transaction, commits, and only
then records the audit entry. A storage failure rolls back and is reported
as a generic 500; nothing is audited for a failed operation.
"""

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.api.auth import Admin
from eventdesk.api.errors import APIError, BadRequestError, ErrorCode
from eventdesk.api.rate_limit import limit_admin
from eventdesk.db import get_session
from eventdesk.models import (
    BulkArchiveResponse,
    BulkIdsRequest,
    BulkPurgeResponse,
    BulkRestoreResponse,
    EntityFamily,
    SkippedItem,
)
from eventdesk.services import bulk
from eventdesk.services.archiver import EmptySelectionError
from eventdesk.services.audit import AuditRecorder, get_audit_recorder

logger = logging.getLogger(__name__)

T = TypeVar("T")

router = APIRouter()

# (action, entity type) recorded for each family and operation
ARCHIVE_ACTIONS = {
    EntityFamily.REGISTRATIONS: ("registration.bulk_delete", "registration"),
    EntityFamily.USERS: ("user.bulk_delete", "user"),
    EntityFamily.EVENTS: ("event.bulk_delete", "event"),
}
RESTORE_ACTIONS = {
    EntityFamily.REGISTRATIONS: ("registration.archive_bulk_restore", "archived_registration"),
    EntityFamily.USERS: ("user.archive_bulk_restore", "archived_user"),
    EntityFamily.EVENTS: ("event.bulk_restore", "event"),
}
PURGE_ACTIONS = {
    EntityFamily.REGISTRATIONS: ("registration.archive_bulk_delete", "archived_registration"),
    EntityFamily.USERS: ("user.archive_bulk_delete", "archived_user"),
}


async def run_in_transaction(session: AsyncSession, operation: Awaitable[T], name: str) -> T:
    """Await ``operation`` and commit, mapping failures to API errors."""
    try:
        result = await operation
        await session.commit()
    except EmptySelectionError as e:
        await session.rollback()
        raise BadRequestError(str(e), code=ErrorCode.EMPTY_ID_SET) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("%s failed", name)
        raise APIError(
            ErrorCode.ARCHIVE_OPERATION_FAILED,
            f"{name} failed",
            status_code=500,
        ) from e
    return result


@router.post("/{family}/bulk-archive", response_model=BulkArchiveResponse)
@limit_admin
async def bulk_archive(
    request: Request,
    family: EntityFamily,
    body: BulkIdsRequest,
    admin: Admin,
    session: AsyncSession = Depends(get_session),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> BulkArchiveResponse:
    """Archive live users or registrations, or soft-delete events."""
    summary = await run_in_transaction(
        session,
        bulk.bulk_archive(session, family, body.ids, admin.user_id),
        f"Bulk archive of {family}",
    )

    action, entity_type = ARCHIVE_ACTIONS[family]
    details: dict[str, Any] = {"count": summary.archived_count, "ids": summary.archived_ids}
    if family == EntityFamily.USERS:
        details["registrationIds"] = summary.cascaded_registration_ids
    await audit.log_admin_action(admin.user_id, action, entity_type, "bulk", details)

    return BulkArchiveResponse(archived_count=summary.archived_count)


@router.post("/archive/{family}/bulk-restore", response_model=BulkRestoreResponse)
@limit_admin
async def bulk_restore(
    request: Request,
    family: EntityFamily,
    body: BulkIdsRequest,
    admin: Admin,
    session: AsyncSession = Depends(get_session),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> BulkRestoreResponse:
    """Restore archived rows, reporting every row that was skipped and why."""
    report = await run_in_transaction(
        session,
        bulk.bulk_restore(session, family, body.ids, admin.user_id),
        f"Bulk restore of {family}",
    )

    action, entity_type = RESTORE_ACTIONS[family]
    await audit.log_admin_action(admin.user_id, action, entity_type, "bulk", report.summary())

    return BulkRestoreResponse(
        requested=report.requested,
        restored=report.restored,
        skipped_count=report.skipped_count,
        skipped=[SkippedItem(id=s.archive_id, reason=s.reason) for s in report.skipped],
    )


@router.post("/archive/{family}/bulk-delete", response_model=BulkPurgeResponse)
@limit_admin
async def bulk_purge(
    request: Request,
    family: EntityFamily,
    body: BulkIdsRequest,
    admin: Admin,
    session: AsyncSession = Depends(get_session),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> BulkPurgeResponse:
    """Permanently delete archived rows. Events must already be soft-deleted."""
    result = await run_in_transaction(
        session,
        bulk.bulk_purge(session, family, body.ids, admin.user_id),
        f"Bulk purge of {family}",
    )

    if family == EntityFamily.EVENTS:
        for event in result.events:
            await audit.log_admin_action(
                admin.user_id,
                "event.delete_permanent",
                "event",
                event.id,
                {"eventTitle": event.title},
            )
    else:
        action, entity_type = PURGE_ACTIONS[family]
        await audit.log_admin_action(
            admin.user_id,
            action,
            entity_type,
            "bulk",
            {"ids": body.ids, "deleted": result.deleted_count},
        )

    return BulkPurgeResponse(deleted_count=result.deleted_count)
