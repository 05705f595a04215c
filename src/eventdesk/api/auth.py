"""Admin identity dependency for the archive endpoints.

The caller's admin user id arrives in the ``X-Admin-User-Id`` header and is
resolved against the live users table. Sessions and login are handled in
front of this service.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.api.errors import ErrorCode, ForbiddenError, UnauthorizedError
from eventdesk.config import settings
from eventdesk.db.database import get_session
from eventdesk.db.models import UserDB
from eventdesk.models.enums import UserRole

logger = logging.getLogger(__name__)

ADMIN_HEADER = "X-Admin-User-Id"

admin_header = APIKeyHeader(name=ADMIN_HEADER, auto_error=False)


@dataclass(frozen=True)
class AdminContext:
    """The administrator performing the current request."""

    user_id: int | None
    role: str = UserRole.ADMIN


async def get_admin_context(
    request: Request,
    admin_user_id: str | None = Security(admin_header),
    session: AsyncSession = Depends(get_session),
) -> AdminContext:
    """Resolve the acting administrator.

    Raises:
        UnauthorizedError: If the header is missing, malformed or names no user
        ForbiddenError: If the user is not an administrator
    """
    if settings.auth_disabled:
        context = AdminContext(user_id=None)
        request.state.admin = context
        return context

    if not admin_user_id:
        raise UnauthorizedError(
            f"Missing {ADMIN_HEADER} header",
            code=ErrorCode.MISSING_ACTOR,
        )

    try:
        user_id = int(admin_user_id)
    except ValueError:
        raise UnauthorizedError(f"Invalid {ADMIN_HEADER} header") from None

    role = await session.scalar(select(UserDB.role).where(UserDB.id == user_id))
    if role is None:
        logger.debug("Admin header names unknown user %s", user_id)
        raise UnauthorizedError(f"Unknown user {user_id}")
    if role != UserRole.ADMIN:
        raise ForbiddenError(
            "This operation requires the admin role",
            extra={"required_role": str(UserRole.ADMIN)},
        )

    context = AdminContext(user_id=user_id, role=role)
    request.state.admin = context
    return context


# Type alias for dependency injection
Admin = Annotated[AdminContext, Depends(get_admin_context)]
