"""Audit trail for administrative archive actions.

The recorder writes on its own session, after the primary operation has
committed. Recording is best-effort: any failure is logged and swallowed so
that it can never undo or fail an archive, restore or purge that already
happened.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventdesk.db.database import get_session_maker
from eventdesk.db.models import AuditEventDB
from eventdesk.models.enums import UserRole

logger = logging.getLogger(__name__)


@dataclass
class AuditEntry:
    """One administrative action to record."""

    actor_id: int | None
    actor_role: str
    action: str
    entity_type: str
    entity_id: str | int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {"actorRole": self.actor_role, **self.details}


class AuditRecorder:
    """Best-effort sink for audit entries."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def record(self, entry: AuditEntry) -> bool:
        """Persist an audit entry. Returns False if it could not be written."""
        try:
            async with self._session_maker() as session:
                session.add(
                    AuditEventDB(
                        actor_id=entry.actor_id,
                        actor_role=entry.actor_role,
                        action=entry.action,
                        entity_type=entry.entity_type,
                        entity_id=None if entry.entity_id is None else str(entry.entity_id),
                        payload=entry.payload(),
                    )
                )
                await session.commit()
        except Exception:
            # The primary operation has already committed
            logger.exception("Audit log insert failed for action %s", entry.action)
            return False
        return True

    async def log_admin_action(
        self,
        admin_user_id: int | None,
        action: str,
        entity_type: str,
        entity_id: str | int | None = None,
        details: dict[str, Any] | None = None,
    ) -> bool:
        """Record an action performed by an administrator."""
        return await self.record(
            AuditEntry(
                actor_id=admin_user_id,
                actor_role=UserRole.ADMIN,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details or {},
            )
        )


def get_audit_recorder() -> AuditRecorder:
    """FastAPI dependency returning the application's audit recorder."""
    return AuditRecorder(get_session_maker())
