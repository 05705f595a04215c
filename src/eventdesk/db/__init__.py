"""Database module."""

from eventdesk.db.database import get_session, get_session_maker, init_db
from eventdesk.db.models import (
    ArchivedRegistrationDB,
    ArchivedUserDB,
    AuditEventDB,
    Base,
    EventDB,
    RegistrationDB,
    UserDB,
)

__all__ = [
    "Base",
    "get_session",
    "get_session_maker",
    "init_db",
    "UserDB",
    "EventDB",
    "RegistrationDB",
    "ArchivedUserDB",
    "ArchivedRegistrationDB",
    "AuditEventDB",
]
