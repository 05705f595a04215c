"""Query helpers that enforce soft-delete filtering.

Use these helpers as the starting point for queries against soft-deletable
models to ensure deleted records are never accidentally included.
"""

from sqlalchemy import Select, select

from eventdesk.db.models import EventDB


def active_events() -> Select[tuple[EventDB]]:
    """Base query for events that are not soft-deleted."""
    return select(EventDB).where(EventDB.deleted_at.is_(None))


def archived_events() -> Select[tuple[EventDB]]:
    """Base query for soft-deleted events."""
    return select(EventDB).where(EventDB.deleted_at.is_not(None))
