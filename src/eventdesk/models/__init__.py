"""Pydantic models for eventdesk entities."""

from eventdesk.models.archive import (
    ArchivedEvent,
    ArchivedEventList,
    ArchivedRegistration,
    ArchivedRegistrationList,
    ArchivedUser,
    ArchivedUserList,
    BulkArchiveResponse,
    BulkIdsRequest,
    BulkPurgeResponse,
    BulkRestoreResponse,
    SkippedItem,
)
from eventdesk.models.enums import (
    DeletionSource,
    EntityFamily,
    EventStatus,
    RegistrationStatus,
    SkipReason,
    UserRole,
)

__all__ = [
    # Enums
    "DeletionSource",
    "EntityFamily",
    "EventStatus",
    "RegistrationStatus",
    "SkipReason",
    "UserRole",
    # Requests
    "BulkIdsRequest",
    # Responses
    "BulkArchiveResponse",
    "BulkRestoreResponse",
    "BulkPurgeResponse",
    "SkippedItem",
    # Archive listings
    "ArchivedEvent",
    "ArchivedEventList",
    "ArchivedRegistration",
    "ArchivedRegistrationList",
    "ArchivedUser",
    "ArchivedUserList",
]
