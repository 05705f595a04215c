"""Request and response models for the admin archive endpoints."""

import datetime as dt
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel

from eventdesk.models.enums import SkipReason


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BulkIdsRequest(BaseModel):
    """Identifier set for a bulk operation."""

    ids: list[PositiveInt] = Field(..., min_length=1, description="Ids to operate on")

    @field_validator("ids")
    @classmethod
    def dedupe_ids(cls, v: list[int]) -> list[int]:
        """Drop repeated ids, keeping the first occurrence."""
        return list(dict.fromkeys(v))


class BulkArchiveResponse(CamelModel):
    archived_count: int


class SkippedItem(BaseModel):
    """One row a restore left in the archive."""

    id: int
    reason: SkipReason


class BulkRestoreResponse(CamelModel):
    """Skip report for a restore batch."""

    requested: int
    restored: int
    skipped_count: int
    skipped: list[SkippedItem] = Field(default_factory=list)


class BulkPurgeResponse(CamelModel):
    deleted_count: int


class ArchivedUser(CamelModel):
    """Archived user as listed to administrators (credential omitted)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    email: str
    role: str
    company: str | None = None
    phone: str | None = None
    bio: str | None = None
    created_at_original: datetime | None = None
    deleted_at: datetime
    deleted_by: int | None = None
    deletion_source: str | None = None


class ArchivedRegistration(CamelModel):
    """Archived registration with its user and event snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    registration_id: int | None = None
    event_id: int
    user_id: int
    status: str
    registered_at: datetime | None = None
    user_name: str | None = None
    user_email: str | None = None
    event_title: str | None = None
    event_date: dt.date | None = None
    event_time: str | None = None
    event_location: str | None = None
    deleted_at: datetime
    deleted_by: int | None = None
    deletion_source: str | None = None


class ArchivedEvent(CamelModel):
    """Soft-deleted event."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    date: dt.date | None = None
    time: str | None = None
    location: str | None = None
    total_slots: int
    available_slots: int
    status: str
    deleted_at: datetime
    deleted_by: int | None = None


class ArchivedUserList(BaseModel):
    users: list[ArchivedUser]


class ArchivedRegistrationList(BaseModel):
    registrations: list[ArchivedRegistration]


class ArchivedEventList(BaseModel):
    events: list[ArchivedEvent]
