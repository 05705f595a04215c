"""Typed snapshots of live rows captured at archive time."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy import Row, Select, select

from eventdesk.db.models import EventDB, RegistrationDB, UserDB


@dataclass(frozen=True)
class RegistrationSnapshot:
    """A live registration plus the user and event fields shown alongside it."""

    registration_id: int
    event_id: int
    user_id: int
    status: str
    registered_at: datetime | None
    user_name: str | None
    user_email: str | None
    event_title: str | None
    event_date: date | None
    event_time: str | None
    event_location: str | None

    @classmethod
    def from_row(cls, row: Row[Any]) -> "RegistrationSnapshot":
        return cls(
            registration_id=row.id,
            event_id=row.event_id,
            user_id=row.user_id,
            status=row.status,
            registered_at=row.registered_at,
            user_name=row.user_name,
            user_email=row.user_email,
            event_title=row.event_title,
            event_date=row.event_date,
            event_time=row.event_time,
            event_location=row.event_location,
        )

    def archive_values(
        self, deleted_at: datetime, deleted_by: int | None, deletion_source: str
    ) -> dict[str, Any]:
        """Column values for the matching ``archived_registrations`` row."""
        return {
            "registration_id": self.registration_id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "status": self.status,
            "registered_at": self.registered_at,
            "user_name": self.user_name,
            "user_email": self.user_email,
            "event_title": self.event_title,
            "event_date": self.event_date,
            "event_time": self.event_time,
            "event_location": self.event_location,
            "deleted_at": deleted_at,
            "deleted_by": deleted_by,
            "deletion_source": deletion_source,
        }


@dataclass(frozen=True)
class UserSnapshot:
    """A live user as it will be written to ``archived_users``."""

    user_id: int
    name: str
    email: str
    password_hash: str | None
    role: str
    company: str | None
    phone: str | None
    bio: str | None
    created_at: datetime | None

    @classmethod
    def from_model(cls, user: UserDB) -> "UserSnapshot":
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role,
            company=user.company,
            phone=user.phone,
            bio=user.bio,
            created_at=user.created_at,
        )

    def archive_values(
        self, deleted_at: datetime, deleted_by: int | None, deletion_source: str
    ) -> dict[str, Any]:
        """Column values for the matching ``archived_users`` row."""
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "role": self.role,
            "company": self.company,
            "phone": self.phone,
            "bio": self.bio,
            "created_at_original": self.created_at,
            "deleted_at": deleted_at,
            "deleted_by": deleted_by,
            "deletion_source": deletion_source,
        }


def registration_snapshot_query() -> Select[Any]:
    """Registrations joined to their user and event display fields.

    Outer joins keep registrations whose user or event row is already gone.
    """
    return (
        select(
            RegistrationDB.id,
            RegistrationDB.event_id,
            RegistrationDB.user_id,
            RegistrationDB.status,
            RegistrationDB.registered_at,
            UserDB.name.label("user_name"),
            UserDB.email.label("user_email"),
            EventDB.title.label("event_title"),
            EventDB.date.label("event_date"),
            EventDB.time.label("event_time"),
            EventDB.location.label("event_location"),
        )
        .select_from(RegistrationDB)
        .outerjoin(UserDB, UserDB.id == RegistrationDB.user_id)
        .outerjoin(EventDB, EventDB.id == RegistrationDB.event_id)
        .order_by(RegistrationDB.id)
    )
