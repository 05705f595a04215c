"""Enumerations for eventdesk entities."""

from enum import StrEnum


class EntityFamily(StrEnum):
    """Entity families handled by the archive engine."""

    USERS = "users"
    EVENTS = "events"
    REGISTRATIONS = "registrations"


class UserRole(StrEnum):
    """Role of a user account."""

    ADMIN = "admin"
    ATTENDEE = "attendee"


class RegistrationStatus(StrEnum):
    """Status of an attendee's registration for an event."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    ATTENDED = "attended"
    CANCELLED = "cancelled"
    WAITLISTED = "waitlisted"
    NO_SHOW = "no-show"
    REJECTED = "rejected"


class EventStatus(StrEnum):
    """Publication status of an event."""

    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class SkipReason(StrEnum):
    """Why a requested restore did not proceed for one row."""

    EVENT_MISSING_OR_ARCHIVED = "event_missing_or_archived"
    USER_MISSING = "user_missing"
    ALREADY_EXISTS = "already_exists"  # Conflicting live row
    USER_ID_EXISTS = "user_id_exists"
    EMAIL_EXISTS = "email_exists"
    NOT_FOUND = "not_found"  # No archived row for the requested id


class DeletionSource(StrEnum):
    """Administrative action that moved a row into the archive."""

    REGISTRATION_BULK_DELETE = "registration.bulk_delete"
    USER_BULK_DELETE = "user.bulk_delete"
    EVENT_BULK_DELETE_PERMANENT = "event.bulk_delete_permanent"
