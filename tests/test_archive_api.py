"""Tests for the admin archive listing endpoints."""

from datetime import UTC, datetime

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import create_event, create_registration, create_user
from eventdesk.db.models import ArchivedUserDB

ARCHIVE_API = "/api/v1/admin/archive"


class TestListArchivedUsers:
    async def test_newest_first_without_credentials(
        self, client: AsyncClient, admin_headers, test_session: AsyncSession
    ):
        for user_id, day in ((100, 1), (101, 3), (102, 2)):
            test_session.add(
                ArchivedUserDB(
                    user_id=user_id,
                    name=f"User {user_id}",
                    email=f"user{user_id}@example.com",
                    password_hash="$argon2id$secret",
                    role="attendee",
                    deleted_at=datetime(2024, 5, day, tzinfo=UTC),
                    deletion_source="user.bulk_delete",
                )
            )
        await test_session.commit()

        resp = await client.get(f"{ARCHIVE_API}/users", headers=admin_headers)

        assert resp.status_code == 200
        users = resp.json()["users"]
        assert [u["userId"] for u in users] == [101, 102, 100]
        assert users[0]["deletionSource"] == "user.bulk_delete"
        assert all("passwordHash" not in u for u in users)

    async def test_requires_admin(self, client: AsyncClient):
        resp = await client.get(f"{ARCHIVE_API}/users")
        assert resp.status_code == 401


class TestListArchivedRegistrations:
    async def test_snapshot_fields(
        self, client: AsyncClient, admin_headers, test_session: AsyncSession
    ):
        event = await create_event(test_session, title="Workshop", location="Room 2")
        user = await create_user(test_session, name="Lin", email="lin@example.com")
        reg = await create_registration(test_session, event, user)
        await test_session.commit()
        await client.post(
            "/api/v1/admin/registrations/bulk-archive",
            json={"ids": [reg.id]},
            headers=admin_headers,
        )

        resp = await client.get(f"{ARCHIVE_API}/registrations", headers=admin_headers)

        assert resp.status_code == 200
        [row] = resp.json()["registrations"]
        assert row["registrationId"] == reg.id
        assert row["userName"] == "Lin"
        assert row["userEmail"] == "lin@example.com"
        assert row["eventTitle"] == "Workshop"
        assert row["eventLocation"] == "Room 2"
        assert row["eventDate"] == "2025-04-12"
        assert row["deletionSource"] == "registration.bulk_delete"


class TestListArchivedEvents:
    async def test_only_soft_deleted_events(
        self, client: AsyncClient, admin_headers, test_session: AsyncSession
    ):
        await create_event(test_session, title="Live")
        await create_event(
            test_session, title="Older", deleted_at=datetime(2024, 1, 1, tzinfo=UTC)
        )
        await create_event(
            test_session, title="Newer", deleted_at=datetime(2024, 2, 1, tzinfo=UTC)
        )
        await test_session.commit()

        resp = await client.get(f"{ARCHIVE_API}/events", headers=admin_headers)

        assert resp.status_code == 200
        events = resp.json()["events"]
        assert [e["title"] for e in events] == ["Newer", "Older"]
        assert events[0]["totalSlots"] == 50
        assert events[0]["availableSlots"] == 50
