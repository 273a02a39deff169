"""
Tests for booking endpoints: booking, duplicate protection, cancellation,
admin rosters and the cascade on event deletion.
"""

import pytest
from httpx import AsyncClient
from prometheus_client import REGISTRY
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from eventy.models.booking import Booking, STATUS_CANCELLED, STATUS_CONFIRMED
from eventy.api.routes import bookings as booking_routes


async def _book(client: AsyncClient, headers: dict, event_id: int):
    return await client.post("/api/bookings", json={"eventId": event_id}, headers=headers)


@pytest.mark.asyncio
async def test_book_event(client: AsyncClient, auth_headers, test_user, test_event):
    response = await _book(client, auth_headers, test_event.id)
    assert response.status_code == 201
    data = response.json()
    assert data["event_id"] == test_event.id
    assert data["user_id"] == test_user.id
    assert data["quantity"] == 1
    assert data["status"] == "confirmed"


@pytest.mark.asyncio
async def test_book_accepts_snake_case_body(client: AsyncClient, auth_headers, test_event):
    response = await client.post("/api/bookings", json={"event_id": test_event.id}, headers=auth_headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_book_missing_event_id(client: AsyncClient, auth_headers):
    response = await client.post("/api/bookings", json={}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_book_unauthenticated(client: AsyncClient, test_event):
    """Unauthenticated booking returns 401."""
    response = await client.post("/api/bookings", json={"eventId": test_event.id})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_nonexistent_event(client: AsyncClient, auth_headers):
    """Booking non-existent event returns 404."""
    response = await _book(client, auth_headers, 99999)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_booking(client: AsyncClient, auth_headers, test_event):
    """Same user booking same event twice returns 409."""
    first = await _book(client, auth_headers, test_event.id)
    assert first.status_code == 201

    second = await _book(client, auth_headers, test_event.id)
    assert second.status_code == 409
    assert second.json()["message"] == "You have already booked this event"


@pytest.mark.asyncio
async def test_different_users_can_book_same_event(client: AsyncClient, auth_headers, other_headers, test_event):
    assert (await _book(client, auth_headers, test_event.id)).status_code == 201
    assert (await _book(client, other_headers, test_event.id)).status_code == 201


@pytest.mark.asyncio
async def test_rebook_after_cancel(client: AsyncClient, auth_headers, test_event):
    """A cancelled booking no longer blocks booking the event again."""
    booking_id = (await _book(client, auth_headers, test_event.id)).json()["id"]
    await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)

    response = await _book(client, auth_headers, test_event.id)
    assert response.status_code == 201
    assert response.json()["id"] != booking_id


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, auth_headers, test_event):
    booking_id = (await _book(client, auth_headers, test_event.id)).json()["id"]

    response = await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "message": "Booking cancelled successfully",
        "booking_id": booking_id,
        "status": "cancelled",
    }

    bookings = (await client.get("/api/bookings", headers=auth_headers)).json()
    assert [(b["id"], b["status"]) for b in bookings] == [(booking_id, "cancelled")]


@pytest.mark.asyncio
async def test_cancel_already_cancelled(client: AsyncClient, auth_headers, test_event):
    """Cancelling twice is a no-op that still succeeds."""
    booking_id = (await _book(client, auth_headers, test_event.id)).json()["id"]
    await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)

    response = await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


@pytest.mark.asyncio
async def test_cancel_someone_elses_booking(client: AsyncClient, auth_headers, other_headers, test_event):
    """Only the owner may cancel; the booking stays confirmed."""
    booking_id = (await _book(client, auth_headers, test_event.id)).json()["id"]

    response = await client.put(f"/api/bookings/{booking_id}/cancel", headers=other_headers)
    assert response.status_code == 403

    bookings = (await client.get("/api/bookings", headers=auth_headers)).json()
    assert bookings[0]["status"] == "confirmed"


@pytest.mark.asyncio
async def test_cancel_missing_booking(client: AsyncClient, auth_headers):
    response = await client.put("/api/bookings/99999/cancel", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Booking not found"


@pytest.mark.asyncio
async def test_list_user_bookings(client: AsyncClient, auth_headers, other_headers, admin_headers, event_payload, test_event):
    """Users see only their own bookings, newest first, with the event embedded."""
    second_event = (await client.post("/api/events", json=event_payload, headers=admin_headers)).json()

    first = (await _book(client, auth_headers, test_event.id)).json()
    second = (await _book(client, auth_headers, second_event["id"])).json()
    await _book(client, other_headers, test_event.id)

    response = await client.get("/api/bookings", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert [b["id"] for b in data] == [second["id"], first["id"]]
    assert data[0]["event"]["name"] == "Jazz Night"
    assert data[1]["event"]["name"] == "Test Concert"


@pytest.mark.asyncio
async def test_list_bookings_unauthenticated(client: AsyncClient):
    response = await client.get("/api/bookings")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_event_roster(client: AsyncClient, auth_headers, other_headers, admin_headers, test_event, test_user):
    """Admins see confirmed bookings with attendee name and email."""
    mine = (await _book(client, auth_headers, test_event.id)).json()
    theirs = (await _book(client, other_headers, test_event.id)).json()
    await client.put(f"/api/bookings/{theirs['id']}/cancel", headers=other_headers)

    response = await client.get(f"/api/bookings/event/{test_event.id}", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert [b["id"] for b in data] == [mine["id"]]
    assert data[0]["user"] == {"id": test_user.id, "name": "Test User", "email": "test@example.com"}


@pytest.mark.asyncio
async def test_event_roster_requires_admin(client: AsyncClient, auth_headers, test_event):
    response = await client.get(f"/api/bookings/event/{test_event.id}", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_event_cascades_bookings(client: AsyncClient, db_session, auth_headers, other_headers, admin_headers, test_event):
    await _book(client, auth_headers, test_event.id)
    await _book(client, other_headers, test_event.id)

    response = await client.delete(f"/api/events/{test_event.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["bookings_deleted"] == 2

    remaining = await db_session.scalar(
        select(func.count()).select_from(Booking).where(Booking.event_id == test_event.id)
    )
    assert remaining == 0
    assert (await client.get(f"/api/bookings/event/{test_event.id}", headers=admin_headers)).json() == []
    assert (await client.get("/api/bookings", headers=auth_headers)).json() == []


@pytest.mark.asyncio
async def test_jazz_night_scenario(client: AsyncClient, auth_headers, admin_headers, event_payload):
    """Create, book, rebook, delete, and the event is gone."""
    created = await client.post("/api/events", json=event_payload, headers=admin_headers)
    assert created.status_code == 201
    event_id = created.json()["id"]

    booked = await _book(client, auth_headers, event_id)
    assert booked.status_code == 201
    assert booked.json()["status"] == "confirmed"

    again = await _book(client, auth_headers, event_id)
    assert again.status_code == 409
    assert "already booked" in again.json()["message"]

    deleted = await client.delete(f"/api/events/{event_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/bookings/event/{event_id}", headers=admin_headers)).json() == []
    assert (await client.get(f"/api/events/{event_id}")).status_code == 404


@pytest.mark.asyncio
async def test_unique_index_rejects_second_confirmed_booking(db_session, test_user, test_event):
    """The database itself refuses two confirmed rows for one (user, event)."""
    db_session.add_all([
        Booking(user_id=test_user.id, event_id=test_event.id, status=STATUS_CONFIRMED),
        Booking(user_id=test_user.id, event_id=test_event.id, status=STATUS_CONFIRMED),
    ])
    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_unique_index_allows_cancelled_history(db_session, test_user, test_event):
    db_session.add_all([
        Booking(user_id=test_user.id, event_id=test_event.id, status=STATUS_CANCELLED),
        Booking(user_id=test_user.id, event_id=test_event.id, status=STATUS_CANCELLED),
        Booking(user_id=test_user.id, event_id=test_event.id, status=STATUS_CONFIRMED),
    ])
    await db_session.flush()

    count = await db_session.scalar(select(func.count()).select_from(Booking))
    assert count == 3


@pytest.mark.asyncio
async def test_repeat_cancel_leaves_metrics_and_cache_alone(client: AsyncClient, auth_headers, test_event, monkeypatch):
    """Only a cancel that changes the status counts and clears the cache."""
    invalidations = []

    async def invalidate():
        invalidations.append(True)

    monkeypatch.setattr(booking_routes, "invalidate_event_cache", invalidate)
    booking_id = (await _book(client, auth_headers, test_event.id)).json()["id"]
    before = REGISTRY.get_sample_value("eventy_booking_cancellations_total")

    await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)
    await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)

    assert REGISTRY.get_sample_value("eventy_booking_cancellations_total") - before == 1
    # one for the booking, one for the first cancel
    assert len(invalidations) == 2
