"""
Tests for the top-booked ranking.
"""

import pytest
from httpx import AsyncClient

from eventy.services import event_service


async def _event(client: AsyncClient, headers: dict, payload: dict, name: str) -> int:
    response = await client.post("/api/events", json={**payload, "name": name}, headers=headers)
    return response.json()["id"]


async def _book(client: AsyncClient, headers: dict, event_id: int) -> int:
    response = await client.post("/api/bookings", json={"eventId": event_id}, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_top_booked_orders_by_count(
    client: AsyncClient, admin_headers, auth_headers, other_headers, event_payload
):
    popular = await _event(client, admin_headers, event_payload, "Popular")
    quiet = await _event(client, admin_headers, event_payload, "Quiet")
    empty = await _event(client, admin_headers, event_payload, "Empty")
    await _event(client, admin_headers, event_payload, "Also empty")

    await _book(client, auth_headers, popular)
    await _book(client, other_headers, popular)
    await _book(client, admin_headers, popular)
    await _book(client, auth_headers, quiet)

    response = await client.get("/api/events/top-booked")
    assert response.status_code == 200
    data = response.json()
    # Default limit is three; ties at zero go to the newest event
    assert len(data) == 3
    assert [(e["id"], e["booking_count"]) for e in data[:2]] == [(popular, 3), (quiet, 1)]
    assert data[2]["booking_count"] == 0
    assert data[2]["id"] != empty


@pytest.mark.asyncio
async def test_top_booked_counts_cancelled_by_default(
    client: AsyncClient, admin_headers, auth_headers, event_payload
):
    event_id = await _event(client, admin_headers, event_payload, "Flaky")
    booking_id = await _book(client, auth_headers, event_id)
    await client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_headers)

    data = (await client.get("/api/events/top-booked", params={"limit": 1})).json()
    assert data[0]["id"] == event_id
    assert data[0]["booking_count"] == 1


@pytest.mark.asyncio
async def test_top_booked_confirmed_only(
    client: AsyncClient, db_session, admin_headers, auth_headers, other_headers, event_payload
):
    cancelled_twice = await _event(client, admin_headers, event_payload, "Cancelled twice")
    confirmed_once = await _event(client, admin_headers, event_payload, "Confirmed once")

    for headers in (auth_headers, other_headers):
        booking_id = await _book(client, headers, cancelled_twice)
        await client.put(f"/api/bookings/{booking_id}/cancel", headers=headers)
    await _book(client, auth_headers, confirmed_once)

    all_statuses = await event_service.top_booked_events(db_session, limit=2)
    assert [(e.id, n) for e, n in all_statuses] == [(cancelled_twice, 2), (confirmed_once, 1)]

    confirmed = await event_service.top_booked_events(db_session, limit=2, confirmed_only=True)
    assert [(e.id, n) for e, n in confirmed] == [(confirmed_once, 1), (cancelled_twice, 0)]


@pytest.mark.asyncio
async def test_top_booked_limit_validation(client: AsyncClient):
    response = await client.get("/api/events/top-booked", params={"limit": 0})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_top_booked_empty_catalog(client: AsyncClient):
    response = await client.get("/api/events/top-booked")
    assert response.status_code == 200
    assert response.json() == []
