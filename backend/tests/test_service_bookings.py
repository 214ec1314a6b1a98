"""
Tests for service provider bookings and the booking cost aggregate.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.models.service_booking import EventServiceBooking
from eventhub.services.service_booking_service import get_event_booking_total


@pytest.mark.asyncio
async def test_book_services_computes_total(client: AsyncClient, auth_headers, test_event, db_session: AsyncSession):
    response = await client.post(
        f"/api/v1/events/{test_event.id}/service-bookings",
        json={"bookings": [{
            "providerId": "cater-7",
            "providerName": "Good Food Ltd",
            "providerCategory": "catering",
            "quantity": 3,
            "basePrice": 100,
        }]},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "error": None}

    rows = (await db_session.execute(select(EventServiceBooking))).scalars().all()
    assert len(rows) == 1
    assert rows[0].total_price == 300
    assert rows[0].booking_status == "pending"
    assert rows[0].provider_name == "Good Food Ltd"


@pytest.mark.asyncio
async def test_book_services_one_row_per_provider(client: AsyncClient, auth_headers, test_event):
    response = await client.post(
        f"/api/v1/events/{test_event.id}/service-bookings",
        json={"bookings": [
            {"providerId": "a", "providerName": "A/V", "providerCategory": "audio", "quantity": 1, "basePrice": 250},
            {"providerId": "b", "providerName": "Blooms", "providerCategory": "decor", "quantity": 4, "basePrice": 12.5},
        ]},
        headers=auth_headers,
    )
    assert response.json()["success"] is True

    listed = await client.get(f"/api/v1/events/{test_event.id}/service-bookings")
    totals = sorted(b["total_price"] for b in listed.json())
    assert totals == [50.0, 250.0]


@pytest.mark.asyncio
async def test_book_services_rejects_zero_quantity(client: AsyncClient, auth_headers, test_event):
    response = await client.post(
        f"/api/v1/events/{test_event.id}/service-bookings",
        json={"bookings": [
            {"providerId": "a", "providerName": "A/V", "providerCategory": "audio", "quantity": 0, "basePrice": 250},
        ]},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_book_services_unknown_event_surfaces_error(client: AsyncClient, auth_headers, db_session: AsyncSession):
    response = await client.post(
        f"/api/v1/events/{uuid.uuid4()}/service-bookings",
        json={"bookings": [
            {"providerId": "a", "providerName": "A/V", "providerCategory": "audio", "quantity": 1, "basePrice": 10},
        ]},
        headers=auth_headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]


@pytest.mark.asyncio
async def test_pending_bookings_newest_first(client: AsyncClient, test_event, make_booking, organizer_id):
    base = datetime(2026, 3, 1, tzinfo=timezone.utc)
    first = await make_booking(test_event, organizer_id, provider_id="first", created_at=base)
    second = await make_booking(test_event, organizer_id, provider_id="second", created_at=base + timedelta(minutes=5))
    await make_booking(test_event, organizer_id, provider_id="done", booking_status="confirmed")
    await make_booking(test_event, organizer_id, provider_id="gone", booking_status="cancelled")

    response = await client.get(f"/api/v1/events/{test_event.id}/service-bookings")
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [str(second.id), str(first.id)]


@pytest.mark.asyncio
async def test_update_booking_status(client: AsyncClient, auth_headers, test_event, make_booking, organizer_id, db_session):
    booking = await make_booking(test_event, organizer_id)

    response = await client.patch(
        f"/api/v1/service-bookings/{booking.id}",
        json={"status": "confirmed"},
        headers=auth_headers,
    )
    assert response.json()["success"] is True

    await db_session.refresh(booking)
    assert booking.booking_status == "confirmed"


@pytest.mark.asyncio
async def test_update_booking_invalid_status(client: AsyncClient, auth_headers, test_event, make_booking, organizer_id):
    booking = await make_booking(test_event, organizer_id)
    response = await client.patch(
        f"/api/v1/service-bookings/{booking.id}",
        json={"status": "refunded"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_cancel_booking_keeps_row(client: AsyncClient, auth_headers, test_event, make_booking, organizer_id, db_session):
    booking = await make_booking(test_event, organizer_id)

    response = await client.delete(f"/api/v1/service-bookings/{booking.id}", headers=auth_headers)
    assert response.json()["success"] is True

    await db_session.refresh(booking)
    assert booking.booking_status == "cancelled"

    pending = await client.get(f"/api/v1/events/{test_event.id}/service-bookings")
    assert pending.json() == []


@pytest.mark.asyncio
async def test_cancel_other_users_booking_is_noop(
    client: AsyncClient, other_headers, test_event, make_booking, organizer_id, db_session
):
    booking = await make_booking(test_event, organizer_id)

    response = await client.delete(f"/api/v1/service-bookings/{booking.id}", headers=other_headers)
    assert response.json()["success"] is True

    await db_session.refresh(booking)
    assert booking.booking_status == "pending"


@pytest.mark.asyncio
async def test_booking_total_from_database_function(client: AsyncClient, test_event, procedure_totals):
    procedure_totals[test_event.id] = 1234.5

    response = await client.get(f"/api/v1/events/{test_event.id}/service-bookings/total")
    assert response.status_code == 200
    assert response.json() == {"event_id": str(test_event.id), "total": 1234.5}


@pytest.mark.asyncio
async def test_booking_total_zero_on_failure(db_session: AsyncSession, test_event):
    # The database function raises for events it does not know
    assert await get_event_booking_total(db_session, test_event.id) == 0


@pytest.mark.asyncio
async def test_booking_total_null_is_zero(db_session: AsyncSession, test_event, procedure_totals):
    procedure_totals[test_event.id] = None
    assert await get_event_booking_total(db_session, test_event.id) == 0
