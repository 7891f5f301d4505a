"""
Tests for POST /booking: rule order, capacity boundary and eligibility.
"""

import pytest
from httpx import AsyncClient

from hotel_booking.core.security import create_access_token
from tests import factories


@pytest.mark.asyncio
async def test_unknown_room_returns_404(client: AsyncClient, auth_headers, eligible_user, room):
    response = await client.post("/booking", json={"roomId": 0}, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    None,
    {},
    {"roomId": None},
    {"roomId": "abc"},
    {"roomId": 1.5},
    {"roomId": 10 ** 20},
    {"roomId": 1e20},
    {"roomId": 2 ** 31},
    {"roomId": str(2 ** 40)},
])
async def test_missing_or_malformed_room_id_returns_404(client: AsyncClient, auth_headers, eligible_user, room, body):
    response = await client.post("/booking", json=body, headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_numeric_string_room_id_is_accepted(client: AsyncClient, auth_headers, eligible_user, room):
    response = await client.post("/booking", json={"roomId": str(room.id)}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["roomId"] == room.id


@pytest.mark.asyncio
async def test_user_without_enrollment_returns_403(client: AsyncClient, auth_headers, room):
    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_user_without_ticket_returns_403(client: AsyncClient, db_session, auth_headers, test_user, room):
    await factories.create_enrollment(db_session, test_user)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unpaid_ticket_returns_403(client: AsyncClient, db_session, auth_headers, test_user, room):
    enrollment = await factories.create_enrollment(db_session, test_user)
    ticket_type = await factories.create_ticket_type(db_session, is_remote=False, includes_hotel=True)
    await factories.create_ticket(db_session, enrollment, ticket_type, status="RESERVED")

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("is_remote,includes_hotel", [(True, False), (True, True), (False, False)])
async def test_paid_ticket_of_wrong_type_returns_403(
    client: AsyncClient, db_session, auth_headers, test_user, room, is_remote, includes_hotel
):
    enrollment = await factories.create_enrollment(db_session, test_user)
    ticket_type = await factories.create_ticket_type(db_session, is_remote=is_remote, includes_hotel=includes_hotel)
    await factories.create_ticket(db_session, enrollment, ticket_type, status="PAID")

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_user_with_booking_returns_403(client: AsyncClient, db_session, auth_headers, eligible_user, room):
    await factories.create_booking(db_session, room, eligible_user)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_full_room_returns_403(client: AsyncClient, db_session, auth_headers, eligible_user, room):
    """Capacity 3 with 3 bookings is full."""
    await factories.fill_room(db_session, room, 3)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_eligibility_checked_before_existing_booking(client: AsyncClient, db_session, auth_headers, test_user, room):
    """An ineligible user who already holds a booking is rejected for the ticket."""
    await factories.create_booking(db_session, room, test_user)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "A paid in-person ticket with hotel is required"


@pytest.mark.asyncio
async def test_full_room_checked_before_eligibility(client: AsyncClient, db_session, auth_headers, room):
    """An ineligible user asking for a full room is rejected for the room."""
    await factories.fill_room(db_session, room, 3)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Room is full"


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, db_session, auth_headers, eligible_user, room):
    """Capacity 3 with 2 bookings accepts one more."""
    await factories.fill_room(db_session, room, 2)

    response = await client.post("/booking", json={"roomId": room.id}, headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert isinstance(data["id"], int)
    assert data["userId"] == eligible_user.id
    assert data["roomId"] == room.id

    query = await client.get("/booking", headers=auth_headers)
    assert query.status_code == 200
    assert query.json()["id"] == data["id"]


@pytest.mark.asyncio
async def test_room_accepts_exactly_capacity_bookings(client: AsyncClient, db_session, hotel):
    """A room of capacity N takes N bookings; the N+1-th is forbidden."""
    capacity = 2
    small_room = await factories.create_room(db_session, hotel, capacity=capacity)

    statuses = []
    for _ in range(capacity + 1):
        user = await factories.create_user(db_session)
        enrollment = await factories.create_enrollment(db_session, user)
        ticket_type = await factories.create_ticket_type(db_session)
        await factories.create_ticket(db_session, enrollment, ticket_type, status="PAID")
        headers = {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}

        response = await client.post("/booking", json={"roomId": small_room.id}, headers=headers)
        statuses.append(response.status_code)

    assert statuses == [200] * capacity + [403]
