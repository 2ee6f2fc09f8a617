"""
Tests for booking endpoints: batch/recurring creation, listing and cancellation.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from deskbooking.models.booking import Slot
from deskbooking.services import booking_service

from conftest import make_booking

BOOKINGS = "/api/v1/bookings/"


async def _book(client: AsyncClient, headers: dict, seat_id: int, dates: list[str], slot: str):
    return await client.post(BOOKINGS, json={"seatId": seat_id, "dates": dates, "slot": slot}, headers=headers)


@pytest.mark.asyncio
async def test_half_day_walkthrough(client: AsyncClient, auth_headers, test_seat):
    """AM then PM on the same day succeed; FULL then conflicts."""
    seat_id = test_seat.id

    am = await _book(client, auth_headers, seat_id, ["2024-03-01"], "AM")
    assert am.status_code == 201
    assert len(am.json()) == 1
    assert am.json()[0]["slot"] == "AM"
    assert am.json()[0]["date"] == "2024-03-01"

    pm = await _book(client, auth_headers, seat_id, ["2024-03-01"], "PM")
    assert pm.status_code == 201

    full = await _book(client, auth_headers, seat_id, ["2024-03-01"], "FULL")
    assert full.status_code == 409
    assert full.json()["conflicts"] == ["2024-03-01"]
    assert full.json()["message"]


@pytest.mark.asyncio
async def test_batch_is_all_or_nothing(client: AsyncClient, auth_headers, other_headers, test_seat):
    seat_id = test_seat.id
    taken = await _book(client, other_headers, seat_id, ["2024-03-05"], "AM")
    assert taken.status_code == 201

    response = await _book(client, auth_headers, seat_id, ["2024-03-04", "2024-03-05"], "AM")
    assert response.status_code == 409
    assert response.json()["conflicts"] == ["2024-03-05"]

    # 2024-03-04 was not booked either
    listing = await client.get(BOOKINGS, params={"date": "2024-03-04"}, headers=auth_headers)
    assert listing.json() == []

    # Retry with the remaining dates
    retry = await _book(client, auth_headers, seat_id, ["2024-03-04"], "AM")
    assert retry.status_code == 201


@pytest.mark.asyncio
async def test_recurring_weekly_booking(client: AsyncClient, auth_headers, test_seat):
    response = await client.post(
        BOOKINGS,
        json={"seatId": test_seat.id, "startDate": "2024-01-01", "occurrences": 4, "intervalWeeks": 1, "slot": "FULL"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert [b["date"] for b in response.json()] == ["2024-01-01", "2024-01-08", "2024-01-15", "2024-01-22"]


@pytest.mark.asyncio
async def test_snake_case_payload_is_accepted(client: AsyncClient, auth_headers, test_seat):
    response = await client.post(
        BOOKINGS,
        json={"seat_id": test_seat.id, "start_date": "2024-12-25", "occurrences": 2, "interval_weeks": 2, "slot": "PM"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert [b["date"] for b in response.json()] == ["2024-12-25", "2025-01-08"]


@pytest.mark.asyncio
async def test_blocked_range_walkthrough(client: AsyncClient, auth_headers, range_blocked_seat):
    seat_id = range_blocked_seat.id

    inside = await _book(client, auth_headers, seat_id, ["2024-04-03"], "PM")
    assert inside.status_code == 409
    assert inside.json()["conflicts"] == ["2024-04-03"]

    outside = await _book(client, auth_headers, seat_id, ["2024-04-06"], "PM")
    assert outside.status_code == 201


@pytest.mark.asyncio
async def test_permanently_blocked_seat(client: AsyncClient, auth_headers, permanently_blocked_seat):
    response = await _book(client, auth_headers, permanently_blocked_seat.id, ["2024-04-03"], "AM")
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_seat_returns_404(client: AsyncClient, auth_headers):
    response = await _book(client, auth_headers, 99999, ["2024-03-01"], "AM")
    assert response.status_code == 404
    assert response.json()["detail"] == "Seat 99999 not found"


@pytest.mark.asyncio
async def test_book_unauthenticated(client: AsyncClient, test_seat):
    response = await client.post(BOOKINGS, json={"seatId": test_seat.id, "dates": ["2024-03-01"], "slot": "AM"})
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"dates": ["2024-03-01"], "slot": "AM"},                                   # missing seat
        {"seatId": 1, "dates": ["2024-03-01"], "slot": "EVENING"},                  # unknown slot
        {"seatId": 1, "dates": ["03/01/2024"], "slot": "AM"},                       # bad date format
        {"seatId": 1, "dates": ["2024-02-30"], "slot": "AM"},                       # impossible date
        {"seatId": 1, "dates": [], "slot": "AM"},                                   # empty list
        {"seatId": 1, "slot": "AM"},                                                # no dates at all
        {"seatId": 1, "dates": ["2024-03-01"], "startDate": "2024-03-01", "slot": "AM"},
        {"seatId": 1, "dates": ["2024-03-01", "2024-03-01"], "slot": "AM"},         # duplicates
        {"seatId": 1, "startDate": "2024-03-01", "occurrences": 0, "slot": "AM"},
        {"seatId": 1, "startDate": "2024-03-01", "intervalWeeks": 0, "slot": "AM"},
        {"seatId": 1, "startDate": "2024-03-01", "occurrences": 500, "slot": "AM"},
        {"seatId": 1, "dates": [86400], "slot": "AM"},                             # epoch seconds
        {"seatId": 1, "startDate": 0, "slot": "AM"},                                # epoch seconds
        {"seatId": 1, "dates": ["2024-03-01T09:00:00"], "slot": "AM"},              # datetime
    ],
)
async def test_invalid_booking_requests(client: AsyncClient, auth_headers, payload):
    response = await client.post(BOOKINGS, json=payload, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, auth_headers, test_seat):
    seat_id = test_seat.id
    await _book(client, auth_headers, seat_id, ["2024-03-01", "2024-03-04", "2024-03-08"], "AM")

    by_date = await client.get(BOOKINGS, params={"date": "2024-03-04"}, headers=auth_headers)
    assert [b["date"] for b in by_date.json()] == ["2024-03-04"]

    in_range = await client.get(BOOKINGS, params={"start": "2024-03-01", "end": "2024-03-04"}, headers=auth_headers)
    assert sorted(b["date"] for b in in_range.json()) == ["2024-03-01", "2024-03-04"]

    from_start = await client.get(BOOKINGS, params={"start": "2024-03-04"}, headers=auth_headers)
    assert sorted(b["date"] for b in from_start.json()) == ["2024-03-04", "2024-03-08"]

    combined = await client.get(
        BOOKINGS, params={"date": "2024-03-08", "start": "2024-03-01", "end": "2024-03-04"}, headers=auth_headers
    )
    assert combined.json() == []


@pytest.mark.asyncio
@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"date": "86400"}, {"start": "0"}, {"end": "03/04/2024"}])
async def test_list_rejects_non_iso_dates(client: AsyncClient, auth_headers, params):
    response = await client.get(BOOKINGS, params=params, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_is_joined_and_hides_credentials(client: AsyncClient, auth_headers, test_seat):
    await _book(client, auth_headers, test_seat.id, ["2024-03-01"], "FULL")

    response = await client.get(BOOKINGS, headers=auth_headers)
    assert response.status_code == 200
    booking = response.json()[0]
    assert booking["seat"]["label"] == "T10"
    assert booking["user"]["username"] == "testuser"
    assert "hashed_password" not in booking["user"]
    assert "password" not in booking["user"]


@pytest.mark.asyncio
async def test_list_orders_most_recent_first(client: AsyncClient, auth_headers, test_seat):
    seat_id = test_seat.id
    await _book(client, auth_headers, seat_id, ["2024-05-01"], "AM")
    await _book(client, auth_headers, seat_id, ["2024-03-01"], "AM")

    response = await client.get(BOOKINGS, headers=auth_headers)
    assert [b["date"] for b in response.json()] == ["2024-03-01", "2024-05-01"]


@pytest.mark.asyncio
async def test_inverted_range_is_rejected(client: AsyncClient, auth_headers):
    response = await client.get(BOOKINGS, params={"start": "2024-03-05", "end": "2024-03-01"}, headers=auth_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_employees_only_see_their_own_bookings(
    client: AsyncClient, db_session, auth_headers, test_user, other_user, test_seat
):
    other_id = other_user.id
    await make_booking(db_session, other_user, test_seat, date(2024, 3, 1), Slot.AM)
    await make_booking(db_session, test_user, test_seat, date(2024, 3, 1), Slot.PM)

    mine = await client.get(BOOKINGS, headers=auth_headers)
    assert [b["slot"] for b in mine.json()] == ["PM"]

    theirs = await client.get(BOOKINGS, params={"user_id": other_id}, headers=auth_headers)
    assert theirs.status_code == 403


@pytest.mark.asyncio
async def test_admin_sees_and_filters_all_bookings(
    client: AsyncClient, db_session, admin_headers, test_user, other_user, test_seat
):
    other_id = other_user.id
    await make_booking(db_session, other_user, test_seat, date(2024, 3, 1), Slot.AM)
    await make_booking(db_session, test_user, test_seat, date(2024, 3, 1), Slot.PM)

    everything = await client.get(BOOKINGS, headers=admin_headers)
    assert len(everything.json()) == 2

    filtered = await client.get(BOOKINGS, params={"user_id": other_id}, headers=admin_headers)
    assert [b["user"]["username"] for b in filtered.json()] == ["otheruser"]


@pytest.mark.asyncio
async def test_get_booking(client: AsyncClient, auth_headers, other_headers, test_seat):
    created = await _book(client, auth_headers, test_seat.id, ["2024-03-01"], "AM")
    booking_id = created.json()[0]["id"]

    own = await client.get(f"{BOOKINGS}{booking_id}", headers=auth_headers)
    assert own.status_code == 200
    assert own.json()["seat"]["label"] == "T10"

    foreign = await client.get(f"{BOOKINGS}{booking_id}", headers=other_headers)
    assert foreign.status_code == 403

    missing = await client.get(f"{BOOKINGS}99999", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_cancel_booking(client: AsyncClient, auth_headers, test_seat):
    seat_id = test_seat.id
    created = await _book(client, auth_headers, seat_id, ["2024-03-01"], "FULL")
    booking_id = created.json()[0]["id"]

    cancel = await client.delete(f"{BOOKINGS}{booking_id}", headers=auth_headers)
    assert cancel.status_code == 200
    assert cancel.json()["booking_id"] == booking_id

    # Hard delete: gone, and the slot is free again
    assert (await client.get(f"{BOOKINGS}{booking_id}", headers=auth_headers)).status_code == 404
    rebook = await _book(client, auth_headers, seat_id, ["2024-03-01"], "AM")
    assert rebook.status_code == 201


@pytest.mark.asyncio
async def test_cancel_permissions(client: AsyncClient, auth_headers, other_headers, admin_headers, test_seat):
    created = await _book(client, auth_headers, test_seat.id, ["2024-03-01"], "AM")
    booking_id = created.json()[0]["id"]

    forbidden = await client.delete(f"{BOOKINGS}{booking_id}", headers=other_headers)
    assert forbidden.status_code == 403

    by_admin = await client.delete(f"{BOOKINGS}{booking_id}", headers=admin_headers)
    assert by_admin.status_code == 200

    again = await client.delete(f"{BOOKINGS}{booking_id}", headers=admin_headers)
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_insert_collision_is_reported_as_conflict(
    client: AsyncClient, db_session, auth_headers, other_user, test_seat, monkeypatch
):
    """A booking committed after the availability check still turns the request into a 409."""
    seat_id = test_seat.id
    await make_booking(db_session, other_user, test_seat, date(2024, 3, 5), Slot.PM)

    real_find_conflicts = booking_service.find_conflicts
    calls = []

    async def stale_first_check(db, seat, dates, slot):
        calls.append(slot)
        if len(calls) == 1:
            return []
        return await real_find_conflicts(db, seat, dates, slot)

    monkeypatch.setattr(booking_service, "find_conflicts", stale_first_check)

    response = await _book(client, auth_headers, seat_id, ["2024-03-04", "2024-03-05"], "FULL")

    assert response.status_code == 409
    assert response.json()["conflicts"] == ["2024-03-05"]
    mine = await client.get(BOOKINGS, headers=auth_headers)
    assert mine.json() == []
