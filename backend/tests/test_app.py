"""
Tests for health, metrics, logging setup and the seed command.
"""

import json
import logging

import pytest
import structlog
from httpx import AsyncClient
from sqlalchemy import select, func

from deskbooking.core.config import get_settings
from deskbooking.core.logging import setup_logging, get_logger
from deskbooking.models.seat import Seat
from deskbooking.models.user import User
from deskbooking.seed import seed, SEAT_LABELS


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["cache"] == {"status": "disabled"}
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_metrics_exposed_after_booking(client: AsyncClient, auth_headers, test_seat):
    await client.post(
        "/api/v1/bookings/", json={"seatId": test_seat.id, "dates": ["2024-03-01"], "slot": "AM"}, headers=auth_headers
    )
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "booking_attempts_total" in response.text


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session):
    first = await seed(db_session)
    await db_session.commit()
    second = await seed(db_session)

    assert first == {"users_created": 2, "seats_created": len(SEAT_LABELS)}
    assert second == {"users_created": 0, "seats_created": 0}
    assert (await db_session.execute(select(func.count()).select_from(Seat))).scalar() == len(SEAT_LABELS)
    roles = dict((await db_session.execute(select(User.username, User.role))).all())
    assert roles == {"admin": "admin", "employee": "employee"}


def test_json_logs_carry_service_context(capsys, monkeypatch):
    settings = get_settings()
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    monkeypatch.setattr(settings, "LOG_JSON", True)

    setup_logging()
    try:
        get_logger("deskbooking.checkin", component="kiosk").info("seat_checked_in", seat_id=7)
    finally:
        root.handlers, root.level = saved_handlers, saved_level
        structlog.reset_defaults()

    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "seat_checked_in"
    assert record["seat_id"] == 7
    assert record["component"] == "kiosk"
    assert record["service"] == settings.APP_NAME
    assert record["env"] == settings.ENVIRONMENT
    assert record["level"] == "info"
