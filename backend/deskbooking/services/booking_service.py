"""
Booking service: conflict-checked batch booking, listing and cancellation.

CONCURRENCY STRATEGY: Check, then insert under a uniqueness guard
=================================================================

Problem:
  Two users request T10 AM on the same date at the same time.
  Both run the availability check, both see a free seat, both insert.
  Result: Double booking.

Solution:
  Every booking also writes one SlotClaim row per half-day it occupies
  (AM -> AM, PM -> PM, FULL -> AM + PM), and slot_claims carries
  UNIQUE (seat_id, date, half).

  1. Check every requested date with the availability predicate and
     collect the conflicts. Any conflict -> return them, write nothing.
  2. Insert all bookings, then all claims, in one flush.
  3. If the flush hits the unique constraint, another request won the race
     for at least one date: roll back the whole batch and report the dates
     that are now unavailable.

  The check in step 1 gives the caller a complete conflict list; the
  constraint in step 3 is what guarantees no two committed bookings overlap.
  A failed batch never leaves rows behind because nothing is committed
  before every insert of the batch has succeeded.

Conflicts are returned as data (BookingResult), not raised: the usual
response is a retry with the non-conflicting dates.
"""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from fastapi import HTTPException, status

from deskbooking.models.booking import Booking, SlotClaim, Slot
from deskbooking.models.seat import Seat
from deskbooking.models.user import User
from deskbooking.services.availability_service import find_conflicts
from deskbooking.core.metrics import record_booking_attempt, bookings_created, booking_latency, batch_size
from deskbooking.core.logging import get_logger

logger = get_logger(__name__, component="booking_engine")


@dataclass
class BookingResult:
    ok: bool
    bookings: list[Booking] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    seat_missing: bool = False

    @classmethod
    def created(cls, bookings: list[Booking]) -> "BookingResult":
        return cls(ok=True, bookings=bookings)

    @classmethod
    def conflicted(cls, dates: Sequence[date]) -> "BookingResult":
        return cls(ok=False, conflicts=[d.isoformat() for d in dates])


def _claims_for(booking: Booking, slot: Slot) -> list[SlotClaim]:
    return [
        SlotClaim(booking_id=booking.id, seat_id=booking.seat_id, date=booking.date, half=half.value)
        for half in slot.halves
    ]


async def _insert_batch(
    db: AsyncSession,
    user_id: int,
    seat_id: int,
    dates: Sequence[date],
    slot: Slot,
) -> list[Booking]:
    created = [Booking(user_id=user_id, seat_id=seat_id, date=day, slot=slot.value) for day in dates]
    db.add_all(created)
    await db.flush()  # assigns booking ids

    for booking in created:
        db.add_all(_claims_for(booking, slot))
    await db.flush()
    return created


async def create_bookings_for_dates(
    db: AsyncSession,
    user_id: int,
    seat_id: int,
    dates: Sequence[date],
    slot: Slot,
) -> BookingResult:
    """
    Book `slot` on every date in `dates`, or on none of them.

    Returns BookingResult.created with bookings in input order, or
    BookingResult.conflicted listing every unavailable date in input order.
    """
    started = time.perf_counter()
    batch_size.observe(len(dates))

    seat = await db.get(Seat, seat_id)
    if seat is None:
        logger.warning("booking_failed_seat_missing", seat_id=seat_id, user_id=user_id)
        record_booking_attempt("seat_missing")
        return BookingResult(ok=False, conflicts=[f"Seat {seat_id} not found"], seat_missing=True)

    if len(set(dates)) != len(dates):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The same date was requested more than once",
        )

    conflicts = await find_conflicts(db, seat, dates, slot)
    if conflicts:
        logger.info(
            "booking_conflict",
            seat_id=seat_id,
            user_id=user_id,
            slot=slot.value,
            requested=len(dates),
            conflicts=[d.isoformat() for d in conflicts],
        )
        record_booking_attempt("conflict")
        return BookingResult.conflicted(conflicts)

    try:
        created = await _insert_batch(db, user_id, seat_id, dates, slot)
    except IntegrityError:
        # Lost a race against a concurrent writer: nothing of this batch survives
        await db.rollback()
        seat = await db.get(Seat, seat_id, populate_existing=True)
        conflicts = await find_conflicts(db, seat, dates, slot) if seat is not None else list(dates)
        logger.warning(
            "booking_race_conflict",
            seat_id=seat_id,
            user_id=user_id,
            slot=slot.value,
            conflicts=[d.isoformat() for d in conflicts],
        )
        record_booking_attempt("race_conflict")
        return BookingResult.conflicted(conflicts or dates)

    bookings_created.labels(slot=slot.value).inc(len(created))
    record_booking_attempt("success")
    booking_latency.observe(time.perf_counter() - started)
    logger.info(
        "booking_created",
        booking_ids=[b.id for b in created],
        seat_id=seat_id,
        user_id=user_id,
        slot=slot.value,
        dates=[d.isoformat() for d in dates],
    )
    return BookingResult.created(created)


async def get_booking(db: AsyncSession, booking_id: int) -> Optional[Booking]:
    result = await db.execute(
        select(Booking)
        .options(joinedload(Booking.seat), joinedload(Booking.user))
        .where(Booking.id == booking_id)
    )
    return result.scalar_one_or_none()


async def get_visible_booking(db: AsyncSession, booking_id: int, user: User) -> Booking:
    """Fetch a booking the caller may see: their own, or any for admins."""
    booking = await get_booking(db, booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    if booking.user_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own bookings",
        )
    return booking


async def cancel_booking(db: AsyncSession, booking_id: int, user: User) -> int:
    """Hard-delete a booking and its slot claims. Owner or admin only."""
    booking = await get_visible_booking(db, booking_id, user)
    details = dict(
        owner_id=booking.user_id,
        seat_id=booking.seat_id,
        date=booking.date.isoformat(),
        slot=booking.slot,
    )

    await db.execute(delete(SlotClaim).where(SlotClaim.booking_id == booking_id))
    await db.execute(delete(Booking).where(Booking.id == booking_id))

    logger.info("booking_cancelled", booking_id=booking_id, cancelled_by=user.id, **details)
    return booking_id


async def list_bookings(
    db: AsyncSession,
    day: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user_id: Optional[int] = None,
) -> list[Booking]:
    """
    Bookings joined with seat and user, most recently created first.
    Filters combine with AND; `start`/`end` are inclusive.
    """
    if start is not None and end is not None and start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must be on or before end",
        )

    query = select(Booking).options(joinedload(Booking.seat), joinedload(Booking.user))

    if day is not None:
        query = query.where(Booking.date == day)
    if start is not None:
        query = query.where(Booking.date >= start)
    if end is not None:
        query = query.where(Booking.date <= end)
    if user_id is not None:
        query = query.where(Booking.user_id == user_id)

    result = await db.execute(query.order_by(Booking.created_at.desc(), Booking.id.desc()))
    return list(result.scalars().all())
