"""
Availability predicate: can this seat be booked for this date and slot?

Evaluation order:
  1. Unknown seat                              -> not available
  2. Seat blocking state covers the date       -> not available
  3. FULL requested and any booking exists     -> not available
  4. AM/PM requested and same slot or FULL
     already booked                            -> not available
  5. Otherwise                                 -> available

Reads only. The unique constraint on slot claims is what keeps concurrent
writers honest; this check gives callers the per-date conflict report.
"""

from datetime import date
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from deskbooking.core.metrics import record_availability
from deskbooking.models.booking import Booking, Slot
from deskbooking.models.seat import Seat


def slot_is_free(requested: Slot, existing: Sequence[Slot]) -> bool:
    if requested is Slot.FULL:
        return len(existing) == 0
    return not any(slot is requested or slot is Slot.FULL for slot in existing)


async def get_booked_slots(db: AsyncSession, seat_id: int, day: date) -> list[Slot]:
    result = await db.execute(
        select(Booking.slot).where(Booking.seat_id == seat_id, Booking.date == day)
    )
    return [Slot(value) for value in result.scalars().all()]


async def check_seat_date(db: AsyncSession, seat: Seat, day: date, slot: Slot) -> bool:
    """Availability for an already loaded seat."""
    if seat.blocking.blocks(day):
        record_availability("blocked")
        return False

    free = slot_is_free(slot, await get_booked_slots(db, seat.id, day))
    record_availability("available" if free else "booked")
    return free


async def is_seat_available(db: AsyncSession, seat_id: int, day: date, slot: Slot) -> bool:
    seat = await db.get(Seat, seat_id)
    if seat is None:
        record_availability("missing_seat")
        return False
    return await check_seat_date(db, seat, day, slot)


async def find_conflicts(db: AsyncSession, seat: Seat, dates: Sequence[date], slot: Slot) -> list[date]:
    """Dates from `dates` (in order) on which the seat cannot take `slot`."""
    conflicts = []
    for day in dates:
        if not await check_seat_date(db, seat, day, slot):
            conflicts.append(day)
    return conflicts
