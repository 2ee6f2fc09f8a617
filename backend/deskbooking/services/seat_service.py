"""
Seat service: inventory CRUD, blocking transitions and layout positions.

Blocking transitions (the only writers of the blocking columns):
  block_seat(seat, None, None)  -> BLOCKED_PERMANENT
  block_seat(seat, start, end)  -> BLOCKED_RANGE
  unblock_seat(seat)            -> OPEN, flag and range cleared together
"""

from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from deskbooking.models.booking import Booking, SlotClaim
from deskbooking.models.seat import Seat, SeatBlocking
from deskbooking.schemas.seat import SeatCreate, SeatUpdate, SeatPosition
from deskbooking.core.logging import get_logger

logger = get_logger(__name__)


async def list_seats(db: AsyncSession) -> list[Seat]:
    result = await db.execute(select(Seat).order_by(Seat.label.asc()))
    return list(result.scalars().all())


async def get_seat(db: AsyncSession, seat_id: int) -> Seat:
    """Get a single seat by ID, 404 when absent."""
    seat = await db.get(Seat, seat_id)
    if not seat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Seat {seat_id} not found",
        )
    return seat


async def _ensure_label_free(db: AsyncSession, label: str, seat_id: Optional[int] = None) -> None:
    query = select(Seat.id).where(Seat.label == label)
    if seat_id is not None:
        query = query.where(Seat.id != seat_id)
    if (await db.execute(query)).first():
        logger.warning("seat_label_taken", label=label)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Seat label {label} already exists",
        )


async def create_seat(db: AsyncSession, seat_data: SeatCreate) -> Seat:
    await _ensure_label_free(db, seat_data.label)

    seat = Seat(
        label=seat_data.label,
        type=seat_data.type.value,
        tags=list(seat_data.tags),
        grid_x=seat_data.grid_x,
        grid_y=seat_data.grid_y,
        grid_width=seat_data.grid_width,
        grid_height=seat_data.grid_height,
    )
    seat.apply_blocking(SeatBlocking.permanent() if seat_data.is_blocked else SeatBlocking.open())
    db.add(seat)
    await db.flush()
    await db.refresh(seat)

    logger.info("seat_created", seat_id=seat.id, label=seat.label, type=seat.type)
    return seat


async def update_seat(db: AsyncSession, seat_id: int, seat_data: SeatUpdate) -> Seat:
    seat = await get_seat(db, seat_id)
    changes = seat_data.model_dump(exclude_unset=True, exclude_none=True)

    if "label" in changes and changes["label"] != seat.label:
        await _ensure_label_free(db, changes["label"], seat_id)
    if "type" in changes:
        changes["type"] = changes["type"].value

    for name, value in changes.items():
        setattr(seat, name, value)
    await db.flush()
    await db.refresh(seat)

    logger.info("seat_updated", seat_id=seat.id, fields=sorted(changes))
    return seat


async def delete_seat(db: AsyncSession, seat_id: int) -> None:
    """Delete a seat together with every booking made on it."""
    seat = await get_seat(db, seat_id)

    await db.execute(delete(SlotClaim).where(SlotClaim.seat_id == seat_id))
    removed = await db.execute(delete(Booking).where(Booking.seat_id == seat_id))
    await db.delete(seat)
    await db.flush()

    logger.info("seat_deleted", seat_id=seat_id, bookings_removed=removed.rowcount)


async def block_seat(
    db: AsyncSession,
    seat_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Seat:
    seat = await get_seat(db, seat_id)

    if start_date is None and end_date is None:
        blocking = SeatBlocking.permanent()
    elif start_date is not None and end_date is not None:
        try:
            blocking = SeatBlocking.between(start_date, end_date)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A block range needs both a start and an end date",
        )

    seat.apply_blocking(blocking)
    await db.flush()
    await db.refresh(seat)

    logger.info(
        "seat_blocked",
        seat_id=seat.id,
        state=blocking.state.value,
        start=start_date.isoformat() if start_date else None,
        end=end_date.isoformat() if end_date else None,
    )
    return seat


async def unblock_seat(db: AsyncSession, seat_id: int) -> Seat:
    seat = await get_seat(db, seat_id)
    seat.apply_blocking(SeatBlocking.open())
    await db.flush()
    await db.refresh(seat)

    logger.info("seat_unblocked", seat_id=seat.id)
    return seat


async def update_layout(db: AsyncSession, positions: Sequence[SeatPosition]) -> list[Seat]:
    """Move several seats at once; unknown ids fail the whole update."""
    ids = [p.id for p in positions]
    result = await db.execute(select(Seat).where(Seat.id.in_(ids)))
    seats = {seat.id: seat for seat in result.scalars().all()}

    missing = sorted(set(ids) - set(seats))
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Seats not found: {', '.join(str(i) for i in missing)}",
        )

    for position in positions:
        seat = seats[position.id]
        seat.grid_x = position.grid_x
        seat.grid_y = position.grid_y
    await db.flush()

    logger.info("layout_updated", seats=len(positions))
    return [seats[i] for i in ids]
