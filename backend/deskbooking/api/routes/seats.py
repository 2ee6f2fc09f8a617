"""
Seat endpoints: listing (cached), availability, and admin-only inventory,
blocking and layout mutations.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from deskbooking.db.session import get_db
from deskbooking.models.booking import Slot
from deskbooking.models.user import User
from deskbooking.schemas.seat import (
    SeatCreate,
    SeatUpdate,
    SeatBlockRequest,
    SeatPosition,
    SeatResponse,
    SeatAvailabilityResponse,
)
from deskbooking.schemas.types import IsoDate
from deskbooking.services import seat_service
from deskbooking.services.availability_service import is_seat_available
from deskbooking.services.cache_service import get_cached_seats, set_cached_seats, invalidate_seat_cache
from deskbooking.core.security import get_current_user, require_admin
from deskbooking.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/seats", tags=["Seats"])


@router.get("/", response_model=list[SeatResponse])
async def list_seats_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List all seats ordered by label.
    Served from Redis when cached; any seat mutation invalidates the cache.
    """
    cached = await get_cached_seats()
    if cached is not None:
        logger.info("seats_list_cache_hit", count=len(cached))
        return cached

    seats = await seat_service.list_seats(db)
    payload = [SeatResponse.model_validate(s).model_dump(mode="json") for s in seats]
    await set_cached_seats(payload)
    return payload


@router.put("/layout", response_model=list[SeatResponse])
async def update_layout_endpoint(
    positions: list[SeatPosition],
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Persist floor-plan positions for several seats at once."""
    seats = await seat_service.update_layout(db, positions)
    await invalidate_seat_cache()
    return seats


@router.get("/{seat_id}", response_model=SeatResponse)
async def get_seat_endpoint(
    seat_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await seat_service.get_seat(db, seat_id)


@router.get("/{seat_id}/availability", response_model=SeatAvailabilityResponse)
async def seat_availability_endpoint(
    seat_id: int,
    day: IsoDate = Query(..., alias="date"),
    slot: Slot = Query(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Whether the seat can be booked for `slot` on `date`. Unknown seats are never available."""
    available = await is_seat_available(db, seat_id, day, slot)
    return SeatAvailabilityResponse(seat_id=seat_id, date=day, slot=slot.value, available=available)


@router.post("/", response_model=SeatResponse, status_code=status.HTTP_201_CREATED)
async def create_seat_endpoint(
    seat_data: SeatCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    seat = await seat_service.create_seat(db, seat_data)
    await invalidate_seat_cache()
    return seat


@router.put("/{seat_id}", response_model=SeatResponse)
async def update_seat_endpoint(
    seat_id: int,
    seat_data: SeatUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    seat = await seat_service.update_seat(db, seat_id, seat_data)
    await invalidate_seat_cache()
    return seat


@router.delete("/{seat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_seat_endpoint(
    seat_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a seat and all of its bookings."""
    await seat_service.delete_seat(db, seat_id)
    await invalidate_seat_cache()


@router.post("/{seat_id}/block", response_model=SeatResponse)
async def block_seat_endpoint(
    seat_id: int,
    block: SeatBlockRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Block permanently (empty body) or for an inclusive date range."""
    seat = await seat_service.block_seat(db, seat_id, block.start_date, block.end_date)
    await invalidate_seat_cache()
    return seat


@router.post("/{seat_id}/unblock", response_model=SeatResponse)
async def unblock_seat_endpoint(
    seat_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    seat = await seat_service.unblock_seat(db, seat_id)
    await invalidate_seat_cache()
    return seat
