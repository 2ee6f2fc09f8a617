"""
Booking endpoints: batch/recurring reservation, listing and cancellation.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from deskbooking.db.session import get_db
from deskbooking.models.user import User
from deskbooking.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingDetailResponse,
    BookingConflictResponse,
    BookingCancelResponse,
)
from deskbooking.schemas.types import IsoDate
from deskbooking.services.booking_service import (
    create_bookings_for_dates,
    get_visible_booking,
    cancel_booking,
    list_bookings,
)
from deskbooking.services.recurrence import expand_dates
from deskbooking.core.security import get_current_user

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "/",
    response_model=list[BookingResponse],
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_409_CONFLICT: {"model": BookingConflictResponse}},
)
async def create_booking(
    booking_data: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Book a seat for one or more dates, all or nothing.

    Send either `dates` or `startDate` + `occurrences` + `intervalWeeks`.
    On 409 the body lists the unavailable dates; resubmit with the remaining
    dates to book only those.
    """
    dates = expand_dates(
        dates=booking_data.dates,
        start_date=booking_data.start_date,
        occurrences=booking_data.occurrences,
        interval_weeks=booking_data.interval_weeks,
    )
    result = await create_bookings_for_dates(db, user.id, booking_data.seat_id, dates, booking_data.slot)

    if result.seat_missing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.conflicts[0])
    if not result.ok:
        conflict = BookingConflictResponse(
            message="Seat is not available on some of the requested dates",
            conflicts=result.conflicts,
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=conflict.model_dump())
    return result.bookings


@router.get("/", response_model=list[BookingDetailResponse])
async def list_bookings_endpoint(
    day: Optional[IsoDate] = Query(None, alias="date"),
    start: Optional[IsoDate] = Query(None),
    end: Optional[IsoDate] = Query(None),
    user_id: Optional[int] = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Bookings joined with seat and booker, most recently created first.
    Employees only ever see their own bookings; admins may filter by any user.
    """
    if not user.is_admin:
        if user_id is not None and user_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only view your own bookings",
            )
        user_id = user.id
    return await list_bookings(db, day=day, start=start, end=end, user_id=user_id)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking_endpoint(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_visible_booking(db, booking_id, user)


@router.delete("/{booking_id}", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel (delete) a booking. Owners may cancel their own, admins any."""
    await cancel_booking(db, booking_id, user)
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking_id=booking_id,
    )
