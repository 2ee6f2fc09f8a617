"""
Pydantic schemas for booking-related request/response validation.

Booking requests accept camelCase (seatId, startDate, intervalWeeks) as well
as snake_case field names.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from deskbooking.core.config import get_settings
from deskbooking.models.booking import Slot
from deskbooking.schemas.seat import SeatResponse
from deskbooking.schemas.user import UserSummary
from deskbooking.schemas.types import IsoDate

MAX_OCCURRENCES = get_settings().MAX_OCCURRENCES


class BookingCreate(BaseModel):
    """Either an explicit `dates` list or a weekly recurrence from `start_date`."""
    seat_id: int
    slot: Slot
    dates: Optional[list[IsoDate]] = Field(None, min_length=1, max_length=MAX_OCCURRENCES)
    start_date: Optional[IsoDate] = None
    occurrences: int = Field(1, ge=1, le=MAX_OCCURRENCES)
    interval_weeks: int = Field(1, ge=1, le=52)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def check_recurrence(self) -> "BookingCreate":
        if (self.dates is None) == (self.start_date is None):
            raise ValueError("Provide either dates or start_date")
        if self.dates is not None:
            seen, repeated = set(), set()
            for day in self.dates:
                if day in seen:
                    repeated.add(day.isoformat())
                seen.add(day)
            if repeated:
                raise ValueError(f"Duplicate dates: {', '.join(sorted(repeated))}")
        return self


class BookingResponse(BaseModel):
    id: int
    user_id: int
    seat_id: int
    date: date
    slot: Slot
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingDetailResponse(BookingResponse):
    """Booking joined with its seat and booker."""
    seat: SeatResponse
    user: UserSummary


class BookingConflictResponse(BaseModel):
    message: str
    conflicts: list[str]


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: int
