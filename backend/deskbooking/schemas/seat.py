"""
Pydantic schemas for seat inventory, blocking and layout.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from deskbooking.models.seat import SeatType, BlockState
from deskbooking.schemas.types import IsoDate


class SeatCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=50)
    type: SeatType = SeatType.WITHOUT_MONITOR
    tags: list[str] = Field(default_factory=list)
    is_blocked: bool = False
    grid_x: int = Field(0, ge=0)
    grid_y: int = Field(0, ge=0)
    grid_width: int = Field(2, gt=0)
    grid_height: int = Field(2, gt=0)


class SeatUpdate(BaseModel):
    """Partial update. Blocking is changed only through block/unblock."""
    label: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[SeatType] = None
    tags: Optional[list[str]] = None
    grid_x: Optional[int] = Field(None, ge=0)
    grid_y: Optional[int] = Field(None, ge=0)
    grid_width: Optional[int] = Field(None, gt=0)
    grid_height: Optional[int] = Field(None, gt=0)

    model_config = {"extra": "forbid"}


class SeatBlockRequest(BaseModel):
    """No dates blocks the seat permanently; both dates block an inclusive range."""
    start_date: Optional[IsoDate] = None
    end_date: Optional[IsoDate] = None

    @model_validator(mode="after")
    def check_range(self) -> "SeatBlockRequest":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.start_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class SeatPosition(BaseModel):
    id: int
    grid_x: int = Field(..., ge=0)
    grid_y: int = Field(..., ge=0)


class SeatResponse(BaseModel):
    id: int
    label: str
    type: SeatType
    tags: list[str]
    is_blocked: bool
    block_start_date: Optional[date]
    block_end_date: Optional[date]
    block_state: BlockState
    grid_x: int
    grid_y: int
    grid_width: int
    grid_height: int
    created_at: datetime

    model_config = {"from_attributes": True}


class SeatAvailabilityResponse(BaseModel):
    seat_id: int
    date: date
    slot: str
    available: bool
