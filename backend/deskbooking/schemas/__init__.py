from deskbooking.schemas.user import UserCreate, UserResponse, UserLogin, UserSummary, Token
from deskbooking.schemas.seat import (
    SeatCreate, SeatUpdate, SeatBlockRequest, SeatPosition, SeatResponse, SeatAvailabilityResponse,
)
from deskbooking.schemas.booking import (
    BookingCreate, BookingResponse, BookingDetailResponse, BookingConflictResponse, BookingCancelResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "UserSummary", "Token",
    "SeatCreate", "SeatUpdate", "SeatBlockRequest", "SeatPosition", "SeatResponse",
    "SeatAvailabilityResponse",
    "BookingCreate", "BookingResponse", "BookingDetailResponse", "BookingConflictResponse",
    "BookingCancelResponse",
]
