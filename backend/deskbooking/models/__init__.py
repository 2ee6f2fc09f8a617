from deskbooking.models.user import User, UserRole
from deskbooking.models.seat import Seat, SeatType, SeatBlocking, BlockState
from deskbooking.models.booking import Booking, SlotClaim, Slot, DayHalf

__all__ = [
    "User", "UserRole",
    "Seat", "SeatType", "SeatBlocking", "BlockState",
    "Booking", "SlotClaim", "Slot", "DayHalf",
]
