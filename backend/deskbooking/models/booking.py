"""
Booking model and the per-half-day slot claims that guard it.

Key design decisions:
- A booking covers one seat, one calendar date and one slot (AM, PM, FULL)
- Every booking writes one SlotClaim row per half-day it occupies
  (AM -> AM, PM -> PM, FULL -> AM + PM). The unique constraint on
  (seat_id, date, half) makes overlapping bookings impossible to commit,
  even when two requests pass the availability check at the same time.
- Cancellation hard-deletes the booking and its claims
"""

import enum

from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship

from deskbooking.db.base import Base, TimestampMixin


class DayHalf(str, enum.Enum):
    AM = "AM"
    PM = "PM"


class Slot(str, enum.Enum):
    AM = "AM"
    PM = "PM"
    FULL = "FULL"

    @property
    def halves(self) -> tuple[DayHalf, ...]:
        if self is Slot.AM:
            return (DayHalf.AM,)
        if self is Slot.PM:
            return (DayHalf.PM,)
        return (DayHalf.AM, DayHalf.PM)

    def conflicts_with(self, other: "Slot") -> bool:
        return bool(set(self.halves) & set(other.halves))


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_id = Column(Integer, ForeignKey("seats.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    slot = Column(String(4), nullable=False)

    # Non-owning lookups, loaded explicitly by the query layer
    user = relationship("User", lazy="raise")
    seat = relationship("Seat", lazy="raise")

    __table_args__ = (
        CheckConstraint("slot IN ('AM', 'PM', 'FULL')", name="check_booking_slot"),
        # Availability lookups are always (seat, date)
        Index("ix_bookings_seat_date", "seat_id", "date"),
        Index("ix_bookings_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, seat={self.seat_id}, date={self.date}, slot={self.slot})>"


class SlotClaim(Base):
    __tablename__ = "slot_claims"

    id = Column(Integer, primary_key=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_id = Column(Integer, ForeignKey("seats.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    half = Column(String(2), nullable=False)

    __table_args__ = (
        UniqueConstraint("seat_id", "date", "half", name="uq_slot_claim_seat_date_half"),
        CheckConstraint("half IN ('AM', 'PM')", name="check_slot_claim_half"),
    )

    def __repr__(self) -> str:
        return f"<SlotClaim(seat={self.seat_id}, date={self.date}, half={self.half})>"
