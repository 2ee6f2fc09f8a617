"""
Seat model and its blocking state.

Blocking is stored as three columns (`is_blocked`, `block_start_date`,
`block_end_date`) but is read through `SeatBlocking`, which collapses them
into exactly one of three states:

  OPEN               -> bookable on every date
  BLOCKED_PERMANENT  -> flag set, no range
  BLOCKED_RANGE      -> range set; the flag is ignored, only dates inside
                        [start, end] are blocked

The two range columns are always written together (see seat_service),
and a CHECK constraint keeps them consistent at the DB level.
"""

import enum
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, Date, JSON, CheckConstraint

from deskbooking.db.base import Base, TimestampMixin


class SeatType(str, enum.Enum):
    WITH_MONITOR = "with_monitor"
    WITHOUT_MONITOR = "without_monitor"


class BlockState(str, enum.Enum):
    OPEN = "open"
    BLOCKED_PERMANENT = "blocked_permanent"
    BLOCKED_RANGE = "blocked_range"


@dataclass(frozen=True)
class SeatBlocking:
    state: BlockState
    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def open(cls) -> "SeatBlocking":
        return cls(BlockState.OPEN)

    @classmethod
    def permanent(cls) -> "SeatBlocking":
        return cls(BlockState.BLOCKED_PERMANENT)

    @classmethod
    def between(cls, start: date, end: date) -> "SeatBlocking":
        if end < start:
            raise ValueError("Block end date must be on or after the start date")
        return cls(BlockState.BLOCKED_RANGE, start, end)

    def blocks(self, day: date) -> bool:
        """True when `day` cannot be booked because of this blocking state."""
        if self.state is BlockState.OPEN:
            return False
        if self.state is BlockState.BLOCKED_PERMANENT:
            return True
        if self.state is BlockState.BLOCKED_RANGE:
            return self.start <= day <= self.end
        raise ValueError(f"Unknown block state: {self.state}")


class Seat(Base, TimestampMixin):
    __tablename__ = "seats"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(50), unique=True, index=True, nullable=False)
    type = Column(String(20), nullable=False, default=SeatType.WITHOUT_MONITOR.value)
    tags = Column(JSON, nullable=False, default=list)

    is_blocked = Column(Boolean, nullable=False, default=False)
    block_start_date = Column(Date, nullable=True)
    block_end_date = Column(Date, nullable=True)

    # Floor-plan placement, in grid units
    grid_x = Column(Integer, nullable=False, default=0)
    grid_y = Column(Integer, nullable=False, default=0)
    grid_width = Column(Integer, nullable=False, default=2)
    grid_height = Column(Integer, nullable=False, default=2)

    __table_args__ = (
        CheckConstraint("type IN ('with_monitor', 'without_monitor')", name="check_seat_type"),
        CheckConstraint(
            "(block_start_date IS NULL AND block_end_date IS NULL) OR "
            "(block_start_date IS NOT NULL AND block_end_date IS NOT NULL "
            "AND block_start_date <= block_end_date)",
            name="check_seat_block_range",
        ),
        CheckConstraint("grid_width > 0 AND grid_height > 0", name="check_seat_grid_size"),
    )

    @property
    def blocking(self) -> SeatBlocking:
        # A range, when present, fully supersedes the permanent flag
        if self.block_start_date is not None and self.block_end_date is not None:
            return SeatBlocking.between(self.block_start_date, self.block_end_date)
        if self.is_blocked:
            return SeatBlocking.permanent()
        return SeatBlocking.open()

    @property
    def block_state(self) -> str:
        return self.blocking.state.value

    def apply_blocking(self, blocking: SeatBlocking) -> None:
        """Write a blocking state back to the columns, all three at once."""
        if blocking.state is BlockState.OPEN:
            self.is_blocked, self.block_start_date, self.block_end_date = False, None, None
        elif blocking.state is BlockState.BLOCKED_PERMANENT:
            self.is_blocked, self.block_start_date, self.block_end_date = True, None, None
        elif blocking.state is BlockState.BLOCKED_RANGE:
            self.is_blocked, self.block_start_date, self.block_end_date = True, blocking.start, blocking.end
        else:
            raise ValueError(f"Unknown block state: {blocking.state}")

    def __repr__(self) -> str:
        return f"<Seat(id={self.id}, label={self.label}, blocking={self.block_state})>"
