"""Initial schema: users, seats, bookings and slot claims.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'employee'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'employee')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "seats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("label", sa.String(50), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default=sa.text("'without_monitor'")),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("block_start_date", sa.Date(), nullable=True),
        sa.Column("block_end_date", sa.Date(), nullable=True),
        sa.Column("grid_x", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("grid_y", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("grid_width", sa.Integer(), nullable=False, server_default=sa.text("2")),
        sa.Column("grid_height", sa.Integer(), nullable=False, server_default=sa.text("2")),
        *_timestamps(),
        sa.CheckConstraint("type IN ('with_monitor', 'without_monitor')", name="check_seat_type"),
        # Range columns are written together; a half-set range is never valid
        sa.CheckConstraint(
            "(block_start_date IS NULL AND block_end_date IS NULL) OR "
            "(block_start_date IS NOT NULL AND block_end_date IS NOT NULL "
            "AND block_start_date <= block_end_date)",
            name="check_seat_block_range",
        ),
        sa.CheckConstraint("grid_width > 0 AND grid_height > 0", name="check_seat_grid_size"),
    )
    op.create_index("ix_seats_id", "seats", ["id"])
    op.create_index("ix_seats_label", "seats", ["label"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("seat_id", sa.Integer(), sa.ForeignKey("seats.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("slot", sa.String(4), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("slot IN ('AM', 'PM', 'FULL')", name="check_booking_slot"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_seat_id", "bookings", ["seat_id"])
    # Every availability check filters on (seat_id, date)
    op.create_index("ix_bookings_seat_date", "bookings", ["seat_id", "date"])
    # Date and date-range listings
    op.create_index("ix_bookings_date", "bookings", ["date"])

    # One row per occupied half-day. The unique constraint is what rejects
    # the second of two concurrent overlapping bookings.
    op.create_table(
        "slot_claims",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("seat_id", sa.Integer(), sa.ForeignKey("seats.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("half", sa.String(2), nullable=False),
        sa.UniqueConstraint("seat_id", "date", "half", name="uq_slot_claim_seat_date_half"),
        sa.CheckConstraint("half IN ('AM', 'PM')", name="check_slot_claim_half"),
    )
    op.create_index("ix_slot_claims_booking_id", "slot_claims", ["booking_id"])


def downgrade() -> None:
    op.drop_table("slot_claims")
    op.drop_table("bookings")
    op.drop_table("seats")
    op.drop_table("users")
