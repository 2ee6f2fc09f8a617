"""
Seed the database with the default accounts and the office seat map.

Safe to run repeatedly: existing users and seat labels are left untouched.

    deskbooking-seed
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from deskbooking.core.logging import setup_logging, get_logger
from deskbooking.db.session import AsyncSessionLocal
from deskbooking.models.seat import Seat, SeatType
from deskbooking.models.user import UserRole
from deskbooking.services.auth_service import get_user_by_username, create_user

logger = get_logger(__name__, component="seed")

DEFAULT_USERS = [
    ("admin", "password", UserRole.ADMIN),
    ("employee", "password", UserRole.EMPLOYEE),
]

# Pods of eight desks as they appear on the floor plan, left to right
SEAT_LABELS = [
    "T56", "T55", "T54", "T53", "T49", "T50", "T51", "T52",
    "T48", "T47", "T46", "T45", "T41", "T42", "T43", "T44",
    "T60", "T61", "T59", "T62", "T58", "T63", "T57", "T64",
    "T68", "T69", "T67", "T70", "T66", "T71", "T65", "T72",
    "T76", "T77", "T75", "T78", "T74", "T79", "T73", "T80",
    "T8", "T9", "T7", "T10", "T6", "T11", "T5", "T12",
    "S1", "S2", "S3", "S4",
]
SEATS_PER_ROW = 8


async def seed(db: AsyncSession) -> dict:
    users_created = 0
    for username, password, role in DEFAULT_USERS:
        if await get_user_by_username(db, username) is None:
            await create_user(db, username, password, role)
            users_created += 1

    existing = set((await db.execute(select(Seat.label))).scalars().all())
    seats_created = 0
    for index, label in enumerate(SEAT_LABELS):
        if label in existing:
            continue
        row, col = divmod(index, SEATS_PER_ROW)
        db.add(Seat(
            label=label,
            type=(SeatType.WITHOUT_MONITOR if label.startswith("S") else SeatType.WITH_MONITOR).value,
            tags=[],
            grid_x=col * 2,
            grid_y=row * 2,
        ))
        seats_created += 1
    await db.flush()

    logger.info("seed_complete", users_created=users_created, seats_created=seats_created)
    return {"users_created": users_created, "seats_created": seats_created}


async def _run() -> None:
    async with AsyncSessionLocal() as session:
        await seed(session)
        await session.commit()


def main() -> None:
    setup_logging()
    asyncio.run(_run())


if __name__ == "__main__":
    main()
