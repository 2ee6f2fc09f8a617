"""
Authentication service handling user registration and login.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from deskbooking.models.user import User, UserRole
from deskbooking.schemas.user import UserCreate, UserLogin
from deskbooking.core.security import hash_password, verify_password, create_access_token
from deskbooking.core.logging import get_logger

logger = get_logger(__name__)


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    username: str,
    password: str,
    role: UserRole = UserRole.EMPLOYEE,
) -> User:
    user = User(
        username=username,
        hashed_password=hash_password(password),
        role=role.value,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new employee account.
    Raises 409 if the username already exists.
    """
    if await get_user_by_username(db, user_data.username):
        logger.warning("registration_failed", reason="username_exists", username=user_data.username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        )

    user = await create_user(db, user_data.username, user_data.password)
    logger.info("user_registered", user_id=user.id, username=user.username)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> str:
    """
    Authenticate user and return JWT access token.
    Raises 401 if credentials are invalid.
    """
    user = await get_user_by_username(db, login_data.username)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", username=login_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    logger.info("user_logged_in", user_id=user.id)
    return token
