"""Authentication service."""
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from duetasks.models.user import User
from duetasks.crud.user import user as user_crud
from duetasks.schemas.user import UserCreate
from duetasks.utils.security import verify_password, get_password_hash, create_access_token, create_refresh_token, decode_token
from duetasks.config import settings
from duetasks.core.exceptions import ConflictError, UnauthorizedError
from duetasks.localization.helpers import get_translation

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service."""

    @staticmethod
    async def register_user(db: AsyncSession, obj_in: UserCreate) -> User:
        """Create an account; emails are unique."""
        existing = await user_crud.get_by_email(db, email=obj_in.email)
        if existing:
            raise ConflictError(get_translation("errors.email_taken"))
        new_user = await user_crud.create(db, obj_in=obj_in)
        logger.info("Registered user %s", new_user.id)
        return new_user

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """Authenticate a user by email and password."""
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        if not user.is_active:
            return None

        return user

    @staticmethod
    async def create_tokens(user: User) -> dict:
        """Create access and refresh tokens for a user."""
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=access_token_expires,
        )
        refresh_token = create_refresh_token(data={"sub": str(user.id)})

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    @staticmethod
    async def refresh_access_token(db: AsyncSession, refresh_token: str) -> dict:
        """Refresh access token using refresh token."""
        try:
            payload = decode_token(refresh_token)
        except ValueError:
            raise UnauthorizedError("Invalid refresh token")

        if payload.get("type") != "refresh":
            raise UnauthorizedError("Invalid token type")

        user_id = payload.get("sub")
        if not user_id:
            raise UnauthorizedError("Invalid token")

        try:
            user_uuid = UUID(str(user_id))
        except ValueError:
            raise UnauthorizedError("Invalid token")

        result = await db.execute(select(User).where(User.id == user_uuid))
        user = result.scalar_one_or_none()

        if not user or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=access_token_expires,
        )

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return get_password_hash(password)
