"""User schemas."""
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr


class UserCreate(UserBase):
    """User creation schema."""

    password: str = Field(min_length=6)


class UserResponse(UserBase):
    """User response schema."""

    id: UUID
    is_active: bool = True
    created_at: datetime

    class Config:
        from_attributes = True
