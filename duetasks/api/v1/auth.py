"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from duetasks.database import get_db
from duetasks.dependencies import get_current_active_user
from duetasks.models.user import User
from duetasks.services.auth_service import AuthService
from duetasks.schemas.auth import TokenResponse, RefreshTokenRequest, RefreshTokenResponse
from duetasks.schemas.user import UserCreate, UserResponse
from duetasks.core.exceptions import UnauthorizedError
from duetasks.localization.helpers import get_translation

router = APIRouter()


@router.post("/sign-up", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    """Register a new account."""
    return await AuthService.register_user(db, user_in)


@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Login endpoint - returns access and refresh tokens.

    Supports OAuth2 password flow (form data) where username is the email.
    """
    user = await AuthService.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise UnauthorizedError(get_translation("errors.invalid_credentials"))

    tokens = await AuthService.create_tokens(user)
    return TokenResponse(**tokens)


@router.post("/refresh", response_model=RefreshTokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
):
    """Refresh access token using refresh token."""
    tokens = await AuthService.refresh_access_token(db, request.refresh_token)
    return RefreshTokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
):
    """Get current authenticated user information."""
    return current_user
