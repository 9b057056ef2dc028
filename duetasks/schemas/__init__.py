"""Schema modules."""
from duetasks.schemas.auth import TokenResponse, RefreshTokenRequest, RefreshTokenResponse
from duetasks.schemas.user import UserCreate, UserResponse
from duetasks.schemas.task import (
    Attachment,
    TaskCreate,
    TaskUpdate,
    TaskResponse,
    TaskListResponse,
    SeedRequest,
)
from duetasks.schemas.board import FilterState, PageState, BoardResponse
