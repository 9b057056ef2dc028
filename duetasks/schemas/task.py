"""Task and attachment schemas."""
from typing import List, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from duetasks.core.exceptions import UnparseableDateTimeError
from duetasks.utils.datetimes import require_local_datetime, to_due_at

TITLE_MAX_LENGTH = 80
DESCRIPTION_MAX_LENGTH = 500

AttachmentKind = Literal[
    "image", "audio", "video", "pdf", "spreadsheet", "document", "text", "file"
]


def _clean_title(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("Title is required.")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"Keep it under {TITLE_MAX_LENGTH} characters.")
    return value


def _clean_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Keep it under {DESCRIPTION_MAX_LENGTH} characters.")
    return value or None


def _check_due_at(value: str) -> str:
    try:
        return to_due_at(require_local_datetime(value))
    except UnparseableDateTimeError as exc:
        raise ValueError("Invalid date/time.") from exc


class Attachment(BaseModel):
    """File attached to a task; kind is fixed at upload time."""

    id: str
    name: str
    type: str
    size: int
    bucket: str
    path: str
    kind: AttachmentKind


class TaskBase(BaseModel):
    """Base task schema."""

    title: str
    description: Optional[str] = None
    due_at: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: Optional[str]) -> Optional[str]:
        return _clean_description(value)

    @field_validator("due_at")
    @classmethod
    def validate_due_at(cls, value: str) -> str:
        return _check_due_at(value)


class TaskCreate(TaskBase):
    """Task creation schema."""

    class Config:
        extra = "forbid"


class SeedTask(TaskBase):
    """Demo task accepted by the seed endpoint."""

    completed: bool = False


class SeedRequest(BaseModel):
    tasks: List[SeedTask] = Field(min_length=1)


class TaskUpdate(BaseModel):
    """Partial update; unknown fields are rejected."""

    completed: Optional[bool] = None
    title: Optional[str] = None
    description: Optional[str] = None
    due_at: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _clean_title(value)

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: Optional[str]) -> Optional[str]:
        return _clean_description(value)

    @field_validator("due_at")
    @classmethod
    def validate_due_at(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_due_at(value)


class TaskResponse(BaseModel):
    """Task response schema."""

    id: UUID
    title: str
    description: Optional[str] = None
    due_at: str
    completed: bool = False
    attachments: List[Attachment] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("attachments", mode="before")
    @classmethod
    def coerce_attachments(cls, value):
        if not isinstance(value, list):
            return []
        return [item for item in value if item]


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]
    in_progress_task_id: Optional[UUID] = None


class TaskCreatedResponse(BaseModel):
    task: TaskResponse
    conflict_count: int = 0


class TaskEnvelope(BaseModel):
    task: TaskResponse


class SeedResponse(BaseModel):
    tasks: List[TaskResponse]


class OkResponse(BaseModel):
    ok: bool = True
    deleted: Optional[int] = None


class InProgressRequest(BaseModel):
    id: Optional[UUID] = None


class InProgressResponse(BaseModel):
    in_progress_task_id: Optional[UUID] = None


class AttachmentDeleteRequest(BaseModel):
    attachment_id: str = Field(min_length=1)


class SignedUrlRequest(BaseModel):
    bucket: str = Field(min_length=1)
    path: str = Field(min_length=1)


class SignedUrlResponse(BaseModel):
    signed_url: str
    expires_in: int
