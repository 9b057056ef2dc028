"""Board view schemas: filter and page parameters plus derived views."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from duetasks.config import settings
from duetasks.schemas.task import TaskResponse

FilterMode = Literal["between", "exact"]


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class FilterState(BaseModel):
    """View-layer filter parameters; never persisted with tasks."""

    mode: FilterMode = "between"
    focus: bool = False
    from_date: Optional[str] = None
    from_time: Optional[str] = None
    to_date: Optional[str] = None
    to_time: Optional[str] = None
    exact_date: Optional[str] = None
    exact_time: Optional[str] = None

    @field_validator(
        "from_date", "from_time", "to_date", "to_time", "exact_date", "exact_time",
        mode="before",
    )
    @classmethod
    def empty_string_is_unset(cls, value):
        return _blank_to_none(value)


class PageState(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=1)
    page_size: int = Field(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)


class TaskFlagsResponse(BaseModel):
    completed: bool
    overdue: bool
    in_progress: bool
    planned: bool
    state: str


class BoardTask(BaseModel):
    """A task together with its derived flags."""

    task: TaskResponse
    flags: TaskFlagsResponse


class TaskGroupResponse(BaseModel):
    date: str
    items: List[BoardTask]


class TaskPageResponse(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    groups: List[TaskGroupResponse]


class DailyLoadResponse(BaseModel):
    day: str
    load: str
    total: int
    peak: int
    spread: int
    busiest_window: str
    score: float
    labels: List[str]
    buckets: List[int]


class WindowCountResponse(BaseModel):
    label: str
    count: int


class DaySummaryResponse(BaseModel):
    today_completed: int
    today_pending: int
    tomorrow_total: int
    tomorrow_buckets: List[WindowCountResponse]
    upcoming_total: int
    upcoming_buckets: List[WindowCountResponse]


class ReminderResponse(BaseModel):
    task: TaskResponse
    due: datetime
    minutes: int
    message: str


class ConflictResponse(BaseModel):
    due_at: str
    count: int
    expires_at: datetime
    message: str


class BoardResponse(BaseModel):
    """Everything the task list screen renders, derived from one `now`."""

    now: datetime
    filter: FilterState
    in_progress_task_id: Optional[str] = None
    completed_count: int
    filtered_count: int
    page: TaskPageResponse
    daily_load: DailyLoadResponse
    summary: DaySummaryResponse
    reminder: Optional[ReminderResponse] = None
    conflict: Optional[ConflictResponse] = None
