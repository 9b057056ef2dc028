"""Board view endpoints: filtered, paginated tasks with workload analytics."""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from duetasks.config import settings
from duetasks.database import get_db
from duetasks.dependencies import get_clock, get_current_active_user
from duetasks.localization.helpers import get_locale_from_request
from duetasks.models.user import User
from duetasks.schemas.board import BoardResponse, FilterMode, FilterState, PageState
from duetasks.schemas.task import OkResponse
from duetasks.services.board_service import board_service, board_sessions
from duetasks.services.reminder_service import reminder_service
from duetasks.services.task_service import task_service
from duetasks.utils.clock import Clock

router = APIRouter()


class ReminderDismissRequest(BaseModel):
    task_id: UUID


def get_filter_state(
    mode: FilterMode = Query("between"),
    focus: bool = Query(False),
    from_date: Optional[str] = Query(None),
    from_time: Optional[str] = Query(None),
    to_date: Optional[str] = Query(None),
    to_time: Optional[str] = Query(None),
    exact_date: Optional[str] = Query(None),
    exact_time: Optional[str] = Query(None),
) -> FilterState:
    return FilterState(
        mode=mode,
        focus=focus,
        from_date=from_date,
        from_time=from_time,
        to_date=to_date,
        to_time=to_time,
        exact_date=exact_date,
        exact_time=exact_time,
    )


def get_page_state(
    page: int = Query(1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PageState:
    return PageState(page=page, page_size=page_size)


@router.get("", response_model=BoardResponse)
async def get_board(
    request: Request,
    filter_state: FilterState = Depends(get_filter_state),
    page_state: PageState = Depends(get_page_state),
    dismissed_reminder_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    clock: Clock = Depends(get_clock),
):
    """Everything the task list renders, computed from a single clock reading."""
    now = clock.now
    tasks, in_progress_id = await task_service.list_tasks(db, owner=current_user)

    board_sessions.prune(now)
    session = board_sessions.get(current_user.id)
    if dismissed_reminder_id is not None:
        session.reminders.dismiss(dismissed_reminder_id)
    session.reminders.refresh(reminder_service.next_upcoming(tasks, now))

    return board_service.build_board(
        tasks,
        now=now,
        in_progress_id=in_progress_id,
        filter_state=filter_state,
        page_state=page_state,
        dismissed_reminder_id=session.reminders.dismissed_task_id,
        conflict=session.conflicts.active(now),
        locale=get_locale_from_request(request),
    )


@router.post("/reminder/dismiss", response_model=OkResponse)
async def dismiss_reminder(
    request: ReminderDismissRequest,
    current_user: User = Depends(get_current_active_user),
):
    """Hide the reminder for a task until a different task becomes nearest."""
    board_sessions.get(current_user.id).reminders.dismiss(request.task_id)
    return OkResponse()
