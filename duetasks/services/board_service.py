"""Compose the derived board view from tasks, `now`, filter and page state."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from duetasks.localization.helpers import get_translation
from duetasks.schemas.board import (
    BoardResponse,
    BoardTask,
    ConflictResponse,
    DailyLoadResponse,
    DaySummaryResponse,
    FilterState,
    PageState,
    ReminderResponse,
    TaskFlagsResponse,
    TaskGroupResponse,
    TaskPageResponse,
    WindowCountResponse,
)
from duetasks.schemas.task import TaskResponse
from duetasks.services.conflict_service import Conflict, ConflictTracker
from duetasks.services.filter_service import filter_service
from duetasks.services.pagination_service import pagination_service
from duetasks.services.reminder_service import ReminderTracker, reminder_service
from duetasks.services.task_state_service import task_state_service
from duetasks.services.workload_service import workload_service
from duetasks.utils.datetimes import format_datetime, format_local_datetime


@dataclass
class BoardSession:
    """Per-user transient view state: the conflict signal and reminder dismissal."""

    conflicts: ConflictTracker = field(default_factory=ConflictTracker)
    reminders: ReminderTracker = field(default_factory=ReminderTracker)

    def is_idle(self, now: datetime) -> bool:
        return self.conflicts.active(now) is None and self.reminders.dismissed_task_id is None


class BoardSessions:
    """In-process registry of board sessions keyed by user id."""

    def __init__(self):
        self._sessions: Dict[str, BoardSession] = {}

    def get(self, user_id: Any) -> BoardSession:
        return self._sessions.setdefault(str(user_id), BoardSession())

    def prune(self, now: datetime) -> int:
        """Drop sessions holding neither an active conflict nor a dismissal."""
        idle = [key for key, session in self._sessions.items() if session.is_idle(now)]
        for key in idle:
            del self._sessions[key]
        return len(idle)

    def __len__(self) -> int:
        return len(self._sessions)

    def reset(self) -> None:
        self._sessions.clear()


class BoardService:
    """Pure composition; every value is derived from the single `now` passed in."""

    def build_board(
        self,
        tasks: Sequence[Any],
        *,
        now: datetime,
        in_progress_id: Optional[Any] = None,
        filter_state: Optional[FilterState] = None,
        page_state: Optional[PageState] = None,
        dismissed_reminder_id: Optional[Any] = None,
        conflict: Optional[Conflict] = None,
        locale: str = "en",
    ) -> BoardResponse:
        filter_state = filter_state or FilterState()
        page_state = page_state or PageState()

        filtered = filter_service.filter_tasks(tasks, filter_state, now)
        page = pagination_service.paginate(filtered, page_state.page, page_state.page_size)

        def board_task(task: Any) -> BoardTask:
            flags = task_state_service.classify(task, now, in_progress_id)
            return BoardTask(
                task=TaskResponse.model_validate(task),
                flags=TaskFlagsResponse(
                    completed=flags.completed,
                    overdue=flags.overdue,
                    in_progress=flags.in_progress,
                    planned=flags.planned,
                    state=flags.state,
                ),
            )

        day_key = workload_service.load_day_key(filter_state, now)
        daily = workload_service.get_daily_load_for(tasks, day_key)
        summary = workload_service.get_day_summary(tasks, now)
        reminder = reminder_service.select_reminder(tasks, now, dismissed_reminder_id)

        return BoardResponse(
            now=now,
            filter=filter_state,
            in_progress_task_id=str(in_progress_id) if in_progress_id else None,
            completed_count=sum(1 for t in filtered if t.completed),
            filtered_count=len(filtered),
            page=TaskPageResponse(
                page=page.page,
                page_size=page.page_size,
                total_items=page.total_items,
                total_pages=page.total_pages,
                groups=[
                    TaskGroupResponse(date=group.date, items=[board_task(t) for t in group.items])
                    for group in page.groups
                ],
            ),
            daily_load=DailyLoadResponse(
                day=day_key,
                load=daily.load,
                total=daily.total,
                peak=daily.peak,
                spread=daily.spread,
                busiest_window=daily.busiest_window,
                score=daily.score,
                labels=daily.labels,
                buckets=daily.buckets,
            ),
            summary=DaySummaryResponse(
                today_completed=summary.today_completed,
                today_pending=summary.today_pending,
                tomorrow_total=summary.tomorrow_total,
                tomorrow_buckets=[WindowCountResponse(label=w.label, count=w.count) for w in summary.tomorrow_buckets],
                upcoming_total=summary.upcoming_total,
                upcoming_buckets=[WindowCountResponse(label=w.label, count=w.count) for w in summary.upcoming_buckets],
            ),
            reminder=ReminderResponse(
                task=TaskResponse.model_validate(reminder.task),
                due=reminder.due,
                minutes=reminder.minutes,
                message=(
                    get_translation("reminder.title", locale, mins=reminder.minutes)
                    + f" · {format_datetime(reminder.due)}"
                ),
            ) if reminder else None,
            conflict=ConflictResponse(
                due_at=conflict.due_at,
                count=conflict.count,
                expires_at=conflict.expires_at,
                message=get_translation(
                    "conflict.description",
                    locale,
                    count=conflict.count,
                    when=format_local_datetime(conflict.due_at),
                ),
            ) if conflict else None,
        )


board_service = BoardService()
board_sessions = BoardSessions()
