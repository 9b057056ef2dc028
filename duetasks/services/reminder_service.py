"""Nearest-upcoming task reminders."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from duetasks.config import settings
from duetasks.utils.datetimes import minutes_until, parse_local_datetime


@dataclass
class Upcoming:
    task: Any
    due: datetime


@dataclass
class Reminder:
    task: Any
    due: datetime
    minutes: int


class ReminderTracker:
    """Remembers the dismissed task until a different task becomes nearest."""

    def __init__(self):
        self.dismissed_task_id: Optional[str] = None

    def dismiss(self, task_id: Any) -> None:
        self.dismissed_task_id = str(task_id)

    def refresh(self, upcoming: Optional[Upcoming]) -> None:
        if upcoming is None or str(upcoming.task.id) != self.dismissed_task_id:
            self.dismissed_task_id = None


class ReminderService:
    """Select the single nearest pending task and decide whether to remind."""

    def __init__(self, window_minutes: int = settings.REMINDER_WINDOW_MINUTES):
        self.window_minutes = window_minutes

    @staticmethod
    def next_upcoming(tasks: Sequence[Any], now: datetime) -> Optional[Upcoming]:
        best: Optional[Upcoming] = None
        for task in tasks:
            if task.completed:
                continue
            due = parse_local_datetime(task.due_at)
            if due is None or due < now:
                continue
            if best is None or due < best.due:
                best = Upcoming(task=task, due=due)
        return best

    def select_reminder(
        self,
        tasks: Sequence[Any],
        now: datetime,
        dismissed_task_id: Optional[Any] = None,
    ) -> Optional[Reminder]:
        upcoming = self.next_upcoming(tasks, now)
        if upcoming is None:
            return None
        if dismissed_task_id is not None and str(upcoming.task.id) == str(dismissed_task_id):
            return None
        mins = minutes_until(upcoming.due, now)
        if mins < 0 or mins > self.window_minutes:
            return None
        return Reminder(task=upcoming.task, due=upcoming.due, minutes=mins)

    def tick(self, tasks: Sequence[Any], now: datetime, tracker: ReminderTracker) -> Optional[Reminder]:
        """Recompute on a clock tick or task-set change, updating the dismissal record."""
        tracker.refresh(self.next_upcoming(tasks, now))
        return self.select_reminder(tasks, now, tracker.dismissed_task_id)


reminder_service = ReminderService()
