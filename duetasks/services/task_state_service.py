"""Per-task derived state (completed / overdue / in progress / planned)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from duetasks.utils.datetimes import parse_local_datetime

logger = logging.getLogger(__name__)


class TaskState:
    """Names of the renderable task states."""

    COMPLETED = "completed"
    OVERDUE = "overdue"
    IN_PROGRESS = "in_progress"
    PLANNED = "planned"


@dataclass(frozen=True)
class TaskFlags:
    """Derived flags for one task at one instant."""

    completed: bool
    overdue: bool
    in_progress: bool
    planned: bool

    @property
    def state(self) -> str:
        if self.completed:
            return TaskState.COMPLETED
        if self.overdue:
            return TaskState.OVERDUE
        if self.in_progress:
            return TaskState.IN_PROGRESS
        return TaskState.PLANNED


class TaskStateService:
    """Classifies tasks against the current instant and in-progress marker."""

    @staticmethod
    def classify(task: Any, now: datetime, in_progress_id: Optional[Any]) -> TaskFlags:
        completed = bool(task.completed)
        due = parse_local_datetime(task.due_at)
        if due is None:
            logger.debug("Task %s has unparseable due_at %r", task.id, task.due_at)
        overdue = not completed and due is not None and due < now
        in_progress = (
            not completed
            and in_progress_id is not None
            and str(task.id) == str(in_progress_id)
        )
        planned = not completed and not overdue and not in_progress
        return TaskFlags(
            completed=completed,
            overdue=overdue,
            in_progress=in_progress,
            planned=planned,
        )


task_state_service = TaskStateService()
