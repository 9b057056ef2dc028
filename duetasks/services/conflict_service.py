"""Due-time conflict detection on task creation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Optional, Sequence

from duetasks.config import settings
from duetasks.schemas.board import FilterState
from duetasks.utils.datetimes import get_date_part, get_time_part

logger = logging.getLogger(__name__)


@dataclass
class Conflict:
    """A transient signal that a new task collides with existing ones."""

    due_at: str
    count: int
    expires_at: datetime


class ConflictTracker:
    """Holds at most one active conflict; a new signal restarts the expiry."""

    def __init__(self, ttl_seconds: int = settings.CONFLICT_TTL_SECONDS):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._current: Optional[Conflict] = None

    def signal(self, due_at: str, count: int, now: datetime) -> Conflict:
        self._current = Conflict(due_at=due_at, count=count, expires_at=now + self.ttl)
        return self._current

    def active(self, now: datetime) -> Optional[Conflict]:
        if self._current is not None and now >= self._current.expires_at:
            self._current = None
        return self._current

    def clear(self) -> None:
        self._current = None


class ConflictService:
    """Advisory checks; creation always proceeds regardless of the outcome."""

    @staticmethod
    def find_conflicts(tasks: Sequence[Any], due_at: str) -> List[Any]:
        return [t for t in tasks if t.due_at == due_at]

    @staticmethod
    def exact_filter_for(due_at: str) -> FilterState:
        """Exact-mode filter pinned to the colliding slot."""
        return FilterState(
            mode="exact",
            exact_date=get_date_part(due_at),
            exact_time=get_time_part(due_at),
        )

    def check(
        self,
        tasks: Sequence[Any],
        due_at: str,
        now: datetime,
        tracker: ConflictTracker,
    ) -> Optional[Conflict]:
        conflicts = self.find_conflicts(tasks, due_at)
        if not conflicts:
            return None
        logger.warning("Due time %s already used by %d task(s)", due_at, len(conflicts))
        return tracker.signal(due_at, len(conflicts), now)


conflict_service = ConflictService()
