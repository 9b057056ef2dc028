"""Filter engine reducing the task set to the visible subset."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, List, Optional, Sequence

from duetasks.config import settings
from duetasks.schemas.board import FilterState
from duetasks.utils.datetimes import (
    MINUTES_PER_DAY,
    end_of_day,
    get_date_part,
    get_time_part,
    parse_local_date_only,
    parse_local_datetime,
    parse_local_time_to_minutes,
    start_of_day,
)


class FilterService:
    """Focus, exact and between filtering. Input order is always preserved."""

    def __init__(self, focus_window_hours: int = settings.FOCUS_WINDOW_HOURS):
        self.focus_window = timedelta(hours=focus_window_hours)

    def filter_tasks(
        self,
        tasks: Sequence[Any],
        filter_state: Optional[FilterState],
        now: datetime,
    ) -> List[Any]:
        if filter_state is None:
            return list(tasks)
        if filter_state.focus:
            return self.filter_focus(tasks, now)
        if filter_state.mode == "exact":
            return self.filter_exact(tasks, filter_state.exact_date, filter_state.exact_time)
        return self.filter_between(
            tasks,
            from_date=filter_state.from_date,
            from_time=filter_state.from_time,
            to_date=filter_state.to_date,
            to_time=filter_state.to_time,
        )

    def filter_focus(self, tasks: Sequence[Any], now: datetime) -> List[Any]:
        """Tasks due within [now, now + focus window], both bounds inclusive."""
        end = now + self.focus_window
        result = []
        for task in tasks:
            due = parse_local_datetime(task.due_at)
            if due is not None and now <= due <= end:
                result.append(task)
        return result

    @staticmethod
    def filter_exact(
        tasks: Sequence[Any],
        exact_date: Optional[str],
        exact_time: Optional[str],
    ) -> List[Any]:
        if not exact_date and not exact_time:
            return list(tasks)
        if exact_date and not exact_time:
            return [t for t in tasks if get_date_part(t.due_at) == exact_date]
        if exact_time and not exact_date:
            return [t for t in tasks if get_time_part(t.due_at) == exact_time]

        target = parse_local_datetime(f"{exact_date}T{exact_time}")
        if target is None:
            return []
        return [t for t in tasks if parse_local_datetime(t.due_at) == target]

    @staticmethod
    def filter_between(
        tasks: Sequence[Any],
        *,
        from_date: Optional[str] = None,
        from_time: Optional[str] = None,
        to_date: Optional[str] = None,
        to_time: Optional[str] = None,
    ) -> List[Any]:
        has_any_date = bool(from_date or to_date)
        has_any_time = bool(from_time or to_time)
        if not has_any_date and not has_any_time:
            return list(tasks)

        lower = _date_bound(from_date, start_of_day)
        upper = _date_bound(to_date, end_of_day)

        from_minutes = _minutes_bound(from_time, 0)
        to_minutes = _minutes_bound(to_time, MINUTES_PER_DAY - 1)

        result = []
        for task in tasks:
            if has_any_date:
                due = parse_local_datetime(task.due_at)
                if due is None:
                    continue
                if lower is not None and due < lower:
                    continue
                if upper is not None and due > upper:
                    continue
            if has_any_time:
                time_part = get_time_part(task.due_at)
                if not time_part:
                    continue
                minutes = parse_local_time_to_minutes(time_part)
                if minutes is None:
                    continue
                if minutes < from_minutes or minutes > to_minutes:
                    continue
            result.append(task)
        return result


def _date_bound(value: Optional[str], align) -> Optional[datetime]:
    """Aligned bound for a date field; None (open) when absent or unparseable."""
    day = parse_local_date_only(value)
    return align(day) if day is not None else None


def _minutes_bound(value: Optional[str], default: int) -> int:
    minutes = parse_local_time_to_minutes(value)
    return default if minutes is None else minutes


filter_service = FilterService()
