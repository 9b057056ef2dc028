"""Workload analytics: daily load scoring and the upcoming-days summary."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Sequence

from duetasks.utils.datetimes import (
    add_days,
    get_date_part,
    local_date_key,
    parse_local_datetime,
    start_of_day,
)

WINDOW_LABELS = (
    "00:00–04:00",
    "04:00–08:00",
    "08:00–12:00",
    "12:00–16:00",
    "16:00–20:00",
    "20:00–24:00",
)
WINDOW_HOURS = 4
LIGHT_MAX_SCORE = 5
BALANCED_MAX_SCORE = 10
SUMMARY_LOOKAHEAD_DAYS = 7


class LoadLevel:
    LIGHT = "light"
    BALANCED = "balanced"
    HEAVY = "heavy"


@dataclass
class DailyLoad:
    """Load classification for a single calendar day."""

    load: str
    total: int
    peak: int
    spread: int
    busiest_window: str
    score: float
    buckets: List[int]
    labels: List[str] = field(default_factory=lambda: list(WINDOW_LABELS))


@dataclass
class WindowCount:
    label: str
    count: int


@dataclass
class DaySummary:
    """Today's progress plus the distribution of tomorrow and the coming week."""

    today_completed: int
    today_pending: int
    tomorrow_total: int
    tomorrow_buckets: List[WindowCount]
    upcoming_total: int
    upcoming_buckets: List[WindowCount]


def bucket_counts(tasks: Iterable[Any]) -> List[int]:
    """Count tasks per four-hour window of their local due hour."""
    buckets = [0] * len(WINDOW_LABELS)
    for task in tasks:
        due = parse_local_datetime(task.due_at)
        if due is None:
            continue
        buckets[due.hour // WINDOW_HOURS] += 1
    return buckets


def classify_score(score: float) -> str:
    if score <= LIGHT_MAX_SCORE:
        return LoadLevel.LIGHT
    if score <= BALANCED_MAX_SCORE:
        return LoadLevel.BALANCED
    return LoadLevel.HEAVY


def load_score(total: int, peak: int, spread: int) -> float:
    return total + peak * 1.5 + max(0, spread - 1) * 0.5


class WorkloadService:
    """Daily load and summary computations over an in-memory task list."""

    @staticmethod
    def get_daily_load(tasks_for_day: Sequence[Any]) -> DailyLoad:
        buckets = bucket_counts(tasks_for_day)
        total = len(tasks_for_day)
        peak = max(buckets)
        spread = sum(1 for count in buckets if count > 0)
        # index() returns the earliest window on ties
        busiest_window = WINDOW_LABELS[buckets.index(peak)]
        score = load_score(total, peak, spread)
        return DailyLoad(
            load=classify_score(score),
            total=total,
            peak=peak,
            spread=spread,
            busiest_window=busiest_window,
            score=score,
            buckets=buckets,
        )

    @staticmethod
    def load_day_key(filter_state: Any, now: datetime) -> str:
        """Pick the calendar day the load badge describes for the current filter."""
        if filter_state is not None:
            if filter_state.mode == "exact" and filter_state.exact_date:
                return filter_state.exact_date
            from_date = filter_state.from_date
            to_date = filter_state.to_date
            if from_date and not to_date:
                return from_date
            if from_date and to_date and from_date == to_date:
                return from_date
            if not from_date and to_date:
                return to_date
        return local_date_key(now)

    def get_daily_load_for(self, tasks: Sequence[Any], day_key: str) -> DailyLoad:
        return self.get_daily_load([t for t in tasks if get_date_part(t.due_at) == day_key])

    @staticmethod
    def get_day_summary(tasks: Sequence[Any], now: datetime) -> DaySummary:
        today_key = local_date_key(now)
        tomorrow = add_days(now, 1)
        tomorrow_key = local_date_key(tomorrow)

        todays = [t for t in tasks if t.due_at.startswith(today_key)]
        today_completed = sum(1 for t in todays if t.completed)

        tomorrow_tasks = [t for t in tasks if t.due_at.startswith(tomorrow_key)]

        range_start = start_of_day(tomorrow)
        range_end = add_days(range_start, SUMMARY_LOOKAHEAD_DAYS)
        upcoming = []
        for task in tasks:
            due = parse_local_datetime(task.due_at)
            if due is not None and range_start <= due < range_end:
                upcoming.append(task)

        return DaySummary(
            today_completed=today_completed,
            today_pending=len(todays) - today_completed,
            tomorrow_total=len(tomorrow_tasks),
            tomorrow_buckets=_labelled(bucket_counts(tomorrow_tasks)),
            upcoming_total=len(upcoming),
            upcoming_buckets=_labelled(bucket_counts(upcoming)),
        )


def _labelled(buckets: List[int]) -> List[WindowCount]:
    return [WindowCount(label=label, count=count) for label, count in zip(WINDOW_LABELS, buckets)]


workload_service = WorkloadService()
