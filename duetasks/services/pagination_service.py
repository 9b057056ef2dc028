"""Sort, paginate and date-group the filtered task list."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Sequence

from duetasks.utils.datetimes import get_date_part, parse_local_datetime


@dataclass
class TaskGroup:
    date: str
    items: List[Any]


@dataclass
class TaskPage:
    page: int
    page_size: int
    total_items: int
    total_pages: int
    items: List[Any]
    groups: List[TaskGroup]


def _due_sort_key(task: Any):
    due = parse_local_datetime(task.due_at)
    # unparseable values sort after every real instant
    return (due is None, due or 0)


class PaginationService:
    """Pipeline: stable sort by due, clamp page, slice, group adjacent dates."""

    @staticmethod
    def sort_by_due(tasks: Sequence[Any]) -> List[Any]:
        # sorted() is stable: equal due instants keep their source order
        return sorted(tasks, key=_due_sort_key)

    @staticmethod
    def total_pages(count: int, page_size: int) -> int:
        return max(1, math.ceil(count / page_size))

    def clamp_page(self, page: int, count: int, page_size: int) -> int:
        return min(max(1, page), self.total_pages(count, page_size))

    @staticmethod
    def page_slice(tasks: Sequence[Any], page: int, page_size: int) -> List[Any]:
        start = (page - 1) * page_size
        return list(tasks[start:start + page_size])

    @staticmethod
    def group_by_date(tasks: Sequence[Any]) -> List[TaskGroup]:
        """Start a new group whenever the date part differs from the previous item."""
        groups: List[TaskGroup] = []
        for task in tasks:
            day = get_date_part(task.due_at)
            if not groups or groups[-1].date != day:
                groups.append(TaskGroup(date=day, items=[task]))
            else:
                groups[-1].items.append(task)
        return groups

    def paginate(self, tasks: Sequence[Any], page: int, page_size: int) -> TaskPage:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        ordered = self.sort_by_due(tasks)
        count = len(ordered)
        current = self.clamp_page(page, count, page_size)
        items = self.page_slice(ordered, current, page_size)
        return TaskPage(
            page=current,
            page_size=page_size,
            total_items=count,
            total_pages=self.total_pages(count, page_size),
            items=items,
            groups=self.group_by_date(items),
        )


pagination_service = PaginationService()
