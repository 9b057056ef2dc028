"""Tests for board view composition."""
from datetime import datetime, timedelta

from duetasks.schemas.board import FilterState, PageState
from duetasks.services.board_service import BoardSessions, board_service
from duetasks.services.conflict_service import ConflictTracker

NOW = datetime(2024, 1, 1, 8, 0)


def test_board_composes_all_views(task_factory):
    overdue = task_factory(title="overdue", due_at="2024-01-01T07:00")
    soon = task_factory(title="soon", due_at="2024-01-01T08:10")
    done = task_factory(title="done", due_at="2024-01-01T09:00", completed=True)
    later = task_factory(title="later", due_at="2024-01-03T09:00")

    board = board_service.build_board(
        [later, done, soon, overdue],
        now=NOW,
        in_progress_id=soon.id,
        page_state=PageState(page=1, page_size=5),
    )

    assert board.now == NOW
    assert board.filtered_count == 4
    assert board.completed_count == 1
    assert board.in_progress_task_id == str(soon.id)
    assert [g.date for g in board.page.groups] == ["2024-01-01", "2024-01-03"]
    first_day = board.page.groups[0].items
    assert [item.task.title for item in first_day] == ["overdue", "soon", "done"]
    assert [item.flags.state for item in first_day] == ["overdue", "in_progress", "completed"]
    assert board.daily_load.day == "2024-01-01"
    assert board.daily_load.total == 3
    assert board.reminder is not None
    assert board.reminder.minutes == 10
    assert "10" in board.reminder.message
    assert board.conflict is None


def test_completed_count_uses_filtered_set(task_factory):
    tasks = [
        task_factory(due_at="2024-01-01T09:00", completed=True),
        task_factory(due_at="2024-01-02T09:00", completed=True),
    ]
    board = board_service.build_board(tasks, now=NOW, filter_state=FilterState(mode="exact", exact_date="2024-01-02"))
    assert board.filtered_count == 1
    assert board.completed_count == 1
    assert board.daily_load.day == "2024-01-02"


def test_dismissed_reminder_is_hidden(task_factory):
    soon = task_factory(due_at="2024-01-01T08:10")
    board = board_service.build_board([soon], now=NOW, dismissed_reminder_id=soon.id)
    assert board.reminder is None


def test_active_conflict_is_localized(task_factory):
    tracker = ConflictTracker()
    conflict = tracker.signal("2024-01-01T09:00", 2, NOW)
    board = board_service.build_board([task_factory()], now=NOW, conflict=conflict, locale="en")
    assert board.conflict.count == 2
    assert board.conflict.expires_at == NOW + timedelta(seconds=8)
    assert board.conflict.message == "You already have 2 task(s) scheduled at Jan 01, 2024, 09:00."


def test_page_is_clamped(task_factory):
    tasks = [task_factory(due_at=f"2024-01-01T{h:02d}:00") for h in range(7)]
    board = board_service.build_board(tasks, now=NOW, page_state=PageState(page=9, page_size=5))
    assert board.page.page == 2
    assert board.page.total_pages == 2


def test_sessions_are_per_user():
    sessions = BoardSessions()
    assert sessions.get("a") is sessions.get("a")
    assert sessions.get("a") is not sessions.get("b")
    sessions.reset()
    assert sessions.get("a").conflicts.active(NOW) is None


def test_prune_drops_idle_sessions_only():
    sessions = BoardSessions()
    sessions.get("idle")
    sessions.get("conflicted").conflicts.signal("2024-01-01T09:00", 1, NOW)
    sessions.get("dismissed").reminders.dismiss("task-1")

    assert sessions.prune(NOW) == 1
    assert len(sessions) == 2

    assert sessions.prune(NOW + timedelta(seconds=8)) == 1
    assert len(sessions) == 1
    assert sessions.get("dismissed").reminders.dismissed_task_id == "task-1"
