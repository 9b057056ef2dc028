"""Tests for the reminder selector."""
from datetime import datetime

from duetasks.services.reminder_service import ReminderTracker, reminder_service

NOW = datetime(2024, 1, 1, 8, 0)


def test_reminder_within_window(task_factory):
    task = task_factory(due_at="2024-01-01T08:10")
    reminder = reminder_service.select_reminder([task], NOW)
    assert reminder is not None
    assert reminder.task is task
    assert reminder.minutes == 10


def test_no_reminder_outside_window(task_factory):
    assert reminder_service.select_reminder([task_factory(due_at="2024-01-01T08:20")], NOW) is None


def test_window_edges(task_factory):
    assert reminder_service.select_reminder([task_factory(due_at="2024-01-01T08:15")], NOW).minutes == 15
    assert reminder_service.select_reminder([task_factory(due_at="2024-01-01T08:00")], NOW).minutes == 0


def test_next_upcoming_skips_completed_past_and_unparseable(task_factory):
    tasks = [
        task_factory(title="past", due_at="2024-01-01T07:00"),
        task_factory(title="done", due_at="2024-01-01T08:05", completed=True),
        task_factory(title="broken", due_at="bad"),
        task_factory(title="first", due_at="2024-01-01T09:00"),
        task_factory(title="tie", due_at="2024-01-01T09:00"),
    ]
    assert reminder_service.next_upcoming(tasks, NOW).task.title == "first"


def test_dismissed_task_is_not_reminded(task_factory):
    task = task_factory(due_at="2024-01-01T08:10")
    assert reminder_service.select_reminder([task], NOW, dismissed_task_id=task.id) is None


def test_tracker_keeps_dismissal_while_same_task_is_nearest(task_factory):
    task = task_factory(due_at="2024-01-01T08:10")
    tracker = ReminderTracker()
    tracker.dismiss(task.id)
    assert reminder_service.tick([task], NOW, tracker) is None
    assert tracker.dismissed_task_id == str(task.id)


def test_tracker_resets_when_another_task_becomes_nearest(task_factory):
    first = task_factory(due_at="2024-01-01T08:10")
    second = task_factory(due_at="2024-01-01T08:05")
    tracker = ReminderTracker()
    tracker.dismiss(first.id)
    reminder = reminder_service.tick([first, second], NOW, tracker)
    assert tracker.dismissed_task_id is None
    assert reminder.task is second


def test_tracker_resets_when_nothing_is_upcoming():
    tracker = ReminderTracker()
    tracker.dismiss("abc")
    reminder_service.tick([], NOW, tracker)
    assert tracker.dismissed_task_id is None
