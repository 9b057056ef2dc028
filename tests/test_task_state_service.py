"""Tests for task flag classification."""
from datetime import datetime

from duetasks.services.task_state_service import TaskState, task_state_service

NOW = datetime(2024, 1, 1, 12, 0)


def test_overdue_when_due_before_now(task_factory):
    task = task_factory(due_at="2024-01-01T11:59")
    flags = task_state_service.classify(task, NOW, None)
    assert flags.overdue
    assert not flags.planned
    assert flags.state == TaskState.OVERDUE


def test_due_exactly_now_is_planned(task_factory):
    flags = task_state_service.classify(task_factory(due_at="2024-01-01T12:00"), NOW, None)
    assert not flags.overdue
    assert flags.planned


def test_completed_task_has_no_other_flags(task_factory):
    task = task_factory(due_at="2023-12-31T09:00", completed=True)
    flags = task_state_service.classify(task, NOW, task.id)
    assert flags.completed
    assert not flags.overdue
    assert not flags.in_progress
    assert not flags.planned
    assert flags.state == TaskState.COMPLETED


def test_in_progress_matches_marker_by_id(task_factory):
    task = task_factory(due_at="2024-01-01T15:00")
    flags = task_state_service.classify(task, NOW, str(task.id))
    assert flags.in_progress
    assert not flags.planned
    assert flags.state == TaskState.IN_PROGRESS


def test_overdue_takes_precedence_over_in_progress(task_factory):
    task = task_factory(due_at="2024-01-01T10:00")
    flags = task_state_service.classify(task, NOW, task.id)
    assert flags.overdue and flags.in_progress
    assert flags.state == TaskState.OVERDUE


def test_unparseable_due_is_never_overdue(task_factory):
    task = task_factory(due_at="not-a-date")
    flags = task_state_service.classify(task, NOW, None)
    assert not flags.overdue
    assert flags.planned
    assert task_state_service.classify(task, NOW, task.id).in_progress
