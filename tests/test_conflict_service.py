"""Tests for due-time conflict detection and expiry."""
from datetime import datetime, timedelta

from duetasks.services.conflict_service import ConflictTracker, conflict_service

NOW = datetime(2024, 1, 1, 8, 0)


def test_same_due_time_is_a_conflict(task_factory):
    tasks = [task_factory(due_at="2024-01-01T09:00"), task_factory(due_at="2024-01-01T10:00")]
    conflicts = conflict_service.find_conflicts(tasks, "2024-01-01T09:00")
    assert len(conflicts) == 1
    assert conflict_service.find_conflicts(tasks, "2024-01-01T11:00") == []


def test_check_signals_tracker(task_factory):
    tracker = ConflictTracker(ttl_seconds=8)
    tasks = [task_factory(due_at="2024-01-01T09:00")]
    conflict = conflict_service.check(tasks, "2024-01-01T09:00", NOW, tracker)
    assert conflict is not None
    assert conflict.count == 1
    assert tracker.active(NOW) == conflict
    assert tracker.active(NOW + timedelta(seconds=7)) == conflict
    assert tracker.active(NOW + timedelta(seconds=8)) is None


def test_check_without_conflict_leaves_tracker_alone(task_factory):
    tracker = ConflictTracker()
    assert conflict_service.check([task_factory(due_at="2024-01-01T09:00")], "2024-01-01T10:00", NOW, tracker) is None
    assert tracker.active(NOW) is None


def test_new_signal_restarts_expiry():
    tracker = ConflictTracker(ttl_seconds=8)
    tracker.signal("2024-01-01T09:00", 1, NOW)
    later = NOW + timedelta(seconds=5)
    tracker.signal("2024-01-01T10:00", 2, later)
    active = tracker.active(NOW + timedelta(seconds=10))
    assert active is not None
    assert active.due_at == "2024-01-01T10:00"
    assert active.count == 2
    tracker.clear()
    assert tracker.active(later) is None


def test_exact_filter_for_slot():
    state = conflict_service.exact_filter_for("2024-01-01T09:00")
    assert state.mode == "exact"
    assert state.exact_date == "2024-01-01"
    assert state.exact_time == "09:00"
    assert not state.focus
