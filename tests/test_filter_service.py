"""Tests for the filter engine."""
from datetime import datetime

import pytest

from duetasks.schemas.board import FilterState
from duetasks.services.filter_service import filter_service

NOW = datetime(2024, 1, 1, 8, 0)


@pytest.fixture
def tasks(task_factory):
    return [
        task_factory(title="early", due_at="2024-01-01T07:59"),
        task_factory(title="now", due_at="2024-01-01T08:00"),
        task_factory(title="edge", due_at="2024-01-01T12:00"),
        task_factory(title="late", due_at="2024-01-01T12:01"),
        task_factory(title="tomorrow", due_at="2024-01-02T09:00"),
        task_factory(title="broken", due_at="2024-01-0xT09:00"),
    ]


def titles(items):
    return [t.title for t in items]


def test_no_filter_returns_everything_in_order(tasks):
    assert titles(filter_service.filter_tasks(tasks, FilterState(), NOW)) == titles(tasks)


def test_focus_window_is_inclusive(tasks):
    result = filter_service.filter_tasks(tasks, FilterState(focus=True), NOW)
    assert titles(result) == ["now", "edge"]


def test_focus_overrides_mode(tasks):
    state = FilterState(focus=True, mode="exact", exact_date="2024-01-02")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["now", "edge"]


def test_exact_date_only(tasks):
    state = FilterState(mode="exact", exact_date="2024-01-02")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["tomorrow"]


def test_exact_time_only_compares_strings(tasks):
    state = FilterState(mode="exact", exact_time="09:00")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["tomorrow", "broken"]


def test_exact_date_and_time(tasks):
    state = FilterState(mode="exact", exact_date="2024-01-01", exact_time="12:00")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["edge"]


def test_exact_without_values_keeps_all(tasks):
    state = FilterState(mode="exact", exact_date="  ", exact_time="")
    assert len(filter_service.filter_tasks(tasks, state, NOW)) == len(tasks)


def test_between_single_day_covers_whole_day(tasks):
    state = FilterState(from_date="2024-01-01", to_date="2024-01-01")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["early", "now", "edge", "late"]


def test_between_open_upper_bound(tasks):
    state = FilterState(from_date="2024-01-02")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["tomorrow"]


def test_between_time_of_day_window(tasks):
    state = FilterState(from_time="08:00", to_time="12:00")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["now", "edge", "tomorrow", "broken"]


def test_between_date_and_time_must_both_pass(tasks):
    state = FilterState(from_date="2024-01-01", to_date="2024-01-02", from_time="09:00", to_time="12:00")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["edge", "tomorrow"]


def test_task_without_time_part_fails_time_bound(task_factory):
    items = [task_factory(title="dateonly", due_at="2024-01-01")]
    assert filter_service.filter_between(items, from_time="00:00") == []


def test_unparseable_bounds_are_open(tasks):
    state = FilterState(from_date="garbage", to_date="2024-01-01")
    assert titles(filter_service.filter_tasks(tasks, state, NOW)) == ["early", "now", "edge", "late"]


def test_filtering_does_not_mutate_input(tasks):
    snapshot = list(tasks)
    filter_service.filter_tasks(tasks, FilterState(focus=True), NOW)
    assert tasks == snapshot
