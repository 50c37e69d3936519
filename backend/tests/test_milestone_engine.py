"""Status derivation, parent rollup and schedule snapshot."""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from projecteye.engine.milestones import (
    check_planned_window,
    derive_status,
    progress_snapshot,
    rollup_children,
)
from projecteye.exceptions import ConflictError
from projecteye.models.milestone import MilestoneStatus as S

TODAY = date(2024, 2, 15)
FUTURE_END = date(2024, 3, 31)
PAST_END = date(2024, 1, 31)


@pytest.mark.parametrize(
    "prior, kwargs, expected",
    [
        (S.PENDING, {}, S.PENDING),
        (S.PENDING, {"actual_end": date(2024, 2, 10)}, S.COMPLETED),
        (S.PENDING, {"actual_start": date(2024, 2, 1)}, S.IN_PROGRESS),
        (S.PENDING, {"progress_percentage": 100}, S.COMPLETED),
        (S.PENDING, {"progress_percentage": 40}, S.IN_PROGRESS),
        (S.IN_PROGRESS, {"progress_percentage": 0}, S.IN_PROGRESS),
        (S.PENDING, {"explicit_status": S.IN_PROGRESS}, S.IN_PROGRESS),
        # actual_end wins over everything else supplied
        (S.PENDING, {"actual_end": date(2024, 2, 10), "actual_start": date(2024, 2, 1),
                     "progress_percentage": 10}, S.COMPLETED),
        # actual_start wins over progress == 100
        (S.PENDING, {"actual_start": date(2024, 2, 1), "progress_percentage": 100}, S.IN_PROGRESS),
    ],
)
def test_derive_status_precedence(prior, kwargs, expected):
    assert derive_status(prior, TODAY, FUTURE_END, **kwargs) == expected


@pytest.mark.parametrize("prior", [S.PENDING, S.IN_PROGRESS])
def test_overdue_milestone_becomes_delayed(prior):
    assert derive_status(prior, TODAY, PAST_END) == S.DELAYED
    assert derive_status(prior, TODAY, PAST_END, progress_percentage=50) == S.DELAYED


def test_completed_is_never_demoted_to_delayed():
    assert derive_status(S.COMPLETED, TODAY, PAST_END) == S.COMPLETED
    assert derive_status(S.PENDING, TODAY, PAST_END, actual_end=TODAY) == S.COMPLETED


def test_planned_end_today_is_not_delayed():
    assert derive_status(S.PENDING, TODAY, TODAY) == S.PENDING


def _child(progress, status):
    return SimpleNamespace(progress_percentage=progress, status=status)


def test_rollup_averages_and_rounds_half_up():
    rollup = rollup_children([_child(100, S.COMPLETED), _child(25, S.PENDING)])
    assert rollup.progress_percentage == 63  # 62.5
    assert rollup.status == S.PENDING


def test_rollup_status_rules():
    assert rollup_children([_child(100, S.COMPLETED), _child(100, S.COMPLETED)]).status == S.COMPLETED
    assert rollup_children([_child(100, S.COMPLETED), _child(30, S.IN_PROGRESS)]).status == S.IN_PROGRESS
    # DELAYED children do not make the parent DELAYED
    assert rollup_children([_child(100, S.COMPLETED), _child(0, S.DELAYED)]).status == S.PENDING


def test_rollup_without_children():
    assert rollup_children([]) is None


def test_snapshot_of_delayed_milestone():
    snap = progress_snapshot(date(2024, 1, 1), date(2024, 1, 31), S.IN_PROGRESS, 40, TODAY)
    assert snap.total_days == 30
    assert snap.elapsed_days == 45
    assert snap.remaining_days == 0
    assert snap.time_progress_percentage == Decimal("100.00")
    assert snap.is_delayed is True
    assert snap.delay_days == 15


def test_snapshot_before_start():
    snap = progress_snapshot(date(2024, 3, 1), date(2024, 3, 11), S.PENDING, 0, TODAY)
    assert snap.elapsed_days == 0
    assert snap.remaining_days == 10
    assert snap.time_progress_percentage == Decimal("0.00")
    assert snap.is_delayed is False
    assert snap.delay_days == 0


def test_snapshot_midway():
    snap = progress_snapshot(date(2024, 2, 1), date(2024, 3, 2), S.IN_PROGRESS, 20, TODAY)
    assert snap.total_days == 30
    assert snap.elapsed_days == 14
    assert snap.time_progress_percentage == Decimal("46.67")


def test_completed_milestone_is_not_reported_late():
    snap = progress_snapshot(date(2024, 1, 1), date(2024, 1, 31), S.COMPLETED, 100, TODAY)
    assert snap.is_delayed is False
    assert snap.delay_days == 0


def test_planned_window_must_be_positive():
    check_planned_window(date(2024, 1, 1), date(2024, 1, 2))
    with pytest.raises(ConflictError):
        check_planned_window(date(2024, 1, 2), date(2024, 1, 2))
    with pytest.raises(ConflictError):
        check_planned_window(date(2024, 1, 3), date(2024, 1, 2))
