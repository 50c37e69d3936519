"""Milestone status derivation, parent rollup and schedule snapshot.

Everything here is a pure function of its arguments. ``today`` is always
passed in by the caller so results are reproducible for a fixed date.
"""
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from projecteye.exceptions import ConflictError
from projecteye.models.milestone import MilestoneStatus


class _HasProgress(Protocol):
    progress_percentage: int
    status: MilestoneStatus


@dataclass(frozen=True)
class Rollup:
    progress_percentage: int
    status: MilestoneStatus


@dataclass(frozen=True)
class ProgressSnapshot:
    total_days: int
    elapsed_days: int
    remaining_days: int
    time_progress_percentage: Decimal
    is_delayed: bool
    delay_days: int
    progress_percentage: int


def derive_status(
    prior_status: MilestoneStatus,
    today: date,
    planned_end: date,
    actual_start: date | None = None,
    actual_end: date | None = None,
    progress_percentage: int | None = None,
    explicit_status: MilestoneStatus | None = None,
) -> MilestoneStatus:
    """Status after an update.

    ``actual_start``, ``actual_end`` and ``progress_percentage`` are the values
    supplied by the update itself, not the stored ones. Precedence:
    actual_end > actual_start > progress == 100 > progress > 0 > baseline,
    then anything short of COMPLETED past its planned end becomes DELAYED.

    ``planned_end`` is the value after the update, so moving the end date out
    clears a delay in the same request. Earlier versions of the tracker
    compared against the stored end date instead.
    """
    status = explicit_status or prior_status

    if actual_end is not None:
        status = MilestoneStatus.COMPLETED
    elif actual_start is not None:
        status = MilestoneStatus.IN_PROGRESS
    elif progress_percentage == 100:
        status = MilestoneStatus.COMPLETED
    elif progress_percentage is not None and progress_percentage > 0:
        status = MilestoneStatus.IN_PROGRESS

    if status != MilestoneStatus.COMPLETED and planned_end < today:
        status = MilestoneStatus.DELAYED
    return MilestoneStatus(status)


def rollup_children(children: Iterable[_HasProgress]) -> Rollup | None:
    """Parent progress and status from its direct children. None when childless.

    No DELAYED override is applied here; a parent only becomes DELAYED through
    a direct update.
    """
    children = list(children)
    if not children:
        return None
    total = sum(c.progress_percentage for c in children)
    average = (Decimal(total) / Decimal(len(children))).quantize(Decimal(1), rounding=ROUND_HALF_UP)

    if all(c.status == MilestoneStatus.COMPLETED for c in children):
        status = MilestoneStatus.COMPLETED
    elif any(c.status == MilestoneStatus.IN_PROGRESS for c in children):
        status = MilestoneStatus.IN_PROGRESS
    else:
        status = MilestoneStatus.PENDING
    return Rollup(progress_percentage=int(average), status=status)


def progress_snapshot(
    planned_start: date,
    planned_end: date,
    status: MilestoneStatus,
    progress_percentage: int,
    today: date,
) -> ProgressSnapshot:
    """Time-based view of a milestone's schedule as of ``today``."""
    total_days = (planned_end - planned_start).days
    elapsed_days = 0 if today < planned_start else (today - planned_start).days
    remaining_days = max(0, total_days - elapsed_days)

    if total_days > 0:
        time_progress = Decimal(elapsed_days) / Decimal(total_days) * Decimal(100)
    else:
        time_progress = Decimal(100)
    time_progress = min(Decimal(100), time_progress).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    is_delayed = today > planned_end and status != MilestoneStatus.COMPLETED
    delay_days = (today - planned_end).days if is_delayed else 0

    return ProgressSnapshot(
        total_days=total_days,
        elapsed_days=elapsed_days,
        remaining_days=remaining_days,
        time_progress_percentage=time_progress,
        is_delayed=is_delayed,
        delay_days=delay_days,
        progress_percentage=progress_percentage,
    )


def check_planned_window(planned_start: date, planned_end: date) -> None:
    if planned_end <= planned_start:
        raise ConflictError("Planned end date must be after start date")
