"""Project analytics: dashboard, trends, burn rate, timeline and team activity."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from projecteye.exceptions import NotFoundError
from projecteye.models.milestone import MilestoneStatus
from projecteye.models.transaction import PaymentMode, TransactionType
from projecteye.schemas.milestone import MilestoneCreate, MilestoneUpdate
from projecteye.schemas.progress import ProgressUpdateCreate
from projecteye.schemas.project import MemberCreate
from projecteye.schemas.transaction import ApprovalRequest, TransactionCreate
from projecteye.services import (
    analytics_service,
    financial_service,
    milestone_service,
    progress_service,
    project_service,
)

from conftest import TODAY, make_user, project_payload


def phase(order, name, start, end):
    return MilestoneCreate(name=name, order=order, planned_start=start, planned_end=end)


async def finish(db, project_id, milestone, on):
    return await milestone_service.update_milestone(
        db, project_id, milestone.id,
        MilestoneUpdate(actual_end=on, progress_percentage=100), TODAY,
    )


async def approved_expense(db, project_id, user, amount, booked_on):
    txn = await financial_service.create_transaction(db, project_id, TransactionCreate(
        type=TransactionType.EXPENSE,
        category="MATERIAL",
        amount=Decimal(amount),
        payment_mode=PaymentMode.BANK_TRANSFER,
    ), user)
    await financial_service.approve_transaction(db, project_id, txn.id, ApprovalRequest(status="APPROVED"), user)
    txn.created_at = booked_on
    await db.flush()
    return txn


def report(on, **kw):
    return ProgressUpdateCreate(date=on, work_description=kw.pop("work_description", "Work"), **kw)


@pytest.fixture()
async def phases(db, project):
    """Site prep overdue, footings done on time, plinth done late, framing ahead."""
    site = await milestone_service.create_milestone(
        db, project.id, phase(1, "Site Preparation", date(2024, 1, 15), date(2024, 1, 31))
    )
    footings = await milestone_service.create_milestone(
        db, project.id, phase(2, "Footings", date(2024, 1, 20), date(2024, 2, 12))
    )
    plinth = await milestone_service.create_milestone(
        db, project.id, phase(3, "Plinth", date(2024, 1, 25), date(2024, 2, 5))
    )
    framing = await milestone_service.create_milestone(
        db, project.id, phase(4, "Framing", date(2024, 3, 1), date(2024, 3, 31))
    )
    await finish(db, project.id, footings, date(2024, 2, 10))
    await finish(db, project.id, plinth, date(2024, 2, 8))
    return site, footings, plinth, framing


async def test_dashboard_overview(db, owner, project, phases):
    await approved_expense(db, project.id, owner, "250000", datetime(2024, 2, 1, tzinfo=timezone.utc))
    await financial_service.create_transaction(db, project.id, TransactionCreate(
        type=TransactionType.EXPENSE, category="LABOR", amount=Decimal("5000"), payment_mode=PaymentMode.CASH,
    ), owner)
    await progress_service.create_progress_update(db, project.id, report(date(2024, 2, 14)), owner)

    dashboard = await analytics_service.get_dashboard(db, project.id, TODAY)

    assert dashboard.project.days_remaining == (date(2024, 12, 31) - TODAY).days
    assert dashboard.project.is_delayed is False
    assert dashboard.overall_progress == 50
    counts = dashboard.milestones
    assert (counts.total, counts.completed, counts.pending, counts.in_progress) == (4, 2, 2, 0)
    assert counts.delayed == 1
    assert dashboard.progress_updates == 1
    assert dashboard.team_members == 1
    assert dashboard.financials.expenses == Decimal("250000")
    assert dashboard.financials.utilization == Decimal("25.00")
    assert dashboard.financials.remaining == Decimal("750000")
    assert dashboard.financials.pending_approvals == 1


async def test_dashboard_for_overrun_project(db, owner):
    late = await project_service.create_project(
        db, project_payload(start_date=date(2024, 1, 1), estimated_end_date=date(2024, 2, 1)), owner
    )
    dashboard = await analytics_service.get_dashboard(db, late.id, TODAY)
    assert dashboard.project.days_remaining == 0
    assert dashboard.project.is_delayed is True
    assert dashboard.overall_progress == 0


async def test_progress_trends_window(db, owner, project):
    await progress_service.create_progress_update(db, project.id, report(date(2024, 1, 10)), owner)
    await progress_service.create_progress_update(db, project.id, report(
        date(2024, 2, 10), workers_count=12, issues="None today"
    ), owner)
    await progress_service.create_progress_update(db, project.id, report(
        date(2024, 2, 1), weather_conditions="rainy", issues="Cement delivery DELAYED"
    ), owner)
    await progress_service.create_progress_update(db, project.id, report(date(2024, 2, 20)), owner)

    points = await analytics_service.get_progress_trends(db, project.id, TODAY)
    assert [(p.date, p.workers_count, p.has_issues) for p in points] == [
        (date(2024, 2, 1), 0, True),
        (date(2024, 2, 10), 12, False),
    ]
    assert points[0].weather_conditions == "rainy"

    last_week = await analytics_service.get_progress_trends(db, project.id, TODAY, days=7)
    assert [p.date for p in last_week] == [date(2024, 2, 10)]


async def test_budget_burn_rate(db, owner, project):
    await approved_expense(db, project.id, owner, "100000", datetime(2024, 1, 20, tzinfo=timezone.utc))
    await approved_expense(db, project.id, owner, "50000", datetime(2024, 2, 3, tzinfo=timezone.utc))
    await financial_service.create_transaction(db, project.id, TransactionCreate(
        type=TransactionType.EXPENSE, category="LABOR", amount=Decimal("900"), payment_mode=PaymentMode.CASH,
    ), owner)

    burn = await analytics_service.get_budget_burn_rate(db, project.id)

    assert [(p.day, p.cumulative_spent, p.budget_remaining) for p in burn.points] == [
        (date(2024, 1, 20), Decimal("100000"), Decimal("900000")),
        (date(2024, 2, 3), Decimal("150000"), Decimal("850000")),
    ]
    assert burn.total_days == 351
    assert burn.daily_budget_target == Decimal("2849.00")


async def test_milestone_timeline_orders_by_planned_start(db, project, phases):
    timeline = await analytics_service.get_milestone_timeline(db, project.id, TODAY)
    assert [e.name for e in timeline] == ["Site Preparation", "Footings", "Plinth", "Framing"]

    site, footings = timeline[0], timeline[1]
    assert (site.status, site.is_delayed, site.delay_days) == (MilestoneStatus.PENDING, True, 15)
    assert (footings.status, footings.is_delayed, footings.actual_end) == (
        MilestoneStatus.COMPLETED, False, date(2024, 2, 10)
    )
    assert timeline[3].is_delayed is False


async def test_milestone_analytics(db, project, phases):
    analytics = await analytics_service.get_milestone_analytics(db, project.id)
    assert analytics.average_progress == 50
    assert analytics.on_time_completions == 1
    assert analytics.late_completions == 1
    assert [(t.month, t.completed, t.total, t.completion_rate) for t in analytics.completion_trend] == [
        ("2024-01", 0, 1, 0),
        ("2024-02", 2, 2, 100),
        ("2024-03", 0, 1, 0),
    ]


async def test_team_analytics(db, owner, project):
    engineer = await make_user(db, "engineer@example.com")
    await project_service.add_member(db, project.id, MemberCreate(user_id=engineer.id, role="SITE_ENGINEER"))
    await progress_service.create_progress_update(db, project.id, report(date(2024, 2, 1)), owner)
    await progress_service.create_progress_update(db, project.id, report(date(2024, 2, 2)), owner)
    await progress_service.create_progress_update(db, project.id, report(date(2024, 2, 3)), engineer)

    team = await analytics_service.get_team_analytics(db, project.id, TODAY)

    by_user = {m.user_id: m for m in team.members}
    assert by_user[owner.id].progress_updates == 2
    assert by_user[engineer.id].progress_updates == 1
    assert by_user[engineer.id].role == "SITE_ENGINEER"
    assert {(r.role, r.count) for r in team.role_distribution} == {("OWNER", 1), ("SITE_ENGINEER", 1)}
    assert team.total_updates == 3
    assert team.average_per_member == 2


async def test_unknown_project(db):
    with pytest.raises(NotFoundError):
        await analytics_service.get_budget_burn_rate(db, "missing")
