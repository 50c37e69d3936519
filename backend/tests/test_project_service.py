"""Projects, membership and dashboard stats."""
from datetime import date
from decimal import Decimal

import pytest

from projecteye.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from projecteye.models.project import OWNER_PERMISSIONS, ProjectStatus
from projecteye.models.milestone import MilestoneStatus
from projecteye.schemas.milestone import MilestoneCreate, MilestoneUpdate
from projecteye.schemas.project import MemberCreate, MemberPermissions, ProjectUpdate
from projecteye.schemas.transaction import ApprovalRequest, TransactionCreate
from projecteye.services import financial_service, milestone_service, project_service

from conftest import TODAY, project_payload


async def test_creator_becomes_owner_member(db, owner, project):
    assert project.status == ProjectStatus.PLANNING
    assert project.address["city"] == "Pune"
    member = await project_service.get_member(db, project.id, owner.id)
    assert member.role == "OWNER"
    assert member.permissions == OWNER_PERMISSIONS


async def test_only_owners_create_projects(db, worker):
    with pytest.raises(PermissionDeniedError):
        await project_service.create_project(db, project_payload(), worker)


async def test_update_project(db, project):
    updated = await project_service.update_project(
        db, project.id, ProjectUpdate(status=ProjectStatus.ACTIVE, total_budget=Decimal("1200000"))
    )
    assert updated.status == ProjectStatus.ACTIVE
    assert updated.total_budget == Decimal("1200000")
    assert updated.name == "Lakeview Villa"


async def test_list_is_scoped_to_membership(db, owner, worker, project):
    await project_service.create_project(db, project_payload(name="Harbour Mall"), owner)

    items, total = await project_service.list_projects(db, owner, page=1, limit=10)
    assert total == 2
    items, total = await project_service.list_projects(db, owner, page=1, limit=10, search="harbour")
    assert [p.name for p in items] == ["Harbour Mall"]

    items, total = await project_service.list_projects(db, worker, page=1, limit=10)
    assert (items, total) == ([], 0)


async def test_member_lifecycle(db, owner, worker, project):
    member = await project_service.add_member(db, project.id, MemberCreate(
        user_id=worker.id,
        role="SITE_ENGINEER",
        permissions=MemberPermissions(can_upload_documents=True),
    ))
    assert member.user.email == "worker@example.com"
    assert member.permissions["can_upload_documents"] is True
    assert member.permissions["can_view_financials"] is False

    with pytest.raises(ConflictError):
        await project_service.add_member(db, project.id, MemberCreate(user_id=worker.id, role="WORKER"))

    members = await project_service.list_members(db, project.id)
    assert {m.user_id for m in members} == {owner.id, worker.id}

    await project_service.remove_member(db, project.id, worker.id)
    with pytest.raises(NotFoundError):
        await project_service.remove_member(db, project.id, worker.id)


async def test_owner_cannot_be_removed(db, owner, project):
    with pytest.raises(ConflictError):
        await project_service.remove_member(db, project.id, owner.id)


async def test_add_unknown_user(db, project):
    with pytest.raises(NotFoundError):
        await project_service.add_member(db, project.id, MemberCreate(user_id="ghost", role="WORKER"))


async def test_stats(db, owner, project):
    first = await milestone_service.create_milestone(db, project.id, MilestoneCreate(
        name="Site Preparation", order=1, planned_start=date(2024, 1, 15), planned_end=date(2024, 1, 22),
    ))
    await milestone_service.create_milestone(db, project.id, MilestoneCreate(
        name="Foundation", order=2, planned_start=date(2024, 1, 23), planned_end=date(2024, 4, 13),
    ))
    await milestone_service.update_milestone(
        db, project.id, first.id, MilestoneUpdate(progress_percentage=100), TODAY
    )
    txn = await financial_service.create_transaction(db, project.id, TransactionCreate(
        type="EXPENSE", category="MATERIAL", amount=Decimal("100000"), payment_mode="CASH",
    ), owner)
    await financial_service.approve_transaction(db, project.id, txn.id, ApprovalRequest(status="APPROVED"), owner)

    stats = await project_service.get_project_stats(db, project.id, TODAY)
    assert stats.total_milestones == 2
    assert stats.completed_milestones == 1
    assert stats.average_milestone_progress == 50
    assert stats.members == 1
    assert stats.total_expenses == Decimal("100000")
    assert stats.budget_utilization == Decimal("10.00")
    assert stats.elapsed_days == 31
    assert first.status == MilestoneStatus.COMPLETED
