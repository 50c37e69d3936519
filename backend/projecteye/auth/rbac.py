"""Project-level access control.

Permissions live on the membership record as boolean flags; the project
owner holds all of them.
"""
from projecteye.models.project import ProjectMember
from projecteye.models.user import User, UserRole


def _has(member: ProjectMember, flag: str) -> bool:
    return bool((member.permissions or {}).get(flag, False))


def can_create_project(user: User) -> bool:
    return user.role == UserRole.OWNER


def can_view_financials(member: ProjectMember) -> bool:
    return _has(member, "can_view_financials")


def can_approve_expenses(member: ProjectMember) -> bool:
    return _has(member, "can_approve_expenses")


def can_edit_project(member: ProjectMember) -> bool:
    return _has(member, "can_edit_project")


def can_add_members(member: ProjectMember) -> bool:
    return _has(member, "can_add_members")


def can_upload_documents(member: ProjectMember) -> bool:
    return _has(member, "can_upload_documents")


def can_create_milestones(member: ProjectMember) -> bool:
    return _has(member, "can_create_milestones")
