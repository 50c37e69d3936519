"""SQLAlchemy models."""
from projecteye.models.milestone import Milestone, MilestoneStatus
from projecteye.models.progress import ProgressUpdate
from projecteye.models.project import Project, ProjectMember, ProjectStatus, ProjectType
from projecteye.models.transaction import ApprovalStatus, PaymentMode, Transaction, TransactionType
from projecteye.models.user import User, UserRole

__all__ = [
    "ApprovalStatus",
    "Milestone",
    "MilestoneStatus",
    "PaymentMode",
    "ProgressUpdate",
    "Project",
    "ProjectMember",
    "ProjectStatus",
    "ProjectType",
    "Transaction",
    "TransactionType",
    "User",
    "UserRole",
]
