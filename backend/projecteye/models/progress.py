"""Daily progress update model."""
import datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from projecteye.database import Base
from projecteye.models.user import _utcnow, _uuid


class ProgressUpdate(Base):
    """Site report for one calendar day. At most one per project per date."""

    __tablename__ = "progress_updates"
    __table_args__ = (UniqueConstraint("project_id", "date", name="uq_progress_project_date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reported_by: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    work_description: Mapped[str] = mapped_column(Text, nullable=False)
    workers_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weather_conditions: Mapped[str | None] = mapped_column(String(20), nullable=True)
    issues: Mapped[str | None] = mapped_column(Text, nullable=True)
    milestone_id: Mapped[str | None] = mapped_column(
        ForeignKey("milestones.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), default=_utcnow
    )
