"""Seed a demo owner, a residential project with template milestones, and print a dev token."""
import asyncio
import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from jose import jwt
from sqlalchemy import select

from projecteye.config import get_settings
from projecteye.database import async_session_maker, init_db
from projecteye.models.project import ProjectType
from projecteye.models.user import User, UserRole
from projecteye.schemas.project import Address, ProjectCreate
from projecteye.services import milestone_service, project_service

DEMO_EMAIL = "owner@projecteye.local"

settings = get_settings()


def dev_token(user_id: str) -> str:
    """Short-lived token for local use; production tokens come from the identity service."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    return jwt.encode({"sub": user_id, "exp": expire}, settings.secret_key, algorithm=settings.algorithm)


async def seed():
    await init_db()
    async with async_session_maker() as db:
        r = await db.execute(select(User).where(User.email == DEMO_EMAIL))
        user = r.scalar_one_or_none()
        if not user:
            user = User(email=DEMO_EMAIL, full_name="Demo Owner", role=UserRole.OWNER)
            db.add(user)
            await db.flush()

            start = date.today()
            project = await project_service.create_project(db, ProjectCreate(
                name="Demo Residence",
                type=ProjectType.RESIDENTIAL,
                description="Two storey residential build",
                address=Address(line1="12 Site Road", city="Pune", state="Maharashtra", pincode="411001"),
                start_date=start,
                estimated_end_date=start + timedelta(days=270),
                total_budget=Decimal("4500000.00"),
            ), user)
            await milestone_service.create_milestones_from_template(db, project.id)
        await db.commit()
    print(f"Seeded {DEMO_EMAIL}")
    print(f"Bearer token: {dev_token(user.id)}")


if __name__ == "__main__":
    asyncio.run(seed())
