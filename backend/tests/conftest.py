"""Shared fixtures: in-memory database, users, a project and an API client."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import projecteye.models  # noqa: F401
from projecteye.auth.deps import get_today
from projecteye.config import get_settings
from projecteye.database import Base, get_db
from projecteye.main import app
from projecteye.models.project import ProjectType
from projecteye.models.user import User, UserRole
from projecteye.schemas.project import Address, ProjectCreate
from projecteye.services import project_service

TODAY = date(2024, 2, 15)


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
async def db(engine):
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session


async def make_user(db, email: str, role: UserRole = UserRole.OWNER) -> User:
    user = User(email=email, full_name=email.split("@")[0].title(), role=role)
    db.add(user)
    await db.flush()
    return user


@pytest.fixture()
async def owner(db) -> User:
    return await make_user(db, "owner@example.com", UserRole.OWNER)


@pytest.fixture()
async def worker(db) -> User:
    return await make_user(db, "worker@example.com", UserRole.WORKER)


def project_payload(**overrides) -> ProjectCreate:
    data = dict(
        name="Lakeview Villa",
        type=ProjectType.RESIDENTIAL,
        description="G+1 villa",
        address=Address(line1="4 Lake Road", city="Pune", state="Maharashtra", pincode="411001"),
        start_date=date(2024, 1, 15),
        estimated_end_date=date(2024, 12, 31),
        total_budget=Decimal("1000000.00"),
    )
    data.update(overrides)
    return ProjectCreate(**data)


@pytest.fixture()
async def project(db, owner):
    return await project_service.create_project(db, project_payload(), owner)


def issue_token(user_id: str, expires_in: timedelta = timedelta(minutes=15)) -> str:
    settings = get_settings()
    claims = {"sub": user_id, "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user.id)}"}


@pytest.fixture()
async def client(db):
    async def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
