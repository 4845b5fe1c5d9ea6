from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import schoolms.core.models  # noqa: F401
from schoolms.client.api_client import SchoolApiClient
from schoolms.db.session import Base, get_db
from schoolms.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
API = "/api/v1"


@pytest.fixture()
async def engine():
    """One in-memory database per test; StaticPool keeps every session on the same connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def session_maker(engine) -> async_sessionmaker:
    maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield maker
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture()
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def api_client(session_maker) -> AsyncGenerator[SchoolApiClient, None]:
    """Portal-side client talking to the in-process app."""
    async with SchoolApiClient(base_url=f"http://test{API}", transport=ASGITransport(app=app)) as c:
        yield c


async def create_student(client: AsyncClient, code: str, name: str, class_name: str, section=None, **extra) -> dict:
    body = {"student_code": code, "name": name, "class_name": class_name, "section": section, **extra}
    response = await client.post(f"{API}/students", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]["student"]


async def create_teacher(client: AsyncClient, code: str, name: str) -> dict:
    response = await client.post(f"{API}/teachers", json={"teacher_code": code, "name": name})
    assert response.status_code == 201, response.text
    return response.json()["data"]["teacher"]


async def create_room(client: AsyncClient, code: str, slots=None, **data) -> dict:
    if slots is not None:
        data["time_slots"] = slots
    response = await client.post(f"{API}/master-data", json={"type": "room", "code": code, "name": f"Room {code}", "data": data})
    assert response.status_code == 201, response.text
    return response.json()["data"]["master_data"]


async def create_subject(client: AsyncClient, code: str, name: str, schedule=None) -> dict:
    body = {"code": code, "name": name, "category": "Core", "level": "Primary", "schedule": schedule or []}
    response = await client.post(f"{API}/subjects", json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]["subject"]


THREE_SLOTS = [
    {"name": "Slot 1", "start_time": "08:00", "end_time": "08:45"},
    {"name": "Slot 2", "start_time": "08:45", "end_time": "09:30"},
    {"name": "Slot 3", "start_time": "09:45", "end_time": "10:30"},
]
