"""
Standup Hub - Test Configuration and Fixtures
"""
import os
import asyncio
from typing import AsyncGenerator, Iterable, List, Set
from uuid import UUID

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set testing environment before the settings are first loaded
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['ENVIRONMENT'] = 'development'

from standuphub.content.store import StaticReferenceStore, TaskRecord, UserRecord
from standuphub.db.base import Base
from standuphub.db.session import get_db_session, get_session_factory
from standuphub.main import app
from standuphub.models import Task, User

fake = Faker()

TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'

# Short id 99 decodes to prefix 000063
SHORT_99_TASK_ID = UUID('00006300-0000-4000-8000-000000000001')


class RecordingStore(StaticReferenceStore):
    """In-memory store that records every lookup it receives"""

    def __init__(self, tasks: Iterable[TaskRecord] = (), users: Iterable[UserRecord] = ()):
        super().__init__(tasks, users)
        self.task_calls: List[Set[str]] = []
        self.user_calls: List[Set[str]] = []

    async def lookup_tasks_by_ids(self, ids):
        self.task_calls.append(set(ids))
        return await super().lookup_tasks_by_ids(ids)

    async def lookup_users_by_ids(self, ids):
        self.user_calls.append(set(ids))
        return await super().lookup_users_by_ids(ids)


class GatedStore(StaticReferenceStore):
    """Store whose task lookups for one id block until the gate opens"""

    def __init__(self, blocked_id: str):
        super().__init__()
        self.blocked_id = blocked_id
        self.gate = asyncio.Event()

    async def lookup_tasks_by_ids(self, ids):
        if self.blocked_id in ids:
            await self.gate.wait()
        return await super().lookup_tasks_by_ids(ids)


@pytest.fixture
def make_store():
    """Factory for in-memory stores holding the given records"""
    return RecordingStore


@pytest.fixture
def gated_store() -> GatedStore:
    """Store that blocks lookups of task 11 until its gate is set"""
    return GatedStore(blocked_id="11")


@pytest.fixture
async def db_engine():
    """Create a fresh schema for each test"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database"""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for arranging test data"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database overrides"""
    async def override_get_db():
        async with session_factory() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user"""
    user = User(
        email=fake.email(),
        name=fake.name(),
        avatar_url='https://cdn.example.com/avatars/1.png',
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def test_task(db_session: AsyncSession) -> Task:
    """Create a task whose short id is 99"""
    task = Task(id=SHORT_99_TASK_ID, title='Publish release notes')
    db_session.add(task)
    await db_session.commit()
    await db_session.refresh(task)
    return task
