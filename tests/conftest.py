from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import get_db
from app.main import app
from app.models import Base
from app.models.user import User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakePipeline:
    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._ops: list[tuple] = []

    def zremrangebyscore(self, key: str, lo: float, hi: float) -> "FakePipeline":
        self._ops.append((self._redis.zremrangebyscore, key, lo, hi))
        return self

    def zadd(self, key: str, mapping: dict[str, float]) -> "FakePipeline":
        self._ops.append((self._redis.zadd, key, mapping))
        return self

    def zcard(self, key: str) -> "FakePipeline":
        self._ops.append((self._redis.zcard, key))
        return self

    def expire(self, key: str, seconds: int) -> "FakePipeline":
        self._ops.append((self._redis.expire, key, seconds))
        return self

    async def execute(self) -> list:
        results = [await op(*args) for op, *args in self._ops]
        self._ops.clear()
        return results


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._zsets: dict[str, dict[str, float]] = {}
        self._ttls: dict[str, int] = {}

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    async def zremrangebyscore(self, key: str, lo: float, hi: float) -> int:
        zset = self._zsets.get(key, {})
        stale = [member for member, score in zset.items() if lo <= score <= hi]
        for member in stale:
            del zset[member]
        return len(stale)

    async def zadd(self, key: str, mapping: dict[str, float]) -> int:
        zset = self._zsets.setdefault(key, {})
        added = len([m for m in mapping if m not in zset])
        zset.update(mapping)
        return added

    async def zcard(self, key: str) -> int:
        return len(self._zsets.get(key, {}))

    async def expire(self, key: str, seconds: int) -> bool:
        self._ttls[key] = seconds
        return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    user = User(
        id=42,
        username="report-target",
        email="target@example.com",
        nickname="Report Target",
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def second_user(db_session: AsyncSession) -> User:
    user = User(
        id=7,
        username="other-user",
        email="other@example.com",
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def client(db_engine, test_user: User, fake_redis: FakeRedis) -> AsyncGenerator[AsyncClient, None]:
    session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.redis = fake_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
