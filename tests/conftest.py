"""Test configuration"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.database.connection import Base
# Import all models to ensure they are registered
from src.models.cache import CacheEntry  # noqa: F401
from src.services.cache_store import CacheStore


class FakeClock:
    """進められる時計"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
async def session_maker(tmp_path):
    """テスト用セッションメーカー（一時ファイルの SQLite）"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def clock():
    """2026-10-19 09:00 (UTC) 開始の時計"""
    return FakeClock(datetime(2026, 10, 19, 9, 0, 0))


@pytest.fixture
def cache_store(session_maker, clock):
    """テスト用キャッシュストア"""
    return CacheStore(session_maker, clock=clock)


@pytest.fixture
def broken_cache_store(clock):
    """常に失敗するキャッシュストア"""

    def failing_session_maker():
        raise RuntimeError("database unavailable")

    return CacheStore(failing_session_maker, clock=clock)
