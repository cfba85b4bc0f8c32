"""
CacheSweeper のユニットテスト
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.cache import CacheType
from src.services.cache_store import CacheMiss, StoreOk
from src.services.cache_sweeper import CacheSweeper


@pytest.mark.asyncio
async def test_sweep_once_removes_expired(cache_store, clock):
    """期限切れの行を削除して件数を返す"""
    await cache_store.write("news_briefing", CacheType.NEWS_BRIEFING, {"v": 1})
    await cache_store.write("title-hash", CacheType.ANALYSIS, {"score": 7})
    clock.advance(hours=2)

    sweeper = CacheSweeper(cache_store, interval=60)

    assert await sweeper.sweep_once() == 1
    assert await cache_store.read("news_briefing", CacheType.NEWS_BRIEFING) == CacheMiss()


@pytest.mark.asyncio
async def test_sweep_once_store_failure_returns_zero(broken_cache_store):
    """ストアエラー時は0件"""
    sweeper = CacheSweeper(broken_cache_store, interval=60)
    assert await sweeper.sweep_once() == 0


@pytest.mark.asyncio
async def test_disabled_when_interval_is_zero():
    """間隔0では起動しない"""
    sweeper = CacheSweeper(MagicMock(), interval=0)

    await sweeper.start()

    assert sweeper.is_running is False
    assert sweeper.worker_task is None


@pytest.mark.asyncio
async def test_loop_runs_periodically_and_stops():
    """定期的に掃除し、停止できる"""
    store = MagicMock()
    store.sweep = AsyncMock(return_value=StoreOk(affected=0))
    sweeper = CacheSweeper(store, interval=0.01)

    await sweeper.start()
    await asyncio.sleep(0.1)
    await sweeper.stop()

    assert store.sweep.await_count >= 2
    assert sweeper.is_running is False
    assert sweeper.worker_task.done()


@pytest.mark.asyncio
async def test_loop_survives_unexpected_errors():
    """予期しないエラーでもループは継続"""
    store = MagicMock()
    store.sweep = AsyncMock(side_effect=[RuntimeError("boom")] + [StoreOk()] * 100)
    sweeper = CacheSweeper(store, interval=0.01)

    await sweeper.start()
    await asyncio.sleep(0.1)
    await sweeper.stop()

    assert store.sweep.await_count >= 2
