"""
キャッシュ掃除ワーカー

期限切れキャッシュを定期的に一括削除するバックグラウンドタスク。
期限判定そのものは読み出し時に行われます。
"""

import asyncio

from src.config.logging import get_logger
from src.services.cache_store import CacheStore, StoreFailure

logger = get_logger(__name__)


class CacheSweeper:
    """定期キャッシュ掃除"""

    def __init__(self, cache_store: CacheStore, interval: float):
        self.cache_store = cache_store
        self.interval = interval
        self.is_running = False
        self.worker_task: asyncio.Task | None = None

    async def start(self):
        """掃除ワーカーを開始"""
        if self.is_running:
            logger.warning("Cache sweeper already running")
            return

        if self.interval <= 0:
            logger.info("Cache sweeper disabled")
            return

        self.is_running = True
        self.worker_task = asyncio.create_task(self._sweep_loop())
        logger.info(f"Cache sweeper started: interval={self.interval}s")

    async def stop(self):
        """掃除ワーカーを停止"""
        if not self.is_running:
            return

        self.is_running = False
        if self.worker_task:
            self.worker_task.cancel()
            try:
                await self.worker_task
            except asyncio.CancelledError:
                pass

        logger.info("Cache sweeper stopped")

    async def sweep_once(self) -> int:
        """1回分の掃除を実行

        Returns:
            削除した行数（失敗時は 0）
        """
        result = await self.cache_store.sweep()
        if isinstance(result, StoreFailure):
            logger.warning(f"Cache sweep failed: {result.error.message}")
            return 0
        return result.affected

    async def _sweep_loop(self):
        """掃除ループ"""
        while self.is_running:
            try:
                await asyncio.sleep(self.interval)
                await self.sweep_once()
            except asyncio.CancelledError:
                logger.info("Cache sweep loop cancelled")
                break
            except Exception as e:
                # エラーが発生しても続行
                logger.exception(f"Error in cache sweep loop: {str(e)}")
