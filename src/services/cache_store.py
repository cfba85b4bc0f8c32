"""
キャッシュストアアダプター

cache_entries テーブルに対する upsert / select / delete / sweep を提供します。
すべての操作は例外を送出せず、結果オブジェクト（CacheHit / CacheMiss /
StoreOk / StoreFailure）を返します。呼び出し側は StoreFailure をキャッシュ
ミスとして扱うかどうかを明示的に判断します。
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config.logging import get_logger
from src.models.cache import CacheEntry, CacheType
from src.services.cache_policy import ExpiryPolicy, is_expired, utcnow
from src.services.error_handler import CacheStoreError

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheHit:
    """キャッシュヒット"""

    payload: Any


@dataclass(frozen=True)
class CacheMiss:
    """キャッシュミス（reason: absent / expired）"""

    reason: str = "absent"


@dataclass(frozen=True)
class StoreOk:
    """書き込み・削除の成功（affected: 影響を受けた行数）"""

    affected: int = 0


@dataclass(frozen=True)
class StoreFailure:
    """ストア操作の失敗"""

    error: CacheStoreError


ReadResult = Union[CacheHit, CacheMiss, StoreFailure]
WriteResult = Union[StoreOk, StoreFailure]


class CacheStore:
    """キャッシュストア

    同一のバックエンドを共有する複数インスタンスを作成しても問題ありません。
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        policy: ExpiryPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_maker = session_maker
        self.policy = policy or ExpiryPolicy()
        self.clock = clock

    async def write(self, cache_key: str, cache_type: CacheType, payload: Any) -> WriteResult:
        """キャッシュを書き込む（upsert）

        有効期限はポリシーに従って書き込み時刻から算出します。

        Args:
            cache_key: キャッシュキー
            cache_type: キャッシュ種別
            payload: JSON シリアライズ可能なデータ

        Returns:
            StoreOk または StoreFailure
        """
        cache_type = CacheType(cache_type)
        now = self.clock()
        values = {
            "id": str(uuid.uuid4()),
            "cache_key": cache_key,
            "cache_type": cache_type.value,
            "data": payload,
            "expires_at": self.policy.expires_at_for(cache_type, now),
            "created_at": now,
        }

        try:
            async with self.session_maker() as session:
                stmt = self._build_upsert(session, values)
                if stmt is not None:
                    await session.execute(stmt)
                else:
                    await self._select_and_upsert(session, values)
                await session.commit()

            logger.debug(
                "Cache entry written",
                extra={"cache_key": cache_key, "cache_type": cache_type.value},
            )
            return StoreOk(affected=1)

        except Exception as e:
            return self._failure("write", cache_key, cache_type, e)

    async def read(self, cache_key: str, cache_type: CacheType) -> ReadResult:
        """キャッシュを読み出す

        期限切れの行はミスとして扱い、その場で削除します。

        Args:
            cache_key: キャッシュキー
            cache_type: キャッシュ種別

        Returns:
            CacheHit / CacheMiss / StoreFailure
        """
        cache_type = CacheType(cache_type)
        now = self.clock()

        try:
            async with self.session_maker() as session:
                stmt = select(CacheEntry).where(
                    CacheEntry.cache_key == cache_key,
                    CacheEntry.cache_type == cache_type.value,
                )
                result = await session.execute(stmt)
                entry = result.scalar_one_or_none()

                if entry is None:
                    logger.debug(
                        "Cache miss",
                        extra={"cache_key": cache_key, "cache_type": cache_type.value},
                    )
                    return CacheMiss()

                if is_expired(entry.expires_at, now):
                    # 並行して更新された行は消さない
                    await session.execute(
                        delete(CacheEntry).where(
                            CacheEntry.id == entry.id,
                            CacheEntry.expires_at < now,
                        )
                    )
                    await session.commit()
                    logger.info(
                        "Expired cache entry removed",
                        extra={"cache_key": cache_key, "cache_type": cache_type.value},
                    )
                    return CacheMiss(reason="expired")

                logger.debug(
                    "Cache hit",
                    extra={"cache_key": cache_key, "cache_type": cache_type.value},
                )
                return CacheHit(payload=entry.data)

        except Exception as e:
            return self._failure("read", cache_key, cache_type, e)

    async def delete(self, cache_key: str, cache_type: CacheType | None = None) -> WriteResult:
        """キャッシュを削除する

        Args:
            cache_key: キャッシュキー
            cache_type: キャッシュ種別（省略時はキーに一致する全種別）

        Returns:
            StoreOk（削除行数）または StoreFailure
        """
        try:
            async with self.session_maker() as session:
                stmt = delete(CacheEntry).where(CacheEntry.cache_key == cache_key)
                if cache_type is not None:
                    stmt = stmt.where(CacheEntry.cache_type == CacheType(cache_type).value)
                result = await session.execute(stmt)
                await session.commit()
                return StoreOk(affected=result.rowcount or 0)

        except Exception as e:
            return self._failure("delete", cache_key, cache_type, e)

    async def sweep(self) -> WriteResult:
        """期限切れの行を全種別から一括削除する

        Returns:
            StoreOk（削除行数）または StoreFailure
        """
        now = self.clock()

        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    delete(CacheEntry).where(
                        CacheEntry.expires_at.is_not(None),
                        CacheEntry.expires_at < now,
                    )
                )
                await session.commit()
                removed = result.rowcount or 0

            logger.info(f"Cache sweep removed {removed} expired entries")
            return StoreOk(affected=removed)

        except Exception as e:
            return self._failure("sweep", None, None, e)

    def _build_upsert(self, session: AsyncSession, values: dict[str, Any]):
        """方言ごとの INSERT ... ON CONFLICT DO UPDATE 文を構築

        Returns:
            対応方言なら Insert 文、それ以外は None
        """
        dialect_name = session.get_bind().dialect.name

        if dialect_name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect_name == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            return None

        stmt = insert(CacheEntry).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[CacheEntry.cache_key, CacheEntry.cache_type],
            set_={
                "data": stmt.excluded["data"],
                "expires_at": stmt.excluded["expires_at"],
                "created_at": stmt.excluded["created_at"],
            },
        )

    async def _select_and_upsert(self, session: AsyncSession, values: dict[str, Any]) -> None:
        """ON CONFLICT 非対応の方言向け upsert"""
        stmt = select(CacheEntry).where(
            CacheEntry.cache_key == values["cache_key"],
            CacheEntry.cache_type == values["cache_type"],
        )
        result = await session.execute(stmt)
        existing_entry = result.scalar_one_or_none()

        if existing_entry:
            existing_entry.data = values["data"]
            existing_entry.expires_at = values["expires_at"]
            existing_entry.created_at = values["created_at"]
        else:
            session.add(CacheEntry(**values))

    def _failure(
        self,
        operation: str,
        cache_key: str | None,
        cache_type: CacheType | None,
        error: Exception,
    ) -> StoreFailure:
        """ストアエラーを記録して StoreFailure を返す"""
        type_value = getattr(cache_type, "value", cache_type)
        logger.error(
            f"Cache store {operation} failed: {error}",
            extra={"cache_key": cache_key, "cache_type": type_value},
        )
        return StoreFailure(
            error=CacheStoreError(
                f"Cache store {operation} failed",
                details={"cache_key": cache_key, "cache_type": type_value},
                original_error=error,
            )
        )
