"""
キャッシュ有効期限ポリシー

キャッシュ種別ごとの TTL と、読み出し時の期限判定を提供
"""

from datetime import datetime, timedelta, timezone

from src.config.settings import Settings
from src.models.cache import CacheType

DEFAULT_BRIEFING_TTL = timedelta(hours=1)
DEFAULT_SUMMARY_TTL = timedelta(hours=6)


def utcnow() -> datetime:
    """現在時刻（naive UTC）"""
    return datetime.utcnow()


def utc_isoformat(value: datetime) -> str:
    """naive UTC の時刻を ISO 8601 文字列に変換"""
    return value.replace(tzinfo=timezone.utc).isoformat()


class ExpiryPolicy:
    """キャッシュ種別ごとの有効期限ポリシー

    analysis は期限なし（None）。
    """

    def __init__(
        self,
        briefing_ttl: timedelta = DEFAULT_BRIEFING_TTL,
        summary_ttl: timedelta = DEFAULT_SUMMARY_TTL,
    ):
        self._ttls: dict[CacheType, timedelta | None] = {
            CacheType.NEWS_BRIEFING: briefing_ttl,
            CacheType.ANALYSIS: None,
            CacheType.SUMMARY: summary_ttl,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExpiryPolicy":
        """設定から生成"""
        return cls(
            briefing_ttl=timedelta(hours=settings.briefing_cache_ttl_hours),
            summary_ttl=timedelta(hours=settings.summary_cache_ttl_hours),
        )

    def ttl_for(self, cache_type: CacheType) -> timedelta | None:
        """キャッシュ種別の TTL（None は期限なし）"""
        return self._ttls[CacheType(cache_type)]

    def expires_at_for(self, cache_type: CacheType, now: datetime) -> datetime | None:
        """書き込み時刻から有効期限を算出

        Args:
            cache_type: キャッシュ種別
            now: 書き込み時刻

        Returns:
            有効期限（期限なしの場合は None）
        """
        ttl = self.ttl_for(cache_type)
        if ttl is None:
            return None
        return now + ttl


def is_expired(expires_at: datetime | None, now: datetime) -> bool:
    """期限切れ判定

    Args:
        expires_at: 保存されている有効期限（None は期限なし）
        now: 現在時刻

    Returns:
        期限切れなら True
    """
    if expires_at is None:
        return False
    return expires_at < now
