"""Unit tests for cache expiry policy"""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from src.models.cache import CacheType
from src.services.cache_policy import ExpiryPolicy, is_expired, utc_isoformat

NOW = datetime(2026, 10, 19, 9, 0, 0)


def test_default_ttls():
    """デフォルト TTL"""
    policy = ExpiryPolicy()

    assert policy.ttl_for(CacheType.NEWS_BRIEFING) == timedelta(hours=1)
    assert policy.ttl_for(CacheType.SUMMARY) == timedelta(hours=6)
    assert policy.ttl_for(CacheType.ANALYSIS) is None


def test_expires_at_for():
    """書き込み時刻からの有効期限"""
    policy = ExpiryPolicy()

    assert policy.expires_at_for(CacheType.NEWS_BRIEFING, NOW) == NOW + timedelta(hours=1)
    assert policy.expires_at_for(CacheType.SUMMARY, NOW) == NOW + timedelta(hours=6)
    assert policy.expires_at_for(CacheType.ANALYSIS, NOW) is None


def test_expires_at_accepts_raw_type_value():
    """種別は文字列でも指定可能"""
    policy = ExpiryPolicy()
    assert policy.expires_at_for("summary", NOW) == NOW + timedelta(hours=6)


def test_from_settings():
    """設定から TTL を読み込む"""
    settings = MagicMock(briefing_cache_ttl_hours=2, summary_cache_ttl_hours=0.5)
    policy = ExpiryPolicy.from_settings(settings)

    assert policy.ttl_for(CacheType.NEWS_BRIEFING) == timedelta(hours=2)
    assert policy.ttl_for(CacheType.SUMMARY) == timedelta(minutes=30)
    assert policy.ttl_for(CacheType.ANALYSIS) is None


def test_is_expired():
    """期限判定"""
    assert is_expired(None, NOW) is False
    assert is_expired(NOW + timedelta(seconds=1), NOW) is False
    assert is_expired(NOW - timedelta(seconds=1), NOW) is True


def test_utc_isoformat():
    """UTC の ISO 8601 表記"""
    assert utc_isoformat(NOW) == "2026-10-19T09:00:00+00:00"
