"""
キャッシュ関連モデル

CacheEntry
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.database.connection import Base


class CacheType(str, Enum):
    """キャッシュ種別（ドメイン）"""

    NEWS_BRIEFING = "news_briefing"
    ANALYSIS = "analysis"
    SUMMARY = "summary"


class CacheEntry(Base):
    """キャッシュエントリ

    (cache_key, cache_type) ごとに最大1行。expires_at が NULL の行は期限なし。
    """

    __tablename__ = "cache_entries"
    __table_args__ = (UniqueConstraint("cache_key", "cache_type", name="uq_cache_entries_key_type"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cache_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cache_type: Mapped[str] = mapped_column(String(32), nullable=False)
    data: Mapped[Any] = mapped_column(JSON, nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<CacheEntry(key={self.cache_key}, type={self.cache_type}, expires_at={self.expires_at})>"
