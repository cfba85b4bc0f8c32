"""
データベース接続モジュール

SQLAlchemy async engine を提供します。
"""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.config.logging import get_logger
from src.config.settings import get_settings

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy ベースクラス"""

    pass


# グローバル変数
_engine = None
_async_session_maker = None


def _ensure_sqlite_directory(database_url: str) -> None:
    """SQLite ファイルの親ディレクトリを作成"""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def get_engine():
    """データベースエンジンを取得"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _ensure_sqlite_directory(settings.database_url)
        _engine = create_async_engine(
            settings.database_url,
            echo=False,
            future=True,
        )
        logger.info(f"Database engine created: {settings.database_url}")

    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """セッションメーカーを取得"""
    global _async_session_maker
    if _async_session_maker is None:
        engine = get_engine()
        _async_session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Session maker created")

    return _async_session_maker


async def init_db():
    """データベースを初期化（テーブル作成）"""
    engine = get_engine()
    async with engine.begin() as conn:
        # すべてのモデルをインポート
        from src.models import cache  # noqa: F401

        # テーブル作成
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized")


async def close_db():
    """データベース接続を閉じる"""
    global _engine, _async_session_maker
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database connection closed")
        _engine = None
        _async_session_maker = None
