"""
ログ設定モジュール

構造化ログを提供します。
"""

import logging
import sys
from typing import Any

from src.config.settings import get_settings

# LogRecord に付与されていれば出力するコンテキスト項目
CONTEXT_FIELDS = ("request_id", "cache_key", "cache_type", "keyword")


class StructuredFormatter(logging.Formatter):
    """構造化ログフォーマッター"""

    def format(self, record: logging.LogRecord) -> str:
        """ログレコードをフォーマット"""
        # 基本情報
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # 追加情報
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # エラー情報
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # フォーマット
        parts = [f"{k}={v}" for k, v in log_data.items()]
        return " | ".join(parts)


def setup_logging() -> None:
    """ログ設定を初期化"""
    settings = get_settings()

    # ログレベル設定
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # ルートロガー設定
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # 二重登録を避ける
    for existing in root_logger.handlers:
        if isinstance(existing.formatter, StructuredFormatter):
            return

    # ハンドラー設定
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(handler)

    # サードパーティライブラリのログレベル調整
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """ロガーを取得

    Args:
        name: ロガー名

    Returns:
        ロガーインスタンス
    """
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """コンテキスト情報を追加するロガーアダプター"""

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        """ログメッセージを処理"""
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        kwargs["extra"].update(self.extra)
        return msg, kwargs


def get_logger_with_context(name: str, **context: Any) -> LoggerAdapter:
    """コンテキスト付きロガーを取得

    Args:
        name: ロガー名
        **context: コンテキスト情報（cache_key, cache_type, keyword など）

    Returns:
        ロガーアダプター
    """
    logger = get_logger(name)
    return LoggerAdapter(logger, context)
