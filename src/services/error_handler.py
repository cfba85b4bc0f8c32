"""
エラーハンドリングユーティリティ

一貫したエラーレスポンスを提供します。
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from src.config.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """エラーコード"""

    # 一般エラー
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # ニュース検索関連
    NEWS_PROVIDER_ERROR = "NEWS_PROVIDER_ERROR"

    # LLM 関連
    LLM_API_ERROR = "LLM_API_ERROR"
    LLM_PARSE_ERROR = "LLM_PARSE_ERROR"

    # キャッシュストア関連
    CACHE_STORE_ERROR = "CACHE_STORE_ERROR"


class ErrorResponse(BaseModel):
    """エラーレスポンス"""

    code: ErrorCode
    message: str
    details: Optional[dict[str, Any]] = None


class ApplicationError(Exception):
    """アプリケーション基底例外"""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """ErrorResponse に変換"""
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class ValidationError(ApplicationError):
    """入力バリデーションエラー"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR, message=message, details=details, **kwargs
        )


class NewsProviderError(ApplicationError):
    """ニュース検索 API エラー"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(
            code=ErrorCode.NEWS_PROVIDER_ERROR, message=message, details=details, **kwargs
        )


class LLMAPIError(ApplicationError):
    """LLM API エラー"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(code=ErrorCode.LLM_API_ERROR, message=message, details=details, **kwargs)


class LLMResponseParseError(ApplicationError):
    """LLM レスポンスのパースエラー"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(
            code=ErrorCode.LLM_PARSE_ERROR, message=message, details=details, **kwargs
        )


class CacheStoreError(ApplicationError):
    """キャッシュストアエラー"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None, **kwargs):
        super().__init__(
            code=ErrorCode.CACHE_STORE_ERROR, message=message, details=details, **kwargs
        )


def handle_error(error: Exception, context: Optional[dict[str, Any]] = None) -> ErrorResponse:
    """エラーをハンドリングして ErrorResponse を返す

    Args:
        error: 例外
        context: コンテキスト情報

    Returns:
        ErrorResponse
    """
    context = context or {}

    if isinstance(error, ApplicationError):
        logger.error(
            f"Application error: {error.code} - {error.message}",
            extra={"error_details": error.details, **context},
        )
        return error.to_response()

    # 予期しないエラー
    logger.exception("Unexpected error", extra=context)
    return ErrorResponse(
        code=ErrorCode.INTERNAL_ERROR,
        message="予期しないエラーが発生しました",
        details={"original_error": str(error)},
    )
