"""
メインアプリケーション

FastAPI アプリケーションのエントリーポイント
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.briefing import router as briefing_router
from src.api.cache import router as cache_router
from src.api.dependencies import get_cache_store
from src.api.health import API_NAME, API_VERSION
from src.api.health import router as health_router
from src.config.logging import get_logger, setup_logging
from src.config.settings import get_settings
from src.database.connection import close_db, init_db
from src.services.cache_sweeper import CacheSweeper
from src.services.error_handler import ApplicationError, NewsProviderError, handle_error

# ログ設定
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """アプリケーションライフサイクル管理

    起動時と終了時の処理を定義
    """
    # 起動時
    logger.info("Application starting...")
    settings = get_settings()
    logger.info(f"Environment: {settings.environment}")

    # データベース初期化
    await init_db()

    # 期限切れキャッシュの定期掃除
    sweeper = CacheSweeper(get_cache_store(), interval=settings.cache_sweep_interval)
    await sweeper.start()

    yield

    # 終了時
    logger.info("Application shutting down...")
    await sweeper.stop()
    await close_db()
    logger.info("Application shutdown complete")


def _status_code_for(exc: ApplicationError) -> int:
    """ApplicationError の HTTP ステータス"""
    if isinstance(exc, NewsProviderError):
        return 502
    return 400


# FastAPI アプリケーション作成
def create_app() -> FastAPI:
    """FastAPI アプリケーションを作成

    Returns:
        FastAPI: アプリケーションインスタンス
    """
    app = FastAPI(
        title=API_NAME,
        description="特検ニュースブリーフィング API",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # CORS ミドルウェア設定
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 本番環境では適切に制限する
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # エラーハンドラー登録
    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        """ApplicationError ハンドラー"""
        error_response = exc.to_response()
        logger.error(
            f"Application error: {exc.code} - {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=_status_code_for(exc), content=error_response.model_dump(mode="json")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """一般的な例外ハンドラー"""
        context = {"path": request.url.path, "method": request.method}
        error_response = handle_error(exc, context)
        return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))

    # ルーター登録
    app.include_router(health_router, tags=["health"])
    app.include_router(briefing_router)
    app.include_router(cache_router)

    return app


# アプリケーションインスタンス
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
    )
