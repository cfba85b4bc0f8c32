"""
ヘルスチェックエンドポイント
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter()

API_NAME = "News Briefing API"
API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    """ヘルスチェックレスポンス"""

    status: str
    timestamp: datetime
    version: str = API_VERSION


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """ヘルスチェック"""
    return HealthResponse(status="healthy", timestamp=datetime.utcnow())


@router.get("/")
async def root() -> dict[str, str]:
    """API情報"""
    return {"name": API_NAME, "version": API_VERSION}
