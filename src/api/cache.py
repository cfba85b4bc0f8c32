"""
キャッシュ管理 API エンドポイント
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.dependencies import get_cache_store
from src.config.logging import get_logger
from src.models.cache import CacheType
from src.services.cache_store import CacheStore, StoreFailure

logger = get_logger(__name__)
router = APIRouter(prefix="/api/cache", tags=["Cache"])


class CleanupResponse(BaseModel):
    """期限切れ掃除レスポンス"""

    removed: int


class DeleteResponse(BaseModel):
    """削除レスポンス"""

    deleted: bool


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_expired(cache_store: CacheStore = Depends(get_cache_store)) -> CleanupResponse:
    """期限切れキャッシュを一括削除

    ストアエラー時も失敗にはせず removed=0 を返します。
    """
    result = await cache_store.sweep()
    if isinstance(result, StoreFailure):
        return CleanupResponse(removed=0)
    return CleanupResponse(removed=result.affected)


@router.delete("/{cache_type}/{cache_key}", response_model=DeleteResponse)
async def delete_entry(
    cache_type: CacheType,
    cache_key: str,
    cache_store: CacheStore = Depends(get_cache_store),
) -> DeleteResponse:
    """キャッシュエントリを強制的に無効化"""
    logger.info(
        "DELETE cache entry", extra={"cache_key": cache_key, "cache_type": cache_type.value}
    )
    result = await cache_store.delete(cache_key, cache_type)
    if isinstance(result, StoreFailure):
        return DeleteResponse(deleted=False)
    return DeleteResponse(deleted=result.affected > 0)
