"""
API 依存性

各エンドポイントで使用するサービスを組み立てます（テストでは
app.dependency_overrides で差し替え可能）。
"""

from typing import AsyncGenerator

from fastapi import Depends

from src.config.settings import get_settings
from src.database.connection import get_session_maker
from src.services.briefing_service import BriefingAggregator
from src.services.cache_policy import ExpiryPolicy
from src.services.cache_store import CacheStore
from src.services.news_client import NaverNewsClient
from src.services.ollama_client import OllamaClient
from src.services.relevance_service import RelevanceAnnotator
from src.services.summary_service import SummaryOrchestrator, investigation_labels


def get_cache_store() -> CacheStore:
    """キャッシュストアを取得"""
    settings = get_settings()
    return CacheStore(get_session_maker(), policy=ExpiryPolicy.from_settings(settings))


async def get_news_client() -> AsyncGenerator[NaverNewsClient, None]:
    """ニュース検索クライアントを取得（リクエスト終了時に閉じる）"""
    client = NaverNewsClient()
    try:
        yield client
    finally:
        await client.close()


async def get_llm_client() -> AsyncGenerator[OllamaClient, None]:
    """LLM クライアントを取得（リクエスト終了時に閉じる）"""
    client = OllamaClient()
    try:
        yield client
    finally:
        await client.close()


def get_briefing_aggregator(
    cache_store: CacheStore = Depends(get_cache_store),
    news_client: NaverNewsClient = Depends(get_news_client),
) -> BriefingAggregator:
    """ブリーフィング集約サービスを取得"""
    settings = get_settings()
    return BriefingAggregator(
        cache_store,
        news_client,
        keywords=settings.news_keywords,
        page_size=settings.news_page_size,
    )


def get_relevance_annotator(
    cache_store: CacheStore = Depends(get_cache_store),
    llm_client: OllamaClient = Depends(get_llm_client),
) -> RelevanceAnnotator:
    """関連度判定サービスを取得"""
    settings = get_settings()
    return RelevanceAnnotator(
        cache_store,
        llm_client,
        threshold=settings.relevance_threshold,
        temperature=settings.scoring_temperature,
    )


def get_summary_orchestrator(
    cache_store: CacheStore = Depends(get_cache_store),
    llm_client: OllamaClient = Depends(get_llm_client),
) -> SummaryOrchestrator:
    """要約生成サービスを取得"""
    settings = get_settings()
    return SummaryOrchestrator(
        cache_store,
        llm_client,
        investigations=investigation_labels(settings.news_keywords),
        temperature=settings.summary_temperature,
    )
