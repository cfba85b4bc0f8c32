"""
ブリーフィング API エンドポイント

ダッシュボードが順に呼び出す3段階（取得 → 関連度判定 → 要約）を提供
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.dependencies import (
    get_briefing_aggregator,
    get_relevance_annotator,
    get_summary_orchestrator,
)
from src.config.logging import get_logger
from src.models.briefing import AnalysisResult, Article, BriefingSnapshot, SummaryRecord
from src.services.briefing_service import BriefingAggregator
from src.services.relevance_service import RelevanceAnnotator
from src.services.summary_service import SummaryOrchestrator

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["Briefing"])


class ArticleBatchRequest(BaseModel):
    """記事バッチ入力スキーマ"""

    articles: list[Article] = Field(description="対象記事")


class BriefingResponse(BaseModel):
    """ブリーフィングレスポンススキーマ"""

    briefing: BriefingSnapshot


class SummaryResponse(BaseModel):
    """要約レスポンススキーマ"""

    summary: SummaryRecord


@router.get("/briefing", response_model=BriefingResponse)
async def get_briefing(
    aggregator: BriefingAggregator = Depends(get_briefing_aggregator),
) -> BriefingResponse:
    """ニュースブリーフィングを取得

    Raises:
        NewsProviderError: ニュース検索に失敗した場合（502）
    """
    logger.info("GET /api/briefing")
    snapshot = await aggregator.get_briefing()
    return BriefingResponse(briefing=snapshot)


@router.post("/analyze", response_model=AnalysisResult)
async def analyze_articles(
    input_data: ArticleBatchRequest,
    annotator: RelevanceAnnotator = Depends(get_relevance_annotator),
) -> AnalysisResult:
    """記事の関連度を判定してフィルタ"""
    logger.info(f"POST /api/analyze: {len(input_data.articles)} articles")
    return await annotator.annotate(input_data.articles)


@router.post("/summary", response_model=SummaryResponse)
async def summarize_articles(
    input_data: ArticleBatchRequest,
    orchestrator: SummaryOrchestrator = Depends(get_summary_orchestrator),
) -> SummaryResponse:
    """記事群の日次要約を取得

    Raises:
        ValidationError: 記事が空の場合（400）
    """
    logger.info(f"POST /api/summary: {len(input_data.articles)} articles")
    summary = await orchestrator.summarize(input_data.articles)
    return SummaryResponse(summary=summary)
