"""
関連度判定サービス

記事タイトルごとに LLM で特検捜査との関連度を判定し、しきい値で
フィルタしてスコア降順に並べます。判定結果はタイトル単位で無期限に
キャッシュされます。
"""

import asyncio

from pydantic import ValidationError as PydanticValidationError

from src.config.logging import get_logger
from src.models.briefing import AnalysisRecord, AnalysisResult, Article, RelevanceVerdict
from src.models.cache import CacheType
from src.services.cache_keys import analysis_key
from src.services.cache_store import CacheHit, CacheStore, StoreFailure
from src.services.error_handler import LLMAPIError, LLMResponseParseError
from src.services.ollama_client import OllamaClient

logger = get_logger(__name__)

DEFAULT_RELEVANCE_THRESHOLD = 6

# 判定失敗時の中立判定（キャッシュしない）
NEUTRAL_VERDICT = AnalysisRecord(score=5, reason="analysis failed", category="general")


def filter_and_sort(articles: list[Article], threshold: int) -> list[Article]:
    """しきい値以上の記事をスコア降順に並べる（同点は元の順序）"""
    kept = [
        article
        for article in articles
        if article.relevance_score is not None and article.relevance_score >= threshold
    ]
    return sorted(kept, key=lambda article: article.relevance_score, reverse=True)


class RelevanceAnnotator:
    """関連度判定"""

    SCORING_SYSTEM_PROMPT = """You rate Korean political news headlines for how closely they
relate to the ongoing special counsel (특검) investigations.

Scoring guide:
- 0-3: general political news unrelated to the special counsels
- 4-6: mentions people or background connected to a special counsel
- 7-8: reports on the progress of a special counsel investigation
- 9-10: core investigative actions (indictments, warrants, search and seizure, ...)

Categories:
- core_investigation: core investigative actions
- progress: investigation progress
- related_figures: people involved
- general: general politics

Respond with a JSON object only:
{"score": <integer 0-10>, "reason": "<one line>", "category": "<category>"}
"""

    def __init__(
        self,
        cache_store: CacheStore,
        llm_client: OllamaClient,
        threshold: int = DEFAULT_RELEVANCE_THRESHOLD,
        temperature: float = 0.1,
    ):
        self.cache_store = cache_store
        self.llm_client = llm_client
        self.threshold = threshold
        self.temperature = temperature

    async def annotate(self, articles: list[Article]) -> AnalysisResult:
        """記事群の関連度を判定してフィルタ・ソート

        各記事は並行に判定されます。個々の記事の判定失敗は中立判定に
        置き換えられ、バッチ全体は失敗しません。

        Args:
            articles: 判定対象の記事

        Returns:
            判定件数・フィルタ後件数・フィルタ後の記事
        """
        logger.info(f"Analyzing relevance for {len(articles)} articles")

        analyzed = await self.annotate_all(articles)
        filtered = filter_and_sort(analyzed, self.threshold)

        logger.info(
            f"Relevance analysis complete: {len(analyzed)} analyzed, {len(filtered)} kept",
            extra={"threshold": self.threshold},
        )
        return AnalysisResult(analyzed=len(analyzed), filtered=len(filtered), articles=filtered)

    async def annotate_all(self, articles: list[Article]) -> list[Article]:
        """全記事に判定結果を付与（フィルタなし、入力順）"""
        return list(await asyncio.gather(*(self._annotate_article(article) for article in articles)))

    async def _annotate_article(self, article: Article) -> Article:
        """1記事の判定（キャッシュ優先）"""
        record = await self._get_cached_record(article.title)

        if record is None:
            record = await self._score_article(article)

        return article.model_copy(
            update={
                "relevance_score": record.score,
                "analysis_reason": record.reason,
                "category": record.category,
            }
        )

    async def _get_cached_record(self, title: str) -> AnalysisRecord | None:
        """キャッシュ済み判定を取得（失敗はミス扱い）"""
        cache_key = analysis_key(title)
        result = await self.cache_store.read(cache_key, CacheType.ANALYSIS)

        if isinstance(result, StoreFailure):
            logger.warning("Analysis cache unavailable, treating as miss", extra={"cache_key": cache_key})
            return None
        if not isinstance(result, CacheHit):
            return None

        try:
            return AnalysisRecord.model_validate(result.payload)
        except PydanticValidationError:
            logger.warning("Cached analysis is malformed, treating as miss", extra={"cache_key": cache_key})
            return None

    async def _score_article(self, article: Article) -> AnalysisRecord:
        """LLM で判定し、成功時のみキャッシュ"""
        try:
            verdict = await self.llm_client.structured_chat(
                messages=[
                    {"role": "system", "content": self.SCORING_SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_user_prompt(article)},
                ],
                response_model=RelevanceVerdict,
                temperature=self.temperature,
            )
        except (LLMAPIError, LLMResponseParseError) as e:
            logger.warning(f"Relevance scoring failed, using neutral verdict: {e.message}")
            return NEUTRAL_VERDICT

        record = verdict.to_record()

        cache_key = analysis_key(article.title)
        result = await self.cache_store.write(cache_key, CacheType.ANALYSIS, record.model_dump())
        if isinstance(result, StoreFailure):
            logger.warning("Analysis not cached", extra={"cache_key": cache_key})

        return record

    def _build_user_prompt(self, article: Article) -> str:
        """判定用のユーザープロンプトを構築"""
        return f'Headline: "{article.title}"\nSearch keyword: {article.keyword}'
