"""
要約生成サービス

関連度判定済みの記事群から日次ブリーフィング要約を生成します。
要約は日付単位のキーで6時間キャッシュされますが、生成に失敗した
フォールバック要約はキャッシュしません。
"""

import json

from pydantic import ValidationError as PydanticValidationError

from src.config.logging import get_logger
from src.models.briefing import Article, SummaryPayload, SummaryRecord
from src.models.cache import CacheType
from src.services.cache_keys import summary_key
from src.services.cache_policy import utc_isoformat
from src.services.cache_store import CacheHit, CacheStore, StoreFailure
from src.services.error_handler import LLMAPIError, LLMResponseParseError, ValidationError
from src.services.ollama_client import OllamaClient

logger = get_logger(__name__)

FAILURE_TEXT = "summary generation failed"


def investigation_labels(keywords: list[str]) -> list[str]:
    """検索キーワードから捜査別要約のラベルを作成（"김건희 특검" -> "김건희특검"）"""
    return [keyword.replace(" ", "") for keyword in keywords]


class SummaryOrchestrator:
    """要約生成"""

    SUMMARY_SYSTEM_PROMPT = """You write a concise daily briefing on the Korean special counsel
(특검) investigations from pre-analyzed news articles. Write in polite Korean.

Respond with a JSON object only:
{
  "overall": "overall trend of today's investigations in a few sentences",
  "by_investigation": {"<investigation>": "main developments, or that nothing notable happened"},
  "key_developments": ["the three most important developments"],
  "top_keywords": ["three concrete keywords by importance, excluding the investigation names"],
  "tone": "urgent | normal | quiet"
}
"""

    def __init__(
        self,
        cache_store: CacheStore,
        llm_client: OllamaClient,
        investigations: list[str],
        temperature: float = 0.3,
    ):
        self.cache_store = cache_store
        self.llm_client = llm_client
        self.investigations = list(investigations)
        self.temperature = temperature

    async def summarize(self, articles: list[Article]) -> SummaryRecord:
        """記事群の要約を取得（当日分のキャッシュ優先）

        Args:
            articles: 関連度判定・フィルタ済みの記事

        Returns:
            要約（生成失敗時はフォールバック要約）

        Raises:
            ValidationError: 記事が空の場合
        """
        if not articles:
            raise ValidationError("No articles provided")

        cache_key = summary_key(self.cache_store.clock())

        cached = await self._get_cached_summary(cache_key)
        if cached is not None:
            logger.info("Using cached summary", extra={"cache_key": cache_key})
            return cached

        logger.info(f"Generating summary for {len(articles)} articles")

        try:
            payload = await self.llm_client.structured_chat(
                messages=[
                    {"role": "system", "content": self.SUMMARY_SYSTEM_PROMPT},
                    {"role": "user", "content": self._build_user_prompt(articles)},
                ],
                response_model=SummaryPayload,
                temperature=self.temperature,
            )
        except (LLMAPIError, LLMResponseParseError) as e:
            logger.error(f"Summary generation failed, returning fallback: {e.message}")
            return self._fallback_summary(len(articles))

        summary = SummaryRecord(
            **payload.model_dump(),
            article_count=len(articles),
            generated_at=utc_isoformat(self.cache_store.clock()),
        )

        result = await self.cache_store.write(cache_key, CacheType.SUMMARY, summary.model_dump())
        if isinstance(result, StoreFailure):
            logger.warning("Summary not cached", extra={"cache_key": cache_key})
        else:
            logger.info("Summary cached", extra={"cache_key": cache_key})

        return summary

    async def _get_cached_summary(self, cache_key: str) -> SummaryRecord | None:
        """キャッシュ済み要約を取得（失敗はミス扱い）"""
        result = await self.cache_store.read(cache_key, CacheType.SUMMARY)

        if isinstance(result, StoreFailure):
            logger.warning("Summary cache unavailable, treating as miss", extra={"cache_key": cache_key})
            return None
        if not isinstance(result, CacheHit):
            return None

        try:
            return SummaryRecord.model_validate(result.payload)
        except PydanticValidationError:
            logger.warning("Cached summary is malformed, treating as miss", extra={"cache_key": cache_key})
            return None

    def _build_user_prompt(self, articles: list[Article]) -> str:
        """要約用のユーザープロンプトを構築"""
        articles_for_summary = [
            {
                "title": article.title,
                "keyword": article.keyword,
                "keywords": article.keywords,
                "relevanceScore": article.relevance_score,
                "category": article.category,
                "analysisReason": article.analysis_reason,
            }
            for article in articles
        ]
        return (
            f"Investigations: {', '.join(self.investigations)}\n\n"
            f"Analyzed articles:\n{json.dumps(articles_for_summary, ensure_ascii=False, indent=2)}"
        )

    def _fallback_summary(self, article_count: int) -> SummaryRecord:
        """生成失敗を示すフォールバック要約"""
        return SummaryRecord(
            overall=FAILURE_TEXT,
            by_investigation={label: FAILURE_TEXT for label in self.investigations},
            key_developments=[FAILURE_TEXT],
            top_keywords=[FAILURE_TEXT],
            tone="normal",
            article_count=article_count,
            generated_at=utc_isoformat(self.cache_store.clock()),
        )
