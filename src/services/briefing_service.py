"""
ニュースブリーフィング集約サービス

固定キーワードごとにニュースを検索し、タイトル単位で重複を統合した
スナップショットを生成・キャッシュします。
"""

import asyncio
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.config.logging import get_logger, get_logger_with_context
from src.models.briefing import Article, BriefingSnapshot
from src.models.cache import CacheType
from src.services.cache_keys import briefing_key
from src.services.cache_policy import utc_isoformat
from src.services.cache_store import CacheHit, CacheStore, StoreFailure
from src.services.news_client import MAX_PAGE_SIZE, NaverNewsClient

logger = get_logger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")

# デコード順序は固定（&amp; は最後）
_ENTITY_REPLACEMENTS = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#x27;", "'"),
    ("&amp;", "&"),
)


def clean_html_text(text: str) -> str:
    """HTML タグを除去してからエンティティをデコード

    タグ除去が先なので、エンティティで表現されたタグ（&lt;b&gt;）は
    除去されずに文字列 "<b>" として残ります。

    Args:
        text: 検索 API が返したタイトル・説明文

    Returns:
        プレーンテキスト
    """
    cleaned = _TAG_PATTERN.sub("", text)
    for entity, char in _ENTITY_REPLACEMENTS:
        cleaned = cleaned.replace(entity, char)
    return cleaned


def dedupe_articles(tagged_items: list[dict[str, Any]]) -> list[Article]:
    """タイトルの完全一致で記事を統合

    最初に出現した記事を正とし、以降の同一タイトルはキーワードのみを
    （未登録の場合に限り）追加します。出現順は保持されます。

    Args:
        tagged_items: keyword 付きの記事辞書のリスト

    Returns:
        重複を除いた記事のリスト
    """
    articles: dict[str, Article] = {}

    for item in tagged_items:
        title = item["title"]
        keyword = item["keyword"]
        existing = articles.get(title)

        if existing is None:
            articles[title] = Article(
                title=title,
                description=item.get("description", ""),
                link=item.get("link", ""),
                pub_date=item.get("pubDate", ""),
                keyword=keyword,
                keywords=[keyword],
            )
        elif keyword not in existing.keywords:
            existing.keywords.append(keyword)

    return list(articles.values())


class BriefingAggregator:
    """ニュースブリーフィング集約"""

    def __init__(
        self,
        cache_store: CacheStore,
        news_client: NaverNewsClient,
        keywords: list[str],
        page_size: int = MAX_PAGE_SIZE,
    ):
        self.cache_store = cache_store
        self.news_client = news_client
        self.keywords = list(keywords)
        self.page_size = page_size

    async def get_briefing(self) -> BriefingSnapshot:
        """ブリーフィングを取得（キャッシュ優先）

        Returns:
            ブリーフィングのスナップショット

        Raises:
            NewsProviderError: いずれかのキーワードの検索に失敗した場合
        """
        cached = await self._get_cached_snapshot()
        if cached is not None:
            logger.info("Using cached news briefing")
            return cached

        logger.info(f"Fetching fresh news for {len(self.keywords)} keywords")
        tagged_items = await self._fetch_all_keywords()
        articles = dedupe_articles(tagged_items)

        snapshot = BriefingSnapshot(
            generated_at=utc_isoformat(self.cache_store.clock()),
            total_articles=len(articles),
            keywords=self.keywords,
            articles=articles,
        )

        result = await self.cache_store.write(
            briefing_key(),
            CacheType.NEWS_BRIEFING,
            snapshot.model_dump(mode="json", by_alias=True),
        )
        if isinstance(result, StoreFailure):
            logger.warning(f"News briefing not cached: {result.error.message}")

        logger.info(
            f"News briefing built: {len(tagged_items)} items -> {len(articles)} articles"
        )
        return snapshot

    async def _get_cached_snapshot(self) -> BriefingSnapshot | None:
        """キャッシュ済みスナップショットを取得（失敗はミス扱い）"""
        result = await self.cache_store.read(briefing_key(), CacheType.NEWS_BRIEFING)

        if isinstance(result, StoreFailure):
            logger.warning("Briefing cache unavailable, treating as miss")
            return None
        if not isinstance(result, CacheHit):
            return None

        try:
            return BriefingSnapshot.model_validate(result.payload)
        except PydanticValidationError:
            logger.warning("Cached news briefing is malformed, treating as miss")
            return None

    async def _fetch_all_keywords(self) -> list[dict[str, Any]]:
        """全キーワードを並行検索し、keyword 付きで平坦化

        1件でも失敗した場合は全体を失敗とします。
        """
        per_keyword = await asyncio.gather(
            *(self._fetch_keyword(keyword) for keyword in self.keywords)
        )
        return [item for items in per_keyword for item in items]

    async def _fetch_keyword(self, keyword: str) -> list[dict[str, Any]]:
        """1キーワード分の記事を取得して正規化"""
        keyword_logger = get_logger_with_context(__name__, keyword=keyword)
        items = await self.news_client.search(keyword, display=self.page_size, start=1, sort="date")
        keyword_logger.info(f"Fetched {len(items)} items")

        return [
            {
                "title": clean_html_text(item.get("title", "")),
                "description": clean_html_text(item.get("description", "")),
                "link": item.get("link", ""),
                "pubDate": item.get("pubDate", ""),
                "keyword": keyword,
            }
            for item in items
        ]
