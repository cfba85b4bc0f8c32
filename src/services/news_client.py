"""
Naver ニュース検索クライアント

キーワードごとに最新順のニュース記事一覧を取得
"""

from typing import Any

import httpx

from src.config.logging import get_logger
from src.config.settings import get_settings
from src.services.error_handler import NewsProviderError

logger = get_logger(__name__)

# Naver 検索 API の1リクエストあたり最大件数
MAX_PAGE_SIZE = 100


class NaverNewsClient:
    """Naver ニュース検索 API クライアント"""

    def __init__(self):
        self.settings = get_settings()
        self.base_url = self.settings.naver_news_api_url
        self.client = httpx.AsyncClient(
            timeout=self.settings.news_api_timeout,
            headers={
                "X-Naver-Client-Id": self.settings.naver_client_id,
                "X-Naver-Client-Secret": self.settings.naver_client_secret,
            },
        )

    async def close(self):
        """クライアントを閉じる"""
        await self.client.aclose()

    async def search(
        self,
        keyword: str,
        display: int = MAX_PAGE_SIZE,
        start: int = 1,
        sort: str = "date",
    ) -> list[dict[str, Any]]:
        """キーワードでニュースを検索

        Args:
            keyword: 検索キーワード
            display: 取得件数（最大100）
            start: 開始位置
            sort: 並び順（date: 新しい順）

        Returns:
            記事のリスト [{"title", "description", "link", "pubDate"}, ...]
            title / description は HTML タグ・エンティティを含んだまま

        Raises:
            NewsProviderError: API エラー
        """
        params = {
            "query": keyword,
            "display": min(display, MAX_PAGE_SIZE),
            "start": start,
            "sort": sort,
        }

        try:
            response = await self.client.get(self.base_url, params=params)

            if response.status_code != 200:
                error_msg = f"Naver News API error: {response.status_code}"
                logger.error(error_msg, extra={"keyword": keyword})
                raise NewsProviderError(
                    error_msg,
                    details={"status_code": response.status_code, "keyword": keyword},
                )

            data = response.json()
            items = data.get("items") if isinstance(data, dict) else None
            if not isinstance(items, list):
                raise NewsProviderError(
                    "Naver News API returned no item list", details={"keyword": keyword}
                )

            results = [
                {
                    "title": item.get("title", ""),
                    "description": item.get("description", ""),
                    "link": item.get("link", ""),
                    "pubDate": item.get("pubDate", ""),
                }
                for item in items
            ]

            logger.info(f"Naver News returned {len(results)} items", extra={"keyword": keyword})
            return results

        except httpx.TimeoutException as e:
            error_msg = "Naver News API request timed out"
            logger.error(error_msg, extra={"keyword": keyword})
            raise NewsProviderError(error_msg, details={"keyword": keyword}, original_error=e)

        except httpx.RequestError as e:
            error_msg = f"Naver News API request error: {e}"
            logger.error(error_msg, extra={"keyword": keyword})
            raise NewsProviderError(error_msg, details={"keyword": keyword}, original_error=e)

        except ValueError as e:
            error_msg = "Failed to decode Naver News response"
            logger.error(error_msg, extra={"keyword": keyword})
            raise NewsProviderError(error_msg, details={"keyword": keyword}, original_error=e)
