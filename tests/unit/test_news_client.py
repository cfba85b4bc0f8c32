"""
Naver ニュース検索クライアントのユニットテスト
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.services.error_handler import ErrorCode, NewsProviderError
from src.services.news_client import NaverNewsClient


@pytest.fixture
def mock_settings():
    """モック設定"""
    settings = MagicMock()
    settings.naver_news_api_url = "https://naver.test/v1/search/news.json"
    settings.naver_client_id = "client-id"
    settings.naver_client_secret = "client-secret"
    settings.news_api_timeout = 5.0
    return settings


@pytest.fixture
def news_client(mock_settings):
    """ニュース検索クライアントのフィクスチャ"""
    with patch("src.services.news_client.get_settings", return_value=mock_settings):
        client = NaverNewsClient()
        yield client


def search_response(items, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = {"items": items}
    return response


def test_client_sends_credentials(news_client):
    """認証ヘッダーを設定"""
    assert news_client.client.headers["X-Naver-Client-Id"] == "client-id"
    assert news_client.client.headers["X-Naver-Client-Secret"] == "client-secret"


@pytest.mark.asyncio
async def test_search_success(news_client):
    """検索が成功するケース"""
    news_client.client = AsyncMock()
    news_client.client.get = AsyncMock(
        return_value=search_response(
            [
                {
                    "title": "<b>특검</b> 속보",
                    "originallink": "https://origin",
                    "link": "https://n.news/1",
                    "description": "&quot;설명&quot;",
                    "pubDate": "Mon, 19 Oct 2026 09:00:00 +0900",
                }
            ]
        )
    )

    results = await news_client.search("김건희 특검")

    assert results == [
        {
            "title": "<b>특검</b> 속보",
            "description": "&quot;설명&quot;",
            "link": "https://n.news/1",
            "pubDate": "Mon, 19 Oct 2026 09:00:00 +0900",
        }
    ]
    call_args = news_client.client.get.call_args
    assert call_args[0][0] == "https://naver.test/v1/search/news.json"
    assert call_args[1]["params"] == {"query": "김건희 특검", "display": 100, "start": 1, "sort": "date"}


@pytest.mark.asyncio
async def test_search_caps_page_size(news_client):
    """取得件数は最大100に制限"""
    news_client.client = AsyncMock()
    news_client.client.get = AsyncMock(return_value=search_response([]))

    await news_client.search("내란 특검", display=500)

    assert news_client.client.get.call_args[1]["params"]["display"] == 100


@pytest.mark.asyncio
async def test_search_error_status(news_client):
    """200 以外は NewsProviderError"""
    news_client.client = AsyncMock()
    news_client.client.get = AsyncMock(return_value=search_response([], status_code=401))

    with pytest.raises(NewsProviderError) as exc_info:
        await news_client.search("내란 특검")

    assert exc_info.value.code == ErrorCode.NEWS_PROVIDER_ERROR
    assert exc_info.value.details == {"status_code": 401, "keyword": "내란 특검"}


@pytest.mark.asyncio
async def test_search_connection_error(news_client):
    """接続エラーは NewsProviderError"""
    news_client.client = AsyncMock()
    news_client.client.get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(NewsProviderError) as exc_info:
        await news_client.search("채상병 특검")

    assert isinstance(exc_info.value.original_error, httpx.ConnectError)


@pytest.mark.asyncio
async def test_search_missing_items(news_client):
    """items がない応答は NewsProviderError"""
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"errorMessage": "bad request"}
    news_client.client = AsyncMock()
    news_client.client.get = AsyncMock(return_value=response)

    with pytest.raises(NewsProviderError):
        await news_client.search("채상병 특검")
