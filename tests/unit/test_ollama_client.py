"""
Ollama クライアントのユニットテスト
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.models.briefing import RelevanceVerdict
from src.services.error_handler import ErrorCode, LLMAPIError, LLMResponseParseError
from src.services.ollama_client import OllamaClient, parse_json_response


@pytest.fixture
def mock_settings():
    """モック設定"""
    settings = MagicMock()
    settings.ollama_api_url = "http://ollama.test"
    settings.ollama_model = "test-model"
    settings.ollama_timeout = 10.0
    return settings


@pytest.fixture
def ollama_client(mock_settings):
    """Ollama クライアントのフィクスチャ"""
    with patch("src.services.ollama_client.get_settings", return_value=mock_settings):
        client = OllamaClient()
        yield client


def chat_response(content: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = content
    response.json.return_value = {"message": {"role": "assistant", "content": content}}
    return response


@pytest.mark.asyncio
async def test_chat_success(ollama_client):
    """チャット生成が成功するケース"""
    ollama_client.client = AsyncMock()
    ollama_client.client.post = AsyncMock(return_value=chat_response("  hello  "))

    result = await ollama_client.chat([{"role": "user", "content": "hi"}], temperature=0.1)

    assert result == "hello"
    call_args = ollama_client.client.post.call_args
    assert call_args[0][0] == "http://ollama.test/api/chat"
    assert call_args[1]["json"]["model"] == "test-model"
    assert call_args[1]["json"]["stream"] is False
    assert call_args[1]["json"]["options"] == {"temperature": 0.1}


@pytest.mark.asyncio
async def test_chat_http_error_status(ollama_client):
    """200 以外は LLMAPIError"""
    ollama_client.client = AsyncMock()
    ollama_client.client.post = AsyncMock(return_value=chat_response("boom", status_code=500))

    with pytest.raises(LLMAPIError) as exc_info:
        await ollama_client.chat([{"role": "user", "content": "hi"}])

    assert exc_info.value.details["status_code"] == 500


@pytest.mark.asyncio
async def test_chat_empty_response(ollama_client):
    """空応答は LLMAPIError"""
    ollama_client.client = AsyncMock()
    ollama_client.client.post = AsyncMock(return_value=chat_response("   "))

    with pytest.raises(LLMAPIError):
        await ollama_client.chat([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_chat_timeout(ollama_client):
    """タイムアウトは LLMAPIError"""
    ollama_client.client = AsyncMock()
    ollama_client.client.post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(LLMAPIError) as exc_info:
        await ollama_client.chat([{"role": "user", "content": "hi"}])

    assert isinstance(exc_info.value.original_error, httpx.ReadTimeout)


@pytest.mark.asyncio
async def test_structured_chat_sends_schema_and_validates(ollama_client):
    """JSON schema を送信し、応答をモデルとして返す"""
    ollama_client.client = AsyncMock()
    ollama_client.client.post = AsyncMock(
        return_value=chat_response('{"score": 8, "reason": "영장 청구", "category": "core_investigation"}')
    )

    verdict = await ollama_client.structured_chat(
        [{"role": "user", "content": "rate"}], RelevanceVerdict, temperature=0.1
    )

    assert verdict == RelevanceVerdict(score=8, reason="영장 청구", category="core_investigation")
    request_json = ollama_client.client.post.call_args[1]["json"]
    assert request_json["format"] == RelevanceVerdict.model_json_schema()


def test_parse_json_response_accepts_code_fence():
    """```json で囲まれた応答も解釈する"""
    text = '```json\n{"score": 6, "reason": "r", "category": "general"}\n```'

    verdict = parse_json_response(text, RelevanceVerdict)

    assert verdict.score == 6


def test_parse_json_response_invalid_json():
    """JSON でない応答は LLMResponseParseError"""
    with pytest.raises(LLMResponseParseError) as exc_info:
        parse_json_response("score is 7", RelevanceVerdict)

    assert exc_info.value.code == ErrorCode.LLM_PARSE_ERROR


@pytest.mark.parametrize(
    "text",
    [
        '{"score": 11, "reason": "r", "category": "general"}',
        '{"score": 7, "reason": "r", "category": "sports"}',
        '{"score": 7, "category": "general"}',
        "[1, 2, 3]",
    ],
)
def test_parse_json_response_schema_mismatch(text):
    """スキーマに合わない応答は LLMResponseParseError"""
    with pytest.raises(LLMResponseParseError):
        parse_json_response(text, RelevanceVerdict)
