"""
Ollama LLM クライアント

関連度判定・要約生成のための LLM API クライアント
"""

import json
import re
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.config.logging import get_logger
from src.config.settings import get_settings
from src.services.error_handler import LLMAPIError, LLMResponseParseError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class OllamaClient:
    """Ollama API クライアント"""

    def __init__(self):
        self.settings = get_settings()
        self.base_url = self.settings.ollama_api_url
        self.model = self.settings.ollama_model
        self.client = httpx.AsyncClient(timeout=self.settings.ollama_timeout)

    async def close(self):
        """クライアントを閉じる"""
        await self.client.aclose()

    async def chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        format: dict[str, Any] | None = None,
    ) -> str:
        """チャット形式で生成

        Args:
            messages: メッセージリスト [{"role": "user|assistant|system", "content": "..."}]
            temperature: 温度パラメータ
            max_tokens: 最大トークン数
            format: JSON schema for structured outputs (optional)

        Returns:
            生成されたテキスト

        Raises:
            LLMAPIError: API エラー
        """
        try:
            logger.info(f"Chat generation with Ollama: model={self.model}")

            # リクエストボディ構築
            request_data: dict[str, Any] = {
                "model": self.model,
                "messages": messages,
                "stream": False,
                "options": {"temperature": temperature},
            }

            if max_tokens:
                request_data["options"]["num_predict"] = max_tokens

            if format:
                request_data["format"] = format

            # API 呼び出し
            response = await self.client.post(f"{self.base_url}/api/chat", json=request_data)

            if response.status_code != 200:
                error_msg = f"Ollama API error: {response.status_code}"
                logger.error(error_msg, extra={"response_text": response.text})
                raise LLMAPIError(
                    error_msg, details={"status_code": response.status_code, "body": response.text}
                )

            # レスポンス解析
            result = response.json()
            message = result.get("message", {})
            generated_text = message.get("content", "").strip()

            if not generated_text:
                raise LLMAPIError("Empty response from Ollama")

            logger.info(
                f"Chat generation complete: {len(generated_text)} characters",
                extra={"message_count": len(messages)},
            )

            return generated_text

        except httpx.TimeoutException as e:
            error_msg = "Ollama API request timed out"
            logger.error(error_msg)
            raise LLMAPIError(error_msg, original_error=e)

        except httpx.RequestError as e:
            error_msg = f"Ollama API request error: {str(e)}"
            logger.error(error_msg)
            raise LLMAPIError(error_msg, original_error=e)

        except json.JSONDecodeError as e:
            error_msg = "Failed to decode Ollama response"
            logger.error(error_msg)
            raise LLMAPIError(error_msg, original_error=e)

        except Exception as e:
            if isinstance(e, LLMAPIError):
                raise
            error_msg = f"Unexpected error in Ollama client: {str(e)}"
            logger.exception(error_msg)
            raise LLMAPIError(error_msg, original_error=e)

    async def structured_chat(
        self,
        messages: list[dict[str, str]],
        response_model: type[ModelT],
        temperature: float = 0.7,
    ) -> ModelT:
        """JSON schema を指定して生成し、pydantic モデルとして検証

        Args:
            messages: メッセージリスト
            response_model: 期待するレスポンスのモデル
            temperature: 温度パラメータ

        Returns:
            検証済みのモデルインスタンス

        Raises:
            LLMAPIError: API エラー
            LLMResponseParseError: レスポンスが JSON でない、またはスキーマ不一致
        """
        response_text = await self.chat(
            messages=messages,
            temperature=temperature,
            format=response_model.model_json_schema(),
        )
        return parse_json_response(response_text, response_model)


def _strip_code_fence(text: str) -> str:
    """```json ... ``` で囲まれた応答から中身を取り出す"""
    match = _CODE_FENCE_PATTERN.search(text)
    if match:
        return match.group(1)
    return text


def parse_json_response(response_text: str, response_model: type[ModelT]) -> ModelT:
    """LLM の応答テキストをモデルに変換

    Args:
        response_text: LLM の応答
        response_model: 期待するレスポンスのモデル

    Returns:
        検証済みのモデルインスタンス

    Raises:
        LLMResponseParseError: JSON として解釈できない、またはスキーマ不一致
    """
    try:
        data = json.loads(_strip_code_fence(response_text.strip()))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM response as JSON: {str(e)}")
        raise LLMResponseParseError("LLM returned invalid JSON format", original_error=e)

    try:
        return response_model.model_validate(data)
    except PydanticValidationError as e:
        logger.error(f"LLM response does not match {response_model.__name__}: {e.error_count()} errors")
        raise LLMResponseParseError(
            f"LLM response does not match {response_model.__name__}", original_error=e
        )
