"""AI client abstraction with OpenAI-compatible and Anthropic API backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from wabot import texts
from wabot.config import AIConfig
from wabot.core.errors import UpstreamServiceError
from wabot.log import get_logger

logger = get_logger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"


class AIClient(ABC):
    """Single-turn prompt -> answer completion."""

    def __init__(self, config: AIConfig):
        self._config = config

    @property
    def model_name(self) -> str:
        return self._config.model

    @abstractmethod
    async def ask(self, prompt: str) -> str:
        """Return the model's answer to ``prompt``.

        Raises UpstreamServiceError on any transport or API failure; the
        error detail is for the log, not for the chat.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the client."""


class OpenAIClient(AIClient):
    """OpenAI-compatible ``/chat/completions`` backend over httpx."""

    def __init__(self, config: AIConfig, http_client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._base_url = (config.base_url or OPENAI_BASE_URL).rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    async def ask(self, prompt: str) -> str:
        payload: dict[str, Any] = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": self._config.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self._config.max_tokens,
        }
        logger.debug("api_request", model=self._config.model, prompt_length=len(prompt))
        try:
            resp = await self._http.post(
                f"{self._base_url}/chat/completions", json=payload, headers=self._headers()
            )
            resp.raise_for_status()
            data = resp.json()
            text = data["choices"][0]["message"]["content"]
        except httpx.HTTPStatusError as e:
            detail = e.response.text[:500]
            logger.error("ai_http_error", status=e.response.status_code, body=detail)
            raise UpstreamServiceError(texts.AI_FAILURE, detail=detail) from e
        except httpx.HTTPError as e:
            logger.error("ai_transport_error", error=str(e))
            raise UpstreamServiceError(texts.AI_FAILURE, detail=str(e)) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("ai_bad_response", error=str(e))
            raise UpstreamServiceError(texts.AI_FAILURE, detail=f"unexpected response: {e}") from e

        usage = data.get("usage") or {}
        logger.debug(
            "api_response",
            model=self._config.model,
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )
        if not text:
            raise UpstreamServiceError(texts.AI_FAILURE, detail="empty completion")
        return text

    async def aclose(self) -> None:
        await self._http.aclose()


class AnthropicClient(AIClient):
    """Anthropic API backend using the official SDK."""

    def __init__(self, config: AIConfig):
        import anthropic

        super().__init__(config)
        self._anthropic = anthropic
        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    async def ask(self, prompt: str) -> str:
        logger.debug("api_request", model=self._config.model, prompt_length=len(prompt))
        try:
            response = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                system=self._config.system_prompt,
                messages=[{"role": "user", "content": prompt}],
            )
        except self._anthropic.APIError as e:
            logger.error("ai_api_error", error=str(e))
            raise UpstreamServiceError(texts.AI_FAILURE, detail=str(e)) from e

        logger.debug(
            "api_response",
            model=self._config.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise UpstreamServiceError(texts.AI_FAILURE, detail="empty completion")
        return text

    async def aclose(self) -> None:
        await self._client.close()


def create_ai_client(config: AIConfig) -> AIClient:
    match config.backend:
        case "openai":
            return OpenAIClient(config)
        case "anthropic":
            return AnthropicClient(config)
        case _:
            raise ValueError(f"Unknown AI backend: {config.backend}")
