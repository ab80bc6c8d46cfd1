"""OpenAI Chat Completions provider (``OPENAI_API_KEY``)."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

from .base import LLMProvider, raise_for_status, read_json, register_provider
from .errors import ModelServiceError

logger = logging.getLogger(__name__)


@register_provider("openai")
class OpenAIProvider(LLMProvider):
    API_ENDPOINT = "https://api.openai.com/v1/chat/completions"

    def __init__(self, api_key: str | None = None, client: Any = None) -> None:
        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        self._api_key = api_key
        self._client = client

    @property
    def name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    def _post(self, body: dict[str, Any], headers: dict[str, str], timeout: int) -> Any:
        import httpx

        if self._client is not None:
            return self._client.post(self.API_ENDPOINT, json=body, headers=headers, timeout=timeout)
        return httpx.post(self.API_ENDPOINT, json=body, headers=headers, timeout=timeout)

    def complete(
        self,
        system: str,
        prompt: str,
        model: str | None = None,
        timeout: int = 90,
        max_tokens: int = 4000,
        temperature: float = 0.1,
    ) -> str:
        import httpx

        resolved_model = model or self.default_model
        body = {
            "model": resolved_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        start = time.time()
        try:
            response = self._post(body, headers, timeout)
        except httpx.TimeoutException as e:
            raise ModelServiceError(f"[openai] timeout after {timeout}s", retryable=True) from e
        except httpx.TransportError as e:
            raise ModelServiceError(f"[openai] connection error: {e}", retryable=True) from e

        raise_for_status(self.name, response)

        data = read_json(self.name, response)
        logger.debug("[openai] OK | model=%s | %.1fs", resolved_model, time.time() - start)
        choices = data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise ModelServiceError("[openai] response had no message content")
        return content.strip()
