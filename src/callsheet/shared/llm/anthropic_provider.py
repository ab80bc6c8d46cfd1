"""Anthropic Messages API provider.

Authenticates with ``ANTHROPIC_API_KEY``. Retrying is not done here: rate
limits and transient failures are raised as typed errors so the caller's
retry policy decides how long to wait.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any

from .base import LLMProvider, raise_for_status, read_json, register_provider
from .errors import ModelServiceError

logger = logging.getLogger(__name__)

MODEL_MAP: dict[str, str] = {
    "haiku": "claude-3-5-haiku-latest",
    "claude-haiku": "claude-3-5-haiku-latest",
    "sonnet": "claude-sonnet-4-5-20250929",
    "claude-sonnet": "claude-sonnet-4-5-20250929",
}


@register_provider("anthropic")
class AnthropicProvider(LLMProvider):
    API_ENDPOINT = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"

    def __init__(self, api_key: str | None = None, client: Any = None) -> None:
        api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")
        self._api_key = api_key
        self._client = client

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "haiku"

    @staticmethod
    def _resolve_model(model: str) -> str:
        resolved = MODEL_MAP.get(model, model)
        if resolved != model:
            logger.debug("Model alias: %s -> %s", model, resolved)
        return resolved

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

        resolved_model = self._resolve_model(model or self.default_model)
        logger.debug(
            "[anthropic] model=%s prompt_len=%d timeout=%ds",
            resolved_model, len(prompt), timeout,
        )
        body: dict[str, Any] = {
            "model": resolved_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self.API_VERSION,
            "Content-Type": "application/json",
        }

        start = time.time()
        try:
            response = self._post(body, headers, timeout)
        except httpx.TimeoutException as e:
            raise ModelServiceError(f"[anthropic] timeout after {timeout}s", retryable=True) from e
        except httpx.TransportError as e:
            raise ModelServiceError(f"[anthropic] connection error: {e}", retryable=True) from e
        elapsed = time.time() - start

        raise_for_status(self.name, response)

        data = read_json(self.name, response)
        usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}
        logger.debug(
            "[anthropic] OK | model=%s | in=%d out=%d | %.1fs",
            resolved_model, usage.get("input_tokens", 0), usage.get("output_tokens", 0), elapsed,
        )
        blocks = data.get("content") if isinstance(data.get("content"), list) else []
        parts = [
            block["text"] for block in blocks
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        ]
        if not parts:
            raise ModelServiceError("[anthropic] response had no text content")
        return "\n".join(parts).strip()
