"""Base model-provider interface and provider registry."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any

from .errors import ModelServiceError, RateLimitError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS_CODES = {429, 529}
RETRYABLE_STATUS_CODES = {500, 502, 503, 504}


class LLMProvider(ABC):
    """Abstract base for hosted model providers (Anthropic, OpenAI)."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g. 'anthropic', 'openai')."""
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        ...

    @abstractmethod
    def complete(
        self,
        system: str,
        prompt: str,
        model: str | None = None,
        timeout: int = 90,
        max_tokens: int = 4000,
        temperature: float = 0.1,
    ) -> str:
        """Run one completion and return the text.

        Raises:
            RateLimitError: The service answered with a rate-limit signal.
            ModelServiceError: Any other failure; ``retryable`` tells the
                caller whether trying again can help.
        """
        ...


def parse_retry_after(response: Any) -> float | None:
    retry_after = response.headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            return None
    return None


def raise_for_status(provider: str, response: Any) -> None:
    """Translate an HTTP error response into the engine's error types."""
    if response.is_success:
        return
    status = response.status_code
    body = response.text[:300]
    if status in RATE_LIMIT_STATUS_CODES:
        raise RateLimitError(f"[{provider}] {status}: {body}", retry_after=parse_retry_after(response))
    raise ModelServiceError(
        f"[{provider}] {status}: {body}",
        retryable=status in RETRYABLE_STATUS_CODES,
        status_code=status,
    )


def read_json(provider: str, response: Any) -> dict[str, Any]:
    """Decode a successful response body; anything but a JSON object is a service error."""
    try:
        data = response.json()
    except ValueError as e:
        raise ModelServiceError(
            f"[{provider}] response was not JSON: {response.text[:120]!r}",
            retryable=True,
            status_code=response.status_code,
        ) from e
    if not isinstance(data, dict):
        raise ModelServiceError(
            f"[{provider}] expected a JSON object, got {type(data).__name__}",
            status_code=response.status_code,
        )
    return data


# ---------------------------------------------------------------------------
# Provider registry
# ---------------------------------------------------------------------------

PROVIDERS: dict[str, type[LLMProvider]] = {}


def register_provider(name: str):
    def decorator(cls: type[LLMProvider]) -> type[LLMProvider]:
        PROVIDERS[name] = cls
        return cls
    return decorator


def get_provider(name: str, **kwargs: Any) -> LLMProvider:
    """Instantiate the provider registered under *name*.

    Raises:
        ValueError: If the provider name is unknown or it has no credentials.
    """
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name!r}. Available: {list(PROVIDERS)}")
    return PROVIDERS[name](**kwargs)


def list_providers() -> list[str]:
    return list(PROVIDERS.keys())


CREDENTIAL_ENV: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def provider_from_env(name: str | None = None) -> LLMProvider | None:
    """Provider named *name*, or the first one with credentials set.

    Returns None when no usable provider is configured. An unknown *name*
    is a configuration error and raises ValueError.
    """
    if name:
        if name not in PROVIDERS:
            raise ValueError(f"Unknown provider: {name!r}. Available: {list(PROVIDERS)}")
        try:
            return get_provider(name)
        except ValueError as e:
            logger.warning("Model provider %s unavailable: %s", name, e)
            return None
    for candidate, env_var in CREDENTIAL_ENV.items():
        if candidate in PROVIDERS and os.environ.get(env_var):
            return get_provider(candidate)
    return None
