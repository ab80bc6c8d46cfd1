"""Model-assisted contact extraction.

Large documents are split on line boundaries and sent one chunk at a time,
paced to the configured request rate. A chunk that fails (retries exhausted,
unparseable reply, non-retryable service error) is counted and skipped; the
remaining chunks still contribute contacts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ...shared.llm import LLMProvider
from ..chunking import Chunk, estimate_tokens, get_chunker
from ..config import ModelConfig
from ..errors import MalformedModelResponse, ModelServiceError, RetryExhausted
from ..fast.patterns import PatternLibrary, get_pattern_library
from ..types import ContactCandidate, DocumentStructure
from .parsing import parse_model_contacts, to_candidates
from .prompts import SYSTEM_INSTRUCTION, build_prompt, classify_document_type
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelPassResult:
    candidates: list[ContactCandidate]
    chunks_total: int
    chunks_failed: int
    document_type: str
    failures: tuple[str, ...] = ()

    @property
    def all_failed(self) -> bool:
        return self.chunks_total > 0 and self.chunks_failed == self.chunks_total


class ModelExtractor:
    def __init__(
        self,
        provider: LLMProvider,
        config: ModelConfig | None = None,
        policy: RetryPolicy | None = None,
        library: PatternLibrary | None = None,
    ) -> None:
        self.provider = provider
        self.config = config or ModelConfig()
        self.policy = policy or RetryPolicy(
            max_attempts=self.config.max_attempts,
            default_rate_limit_delay=self.config.default_rate_limit_delay,
        )
        self.library = library or get_pattern_library()

    def split(self, text: str) -> list[Chunk]:
        if estimate_tokens(text) > self.config.large_document_tokens:
            return get_chunker("token").chunk(text, self.config.chunk_tokens)
        return get_chunker("whole").chunk(text)

    def _complete(self, prompt: str) -> str:
        return self.provider.complete(
            SYSTEM_INSTRUCTION,
            prompt,
            model=self.config.model,
            timeout=self.config.timeout,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

    def extract(
        self,
        text: str,
        structure: DocumentStructure | None = None,
        role_preferences: list[str] | tuple[str, ...] = (),
        production_type: str | None = None,
    ) -> ModelPassResult:
        document_type = classify_document_type(structure)
        chunks = self.split(text)
        interval = self.config.request_interval
        logger.info(
            "[model] %s: %d chunk(s), document_type=%s",
            self.provider.name, len(chunks), document_type,
        )

        candidates: list[ContactCandidate] = []
        failures: list[str] = []
        for chunk in chunks:
            if chunk.index > 0 and interval > 0:
                self.policy.sleep(interval)

            label = f"chunk {chunk.index + 1}/{len(chunks)}"
            prompt = build_prompt(chunk.text, document_type, production_type, role_preferences)
            try:
                reply = self.policy.run(lambda: self._complete(prompt), label=label)
                contacts = parse_model_contacts(reply)
            except (RetryExhausted, MalformedModelResponse, ModelServiceError) as e:
                logger.warning("[model] %s failed: %s", label, e)
                failures.append(f"{label}: {e}")
                continue

            found = to_candidates(contacts, self.library)
            logger.debug("[model] %s -> %d contacts", label, len(found))
            candidates.extend(found)

        return ModelPassResult(
            candidates=candidates,
            chunks_total=len(chunks),
            chunks_failed=len(failures),
            document_type=document_type,
            failures=tuple(failures),
        )
