"""Main extraction pipeline orchestrator."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..shared.llm import LLMProvider, provider_from_env
from .config import ExtractionConfig
from .decoders import DecoderRegistry, default_registry
from .errors import GarbageInputError, NoDecoderAvailable
from .fast.confidence import average_confidence, filter_by_threshold, score_candidates
from .fast.fusion import fuse
from .fast.linker import infer_relationships
from .fast.patterns import get_pattern_library
from .fast.production import enhance_contacts, order_by_preference
from .fast.structure import analyze_structure, check_garbage
from .router import MethodRouter
from .schemas import ContactRecord, ExtractionOptions, ExtractionRequest, ExtractionResponse
from .slow.retry import RetryPolicy
from .types import ExtractionMetadata, ExtractionResult

logger = logging.getLogger(__name__)


def extract(
    text: str,
    options: ExtractionOptions | dict[str, Any] | None = None,
    config: ExtractionConfig | None = None,
    provider: LLMProvider | None = None,
    policy: RetryPolicy | None = None,
) -> ExtractionResult:
    """
    Extract contacts from call-sheet text.

    Stages: garbage check, structure analysis, routed candidate collection,
    fusion, scoring, production enhancement, threshold filter, ordering.

    Args:
        text: Plain document text.
        options: Per-call options; a dict with camelCase keys is accepted.
        config: Engine configuration (defaults to ``ExtractionConfig.from_env()``).
        provider: Hosted model provider; resolved from the environment when None.
        policy: Retry policy for model calls.

    Raises:
        GarbageInputError: The text is undecoded binary or PDF structure.
    """
    config = config or ExtractionConfig.from_env()
    opts = options if isinstance(options, ExtractionOptions) else ExtractionOptions.model_validate(options or {})
    threshold = opts.confidence_threshold if opts.confidence_threshold is not None else config.confidence_threshold
    multi_pass = opts.use_multi_pass if opts.use_multi_pass is not None else config.use_multi_pass

    check_garbage(text, config.structure)

    library = get_pattern_library()
    structure = analyze_structure(text, library, config.structure)
    if provider is None:
        provider = provider_from_env(config.model.provider)

    router = MethodRouter(config, provider, policy, library)
    routed = router.route(
        text, structure,
        override=opts.preferred_method,
        role_preferences=opts.role_preferences,
        use_multi_pass=multi_pass,
    )

    outcome = fuse(*routed.pools.values(), threshold=config.fuzzy_merge_threshold)
    contacts = score_candidates(outcome.contacts)
    if multi_pass:
        contacts = infer_relationships(contacts)

    production_type = None
    suggestions = ()
    if config.enhance:
        enhanced = enhance_contacts(contacts, text)
        contacts = enhanced.contacts
        production_type = enhanced.production_type
        suggestions = enhanced.suggestions

    contacts = filter_by_threshold(contacts, threshold)
    contacts = sorted(contacts, key=lambda c: -c.confidence)
    contacts = order_by_preference(contacts, opts.role_preferences)

    metadata = ExtractionMetadata(
        structure=structure,
        strategies_used=routed.strategies_used,
        raw_candidate_count=routed.raw_count,
        duplicates_removed=outcome.duplicates_removed,
        average_confidence=average_confidence(contacts),
        method=routed.decision.method.value,
        method_reason=routed.decision.reason,
        production_type=production_type,
        document_type=routed.document_type,
        suggestions=suggestions,
        chunks_total=routed.chunks_total,
        chunks_failed=routed.chunks_failed,
        fallback_used=routed.fallback_used,
        warnings=tuple(routed.warnings),
    )
    logger.info(
        "Extracted %d contacts (%d raw, %d duplicates removed) via %s",
        len(contacts), routed.raw_count, outcome.duplicates_removed, metadata.method,
    )
    return ExtractionResult(contacts=tuple(contacts), metadata=metadata)


def _failure(message: str) -> ExtractionResponse:
    return ExtractionResponse(success=False, error=message)


def extract_document(
    request: ExtractionRequest | dict[str, Any],
    config: ExtractionConfig | None = None,
    provider: LLMProvider | None = None,
    policy: RetryPolicy | None = None,
) -> ExtractionResponse:
    """Run :func:`extract` behind the request/response contract.

    Document-level failures come back as ``success=False`` with a message
    instead of raising.
    """
    try:
        req = request if isinstance(request, ExtractionRequest) else ExtractionRequest.model_validate(request)
    except ValidationError as e:
        logger.warning("Rejected extraction request: %s", e)
        return _failure(f"Invalid request: {e.error_count()} validation errors")

    try:
        result = extract(req.text, req.options, config=config, provider=provider, policy=policy)
    except GarbageInputError as e:
        logger.warning("Extraction aborted: %s", e)
        return _failure(str(e))

    return ExtractionResponse(
        success=True,
        contacts=[ContactRecord.from_candidate(c) for c in result.contacts],
        metadata=result.metadata.to_dict(),
    )


def extract_bytes(
    data: bytes,
    mime_type: str = "text/plain",
    options: ExtractionOptions | dict[str, Any] | None = None,
    registry: DecoderRegistry | None = None,
    config: ExtractionConfig | None = None,
    provider: LLMProvider | None = None,
    policy: RetryPolicy | None = None,
) -> ExtractionResponse:
    """Decode a byte buffer, then extract as :func:`extract_document` does."""
    registry = registry or default_registry()
    try:
        text = registry.decode(data, mime_type)
    except NoDecoderAvailable as e:
        logger.warning("Extraction aborted: %s", e)
        return _failure(str(e))

    request = ExtractionRequest(
        text=text,
        options=options if isinstance(options, ExtractionOptions) else ExtractionOptions.model_validate(options or {}),
    )
    return extract_document(request, config=config, provider=provider, policy=policy)
