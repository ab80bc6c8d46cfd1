"""Slow path: hosted-model extraction with chunking, pacing and retries."""
from .extractor import ModelExtractor, ModelPassResult
from .parsing import MODEL_BASE_CONFIDENCE, parse_model_contacts, to_candidates
from .prompts import SYSTEM_INSTRUCTION, build_prompt, classify_document_type
from .retry import RetryPolicy, parse_retry_hint

__all__ = [
    "ModelExtractor",
    "ModelPassResult",
    "MODEL_BASE_CONFIDENCE",
    "parse_model_contacts",
    "to_candidates",
    "SYSTEM_INSTRUCTION",
    "build_prompt",
    "classify_document_type",
    "RetryPolicy",
    "parse_retry_hint",
]
