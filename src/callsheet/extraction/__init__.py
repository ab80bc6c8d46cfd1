"""Contact extraction from production call sheets."""
from .config import CONFIG_PRESETS, ExtractionConfig, get_config
from .pipeline import extract, extract_bytes, extract_document
from .schemas import ContactRecord, ExtractionOptions, ExtractionRequest, ExtractionResponse
from .types import ContactCandidate, ExtractionMetadata, ExtractionResult

__all__ = [
    "CONFIG_PRESETS",
    "ExtractionConfig",
    "get_config",
    "extract",
    "extract_bytes",
    "extract_document",
    "ContactRecord",
    "ExtractionOptions",
    "ExtractionRequest",
    "ExtractionResponse",
    "ContactCandidate",
    "ExtractionMetadata",
    "ExtractionResult",
]
