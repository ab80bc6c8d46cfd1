"""Fast path: pattern-based heuristic extraction, fusion and scoring."""
from .confidence import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    ConfidenceLevel,
    average_confidence,
    base_score,
    confidence_level,
    filter_by_threshold,
    score_candidates,
)
from .fusion import FusionOutcome, fuse, identity_key, merge_candidates
from .linker import collect_observations, infer_relationships, link_by_name
from .patterns import PatternLibrary, get_pattern_library, normalize_name
from .production import enhance_contacts, infer_production_type, order_by_preference
from .strategies import STRATEGY_FUNCTIONS, StrategyContext, run_strategies
from .structure import StructureConfig, analyze_structure, check_garbage

__all__ = [
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "ConfidenceLevel",
    "average_confidence",
    "base_score",
    "confidence_level",
    "filter_by_threshold",
    "score_candidates",
    "FusionOutcome",
    "fuse",
    "identity_key",
    "merge_candidates",
    "collect_observations",
    "infer_relationships",
    "link_by_name",
    "PatternLibrary",
    "get_pattern_library",
    "normalize_name",
    "enhance_contacts",
    "infer_production_type",
    "order_by_preference",
    "STRATEGY_FUNCTIONS",
    "StrategyContext",
    "run_strategies",
    "StructureConfig",
    "analyze_structure",
    "check_garbage",
]
