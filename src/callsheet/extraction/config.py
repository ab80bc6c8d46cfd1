"""Engine configuration.

Defaults live on the dataclasses; named presets cover the common trade-offs
and ``from_env`` lets a deployment override individual knobs.

Environment Variables:
    CALLSHEET_PRESET: Base preset (default, fast, thorough)
    CALLSHEET_CONFIDENCE_THRESHOLD: Minimum contact confidence (default: 0.3)
    CALLSHEET_FUZZY_THRESHOLD: Name similarity needed to merge (default: 0.8)
    CALLSHEET_PROXIMITY_WINDOW: Linker window in characters (default: 200)
    CALLSHEET_STRATEGIES: Comma-separated strategy names to enable
    CALLSHEET_MULTI_PASS: Add the proximity linker pass (default: false)
    CALLSHEET_ENHANCE: Apply production-context enhancement (default: true)
    CALLSHEET_METHOD: heuristic, model, hybrid or auto (default: auto)
    CALLSHEET_HYBRID_ENABLED: Allow auto routing to pick hybrid (default: true)
    CALLSHEET_LLM_PROVIDER: anthropic or openai (default: first with a key)
    CALLSHEET_LLM_MODEL: Model name or alias (default: provider default)
    CALLSHEET_REQUESTS_PER_MINUTE: Pacing between chunk requests (default: 20)
    CALLSHEET_MAX_ATTEMPTS: Attempts per model request (default: 4)
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field

from .fast.confidence import DEFAULT_CONFIDENCE_THRESHOLD
from .fast.linker import DEFAULT_PROXIMITY_WINDOW
from .fast.similarity import FUZZY_MERGE_THRESHOLD
from .fast.structure import StructureConfig
from .types import Strategy

METHODS = ("heuristic", "model", "hybrid", "auto")


@dataclass
class ModelConfig:
    """Settings for the hosted-model path."""
    provider: str | None = None
    model: str | None = None
    temperature: float = 0.1
    max_tokens: int = 4000
    timeout: int = 90
    requests_per_minute: int = 20
    large_document_tokens: int = 4000
    chunk_tokens: int = 2000
    max_attempts: int = 4
    default_rate_limit_delay: float = 20.0

    @property
    def request_interval(self) -> float:
        """Seconds to wait between consecutive chunk requests."""
        if self.requests_per_minute <= 0:
            return 0.0
        return 60.0 / self.requests_per_minute


@dataclass
class RouterConfig:
    preferred_method: str = "auto"
    hybrid_enabled: bool = True
    small_document_chars: int = 5 * 1024
    large_document_chars: int = 100 * 1024


@dataclass
class ExtractionConfig:
    name: str = "default"
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    fuzzy_merge_threshold: float = FUZZY_MERGE_THRESHOLD
    proximity_window: int = DEFAULT_PROXIMITY_WINDOW
    enabled_strategies: tuple[Strategy, ...] = tuple(Strategy)
    use_multi_pass: bool = False
    enhance: bool = True
    structure: StructureConfig = field(default_factory=StructureConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    model: ModelConfig = field(default_factory=ModelConfig)

    @classmethod
    def from_env(cls, base: ExtractionConfig | None = None) -> ExtractionConfig:
        """Build a config from CALLSHEET_* variables on top of a preset."""
        config = copy.deepcopy(base) if base else get_config(os.environ.get("CALLSHEET_PRESET", "default"))

        if "CALLSHEET_CONFIDENCE_THRESHOLD" in os.environ:
            config.confidence_threshold = float(os.environ["CALLSHEET_CONFIDENCE_THRESHOLD"])
        if "CALLSHEET_FUZZY_THRESHOLD" in os.environ:
            config.fuzzy_merge_threshold = float(os.environ["CALLSHEET_FUZZY_THRESHOLD"])
        if "CALLSHEET_PROXIMITY_WINDOW" in os.environ:
            config.proximity_window = int(os.environ["CALLSHEET_PROXIMITY_WINDOW"])
        if "CALLSHEET_STRATEGIES" in os.environ:
            config.enabled_strategies = parse_strategies(os.environ["CALLSHEET_STRATEGIES"])
        if "CALLSHEET_MULTI_PASS" in os.environ:
            config.use_multi_pass = os.environ["CALLSHEET_MULTI_PASS"].lower() == "true"
        if "CALLSHEET_ENHANCE" in os.environ:
            config.enhance = os.environ["CALLSHEET_ENHANCE"].lower() == "true"

        method = os.environ.get("CALLSHEET_METHOD")
        if method:
            if method not in METHODS:
                raise ValueError(f"Unknown extraction method: {method}. Available: {list(METHODS)}")
            config.router.preferred_method = method
        if "CALLSHEET_HYBRID_ENABLED" in os.environ:
            config.router.hybrid_enabled = os.environ["CALLSHEET_HYBRID_ENABLED"].lower() == "true"

        config.model.provider = os.environ.get("CALLSHEET_LLM_PROVIDER", config.model.provider)
        config.model.model = os.environ.get("CALLSHEET_LLM_MODEL", config.model.model)
        if "CALLSHEET_REQUESTS_PER_MINUTE" in os.environ:
            config.model.requests_per_minute = int(os.environ["CALLSHEET_REQUESTS_PER_MINUTE"])
        if "CALLSHEET_MAX_ATTEMPTS" in os.environ:
            config.model.max_attempts = int(os.environ["CALLSHEET_MAX_ATTEMPTS"])
        return config


def parse_strategies(value: str) -> tuple[Strategy, ...]:
    names = [v.strip() for v in value.split(",") if v.strip()]
    known = {s.value: s for s in Strategy}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown strategies: {unknown}. Available: {list(known)}")
    return tuple(s for s in Strategy if s.value in names)


CONFIG_PRESETS: dict[str, ExtractionConfig] = {
    "default": ExtractionConfig(),
    "fast": ExtractionConfig(
        name="fast",
        enhance=False,
        router=RouterConfig(preferred_method="heuristic", hybrid_enabled=False),
    ),
    "thorough": ExtractionConfig(
        name="thorough",
        use_multi_pass=True,
        router=RouterConfig(small_document_chars=0),
        model=ModelConfig(max_attempts=6),
    ),
}


def get_config(name: str = "default") -> ExtractionConfig:
    """Return a fresh copy of a named preset."""
    if name not in CONFIG_PRESETS:
        raise ValueError(f"Unknown config preset: {name}. Available: {list(CONFIG_PRESETS)}")
    return copy.deepcopy(CONFIG_PRESETS[name])

