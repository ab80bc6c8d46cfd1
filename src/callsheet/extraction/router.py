"""Method selection and candidate collection.

The router decides between heuristic, model and hybrid extraction, picks the
heuristic strategies for the detected layout, and returns every candidate
pool unmerged. Fusion happens once, downstream, over all pools.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

from ..shared.llm import LLMProvider
from .config import ExtractionConfig, RouterConfig
from .fast.linker import collect_observations, link_by_name
from .fast.patterns import PatternLibrary, get_pattern_library
from .fast.production import infer_production_type
from .fast.strategies import StrategyContext, run_strategies
from .slow.extractor import ModelExtractor, ModelPassResult
from .slow.retry import RetryPolicy
from .types import PROXIMITY_ORIGIN, MODEL_ORIGIN, ContactCandidate, DocumentStructure, Layout, Strategy

logger = logging.getLogger(__name__)


class ExtractionMethod(str, Enum):
    HEURISTIC = "heuristic"
    MODEL = "model"
    HYBRID = "hybrid"


AUTO = "auto"

# Generic strategies always run; layout-specific ones join when detected.
STRATEGY_TABLE: dict[Layout, tuple[Strategy, ...]] = {
    Layout.TABULAR: (Strategy.LINE_BY_LINE, Strategy.TABULAR, Strategy.FREEFORM),
    Layout.MULTILINE: (Strategy.LINE_BY_LINE, Strategy.MULTI_LINE, Strategy.FREEFORM),
    Layout.SECTIONED: (Strategy.LINE_BY_LINE, Strategy.SECTIONED, Strategy.FREEFORM),
    Layout.MIXED: (Strategy.LINE_BY_LINE, Strategy.FREEFORM),
}


def select_strategies(
    structure: DocumentStructure,
    enabled: tuple[Strategy, ...] = tuple(Strategy),
) -> tuple[Strategy, ...]:
    chosen = set(STRATEGY_TABLE[structure.layout])
    if structure.has_table_like_columns:
        chosen.add(Strategy.TABULAR)
    if structure.has_multiline_stanzas:
        chosen.add(Strategy.MULTI_LINE)
    if structure.sections:
        chosen.add(Strategy.SECTIONED)
    return tuple(s for s in Strategy if s in chosen and s in enabled)


@dataclass(frozen=True)
class MethodDecision:
    method: ExtractionMethod
    reason: str


def _is_unstructured(structure: DocumentStructure) -> bool:
    return (
        structure.layout is Layout.MIXED
        and not structure.sections
        and not structure.has_email_signals
        and not structure.has_phone_signals
    )


def choose_method(
    text: str,
    structure: DocumentStructure,
    config: RouterConfig,
    model_available: bool,
    override: str | None = None,
) -> MethodDecision:
    """Pick the extraction method for *text*.

    An explicit override (per call, then configured) wins, except that a model
    method without a provider degrades to heuristic. Otherwise very large or
    unstructured documents go to the model, small ones stay heuristic and the
    rest run hybrid when enabled.
    """
    requested = override if override and override != AUTO else None
    source = "requested"
    if requested is None and config.preferred_method != AUTO:
        requested, source = config.preferred_method, "configured"

    if requested is not None:
        method = ExtractionMethod(requested)
        if method is not ExtractionMethod.HEURISTIC and not model_available:
            return MethodDecision(
                ExtractionMethod.HEURISTIC,
                f"{method.value} {source} but no model provider is configured",
            )
        return MethodDecision(method, f"{method.value} {source}")

    if not model_available:
        return MethodDecision(ExtractionMethod.HEURISTIC, "no model provider configured")

    size = len(text)
    if size > config.large_document_chars:
        return MethodDecision(ExtractionMethod.MODEL, f"large document ({size} chars)")
    if _is_unstructured(structure):
        return MethodDecision(ExtractionMethod.MODEL, "no recognizable structure or contact signals")
    if size < config.small_document_chars:
        return MethodDecision(ExtractionMethod.HEURISTIC, f"small document ({size} chars)")
    if config.hybrid_enabled:
        return MethodDecision(ExtractionMethod.HYBRID, f"medium document ({size} chars)")
    return MethodDecision(ExtractionMethod.HEURISTIC, f"medium document ({size} chars), hybrid disabled")


@dataclass
class RoutedCandidates:
    """Unmerged candidate pools plus what it took to produce them."""
    pools: dict[str, list[ContactCandidate]]
    decision: MethodDecision
    strategies_used: tuple[str, ...] = ()
    document_type: str | None = None
    chunks_total: int = 0
    chunks_failed: int = 0
    fallback_used: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def raw_count(self) -> int:
        return sum(len(pool) for pool in self.pools.values())


class MethodRouter:
    def __init__(
        self,
        config: ExtractionConfig,
        provider: LLMProvider | None = None,
        policy: RetryPolicy | None = None,
        library: PatternLibrary | None = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self.library = library or get_pattern_library()
        self.model_extractor = (
            ModelExtractor(provider, config.model, policy, self.library) if provider else None
        )

    def run_heuristic(
        self,
        text: str,
        structure: DocumentStructure,
        use_multi_pass: bool = False,
    ) -> dict[str, list[ContactCandidate]]:
        strategies = select_strategies(structure, self.config.enabled_strategies)
        ctx = StrategyContext(library=self.library, proximity_window=self.config.proximity_window)
        results = run_strategies(text, structure, strategies, ctx)
        pools = {strategy.value: found for strategy, found in results.items()}
        if use_multi_pass:
            observations = collect_observations(text, self.library)
            pools[PROXIMITY_ORIGIN] = link_by_name(observations, self.config.proximity_window)
        return pools

    def run_model(
        self,
        text: str,
        structure: DocumentStructure,
        role_preferences: list[str] | tuple[str, ...] = (),
    ) -> ModelPassResult:
        if self.model_extractor is None:
            raise RuntimeError("model extraction requested without a provider")
        return self.model_extractor.extract(
            text, structure, role_preferences, infer_production_type(text)
        )

    def route(
        self,
        text: str,
        structure: DocumentStructure,
        override: str | None = None,
        role_preferences: list[str] | tuple[str, ...] = (),
        use_multi_pass: bool = False,
    ) -> RoutedCandidates:
        decision = choose_method(
            text, structure, self.config.router, self.model_extractor is not None, override
        )
        logger.info("[router] method=%s (%s)", decision.method.value, decision.reason)

        if decision.method is ExtractionMethod.HEURISTIC:
            pools = self.run_heuristic(text, structure, use_multi_pass)
            return RoutedCandidates(pools=pools, decision=decision, strategies_used=tuple(pools))

        if decision.method is ExtractionMethod.MODEL:
            return self._route_model(text, structure, decision, role_preferences, use_multi_pass)

        return self._route_hybrid(text, structure, decision, role_preferences, use_multi_pass)

    def _route_model(
        self,
        text: str,
        structure: DocumentStructure,
        decision: MethodDecision,
        role_preferences: list[str] | tuple[str, ...],
        use_multi_pass: bool,
    ) -> RoutedCandidates:
        result = self.run_model(text, structure, role_preferences)
        routed = RoutedCandidates(
            pools={MODEL_ORIGIN: result.candidates},
            decision=decision,
            strategies_used=(MODEL_ORIGIN,),
            document_type=result.document_type,
            chunks_total=result.chunks_total,
            chunks_failed=result.chunks_failed,
            warnings=list(result.failures),
        )
        if result.all_failed:
            logger.warning("[router] every model chunk failed, falling back to heuristics")
            pools = self.run_heuristic(text, structure, use_multi_pass)
            routed.pools = pools
            routed.strategies_used = tuple(pools)
            routed.fallback_used = True
        return routed

    def _route_hybrid(
        self,
        text: str,
        structure: DocumentStructure,
        decision: MethodDecision,
        role_preferences: list[str] | tuple[str, ...],
        use_multi_pass: bool,
    ) -> RoutedCandidates:
        """Run both branches concurrently; either may fail without sinking the other."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            heuristic_future = executor.submit(self.run_heuristic, text, structure, use_multi_pass)
            model_future = executor.submit(self.run_model, text, structure, role_preferences)

            heuristic_error = heuristic_future.exception()
            model_error = model_future.exception()

        if heuristic_error is not None and model_error is not None:
            raise heuristic_error

        routed = RoutedCandidates(pools={}, decision=decision)
        if heuristic_error is None:
            routed.pools.update(heuristic_future.result())
        else:
            logger.error("[router] heuristic branch failed: %s", heuristic_error)
            routed.warnings.append(f"heuristic branch failed: {heuristic_error}")

        if model_error is None:
            result = model_future.result()
            routed.pools[MODEL_ORIGIN] = result.candidates
            routed.document_type = result.document_type
            routed.chunks_total = result.chunks_total
            routed.chunks_failed = result.chunks_failed
            routed.warnings.extend(result.failures)
        else:
            logger.error("[router] model branch failed: %s", model_error)
            routed.warnings.append(f"model branch failed: {model_error}")

        routed.strategies_used = tuple(routed.pools)
        return routed
