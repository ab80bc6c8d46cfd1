"""Integration tests for model-assisted and hybrid extraction with a scripted provider."""
import json

import httpx
import pytest

from callsheet.extraction import extract, extract_document, get_config
from callsheet.extraction.errors import ModelServiceError, RateLimitError
from callsheet.shared.llm import AnthropicProvider

LENA = {"name": "Lena Ortiz", "role": "Model", "phone": "(310) 555-0199", "email": None}
JOHN = {"name": "JOHN SMITH", "role": "Director", "email": "john@studio.com", "phone": "555-123-4567"}


def _reply(*contacts):
    return json.dumps(list(contacts))


def _config(method, **model_settings):
    config = get_config()
    config.router.preferred_method = method
    for key, value in model_settings.items():
        setattr(config.model, key, value)
    return config


class TestHybrid:
    def test_model_contacts_join_heuristic_ones(self, scenario_b, make_provider, instant_policy):
        provider = make_provider([_reply(JOHN, LENA)])
        result = extract(scenario_b, config=_config("hybrid"), provider=provider, policy=instant_policy)

        by_name = {c.name: c for c in result.contacts}
        assert set(by_name) == {"John Smith", "Sarah Johnson", "Lena Ortiz"}
        assert by_name["Lena Ortiz"].origin == "model"
        assert "model" in by_name["John Smith"].origin
        assert result.metadata.method == "hybrid"
        assert "model" in result.metadata.strategies_used
        assert "line-by-line" in result.metadata.strategies_used
        assert result.metadata.chunks_total == 1
        assert result.metadata.document_type == "structured_table"
        assert scenario_b in provider.prompts[0]

    def test_failed_model_branch_keeps_heuristic_results(self, scenario_b, make_provider, instant_policy):
        provider = make_provider([RuntimeError("socket closed")])
        result = extract(scenario_b, config=_config("hybrid"), provider=provider, policy=instant_policy)

        assert {c.name for c in result.contacts} == {"John Smith", "Sarah Johnson"}
        assert result.metadata.warnings == ("model branch failed: socket closed",)
        assert "model" not in result.metadata.strategies_used

    def test_role_preferences_reach_the_prompt(self, scenario_b, make_provider, instant_policy):
        provider = make_provider(["[]"])
        extract(
            scenario_b, {"rolePreferences": ["Producer"]},
            config=_config("hybrid"), provider=provider, policy=instant_policy,
        )
        assert "list them first: Producer." in provider.prompts[0]


class TestModelOnly:
    def test_contacts_come_from_the_model(self, scenario_a, make_provider, instant_policy):
        provider = make_provider([_reply(LENA)])
        result = extract(scenario_a, config=_config("model"), provider=provider, policy=instant_policy)

        assert [c.name for c in result.contacts] == ["Lena Ortiz"]
        assert result.metadata.strategies_used == ("model",)
        assert not result.metadata.fallback_used

    def test_stray_entries_do_not_fail_the_chunk(self, scenario_a, make_provider, instant_policy):
        provider = make_provider([json.dumps([{"name": "Jane Doe", "phone": "555-123-4567"}, "N/A"])])
        result = extract(scenario_a, config=_config("model"), provider=provider, policy=instant_policy)

        assert [c.name for c in result.contacts] == ["Jane Doe"]
        assert result.metadata.chunks_failed == 0
        assert not result.metadata.fallback_used

    def test_rate_limit_is_retried(self, scenario_a, make_provider, instant_policy, sleeps):
        provider = make_provider([RateLimitError(retry_after=3), _reply(LENA)])
        result = extract(scenario_a, config=_config("model"), provider=provider, policy=instant_policy)

        assert sleeps == [3.0]
        assert len(provider.prompts) == 2
        assert result.metadata.chunks_failed == 0
        assert [c.name for c in result.contacts] == ["Lena Ortiz"]

    @pytest.mark.parametrize("reply", [
        ModelServiceError("[fake] 400: bad request", status_code=400),
        "Sorry, I cannot help with that.",
    ])
    def test_total_failure_falls_back_to_heuristics(self, scenario_a, make_provider, instant_policy, reply):
        provider = make_provider([reply])
        result = extract(scenario_a, config=_config("model"), provider=provider, policy=instant_policy)

        assert [c.name for c in result.contacts] == ["Coni Tarallo"]
        assert result.metadata.fallback_used
        assert result.metadata.chunks_failed == result.metadata.chunks_total == 1
        assert result.metadata.warnings[0].startswith("chunk 1/1")
        assert "model" not in result.metadata.strategies_used

    def test_retries_exhausted_counts_as_failed_chunk(self, scenario_a, make_provider, instant_policy, sleeps):
        provider = make_provider([ModelServiceError("[fake] 503", retryable=True, status_code=503)])
        result = extract(scenario_a, config=_config("model"), provider=provider, policy=instant_policy)

        assert sleeps == [1.0, 2.0, 4.0]
        assert result.metadata.fallback_used
        assert "Gave up after 4 attempts" in result.metadata.warnings[0]


class TestChunking:
    def test_chunks_are_paced(self, scenario_c, make_provider, instant_policy, sleeps):
        config = _config("model", large_document_tokens=10, chunk_tokens=20, requests_per_minute=30)
        provider = make_provider(["[]"])
        result = extract(scenario_c, config=config, provider=provider, policy=instant_policy)

        calls = len(provider.prompts)
        assert calls > 1
        assert result.metadata.chunks_total == calls
        assert sleeps == [2.0] * (calls - 1)
        assert result.contacts == ()

    def test_one_failed_chunk_does_not_sink_the_rest(self, scenario_c, make_provider, instant_policy):
        config = _config("model", large_document_tokens=10, chunk_tokens=20, requests_per_minute=0)
        provider = make_provider([
            _reply(LENA),
            ModelServiceError("[fake] 400: bad request", status_code=400),
        ])
        result = extract(scenario_c, config=config, provider=provider, policy=instant_policy)

        metadata = result.metadata
        assert metadata.chunks_total > 1
        assert metadata.chunks_failed == metadata.chunks_total - 1
        assert not metadata.fallback_used
        assert [c.name for c in result.contacts] == ["Lena Ortiz"]
        assert len(metadata.warnings) == metadata.chunks_failed


class TestAutoRouting:
    def test_small_structured_document_skips_the_model(self, scenario_c, make_provider, instant_policy):
        provider = make_provider(["[]"])
        result = extract(scenario_c, provider=provider, policy=instant_policy)

        assert provider.prompts == []
        assert result.metadata.method == "heuristic"
        assert result.metadata.method_reason.startswith("small document")

    def test_unstructured_text_goes_to_the_model(self, make_provider, instant_policy):
        provider = make_provider([_reply(LENA)])
        text = "Thanks everyone for a great week on set, see you all at the wrap party."
        result = extract(text, provider=provider, policy=instant_policy)

        assert result.metadata.method == "model"
        assert result.metadata.document_type == "narrative"
        assert [c.name for c in result.contacts] == ["Lena Ortiz"]

    def test_provider_from_environment(self, scenario_a, monkeypatch):
        monkeypatch.setenv("CALLSHEET_LLM_PROVIDER", "anthropic")
        response = extract_document({"text": scenario_a})
        assert response.success
        assert response.metadata["method"] == "heuristic"


class TestProviderFailures:
    @staticmethod
    def _provider(handler):
        return AnthropicProvider(api_key="test-key", client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_dropped_connection_falls_back(self, scenario_a, instant_policy, sleeps):
        def handler(request):
            raise httpx.ReadError("connection reset", request=request)

        result = extract(scenario_a, config=_config("model"), provider=self._provider(handler), policy=instant_policy)

        assert [c.name for c in result.contacts] == ["Coni Tarallo"]
        assert result.metadata.fallback_used
        assert sleeps == [1.0, 2.0, 4.0]

    def test_gateway_page_is_a_failed_chunk(self, scenario_a, instant_policy):
        provider = self._provider(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        response = extract_document(
            {"text": scenario_a, "options": {"preferredMethod": "model"}},
            provider=provider, policy=instant_policy,
        )

        assert response.success
        assert response.metadata["chunks_failed"] == 1
        assert response.metadata["fallback_used"] is True
