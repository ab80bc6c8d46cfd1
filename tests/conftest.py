"""Shared test fixtures."""
import pytest

from callsheet.extraction.slow.retry import RetryPolicy
from callsheet.shared.llm import LLMProvider

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "CALLSHEET_PRESET",
    "CALLSHEET_CONFIDENCE_THRESHOLD",
    "CALLSHEET_FUZZY_THRESHOLD",
    "CALLSHEET_PROXIMITY_WINDOW",
    "CALLSHEET_STRATEGIES",
    "CALLSHEET_MULTI_PASS",
    "CALLSHEET_ENHANCE",
    "CALLSHEET_METHOD",
    "CALLSHEET_HYBRID_ENABLED",
    "CALLSHEET_LLM_PROVIDER",
    "CALLSHEET_LLM_MODEL",
    "CALLSHEET_REQUESTS_PER_MINUTE",
    "CALLSHEET_MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """No test may reach a real model service or inherit local settings."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeProvider(LLMProvider):
    """Scripted provider: replies are returned (or raised) in order.

    The last reply is reused once the script runs out.
    """

    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []

    @property
    def name(self):
        return "fake"

    @property
    def default_model(self):
        return "fake-model"

    def complete(self, system, prompt, model=None, timeout=90, max_tokens=4000, temperature=0.1):
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def instant_policy(sleeps):
    """Retry policy with a recording fake clock and no jitter."""
    return RetryPolicy(sleep=sleeps.append, rand=lambda: 0.0)


@pytest.fixture
def scenario_a():
    return "Photographer: Coni Tarallo / 929.250.6798"


@pytest.fixture
def scenario_b():
    return (
        "JOHN SMITH | john@studio.com | (555) 123-4567 | Director\n"
        "SARAH JOHNSON | sarah@agency.com | (555) 234-5678 | Producer\n"
    )


@pytest.fixture
def scenario_c():
    return (
        "Name | Role | Email | Phone\n"
        "Alice Walker | Director | alice@studio.com | (212) 555-0101\n"
        "Ben Carter | Producer | ben@studio.com | (212) 555-0102\n"
        "Cara Diaz | Gaffer | cara@lights.com | (212) 555-0103\n"
        "Dan Evans | Editor | dan@post.com | (212) 555-0104\n"
        "Eve Foster | Stylist | eve@wardrobe.com | (212) 555-0105\n"
    )


@pytest.fixture
def pdf_garbage():
    return "%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n2 0 obj stream\nxyz\nendstream\n"


@pytest.fixture
def sectioned_sheet():
    return (
        "CREW\n"
        "Director: Maya Lin / maya@films.com\n"
        "Gaffer: Tom Reyes / (310) 555-0142\n"
        "\n"
        "TALENT\n"
        "Lena Ortiz - (310) 555-0199\n"
    )
