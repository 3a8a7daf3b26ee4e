"""
Shared fixtures for the text detection test suite.
"""
import sys
from pathlib import Path

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'backend'))

from accounts import AccountStore  # noqa: E402
from external_api import APIError  # noqa: E402


AI_TEXT = (
    "As an AI language model, I cannot provide personal opinions. "
    "Furthermore, it is important to note that this topic is complex."
)

HUMAN_TEXT = "lol yeah i think pizza is awesome, can't wait for tomorrow!"


class FakeClock:
    """Manually advanced stand-in for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeAPIClient:
    """In-memory ExternalDetectionClient double that records calls."""

    def __init__(self, gptzero_api_key='gptzero-key', huggingface_api_key=None,
                 probability=0.92, error: APIError = None):
        self.gptzero_api_key = gptzero_api_key
        self.huggingface_api_key = huggingface_api_key
        self.probability = probability
        self.error = error
        self.calls = []

    @property
    def available_vendors(self):
        vendors = []
        if self.gptzero_api_key:
            vendors.append('gptzero')
        if self.huggingface_api_key:
            vendors.append('huggingface')
        return vendors

    @property
    def is_configured(self):
        return bool(self.available_vendors)

    def detect_text_with_gptzero(self, text):
        self.calls.append(('gptzero', text))
        if self.error is not None:
            raise self.error
        return {'probability': self.probability, 'classification': 'AI_ONLY'}

    def detect_text_with_huggingface(self, text):
        self.calls.append(('huggingface', text))
        if self.error is not None:
            raise self.error
        return {'probability': self.probability, 'model': 'roberta-base-openai-detector'}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ai_text():
    return AI_TEXT


@pytest.fixture
def human_text():
    return HUMAN_TEXT


@pytest.fixture
def fake_api():
    """Factory for FakeAPIClient instances."""
    return FakeAPIClient


@pytest.fixture
def store():
    return AccountStore()
