from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.config import Settings


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings():
    return Settings(completion_api_key="test-completion-key", search_api_key="test-search-key")


@pytest.fixture
def unconfigured_settings():
    return Settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def llm_reply():
    """Factory for a mocked OpenAI client whose completion returns ``content``."""

    def _make(content):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
        return client

    return _make


@pytest.fixture
def search_session():
    """Factory for a mocked requests session returning ``payload`` from ``.json()``."""

    def _make(payload):
        session = MagicMock()
        session.get.return_value.json.return_value = payload
        session.get.return_value.raise_for_status.return_value = None
        return session

    return _make
