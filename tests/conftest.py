"""
Pytest configuration and shared fixtures.

Settings are read at import time, so the environment is seeded before any
``app`` module is imported.
"""

import json
import os
import tempfile
from pathlib import Path

os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_DB_PORT", "5432")
os.environ.setdefault("POSTGRES_DB_NAME", "flashcards_test")
os.environ.setdefault("POSTGRES_DB_USER", "postgres")
os.environ.setdefault("POSTGRES_DB_PASSWORD", "postgres")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("OPENROUTER_API_KEY", "sk-or-test")
os.environ.setdefault(
    "JWT_KEY_FILE", str(Path(tempfile.gettempdir()) / "flashcards-test-jwt.pem")
)

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.core.config import OpenRouterSettings  # noqa: E402
from app.modules.generations.client import OpenRouterClient  # noqa: E402


SAMPLE_SOURCE_TEXT = (
    "Photosynthesis is the process by which green plants, algae and some "
    "bacteria convert light energy into chemical energy stored in glucose. "
) * 15


def chat_completion(content):
    """Provider envelope whose first choice carries ``content``."""
    return {
        "id": "gen-123",
        "object": "chat.completion",
        "model": "openai/gpt-4o-mini",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def flashcards_completion(cards):
    return chat_completion(json.dumps({"flashcards": cards}))


@pytest.fixture
def source_text():
    assert 1000 <= len(SAMPLE_SOURCE_TEXT) <= 10000
    return SAMPLE_SOURCE_TEXT


@pytest.fixture
def openrouter_settings():
    return OpenRouterSettings(
        OPENROUTER_API_KEY="sk-or-test",
        OPENROUTER_BASE_URL="https://openrouter.test/api/v1",
        OPENROUTER_MODEL="openai/gpt-4o-mini",
    )


@pytest.fixture
def make_client(openrouter_settings):
    """Build a client whose HTTP traffic goes to ``handler``."""

    def _make(handler, settings=None):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OpenRouterClient(settings or openrouter_settings, http_client=http_client)

    return _make
