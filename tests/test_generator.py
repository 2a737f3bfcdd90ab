"""Tests for the generation use case with a mocked store and provider."""

import hashlib
import json
import typing
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from app.core.db.schemas.flashcards import FlashcardSource
from app.core.logging import GenerationLogAdapter
from app.modules.generations.errors import GenerationFailedError, NetworkError
from app.modules.generations.generator import SYSTEM_PROMPT, source_text_fingerprint
from app.modules.generations.main import FlashcardsGenerator

from conftest import chat_completion, flashcards_completion


TWO_CARDS = [
    {"front": "What is photosynthesis?", "back": "Turning light into chemical energy."},
    {"front": "Product of photosynthesis?", "back": "Glucose."},
]


def make_store(generation_id=42):
    store = AsyncMock()
    store.create_generation.return_value = SimpleNamespace(id=generation_id)
    return store


class TestFingerprint:
    def test_deterministic(self, source_text):
        assert source_text_fingerprint(source_text) == source_text_fingerprint(
            source_text
        )

    def test_sha256_hex(self, source_text):
        fingerprint = source_text_fingerprint(source_text)

        assert len(fingerprint) == 64
        assert all(c in "0123456789abcdef" for c in fingerprint)
        assert fingerprint == hashlib.sha256(source_text.encode("utf-8")).hexdigest()

    def test_distinct_texts(self, source_text):
        assert source_text_fingerprint(source_text) != source_text_fingerprint(
            source_text + "."
        )

    def test_non_ascii_text(self):
        text = "Zażółć gęślą jaźń"
        assert (
            source_text_fingerprint(text)
            == hashlib.sha256(text.encode("utf-8")).hexdigest()
        )


class TestGenerate:
    @pytest.mark.asyncio
    async def test_success(self, make_client, source_text):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return httpx.Response(200, json=flashcards_completion(TWO_CARDS))

        store = make_store()
        generator = FlashcardsGenerator(make_client(handler), store)

        result = await generator.generate(source_text, user_id=7)

        assert result.generation_id == 42
        assert result.generated_count == 2
        assert [p.front for p in result.flashcards_proposals] == [
            c["front"] for c in TWO_CARDS
        ]
        assert all(
            p.source is FlashcardSource.AI_GENERATED
            for p in result.flashcards_proposals
        )

        store.create_generation.assert_awaited_once()
        kwargs = store.create_generation.await_args.kwargs
        assert kwargs["user_id"] == 7
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["generated_count"] == 2
        assert kwargs["source_text_hash"] == source_text_fingerprint(source_text)
        assert kwargs["source_text_length"] == len(source_text)
        assert kwargs["generation_duration"] >= 0
        store.log_generation_error.assert_not_awaited()

        messages = requests[0]["messages"]
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert messages[1] == {"role": "user", "content": source_text}

    @pytest.mark.asyncio
    async def test_model_override(self, make_client, source_text):
        models = []

        def handler(request: httpx.Request) -> httpx.Response:
            models.append(json.loads(request.content)["model"])
            return httpx.Response(200, json=flashcards_completion(TWO_CARDS))

        store = make_store()
        generator = FlashcardsGenerator(
            make_client(handler), store, model="anthropic/claude-3.5-haiku"
        )

        await generator.generate(source_text, user_id=7)

        assert models == ["anthropic/claude-3.5-haiku"]
        assert (
            store.create_generation.await_args.kwargs["model"]
            == "anthropic/claude-3.5-haiku"
        )

    @pytest.mark.asyncio
    async def test_network_failure_is_logged_once(self, make_client, source_text):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        store = make_store()
        generator = FlashcardsGenerator(make_client(handler), store)

        with pytest.raises(GenerationFailedError) as exc_info:
            await generator.generate(source_text, user_id=7)

        assert str(exc_info.value) == (
            "Failed to generate flashcards due to an AI service error."
        )
        assert isinstance(exc_info.value.__cause__, NetworkError)
        store.create_generation.assert_not_awaited()
        store.log_generation_error.assert_awaited_once()
        kwargs = store.log_generation_error.await_args.kwargs
        assert kwargs["user_id"] == 7
        assert kwargs["error_code"] == "network_error"
        assert kwargs["source_text_hash"] == hashlib.sha256(
            source_text.encode("utf-8")
        ).hexdigest()
        assert kwargs["source_text_length"] == len(source_text)
        assert "connection refused" in kwargs["error_message"]

    @pytest.mark.asyncio
    async def test_provider_status_is_logged(self, make_client, source_text):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "slow down"}})

        store = make_store()
        generator = FlashcardsGenerator(make_client(handler), store)

        with pytest.raises(GenerationFailedError):
            await generator.generate(source_text, user_id=7)

        kwargs = store.log_generation_error.await_args.kwargs
        assert kwargs["error_code"] == "rate_limit_error"
        assert kwargs["error_message"] == "slow down"

    @pytest.mark.asyncio
    async def test_off_shape_reply_creates_no_generation(
        self, make_client, source_text
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=chat_completion('{"flashcards": []}'))

        store = make_store()
        generator = FlashcardsGenerator(make_client(handler), store)

        with pytest.raises(GenerationFailedError):
            await generator.generate(source_text, user_id=7)

        store.create_generation.assert_not_awaited()
        kwargs = store.log_generation_error.await_args.kwargs
        assert kwargs["error_code"] == "schema_validation_error"

    @pytest.mark.asyncio
    async def test_error_log_failure_keeps_original_cause(
        self, make_client, source_text
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        store = make_store()
        store.log_generation_error.side_effect = RuntimeError("database is down")
        generator = FlashcardsGenerator(make_client(handler), store)

        with pytest.raises(GenerationFailedError) as exc_info:
            await generator.generate(source_text, user_id=7)

        assert isinstance(exc_info.value.__cause__, NetworkError)
        store.log_generation_error.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_insert_failure_fails_the_operation(self, make_client, source_text):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=flashcards_completion(TWO_CARDS))

        store = make_store()
        store.create_generation.side_effect = RuntimeError("unique violation")
        generator = FlashcardsGenerator(make_client(handler), store)

        with pytest.raises(GenerationFailedError):
            await generator.generate(source_text, user_id=7)

        kwargs = store.log_generation_error.await_args.kwargs
        assert kwargs["error_code"] == "persistence_error"
        assert kwargs["error_message"] == "unique violation"

    @pytest.mark.asyncio
    async def test_repeat_calls_are_not_deduplicated(self, make_client, source_text):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=flashcards_completion(TWO_CARDS))

        store = make_store()
        generator = FlashcardsGenerator(make_client(handler), store)

        await generator.generate(source_text, user_id=7)
        await generator.generate(source_text, user_id=7)

        assert len(calls) == 2
        assert store.create_generation.await_count == 2
        hashes = {
            c.kwargs["source_text_hash"] for c in store.create_generation.await_args_list
        }
        assert len(hashes) == 1


@pytest.mark.asyncio
async def test_overlong_proposal_creates_no_generation(make_client, source_text):
    cards = [{"front": "Q" * 250, "back": "A"}]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=flashcards_completion(cards))

    store = make_store()
    generator = FlashcardsGenerator(make_client(handler), store)

    with pytest.raises(GenerationFailedError):
        await generator.generate(source_text, user_id=7)

    store.create_generation.assert_not_awaited()
    kwargs = store.log_generation_error.await_args.kwargs
    assert kwargs["error_code"] == "schema_validation_error"
    assert "flashcards[0].front" in kwargs["error_message"]


def test_system_prompt_states_length_limits():
    assert "200 characters" in SYSTEM_PROMPT
    assert "500 characters" in SYSTEM_PROMPT


def test_failure_recorder_takes_the_bound_log_adapter():
    hints = typing.get_type_hints(FlashcardsGenerator._record_failure)

    assert hints["log"] is GenerationLogAdapter
