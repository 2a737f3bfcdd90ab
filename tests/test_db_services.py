"""Tests for GenerationStore and FlashcardStore against a mocked AsyncSession."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.db import base as db_base
from app.core.db.schemas.flashcards import Flashcard, FlashcardSource
from app.core.db.schemas.generations import Generation, GenerationErrorLog
from app.core.db_services import FlashcardStore, GenerationStore
from app.core.errors import RecordNotFoundError
from app.modules.flashcards.models.flashcards import FlashcardCreate


def make_session(*, rows=(), one=None, total=0):
    session = MagicMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.scalar = AsyncMock(return_value=total)

    result = MagicMock()
    result.scalars.return_value.all.return_value = list(rows)
    result.scalar_one_or_none.return_value = one
    session.execute = AsyncMock(return_value=result)
    return session


GENERATION_KWARGS = dict(
    user_id=7,
    model="openai/gpt-4o-mini",
    source_text_hash="a" * 64,
    source_text_length=1500,
    generated_count=3,
    generation_duration=840,
)


class TestGenerationStore:
    @pytest.mark.asyncio
    async def test_create_generation(self):
        session = make_session()
        store = GenerationStore(session)

        generation = await store.create_generation(**GENERATION_KWARGS)

        assert isinstance(generation, Generation)
        assert generation.user_id == 7
        assert generation.generated_count == 3
        assert generation.source_text_hash == "a" * 64
        session.add.assert_called_once_with(generation)
        session.commit.assert_awaited_once()
        session.refresh.assert_awaited_once_with(generation)

    @pytest.mark.asyncio
    async def test_create_generation_rolls_back(self):
        session = make_session()
        session.commit.side_effect = RuntimeError("constraint violated")
        store = GenerationStore(session)

        with pytest.raises(RuntimeError):
            await store.create_generation(**GENERATION_KWARGS)

        session.rollback.assert_awaited_once()
        session.refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_log_generation_error(self):
        session = make_session()
        store = GenerationStore(session)

        await store.log_generation_error(
            user_id=7,
            model="openai/gpt-4o-mini",
            source_text_hash="b" * 64,
            source_text_length=2000,
            error_code="network_error",
            error_message="connection refused",
        )

        (row,), _ = session.add.call_args
        assert isinstance(row, GenerationErrorLog)
        assert row.error_code == "network_error"
        assert row.error_message == "connection refused"
        assert row.source_text_length == 2000
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_log_generation_error_propagates(self):
        session = make_session()
        session.commit.side_effect = RuntimeError("database is down")
        store = GenerationStore(session)

        with pytest.raises(RuntimeError):
            await store.log_generation_error(
                user_id=7,
                model="m",
                source_text_hash="c" * 64,
                source_text_length=1000,
                error_code="api_error",
                error_message="bad request",
            )
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_generations(self):
        rows = [SimpleNamespace(id=2), SimpleNamespace(id=1)]
        session = make_session(rows=rows, total=12)
        store = GenerationStore(session)

        result, total = await store.list_generations(7, page=2, limit=2)

        assert list(result) == rows
        assert total == 12
        session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_generation_not_found(self):
        store = GenerationStore(make_session(one=None))

        with pytest.raises(RecordNotFoundError) as exc_info:
            await store.get_generation(7, 99)

        assert str(exc_info.value) == "Generation not found"
        assert exc_info.value.record_id == 99


class TestFlashcardStore:
    @pytest.mark.asyncio
    async def test_create_manual_cards(self):
        session = make_session()
        store = FlashcardStore(session)

        cards = await store.create_flashcards(
            7,
            [
                FlashcardCreate(front="Q1", back="A1", source=FlashcardSource.MANUAL),
                FlashcardCreate(front="Q2", back="A2", source=FlashcardSource.MANUAL),
            ],
        )

        assert [c.front for c in cards] == ["Q1", "Q2"]
        assert all(isinstance(c, Flashcard) and c.user_id == 7 for c in cards)
        assert all(c.generation_id is None for c in cards)
        session.execute.assert_not_awaited()
        session.commit.assert_awaited_once()
        assert session.refresh.await_count == 2

    @pytest.mark.asyncio
    async def test_accepting_proposals_only_reads_generations(self):
        session = make_session(rows=[5])
        store = FlashcardStore(session)

        cards = await store.create_flashcards(
            7,
            [
                FlashcardCreate(
                    front="Q1", back="A1", source="ai_generated", generation_id=5
                ),
                FlashcardCreate(
                    front="Q2", back="edited", source="ai_edited", generation_id=5
                ),
            ],
        )

        assert [c.generation_id for c in cards] == [5, 5]
        assert [c.source for c in cards] == [
            FlashcardSource.AI_GENERATED,
            FlashcardSource.AI_EDITED,
        ]
        session.execute.assert_awaited_once()
        (added,), _ = session.add_all.call_args
        assert all(isinstance(row, Flashcard) for row in added)
        session.add.assert_not_called()
        refreshed = [c.args[0] for c in session.refresh.await_args_list]
        assert refreshed == cards

    @pytest.mark.asyncio
    async def test_create_rejects_foreign_generation(self):
        session = make_session(rows=[])
        store = FlashcardStore(session)

        with pytest.raises(RecordNotFoundError):
            await store.create_flashcards(
                7,
                [
                    FlashcardCreate(
                        front="Q", back="A", source="ai_generated", generation_id=8
                    )
                ],
            )

        session.add_all.assert_not_called()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_flashcards(self):
        rows = [SimpleNamespace(id=1)]
        session = make_session(rows=rows, total=1)
        store = FlashcardStore(session)

        result, total = await store.list_flashcards(
            7, sort="front", order="asc", source=FlashcardSource.MANUAL
        )

        assert list(result) == rows
        assert total == 1

    @pytest.mark.asyncio
    async def test_edit_marks_ai_card_as_edited(self):
        card = SimpleNamespace(
            id=3, front="Q", back="A", source=FlashcardSource.AI_GENERATED
        )
        session = make_session(one=card)
        store = FlashcardStore(session)

        updated = await store.update_flashcard(7, 3, back="Better answer")

        assert updated.back == "Better answer"
        assert updated.front == "Q"
        assert updated.source == FlashcardSource.AI_EDITED
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unchanged_edit_keeps_source(self):
        card = SimpleNamespace(
            id=3, front="Q", back="A", source=FlashcardSource.AI_GENERATED
        )
        store = FlashcardStore(make_session(one=card))

        updated = await store.update_flashcard(7, 3, front="Q")

        assert updated.source == FlashcardSource.AI_GENERATED

    @pytest.mark.asyncio
    async def test_manual_card_stays_manual(self):
        card = SimpleNamespace(id=4, front="Q", back="A", source=FlashcardSource.MANUAL)
        store = FlashcardStore(make_session(one=card))

        updated = await store.update_flashcard(7, 4, front="New question")

        assert updated.source == FlashcardSource.MANUAL

    @pytest.mark.asyncio
    async def test_delete_flashcard(self):
        card = SimpleNamespace(id=3)
        session = make_session(one=card)
        store = FlashcardStore(session)

        await store.delete_flashcard(7, 3)

        session.delete.assert_awaited_once_with(card)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_card(self):
        session = make_session(one=None)
        store = FlashcardStore(session)

        with pytest.raises(RecordNotFoundError):
            await store.delete_flashcard(7, 404)

        session.delete.assert_not_awaited()


class TestTables:
    def test_generation_rows_have_no_mutable_columns(self):
        columns = set(Generation.__table__.c.keys())

        assert "updated_at" not in columns
        assert not {c for c in columns if c.startswith("accepted_")}

    def test_generation_delete_cascades_to_its_cards(self):
        (fk,) = Flashcard.__table__.c.generation_id.foreign_keys

        assert fk.column.table.name == "generations"
        assert fk.ondelete == "CASCADE"


class TestGetSession:
    @pytest.fixture
    def session(self, monkeypatch):
        session = AsyncMock()
        maker = MagicMock()
        maker.return_value.__aenter__.return_value = session
        monkeypatch.setattr(db_base, "async_session_maker", maker)
        return session

    @pytest.mark.asyncio
    async def test_commits_after_request(self, session):
        dependency = db_base.get_session()

        assert await dependency.__anext__() is session
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, session):
        dependency = db_base.get_session()
        await dependency.__anext__()

        with pytest.raises(RuntimeError, match="boom"):
            await dependency.athrow(RuntimeError("boom"))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()
