"""Database service classes for generations and flashcards."""

from __future__ import annotations

from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.core.errors import RecordNotFoundError
from app.core.db.schemas.flashcards import Flashcard, FlashcardSource
from app.core.db.schemas.generations import Generation, GenerationErrorLog
from app.modules.flashcards.models.flashcards import FlashcardCreate


FLASHCARD_SORT_COLUMNS = {
    "created_at": Flashcard.created_at,
    "updated_at": Flashcard.updated_at,
    "front": Flashcard.front,
    "back": Flashcard.back,
}


class GenerationStore:
    """Appends generation rows and error logs; reads a user's generation history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_generation(
        self,
        *,
        user_id: int,
        model: str,
        source_text_hash: str,
        source_text_length: int,
        generated_count: int,
        generation_duration: int,
    ) -> Generation:
        """Insert and commit a generation row; rolls back before re-raising."""
        generation = Generation(
            user_id=user_id,
            model=model,
            source_text_hash=source_text_hash,
            source_text_length=source_text_length,
            generated_count=generated_count,
            generation_duration=generation_duration,
        )
        self.session.add(generation)
        try:
            await self.session.commit()
            await self.session.refresh(generation)
        except Exception:
            await self.session.rollback()
            raise
        return generation

    async def log_generation_error(
        self,
        *,
        user_id: int,
        model: str,
        source_text_hash: str,
        source_text_length: int,
        error_code: str,
        error_message: str,
    ) -> None:
        self.session.add(
            GenerationErrorLog(
                user_id=user_id,
                model=model,
                source_text_hash=source_text_hash,
                source_text_length=source_text_length,
                error_code=error_code,
                error_message=error_message,
            )
        )
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def list_generations(
        self, user_id: int, *, page: int = 1, limit: int = 10
    ) -> tuple[Sequence[Generation], int]:
        total = await self.session.scalar(
            select(func.count())
            .select_from(Generation)
            .where(Generation.user_id == user_id)
        )
        result = await self.session.execute(
            select(Generation)
            .where(Generation.user_id == user_id)
            .order_by(Generation.created_at.desc(), Generation.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), int(total or 0)

    async def get_generation(self, user_id: int, generation_id: int) -> Generation:
        result = await self.session.execute(
            select(Generation)
            .options(selectinload(Generation.flashcards))
            .where(Generation.id == generation_id, Generation.user_id == user_id)
        )
        generation = result.scalar_one_or_none()
        if generation is None:
            raise RecordNotFoundError("Generation", generation_id)
        return generation


class FlashcardStore:
    """CRUD over a single user's flashcards."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_flashcards(
        self,
        user_id: int,
        *,
        page: int = 1,
        limit: int = 10,
        sort: str = "created_at",
        order: str = "desc",
        source: Optional[FlashcardSource] = None,
        generation_id: Optional[int] = None,
    ) -> tuple[Sequence[Flashcard], int]:
        filters = [Flashcard.user_id == user_id]
        if source is not None:
            filters.append(Flashcard.source == source)
        if generation_id is not None:
            filters.append(Flashcard.generation_id == generation_id)

        column = FLASHCARD_SORT_COLUMNS.get(sort, Flashcard.created_at)
        ordering = column.asc() if order == "asc" else column.desc()

        total = await self.session.scalar(
            select(func.count()).select_from(Flashcard).where(*filters)
        )
        result = await self.session.execute(
            select(Flashcard)
            .where(*filters)
            .order_by(ordering, Flashcard.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), int(total or 0)

    async def _require_owned_generations(
        self, user_id: int, generation_ids: set[int]
    ) -> None:
        if not generation_ids:
            return
        result = await self.session.execute(
            select(Generation.id).where(
                Generation.id.in_(generation_ids), Generation.user_id == user_id
            )
        )
        found = set(result.scalars().all())
        for generation_id in sorted(generation_ids):
            if generation_id not in found:
                raise RecordNotFoundError("Generation", generation_id)

    async def create_flashcards(
        self, user_id: int, items: Sequence[FlashcardCreate]
    ) -> list[Flashcard]:
        """Insert accepted or manual cards; generation rows are only read."""
        await self._require_owned_generations(
            user_id, {i.generation_id for i in items if i.generation_id is not None}
        )

        cards = [
            Flashcard(
                user_id=user_id,
                front=item.front,
                back=item.back,
                source=item.source,
                generation_id=item.generation_id,
            )
            for item in items
        ]
        self.session.add_all(cards)

        await self.session.commit()
        for card in cards:
            await self.session.refresh(card)
        return cards

    async def get_flashcard(self, user_id: int, flashcard_id: int) -> Flashcard:
        result = await self.session.execute(
            select(Flashcard).where(
                Flashcard.id == flashcard_id, Flashcard.user_id == user_id
            )
        )
        card = result.scalar_one_or_none()
        if card is None:
            raise RecordNotFoundError("Flashcard", flashcard_id)
        return card

    async def update_flashcard(
        self,
        user_id: int,
        flashcard_id: int,
        *,
        front: Optional[str] = None,
        back: Optional[str] = None,
    ) -> Flashcard:
        """Apply edits; an edited ``ai_generated`` card becomes ``ai_edited``."""
        card = await self.get_flashcard(user_id, flashcard_id)
        changed = False
        if front is not None and front != card.front:
            card.front = front
            changed = True
        if back is not None and back != card.back:
            card.back = back
            changed = True
        if changed and card.source == FlashcardSource.AI_GENERATED:
            card.source = FlashcardSource.AI_EDITED

        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def delete_flashcard(self, user_id: int, flashcard_id: int) -> None:
        card = await self.get_flashcard(user_id, flashcard_id)
        await self.session.delete(card)
        await self.session.commit()
