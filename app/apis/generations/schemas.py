from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.apis.flashcards.schemas import FlashcardRead, Pagination
from app.core.db.schemas.flashcards import FlashcardSource
from app.core.db.schemas.generations import (
    SOURCE_TEXT_MAX_LENGTH,
    SOURCE_TEXT_MIN_LENGTH,
)


class GenerateFlashcardsRequest(BaseModel):
    source_text: str = Field(
        ...,
        min_length=SOURCE_TEXT_MIN_LENGTH,
        max_length=SOURCE_TEXT_MAX_LENGTH,
        description="Study material to turn into flashcard proposals",
    )


class GenerationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    model: str
    generated_count: int
    source_text_hash: str
    source_text_length: int
    generation_duration: int
    created_at: datetime


class GenerationListResponse(BaseModel):
    data: list[GenerationRead] = Field(default_factory=list)
    pagination: Pagination


class GenerationDetailRead(GenerationRead):
    flashcards: list[FlashcardRead] = Field(default_factory=list)

    # Derived from the saved cards; the generation row itself is never updated
    @computed_field
    @property
    def accepted_unedited_count(self) -> int:
        return sum(
            1 for c in self.flashcards if c.source == FlashcardSource.AI_GENERATED
        )

    @computed_field
    @property
    def accepted_edited_count(self) -> int:
        return sum(
            1 for c in self.flashcards if c.source == FlashcardSource.AI_EDITED
        )
