"""Pydantic models for user-owned flashcards.

Front and back limits match the column sizes. An AI-sourced card must point at
the generation it came from; a manual card must not.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from app.core.db.schemas.flashcards import (
    BACK_MAX_LENGTH,
    FRONT_MAX_LENGTH,
    FlashcardSource,
)


class FlashcardCreate(BaseModel):
    front: str = Field(min_length=1, max_length=FRONT_MAX_LENGTH)
    back: str = Field(min_length=1, max_length=BACK_MAX_LENGTH)
    source: FlashcardSource
    generation_id: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _generation_matches_source(self) -> "FlashcardCreate":
        if self.source == FlashcardSource.MANUAL and self.generation_id is not None:
            raise ValueError("generation_id must be null for 'manual' source")
        if self.source != FlashcardSource.MANUAL and self.generation_id is None:
            raise ValueError("generation_id is required for AI-related sources")
        return self


class FlashcardUpdate(BaseModel):
    front: Optional[str] = Field(default=None, min_length=1, max_length=FRONT_MAX_LENGTH)
    back: Optional[str] = Field(default=None, min_length=1, max_length=BACK_MAX_LENGTH)
