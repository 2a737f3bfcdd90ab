"""Pydantic models for AI flashcard proposals.

``FlashcardsResponse`` is the shape requested from the provider; the same
class builds the structured-output schema and validates the reply.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.core.db.schemas.flashcards import (
    BACK_MAX_LENGTH,
    FRONT_MAX_LENGTH,
    FlashcardSource,
)


class ProposedCard(BaseModel):
    """A single front/back pair as returned by the model."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    # Same limits as FlashcardCreate so an unedited proposal can always be saved
    front: str = Field(
        min_length=1,
        max_length=FRONT_MAX_LENGTH,
        description="The question or term on the front of the flashcard.",
    )
    back: str = Field(
        min_length=1,
        max_length=BACK_MAX_LENGTH,
        description="The answer or definition on the back of the flashcard.",
    )


class FlashcardsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    flashcards: list[ProposedCard] = Field(
        min_length=1, description="An array of generated flashcards."
    )


class FlashcardProposal(BaseModel):
    """Unpersisted candidate card tagged with its provenance."""

    front: str
    back: str
    source: FlashcardSource = FlashcardSource.AI_GENERATED


class GenerateFlashcardsResult(BaseModel):
    generation_id: int
    flashcards_proposals: list[FlashcardProposal] = Field(default_factory=list)
    generated_count: int
