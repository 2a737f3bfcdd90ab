from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.db.schemas.flashcards import FlashcardSource
from app.modules.flashcards.models.flashcards import FlashcardCreate, FlashcardUpdate


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class ListFlashcardsQuery(BaseModel):
    page: int = Field(default=1, gt=0)
    limit: int = Field(default=10, gt=0, le=100)
    sort: Literal["created_at", "updated_at", "front", "back"] = "created_at"
    order: Literal["asc", "desc"] = "desc"
    source: Optional[FlashcardSource] = None
    generation_id: Optional[int] = Field(default=None, gt=0)


class FlashcardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    front: str
    back: str
    source: FlashcardSource
    generation_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class FlashcardListResponse(BaseModel):
    data: list[FlashcardRead] = Field(default_factory=list)
    pagination: Pagination


class CreateFlashcardsRequest(BaseModel):
    flashcards: list[FlashcardCreate] = Field(
        ..., min_length=1, description="Accepted proposals or manual cards"
    )


class CreateFlashcardsResponse(BaseModel):
    flashcards: list[FlashcardRead] = Field(default_factory=list)


UpdateFlashcardRequest = FlashcardUpdate
