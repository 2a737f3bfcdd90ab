from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
    Enum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .generations import Generation


FRONT_MAX_LENGTH = 200
BACK_MAX_LENGTH = 500


class FlashcardSource(str, enum.Enum):
    MANUAL = "manual"
    AI_GENERATED = "ai_generated"
    AI_EDITED = "ai_edited"


class Flashcard(Base):
    __tablename__ = "flashcards"
    __table_args__ = (
        CheckConstraint(
            "(source = 'manual' AND generation_id IS NULL) OR "
            "(source <> 'manual' AND generation_id IS NOT NULL)",
            name="ck_flashcards_generation_matches_source",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    generation_id: Mapped[int | None] = mapped_column(
        ForeignKey("generations.id", ondelete="CASCADE"), nullable=True, index=True
    )
    front: Mapped[str] = mapped_column(String(FRONT_MAX_LENGTH), nullable=False)
    back: Mapped[str] = mapped_column(String(BACK_MAX_LENGTH), nullable=False)
    source: Mapped[FlashcardSource] = mapped_column(
        Enum(
            FlashcardSource,
            name="flashcard_source",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user: Mapped["User"] = relationship("User", back_populates="flashcards")
    generation: Mapped[Optional["Generation"]] = relationship(
        "Generation", back_populates="flashcards"
    )


__all__ = [
    "FRONT_MAX_LENGTH",
    "BACK_MAX_LENGTH",
    "FlashcardSource",
    "Flashcard",
]
