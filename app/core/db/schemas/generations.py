from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .flashcards import Flashcard


SOURCE_TEXT_MIN_LENGTH = 1000
SOURCE_TEXT_MAX_LENGTH = 10000


class Generation(Base):
    """One successful model call. Written once and never updated."""

    __tablename__ = "generations"
    __table_args__ = (
        CheckConstraint(
            f"source_text_length BETWEEN {SOURCE_TEXT_MIN_LENGTH} AND {SOURCE_TEXT_MAX_LENGTH}",
            name="ck_generations_source_text_length",
        ),
        CheckConstraint("generated_count >= 0", name="ck_generations_generated_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    model: Mapped[str] = mapped_column(String, nullable=False)
    generated_count: Mapped[int] = mapped_column(Integer, nullable=False)
    # SHA-256 hex digest; the text itself is never stored
    source_text_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    source_text_length: Mapped[int] = mapped_column(Integer, nullable=False)
    generation_duration: Mapped[int] = mapped_column(
        Integer, nullable=False
    )  # milliseconds
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="generations")
    flashcards: Mapped[list["Flashcard"]] = relationship(
        "Flashcard",
        back_populates="generation",
        cascade="all, delete",
        passive_deletes=True,
    )


class GenerationErrorLog(Base):
    __tablename__ = "generation_error_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    model: Mapped[str] = mapped_column(String, nullable=False)
    source_text_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    source_text_length: Mapped[int] = mapped_column(Integer, nullable=False)
    error_code: Mapped[str] = mapped_column(String(64), nullable=False)
    error_message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="generation_error_logs")


__all__ = [
    "SOURCE_TEXT_MIN_LENGTH",
    "SOURCE_TEXT_MAX_LENGTH",
    "Generation",
    "GenerationErrorLog",
]
