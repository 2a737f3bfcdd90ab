"""Flashcards module exports."""

from .models.flashcards import FlashcardCreate, FlashcardUpdate

__all__ = [
    "FlashcardCreate",
    "FlashcardUpdate",
]
