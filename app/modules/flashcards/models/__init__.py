from .flashcards import FlashcardCreate, FlashcardUpdate

__all__ = [
    "FlashcardCreate",
    "FlashcardUpdate",
]
