from .proposals import (
    ProposedCard,
    FlashcardsResponse,
    FlashcardProposal,
    GenerateFlashcardsResult,
)

__all__ = [
    "ProposedCard",
    "FlashcardsResponse",
    "FlashcardProposal",
    "GenerateFlashcardsResult",
]
