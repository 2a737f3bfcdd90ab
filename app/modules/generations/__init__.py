"""Flashcard generation module exports."""

from .models.proposals import (
    ProposedCard,
    FlashcardsResponse,
    FlashcardProposal,
    GenerateFlashcardsResult,
)
from .client import OpenRouterClient
from .extractor import extract
from .generator import SYSTEM_PROMPT, source_text_fingerprint
from .main import FlashcardsGenerator

__all__ = [
    "ProposedCard",
    "FlashcardsResponse",
    "FlashcardProposal",
    "GenerateFlashcardsResult",
    "OpenRouterClient",
    "extract",
    "SYSTEM_PROMPT",
    "source_text_fingerprint",
    "FlashcardsGenerator",
]
