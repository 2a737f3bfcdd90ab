"""Prompt, response shape and fingerprinting for flashcard generation."""

from __future__ import annotations

import hashlib
from typing import Optional

from app.core.db.schemas.flashcards import BACK_MAX_LENGTH, FRONT_MAX_LENGTH
from app.modules.generations.client import OpenRouterClient
from app.modules.generations.models.proposals import FlashcardsResponse


SYSTEM_PROMPT = (
    "You are an expert educator who turns study material into flashcards. "
    "Read the user's text and extract the facts, terms and ideas worth "
    "memorising. Rules: "
    "- Each flashcard has a 'front' (a clear, atomic question or term) and a "
    "  'back' (a concise answer or definition, at most a few sentences). "
    f"- The front is at most {FRONT_MAX_LENGTH} characters and the back at "
    f"  most {BACK_MAX_LENGTH} characters. "
    "- Use only information stated in the text; do not invent facts. "
    "- Write in the same language as the text. "
    "- Plain text only: no markdown, no code fences. "
    "- Produce at least one flashcard; prefer understanding over trivia. "
    "Return a JSON object of the form {\"flashcards\": [{\"front\": ..., "
    "\"back\": ...}]} with no extra keys or commentary."
)


def source_text_fingerprint(source_text: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded text."""
    return hashlib.sha256(source_text.encode("utf-8")).hexdigest()


async def request_flashcard_proposals(
    client: OpenRouterClient,
    source_text: str,
    *,
    model: Optional[str] = None,
) -> FlashcardsResponse:
    return await client.generate_structured_response(
        SYSTEM_PROMPT,
        source_text,
        FlashcardsResponse,
        model=model,
    )
