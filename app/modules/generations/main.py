"""Flashcard generation use case.

Fingerprints the source text, asks the model for proposals, records the
generation and hands the proposals back tagged as ``ai_generated``. Any
failure is written to the error log (best effort) and re-raised as a single
``GenerationFailedError``.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Optional

from app.core.db.schemas.flashcards import FlashcardSource
from app.core.logging import (
    GenerationLogAdapter,
    bind_generation_context,
    get_logger,
)
from app.modules.generations.errors import GenerationFailedError, error_kind_of
from app.modules.generations.generator import (
    request_flashcard_proposals,
    source_text_fingerprint,
)
from app.modules.generations.models.proposals import (
    FlashcardProposal,
    GenerateFlashcardsResult,
)

if TYPE_CHECKING:
    from app.core.db_services import GenerationStore
    from app.modules.generations.client import OpenRouterClient


logger = get_logger(__name__)


class FlashcardsGenerator:
    """Runs one generation per call; no retries, no dedup by fingerprint."""

    def __init__(
        self,
        client: "OpenRouterClient",
        store: "GenerationStore",
        *,
        model: Optional[str] = None,
    ) -> None:
        self.client = client
        self.store = store
        self.model = model or client.default_model

    async def generate(
        self, source_text: str, user_id: int
    ) -> GenerateFlashcardsResult:
        # Fingerprint first so a failed call can still be correlated in the error log
        fingerprint = source_text_fingerprint(source_text)
        log = bind_generation_context(logger, user_id=user_id, fingerprint=fingerprint)
        log.info(
            f"Generating flashcards from {len(source_text)} characters with {self.model}"
        )

        started = time.perf_counter()
        try:
            response = await request_flashcard_proposals(
                self.client, source_text, model=self.model
            )
            duration_ms = int(round((time.perf_counter() - started) * 1000))
            generation = await self.store.create_generation(
                user_id=user_id,
                model=self.model,
                source_text_hash=fingerprint,
                source_text_length=len(source_text),
                generated_count=len(response.flashcards),
                generation_duration=duration_ms,
            )
        except Exception as e:
            log.exception(f"Flashcard generation failed: {e}")
            await self._record_failure(
                log,
                user_id=user_id,
                fingerprint=fingerprint,
                source_text_length=len(source_text),
                error=e,
            )
            raise GenerationFailedError() from e

        proposals = [
            FlashcardProposal(
                front=card.front, back=card.back, source=FlashcardSource.AI_GENERATED
            )
            for card in response.flashcards
        ]
        log.info(
            f"Generation {generation.id} produced {len(proposals)} proposals in {duration_ms} ms"
        )
        return GenerateFlashcardsResult(
            generation_id=generation.id,
            flashcards_proposals=proposals,
            generated_count=len(proposals),
        )

    async def _record_failure(
        self,
        log: GenerationLogAdapter,
        *,
        user_id: int,
        fingerprint: str,
        source_text_length: int,
        error: BaseException,
    ) -> None:
        try:
            await self.store.log_generation_error(
                user_id=user_id,
                model=self.model,
                source_text_hash=fingerprint,
                source_text_length=source_text_length,
                error_code=error_kind_of(error).value,
                error_message=str(error) or type(error).__name__,
            )
        except Exception as log_error:  # noqa: BLE001
            # Best effort; the caller still raises GenerationFailedError
            log.error(f"Failed to log generation error: {log_error}")
