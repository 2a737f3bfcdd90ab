from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.base import get_session
from app.core.db.schemas.auth import User
from app.core.db_services import FlashcardStore, GenerationStore
from app.modules.auth import current_active_user
from app.modules.generations.client import OpenRouterClient
from app.modules.generations.main import FlashcardsGenerator


CurrentUser = Annotated[User, Depends(current_active_user)]


def get_model_client(request: Request) -> OpenRouterClient:
    """Client built once at startup (see ``main.lifespan``)."""
    return request.app.state.model_client


async def get_generation_store(
    session: AsyncSession = Depends(get_session),
) -> GenerationStore:
    return GenerationStore(session)


async def get_flashcard_store(
    session: AsyncSession = Depends(get_session),
) -> FlashcardStore:
    return FlashcardStore(session)


async def get_flashcards_generator(
    client: OpenRouterClient = Depends(get_model_client),
    store: GenerationStore = Depends(get_generation_store),
) -> FlashcardsGenerator:
    return FlashcardsGenerator(client, store)
