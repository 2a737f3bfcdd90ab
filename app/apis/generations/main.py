from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.apis.deps import CurrentUser, get_flashcards_generator, get_generation_store
from app.apis.flashcards.schemas import Pagination
from app.core.config import settings
from app.core.db_services import GenerationStore
from app.core.errors import RecordNotFoundError
from app.core.logging import get_logger
from app.modules.generations.errors import GenerationFailedError
from app.modules.generations.main import FlashcardsGenerator
from app.modules.generations.models.proposals import GenerateFlashcardsResult
from .schemas import (
    GenerateFlashcardsRequest,
    GenerationDetailRead,
    GenerationListResponse,
    GenerationRead,
)


router = APIRouter()

logger = get_logger(__name__)


@router.post(
    f"/{settings.app.version}/generations",
    response_model=GenerateFlashcardsResult,
    status_code=status.HTTP_201_CREATED,
    tags=["generations"],
)
async def generate_flashcards(
    req: GenerateFlashcardsRequest,
    user: CurrentUser,
    generator: FlashcardsGenerator = Depends(get_flashcards_generator),
) -> GenerateFlashcardsResult:
    try:
        return await generator.generate(req.source_text, user.id)
    except GenerationFailedError:
        # Details are in the server log and generation_error_logs, not in the response
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


@router.get(
    f"/{settings.app.version}/generations",
    response_model=GenerationListResponse,
    tags=["generations"],
)
async def list_generations(
    user: CurrentUser,
    page: Annotated[int, Query(gt=0)] = 1,
    limit: Annotated[int, Query(gt=0, le=100)] = 10,
    store: GenerationStore = Depends(get_generation_store),
) -> GenerationListResponse:
    rows, total = await store.list_generations(user.id, page=page, limit=limit)
    return GenerationListResponse(
        data=[GenerationRead.model_validate(g) for g in rows],
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.get(
    f"/{settings.app.version}/generations/{{generation_id:int}}",
    response_model=GenerationDetailRead,
    tags=["generations"],
)
async def get_generation(
    generation_id: int,
    user: CurrentUser,
    store: GenerationStore = Depends(get_generation_store),
) -> GenerationDetailRead:
    try:
        generation = await store.get_generation(user.id, generation_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return GenerationDetailRead.model_validate(generation)
