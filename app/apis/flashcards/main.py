from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.apis.deps import CurrentUser, get_flashcard_store
from app.core.config import settings
from app.core.db_services import FlashcardStore
from app.core.errors import RecordNotFoundError
from .schemas import (
    CreateFlashcardsRequest,
    CreateFlashcardsResponse,
    FlashcardListResponse,
    FlashcardRead,
    ListFlashcardsQuery,
    Pagination,
    UpdateFlashcardRequest,
)


router = APIRouter()


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    f"/{settings.app.version}/flashcards",
    response_model=FlashcardListResponse,
    tags=["flashcards"],
)
async def list_flashcards(
    user: CurrentUser,
    query: Annotated[ListFlashcardsQuery, Query()],
    store: FlashcardStore = Depends(get_flashcard_store),
) -> FlashcardListResponse:
    rows, total = await store.list_flashcards(
        user.id,
        page=query.page,
        limit=query.limit,
        sort=query.sort,
        order=query.order,
        source=query.source,
        generation_id=query.generation_id,
    )
    return FlashcardListResponse(
        data=[FlashcardRead.model_validate(c) for c in rows],
        pagination=Pagination(page=query.page, limit=query.limit, total=total),
    )


@router.post(
    f"/{settings.app.version}/flashcards",
    response_model=CreateFlashcardsResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["flashcards"],
)
async def create_flashcards(
    req: CreateFlashcardsRequest,
    user: CurrentUser,
    store: FlashcardStore = Depends(get_flashcard_store),
) -> CreateFlashcardsResponse:
    try:
        cards = await store.create_flashcards(user.id, req.flashcards)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return CreateFlashcardsResponse(
        flashcards=[FlashcardRead.model_validate(c) for c in cards]
    )


@router.get(
    f"/{settings.app.version}/flashcards/{{flashcard_id:int}}",
    response_model=FlashcardRead,
    tags=["flashcards"],
)
async def get_flashcard(
    flashcard_id: int,
    user: CurrentUser,
    store: FlashcardStore = Depends(get_flashcard_store),
) -> FlashcardRead:
    try:
        card = await store.get_flashcard(user.id, flashcard_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return FlashcardRead.model_validate(card)


@router.put(
    f"/{settings.app.version}/flashcards/{{flashcard_id:int}}",
    response_model=FlashcardRead,
    tags=["flashcards"],
)
async def update_flashcard(
    flashcard_id: int,
    req: UpdateFlashcardRequest,
    user: CurrentUser,
    store: FlashcardStore = Depends(get_flashcard_store),
) -> FlashcardRead:
    try:
        card = await store.update_flashcard(
            user.id, flashcard_id, front=req.front, back=req.back
        )
    except RecordNotFoundError as e:
        raise _not_found(e)
    return FlashcardRead.model_validate(card)


@router.delete(
    f"/{settings.app.version}/flashcards/{{flashcard_id:int}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["flashcards"],
)
async def delete_flashcard(
    flashcard_id: int,
    user: CurrentUser,
    store: FlashcardStore = Depends(get_flashcard_store),
) -> Response:
    try:
        await store.delete_flashcard(user.id, flashcard_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
