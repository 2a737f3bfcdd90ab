from fastapi import FastAPI
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.logging import get_logger, setup_logging
from app.apis.auth.main import router as auth_router
from app.apis.flashcards.main import router as flashcards_router
from app.apis.generations.main import router as generations_router
from app.modules.generations.client import OpenRouterClient

import httpx
import uvicorn
from fastapi.middleware.cors import CORSMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    async with httpx.AsyncClient(
        timeout=settings.openrouter.timeout_seconds
    ) as http_client:
        # Raises ConfigurationError here, at startup, when the API key is missing
        app.state.model_client = OpenRouterClient(
            settings.openrouter, http_client=http_client
        )
        logger.info(f"Model client ready (default model {settings.openrouter.model})")
        yield


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(generations_router)
    app.include_router(flashcards_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        logger.error(f"An error occurred when starting the server: {e}.")
