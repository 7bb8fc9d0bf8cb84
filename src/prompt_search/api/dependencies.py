"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
    - Services injected before startup (tests) are used as-is
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from prompt_search.config import configure_logging, settings
from prompt_search.handlers import PromptHandler
from prompt_search.protocols import VectorProvider
from prompt_search.repositories import (
    GeminiEmbeddingProvider,
    OllamaEmbeddingProvider,
    OllamaTextGenerator,
    RedisRecordStore,
)
from prompt_search.services import SearchService

logger = logging.getLogger(__name__)


def build_embedding_provider(name: str | None = None) -> VectorProvider:
    """Create the embedding provider selected by settings.embedding_provider.

    ⚠️ IMPORTANT: When switching providers or dimensions, re-embed stored
    prompts (scripts/reindex.py) and clear the query cache.
    """
    name = name or settings.embedding_provider
    if name == "gemini":
        return GeminiEmbeddingProvider.create()
    if name == "ollama":
        return OllamaEmbeddingProvider.create()
    if name == "local":
        from prompt_search.repositories.local_embedding_provider import LocalEmbeddingProvider

        return LocalEmbeddingProvider.create()
    raise ValueError(f"Unknown embedding provider: {name}")


def get_handler(request: Request) -> PromptHandler:
    """Dependency injection for PromptHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "prompt_handler", None)
    if handler is None:
        raise RuntimeError("PromptHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (store, embedding provider, text generator)
    2. Service (business logic) - stored in app.state.search_service
    3. Handler (HTTP endpoints) - stored in app.state.prompt_handler

    If a handler was injected before startup, nothing is built or torn down.
    """
    configure_logging()

    if getattr(app.state, "prompt_handler", None) is not None:
        yield
        return

    embedding_provider = build_embedding_provider()
    store = RedisRecordStore.create(dimension=settings.embedding_dimension)
    generator = OllamaTextGenerator.create()

    search_service = SearchService.create(
        store=store,
        provider=embedding_provider,
        generator=generator,
    )

    app.state.search_service = search_service
    app.state.prompt_handler = PromptHandler(search_service=search_service)

    logger.info("Search service initialized")
    logger.info("Embedding model: %s", embedding_provider.model_name)
    logger.info("Ranker: %s", search_service.ranker.mode)

    yield

    for resource in (embedding_provider, generator, store):
        close = getattr(resource, "close", None)
        if close is not None:
            await close()

    del app.state.prompt_handler
    del app.state.search_service
    logger.info("Search service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[PromptHandler, Depends(get_handler)]
