from typing import Any

from fastapi import APIRouter, FastAPI, Query, status
from fastapi.middleware.cors import CORSMiddleware

from prompt_search.api.dependencies import HandlerDep, lifespan
from prompt_search.config import settings
from prompt_search.dto import (
    ExecutePromptRequest,
    ExecutePromptResponse,
    HealthCheckResponse,
    IngestPromptRequest,
    IngestPromptResponse,
    PromptRecordResponse,
    PromptSummaryResponse,
    SearchResultItem,
)
from prompt_search.handlers import PromptHandler
from prompt_search.services import SearchService

API_VERSION = "0.1.0"

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Prompt Search API",
        "version": API_VERSION,
        "description": "Hybrid semantic prompt search with a content-addressed embedding cache",
        "endpoints": {
            "prompts": "/prompts",
            "search": "/search",
            "keyword_search": "/search/keyword",
            "stats": "/stats",
            "health": "/health",
            "docs": "/docs",
        },
    }


@router.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@router.post(
    "/prompts",
    response_model=IngestPromptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_prompt(request: IngestPromptRequest, handler: HandlerDep) -> IngestPromptResponse:
    """
    Add a prompt to the store.

    The prompt is embedded as a document; the query cache is untouched.
    """
    return await handler.ingest(request)


@router.get("/prompts", response_model=list[PromptSummaryResponse])
async def list_prompts(handler: HandlerDep) -> list[PromptSummaryResponse]:
    """List prompts newest first. Content and embeddings are never included."""
    return await handler.list_prompts()


@router.get("/prompts/{record_id}", response_model=PromptRecordResponse)
async def get_prompt(record_id: int, handler: HandlerDep) -> PromptRecordResponse:
    """Fetch a single prompt including its content."""
    return await handler.get_prompt(record_id)


@router.post("/prompts/{record_id}/execute", response_model=ExecutePromptResponse)
async def execute_prompt(
    record_id: int,
    request: ExecutePromptRequest,
    handler: HandlerDep,
) -> ExecutePromptResponse:
    """Run a stored prompt against caller-supplied input."""
    return await handler.execute(record_id, request)


@router.get("/search", response_model=list[SearchResultItem])
async def search(
    handler: HandlerDep,
    q: str | None = None,
    alpha: float = settings.default_alpha,
    k: int = Query(settings.default_match_count, ge=0, le=100),
) -> list[SearchResultItem]:
    """
    Hybrid search over stored prompts.

    Args:
        q: Query text (required).
        alpha: Semantic weight; clamped to [0, 1].
        k: Maximum number of results.
    """
    return await handler.search(q, alpha, k)


@router.get("/search/keyword", response_model=list[SearchResultItem])
async def keyword_search(
    handler: HandlerDep,
    q: str | None = None,
    k: int = Query(settings.default_match_count, ge=0, le=100),
) -> list[SearchResultItem]:
    """Lexical baseline: prompts whose content matches the query terms."""
    return await handler.keyword_search(q, k)


@router.get("/stats", response_model=dict[str, Any])
async def get_stats(handler: HandlerDep) -> dict[str, Any]:
    """Get store, cache and ranker statistics."""
    return await handler.get_stats()


def create_app(search_service: SearchService | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        search_service: Pre-built service (e.g. with in-memory fakes). If None,
            the lifespan builds the Redis-backed service from settings.
    """
    app = FastAPI(
        title="Prompt Search API",
        description="Hybrid semantic prompt search with a content-addressed embedding cache",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if search_service is not None:
        app.state.search_service = search_service
        app.state.prompt_handler = PromptHandler(search_service=search_service)

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "prompt_search.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
