"""HTTP handlers for prompt operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging

from fastapi import HTTPException, status

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
from prompt_search.entities import PromptRecordEntity, ScoreWeights
from prompt_search.errors import InvalidInput, PromptSearchError
from prompt_search.services import SearchService

logger = logging.getLogger(__name__)


def _to_http(error: PromptSearchError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


def _record_response(record: PromptRecordEntity) -> PromptRecordResponse:
    return PromptRecordResponse(
        id=record.id,
        content=record.content,
        category=record.category,
        votes=record.votes,
        quality_score=record.quality_score,
        created_at=record.created_at,
    )


class PromptHandler:
    """HTTP handlers for prompt operations.

    This handler delegates business logic to SearchService and handles
    HTTP-specific concerns like:
    - Converting entities to DTOs
    - Mapping engine error codes to status codes
    - Keeping prompt content out of listings

    Example:
        ```python
        handler = PromptHandler(search_service=service)

        @app.get("/search", response_model=list[SearchResultItem])
        async def search(q: str):
            return await handler.search(q)
        ```
    """

    def __init__(self, search_service: SearchService) -> None:
        """Initialize the prompt handler.

        Args:
            search_service: The search service for business logic (required).
        """
        self._service = search_service

    async def ingest(self, request: IngestPromptRequest) -> IngestPromptResponse:
        """Handle POST /prompts requests.

        Raises:
            HTTPException: With the status of the engine error
        """
        try:
            record = await self._service.ingest(
                content=request.text,
                category=request.category,
                votes=request.votes,
                quality_score=request.quality_score,
            )
        except PromptSearchError as e:
            raise _to_http(e) from e
        except Exception as e:
            logger.exception("Failed to add prompt")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to add prompt: {e}",
            ) from e

        return IngestPromptResponse(message="Prompt added", data=_record_response(record))

    async def search(
        self,
        query: str | None,
        alpha: float | None = None,
        k: int | None = None,
    ) -> list[SearchResultItem]:
        """Handle GET /search requests.

        Raises:
            HTTPException: 400 for a missing query, otherwise the root cause status
        """
        try:
            if not query or not query.strip():
                raise InvalidInput("Query 'q' is required")
            weights = ScoreWeights() if alpha is None else ScoreWeights(alpha)
            results = await self._service.search(query, weights, k)
        except PromptSearchError as e:
            raise _to_http(e) from e

        return [SearchResultItem(id=r.id, score=r.score, rank=r.rank) for r in results]

    async def keyword_search(self, query: str | None, k: int | None = None) -> list[SearchResultItem]:
        """Handle GET /search/keyword requests."""
        try:
            if not query or not query.strip():
                raise InvalidInput("Query 'q' is required")
            results = await self._service.keyword_search(query, k)
        except PromptSearchError as e:
            raise _to_http(e) from e

        return [SearchResultItem(id=r.id, score=r.score, rank=r.rank) for r in results]

    async def list_prompts(self) -> list[PromptSummaryResponse]:
        """Handle GET /prompts requests (no content, no embeddings)."""
        try:
            summaries = await self._service.list_prompts()
        except PromptSearchError as e:
            raise _to_http(e) from e

        return [
            PromptSummaryResponse(
                id=s.id,
                category=s.category,
                votes=s.votes,
                quality_score=s.quality_score,
                created_at=s.created_at,
            )
            for s in summaries
        ]

    async def get_prompt(self, record_id: int) -> PromptRecordResponse:
        """Handle GET /prompts/{id} requests."""
        try:
            record = await self._service.get_prompt(record_id)
        except PromptSearchError as e:
            raise _to_http(e) from e

        return _record_response(record)

    async def execute(self, record_id: int, request: ExecutePromptRequest) -> ExecutePromptResponse:
        """Handle POST /prompts/{id}/execute requests."""
        try:
            output = await self._service.execute(record_id, request.input)
        except PromptSearchError as e:
            raise _to_http(e) from e

        return ExecutePromptResponse(id=record_id, output=output)

    async def get_stats(self) -> dict:
        """Handle GET /stats requests."""
        try:
            return await self._service.get_stats()
        except PromptSearchError as e:
            raise _to_http(e) from e

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = await self._service.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            healthy=is_healthy,
        )
