"""Response DTOs for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class PromptRecordResponse(BaseModel):
    """A stored prompt including its content (embedding is never returned)."""

    id: int = Field(..., description="Store-assigned identifier")
    content: str = Field(..., description="The prompt content")
    category: str = Field(..., description="Category label")
    votes: int = Field(..., description="Vote count", ge=0)
    quality_score: float = Field(..., description="Quality signal")
    created_at: datetime = Field(..., description="Ingestion time")


class IngestPromptResponse(BaseModel):
    """Response DTO for prompt ingestion."""

    message: str = Field(..., description="Human-readable status message")
    data: PromptRecordResponse


class PromptSummaryResponse(BaseModel):
    """Listing item: safe fields only, no content or embedding."""

    id: int
    category: str
    votes: int = Field(..., ge=0)
    quality_score: float
    created_at: datetime


class SearchResultItem(BaseModel):
    """Single ranked search hit."""

    id: int = Field(..., description="Prompt identifier")
    score: float = Field(..., description="Hybrid relevance score")
    rank: int = Field(..., description="Position in the result list (0 = best)", ge=0)


class ExecutePromptResponse(BaseModel):
    """Response DTO for prompt execution."""

    id: int = Field(..., description="Executed prompt identifier")
    output: str = Field(..., description="Generated text")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    healthy: bool = Field(..., description="Whether store and embedding provider are reachable")
