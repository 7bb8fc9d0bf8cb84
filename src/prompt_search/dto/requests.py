"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class IngestPromptRequest(BaseModel):
    """Request DTO for adding a prompt.

    The handler will convert this to internal calls to the service layer.
    """

    text: str = Field(..., description="The prompt content", min_length=1)
    category: str = Field("", description="Category label")
    votes: int = Field(0, description="Vote count", ge=0)
    quality_score: float = Field(0.0, description="Quality signal")


class ExecutePromptRequest(BaseModel):
    """Request DTO for running a stored prompt against caller input."""

    input: str = Field(..., description="Input appended to the stored prompt", min_length=1)
