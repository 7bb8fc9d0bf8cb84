"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import ExecutePromptRequest, IngestPromptRequest
from .responses import (
    ExecutePromptResponse,
    HealthCheckResponse,
    IngestPromptResponse,
    PromptRecordResponse,
    PromptSummaryResponse,
    SearchResultItem,
)

__all__ = [
    "ExecutePromptRequest",
    "IngestPromptRequest",
    "ExecutePromptResponse",
    "HealthCheckResponse",
    "IngestPromptResponse",
    "PromptRecordResponse",
    "PromptSummaryResponse",
    "SearchResultItem",
]
