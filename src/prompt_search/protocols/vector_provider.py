"""Embedding provider protocol.

Defines the interface for any embedding generation service that can
convert text to vector embeddings.

Implementations can include:
- Google Gemini embeddings (API, default)
- Ollama (local HTTP API)
- sentence-transformers (local, in-process)
"""

from enum import Enum
from typing import Protocol, runtime_checkable


class TaskHint(str, Enum):
    """Embedding intent. Providers may weight internally, never resize."""

    QUERY = "query"
    DOCUMENT = "document"


@runtime_checkable
class VectorProvider(Protocol):
    """Protocol for embedding generation services.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Example:
        ```python
        provider: VectorProvider = GeminiEmbeddingProvider.create()
        provider: VectorProvider = OllamaEmbeddingProvider.create()
        ```
    """

    @property
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors.

        Returns:
            The vector dimension (e.g., 768 for text-embedding-004)
        """
        ...

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def embed(self, text: str, task_hint: TaskHint = TaskHint.QUERY) -> list[float]:
        """Generate an embedding vector for a single text.

        Args:
            text: The text to encode
            task_hint: Whether the text is a search query or a stored document

        Returns:
            The embedding vector as a list of floats
        """
        ...

    async def is_available(self) -> bool:
        """Check if the embedding provider is available."""
        ...
