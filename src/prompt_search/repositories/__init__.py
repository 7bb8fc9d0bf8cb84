"""Repository layer for data access.

This layer abstracts external dependencies (Redis, embedding APIs, text
generation) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis → in-memory, Gemini → Ollama, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.

``LocalEmbeddingProvider`` is not imported here since loading
sentence-transformers is slow; import it from
``prompt_search.repositories.local_embedding_provider`` when needed.
"""

from prompt_search.protocols import RecordStore, TextGenerator, VectorProvider

from .gemini_embedding_provider import GeminiEmbeddingProvider
from .memory_repository import InMemoryRecordStore
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .ollama_text_generator import OllamaTextGenerator
from .redis_repository import RedisRecordStore

__all__ = [
    "RecordStore",
    "TextGenerator",
    "VectorProvider",
    "GeminiEmbeddingProvider",
    "InMemoryRecordStore",
    "OllamaEmbeddingProvider",
    "OllamaTextGenerator",
    "RedisRecordStore",
]
