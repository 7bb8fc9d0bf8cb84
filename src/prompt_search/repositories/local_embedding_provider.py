"""Local sentence-transformers embedding provider.

Runs a sentence-transformers model in process. No API calls required.
Encoding is CPU-bound, so it runs in a worker thread to keep the event
loop free.
"""

import asyncio
import logging
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from prompt_search.config import settings
from prompt_search.protocols import TaskHint

logger = logging.getLogger(__name__)


class LocalEmbeddingProvider:
    """Local sentence-transformers implementation of VectorProvider.

    This class satisfies the VectorProvider protocol through structural
    typing - no explicit inheritance needed.

    Models that ship named prompts for "query"/"document" (e.g.
    EmbeddingGemma) get the task hint; others ignore it.
    """

    def __init__(self, model_name: str | None = None) -> None:
        """Initialize the local embedding provider.

        Args:
            model_name: Name of the sentence-transformers model.
                       Defaults to settings.embedding_model.
        """
        self._model_name = model_name or settings.embedding_model
        self._model: SentenceTransformer | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, model_name: str | None = None) -> "LocalEmbeddingProvider":
        """Factory method to create LocalEmbeddingProvider with defaults."""
        return cls(model_name=model_name)

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the embedding model."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self._model_name)
            start_time = time.time()
            self._model = SentenceTransformer(self._model_name)
            logger.info("Model loaded in %.2fs", time.time() - start_time)
        return self._model

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        if self._dimension is None:
            # Get dimension by encoding a sample
            sample_embedding = self.model.encode(["test"], show_progress_bar=False)
            self._dimension = len(sample_embedding[0])
        return self._dimension

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    def _encode(self, text: str, task_hint: TaskHint) -> list[float]:
        prompts = getattr(self.model, "prompts", None) or {}
        prompt_name = task_hint.value if task_hint.value in prompts else None
        embedding = self.model.encode(
            text,
            prompt_name=prompt_name,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        # Handle both single string (returns array) and list input
        if isinstance(embedding, np.ndarray):
            if embedding.ndim == 1:
                return embedding.tolist()
            return embedding[0].tolist()
        return list(embedding)

    async def embed(self, text: str, task_hint: TaskHint = TaskHint.QUERY) -> list[float]:
        """Generate an embedding vector for a single text.

        Args:
            text: The text to encode
            task_hint: Query or document intent

        Returns:
            The embedding vector as a list of floats
        """
        return await asyncio.to_thread(self._encode, text, task_hint)

    async def is_available(self) -> bool:
        """Check if the model can be loaded."""
        try:
            _ = await asyncio.to_thread(lambda: self.model)
            return True
        except (OSError, ValueError, RuntimeError):
            return False
