"""Ollama-based embedding provider.

Uses Ollama's local API to generate embeddings. Ollama serves models locally
without requiring API keys or downloading models manually.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull nomic-embed-text`
    - Ollama running: `ollama serve` (usually runs automatically)

Models available:
- nomic-embed-text (137M params, 768 dims)
- embeddinggemma (308M params, 768 dims)
- mxbai-embed-large (335M params, 1024 dims)
- all-minilm (22M params, 384 dims)
"""

import httpx

from prompt_search.config import settings
from prompt_search.errors import EmbeddingUnavailable, OperationTimeout
from prompt_search.protocols import TaskHint

# Models trained with task prefixes; others embed the text as-is
TASK_PREFIXES = {
    "nomic-embed-text": {
        TaskHint.QUERY: "search_query: ",
        TaskHint.DOCUMENT: "search_document: ",
    },
}


class OllamaEmbeddingProvider:
    """Ollama-based implementation of VectorProvider protocol.

    This class satisfies the VectorProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OllamaEmbeddingProvider.create(
            model_name="nomic-embed-text",
            base_url="http://localhost:11434"
        )
        embedding = await provider.embed("Hello, world!")
        print(len(embedding))  # 768
        ```
    """

    # Known model dimensions (for common models)
    MODEL_DIMENSIONS = {
        "nomic-embed-text": 768,
        "embeddinggemma": 768,
        "embeddinggemma:300m": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
    }

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model.
                       Defaults to settings.embedding_model.
            base_url: Ollama API base URL.
                     Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds.
        """
        self._model_name = model_name or settings.embedding_model
        self._base_url = base_url or settings.ollama_base_url
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaEmbeddingProvider":
        """Factory method to create OllamaEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            base_url: Ollama API URL. If None, uses settings.

        Returns:
            Configured OllamaEmbeddingProvider
        """
        return cls(model_name=model_name, base_url=base_url)

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension.

        Known models report their native size; anything else is assumed
        to match the configured dimension (validated on every embed).
        """
        return self.MODEL_DIMENSIONS.get(self._model_name, settings.embedding_dimension)

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    async def embed(self, text: str, task_hint: TaskHint = TaskHint.QUERY) -> list[float]:
        """Generate an embedding vector for a single text.

        Args:
            text: The text to encode
            task_hint: Query or document intent (prefix for models trained with one)

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingUnavailable: If the Ollama API request fails
            OperationTimeout: If the request times out
        """
        prefix = TASK_PREFIXES.get(self._model_name, {}).get(task_hint, "")
        url = f"{self._base_url}/api/embed"
        payload = {
            "model": self._model_name,
            "input": f"{prefix}{text}",
        }

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise OperationTimeout(f"Ollama API timed out: {e}") from e
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if "connection refused" in str(e).lower():
                error_msg += "\n  → Is Ollama running? Try: ollama serve"
            elif "model" in str(e).lower() and "not found" in str(e).lower():
                error_msg += f"\n  → Model not found. Try: ollama pull {self._model_name}"
            raise EmbeddingUnavailable(error_msg) from e

        # Ollama returns {"embeddings": [[...]]} for single input
        if data.get("embeddings"):
            return data["embeddings"][0]

        # Fallback: try "embedding" (singular)
        if "embedding" in data:
            return data["embedding"]

        raise EmbeddingUnavailable(f"Unexpected response format: {data}")

    async def is_available(self) -> bool:
        """Check if Ollama is running and the model is available."""
        try:
            _ = await self.embed("test")
            return True
        except (EmbeddingUnavailable, OperationTimeout):
            return False

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
