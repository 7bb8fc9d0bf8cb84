"""Google Gemini embedding provider.

Calls the Generative Language REST API (``models/{model}:embedContent``).
Gemini distinguishes query and document embeddings through ``taskType``
and supports truncating vectors with ``outputDimensionality``.

Requirements:
    - An API key: set ``GEMINI_API_KEY``

Models:
- text-embedding-004 (768 dims)
- gemini-embedding-001 (3072 dims, truncatable to 768)
"""

import httpx

from prompt_search.config import settings
from prompt_search.errors import EmbeddingUnavailable, OperationTimeout
from prompt_search.protocols import TaskHint

TASK_TYPES = {
    TaskHint.QUERY: "RETRIEVAL_QUERY",
    TaskHint.DOCUMENT: "RETRIEVAL_DOCUMENT",
}


class GeminiEmbeddingProvider:
    """Gemini implementation of VectorProvider protocol.

    This class satisfies the VectorProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = GeminiEmbeddingProvider.create(model_name="text-embedding-004")
        embedding = await provider.embed("Hello, world!", TaskHint.QUERY)
        print(len(embedding))  # 768
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        output_dimension: int | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the Gemini embedding provider.

        Args:
            api_key: Gemini API key. Defaults to settings.gemini_api_key.
            model_name: Embedding model. Defaults to settings.embedding_model.
            output_dimension: Requested vector length. Defaults to settings.
            base_url: API base URL. Defaults to settings.gemini_base_url.
            timeout: Request timeout in seconds.
        """
        self._api_key = api_key or settings.gemini_api_key
        self._model_name = model_name or settings.embedding_model
        self._dimension = output_dimension or settings.embedding_dimension
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")
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
        output_dimension: int | None = None,
    ) -> "GeminiEmbeddingProvider":
        """Factory method to create GeminiEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            output_dimension: Vector length. If None, uses settings.

        Returns:
            Configured GeminiEmbeddingProvider
        """
        return cls(model_name=model_name, output_dimension=output_dimension)

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    async def embed(self, text: str, task_hint: TaskHint = TaskHint.QUERY) -> list[float]:
        """Generate an embedding vector for a single text.

        Args:
            text: The text to encode
            task_hint: Query or document intent (maps to ``taskType``)

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingUnavailable: If the API key is missing or the request fails
            OperationTimeout: If the request times out
        """
        if not self._api_key:
            raise EmbeddingUnavailable("GEMINI_API_KEY is not set")

        url = f"{self._base_url}/models/{self._model_name}:embedContent"
        payload = {
            "model": f"models/{self._model_name}",
            "content": {"parts": [{"text": text}]},
            "taskType": TASK_TYPES[task_hint],
            "outputDimensionality": self._dimension,
        }

        try:
            response = await self.client.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self._api_key},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise OperationTimeout(f"Gemini API timed out: {e}") from e
        except httpx.HTTPError as e:
            raise EmbeddingUnavailable(f"Gemini API error: {e}") from e

        try:
            return data["embedding"]["values"]
        except (KeyError, TypeError) as e:
            raise EmbeddingUnavailable(f"Unexpected response format: {data}") from e

    async def is_available(self) -> bool:
        """Check if the Gemini API answers with the configured key."""
        try:
            _ = await self.embed("test")
            return True
        except (EmbeddingUnavailable, OperationTimeout):
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
