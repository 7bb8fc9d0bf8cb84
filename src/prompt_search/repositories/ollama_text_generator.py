"""Ollama text generation for executing stored prompts."""

import httpx

from prompt_search.config import settings
from prompt_search.errors import GenerationUnavailable, OperationTimeout


class OllamaTextGenerator:
    """Ollama implementation of TextGenerator protocol (``/api/generate``)."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        self._model_name = model_name or settings.generation_model
        self._base_url = base_url or settings.ollama_base_url
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @classmethod
    def create(cls, model_name: str | None = None) -> "OllamaTextGenerator":
        return cls(model_name=model_name)

    async def generate(self, prompt: str) -> str:
        """Generate a completion.

        Raises:
            GenerationUnavailable: If the Ollama API request fails
            OperationTimeout: If the request times out
        """
        payload = {"model": self._model_name, "prompt": prompt, "stream": False}
        try:
            response = await self.client.post(f"{self._base_url}/api/generate", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise OperationTimeout(f"Ollama API timed out: {e}") from e
        except httpx.HTTPError as e:
            raise GenerationUnavailable(f"Ollama API error: {e}") from e

        if "response" not in data:
            raise GenerationUnavailable(f"Unexpected response format: {data}")
        return data["response"]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
