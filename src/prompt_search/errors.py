"""Error taxonomy for the prompt search engine.

Every error carries a stable ``code`` so callers can tell a retryable
failure (``timeout``, ``store_unavailable``) from a request that needs
fixing (``invalid_input``) or a missing resource (``not_found``).
Handlers translate ``status_code`` into the HTTP response.
"""


class PromptSearchError(Exception):
    """Base class for all engine errors."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidInput(PromptSearchError):
    """Empty text, negative votes or non-numeric weights."""

    code = "invalid_input"
    status_code = 400


class EmbeddingUnavailable(PromptSearchError):
    """The embedding provider failed or returned an unusable vector."""

    code = "embedding_unavailable"
    status_code = 502


class StoreUnavailable(PromptSearchError):
    """The record store failed."""

    code = "store_unavailable"
    status_code = 503


class MalformedCacheEntry(PromptSearchError):
    """A stored vector could not be parsed or has the wrong length.

    Recovered inside the embedding cache by recomputing the vector.
    """

    code = "malformed_cache_entry"
    status_code = 500


class NotFound(PromptSearchError):
    code = "not_found"
    status_code = 404


class GenerationUnavailable(PromptSearchError):
    """The text generation provider failed or is not configured."""

    code = "generation_unavailable"
    status_code = 502


class OperationTimeout(PromptSearchError):
    """A provider or store call exceeded its timeout."""

    code = "timeout"
    status_code = 504


class SearchFailed(PromptSearchError):
    """Aggregate failure of a search request.

    The root cause is chained as ``__cause__``; ``root_code`` and
    ``status_code`` mirror it so "try again" stays distinguishable.
    """

    code = "search_failed"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.root_code = cause.code if isinstance(cause, PromptSearchError) else "internal_error"
        self.status_code = cause.status_code if isinstance(cause, PromptSearchError) else 500

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "root_code": self.root_code, "message": self.message}
