"""Timeout and error translation for I/O suspension points."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from prompt_search.errors import OperationTimeout, PromptSearchError

T = TypeVar("T")


async def call_with_timeout(
    awaitable: Awaitable[T],
    timeout: float | None,
    error_cls: type[PromptSearchError],
    operation: str,
) -> T:
    """Await a provider or store call under a timeout.

    Engine errors pass through unchanged; any other exception is wrapped
    in ``error_cls`` with the original chained.

    Args:
        awaitable: The pending call
        timeout: Seconds to wait; None waits indefinitely
        error_cls: Error raised for unexpected failures
        operation: Human-readable name used in messages

    Raises:
        OperationTimeout: If the call does not finish in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as e:
        raise OperationTimeout(f"{operation} timed out after {timeout}s") from e
    except PromptSearchError:
        raise
    except Exception as e:
        raise error_cls(f"{operation} failed: {e}") from e
