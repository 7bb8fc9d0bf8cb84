"""Text generation protocol used to execute stored prompts."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for text generation services."""

    async def generate(self, prompt: str) -> str:
        """Generate a completion for the prompt."""
        ...
