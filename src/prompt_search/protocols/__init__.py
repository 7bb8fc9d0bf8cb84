"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → in-memory, Gemini → Ollama, etc.)
- Unit testing with fake implementations
- Two interchangeable rankers (remote and local) behind one contract

Usage:
    ```python
    from prompt_search.protocols import RecordStore, VectorProvider

    store: RecordStore = RedisRecordStore.create()       # works
    store: RecordStore = InMemoryRecordStore()           # also works
    ```
"""

from .ranker import Ranker
from .record_store import RecordStore
from .text_generator import TextGenerator
from .vector_provider import TaskHint, VectorProvider

__all__ = [
    "Ranker",
    "RecordStore",
    "TaskHint",
    "TextGenerator",
    "VectorProvider",
]
