"""Abstract base class and data types for text-generation backends."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from llmbatch.core.prefix import PromptInput


class BackendId(str, Enum):
    """Identifiers accepted by the backend factory."""

    OLLAMA = "ollama"  # on-device service A
    LLAMACPP = "llamacpp"  # on-device service B, prefix-aware
    GEMINI = "gemini"  # cloud


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one prompt: generated text (or error text) and elapsed time."""

    text: str
    elapsed_ms: int = 0

    @classmethod
    def failure(cls, message: str) -> "AttemptResult":
        """Terminal error recorded as data, with zero duration."""
        return cls(text=f"Error: {message}", elapsed_ms=0)

    @property
    def is_error(self) -> bool:
        return self.text.startswith("Error:")


class Stopwatch:
    """Measures only the wrapped generation call, in whole milliseconds."""

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Stopwatch":
        self._start = time.monotonic()
        return self

    def __exit__(self, *exc) -> None:
        self.elapsed_ms = int((time.monotonic() - (self._start or 0.0)) * 1000)


class Backend(ABC):
    """
    One interchangeable prompt-to-response implementation.

    Implementations raise ``BackendBusyError`` for transient overload and
    ``BackendError`` (or any other exception) for terminal failures; the
    dispatch layer turns those into records.

    Lifecycle:
    - ``open()`` acquires the session and verifies the service is reachable
    - ``close()`` releases it; safe to call more than once
    - ``clear_cache()`` drops cached prompt state (no-op unless overridden)
    """

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Identifier this backend was selected by."""
        ...

    @property
    def supports_prefix(self) -> bool:
        """Whether ``complete`` benefits from a PrefixedPrompt."""
        return False

    @property
    def supports_retry(self) -> bool:
        """Whether busy failures should be retried with backoff."""
        return False

    async def open(self) -> None:
        """Acquire resources and verify availability."""

    async def close(self) -> None:
        """Release resources."""

    async def clear_cache(self) -> None:
        """Drop cached prompt state held by the service."""

    @abstractmethod
    async def complete(self, prompt: PromptInput) -> AttemptResult:
        """
        Generate a response for one prompt.

        Args:
            prompt: Full prompt text, or a PrefixedPrompt for prefix-aware backends

        Returns:
            AttemptResult with the response text and the generation time
        """
        ...

    async def __aenter__(self) -> "Backend":
        await self.open()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
