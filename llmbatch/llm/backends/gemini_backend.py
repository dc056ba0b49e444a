"""Gemini cloud backend.

Wraps LangChain's ``ChatGoogleGenerativeAI``. Cloud failures are terminal:
the backend is never retry-wrapped and every exception becomes an
``Error: ...`` record with zero duration.
"""

from __future__ import annotations

from typing import Any, Optional

from langchain_core.messages import HumanMessage

from llmbatch.config.manager import BackendSettings
from llmbatch.core.errors import BackendError, BackendUnavailableError
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PromptInput, prompt_text
from llmbatch.llm.backends.base import AttemptResult, Backend, BackendId, Stopwatch

logger = setup_logger(__name__)


def _content_to_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        return "".join(parts)
    return str(content) if content is not None else ""


class GeminiBackend(Backend):
    """Remote Gemini API; built fresh for each run with the caller's key."""

    def __init__(self, settings: BackendSettings, api_key: str) -> None:
        if not api_key or not api_key.strip():
            raise ValueError("A Gemini API key is required for the cloud backend")
        if not settings.model:
            raise ValueError(f"{self.identifier}: model must be configured")
        self.settings = settings
        self._api_key = api_key.strip()
        self._chat_model: Optional[Any] = None

    def __repr__(self) -> str:
        return f"GeminiBackend(model={self.settings.model!r})"

    @property
    def identifier(self) -> str:
        return BackendId.GEMINI.value

    async def open(self) -> None:
        if self._chat_model is not None:
            return
        try:
            from langchain_google_genai import ChatGoogleGenerativeAI
        except ImportError as e:  # pragma: no cover
            raise BackendUnavailableError(
                "The Gemini backend requires the langchain-google-genai package",
                remediation="Install it with `pip install langchain-google-genai`, then retry.",
            ) from e

        self._chat_model = ChatGoogleGenerativeAI(
            model=self.settings.model,
            google_api_key=self._api_key,
            temperature=self.settings.temperature,
            top_k=self.settings.top_k,
            max_output_tokens=self.settings.max_output_tokens,
            timeout=self.settings.timeout,
            max_retries=self.settings.max_retries,
        )
        logger.info("Gemini backend ready (model: %s)", self.settings.model)

    async def close(self) -> None:
        self._chat_model = None

    async def complete(self, prompt: PromptInput) -> AttemptResult:
        if self._chat_model is None:
            raise BackendError("Gemini backend is not open")

        with Stopwatch() as watch:
            response = await self._chat_model.ainvoke([HumanMessage(content=prompt_text(prompt))])

        content = getattr(response, "content", None)
        if content is None:
            raise BackendError("Empty response from model.")
        return AttemptResult(text=_content_to_text(content), elapsed_ms=watch.elapsed_ms)
