"""Ollama backend (on-device service A).

Talks to a local Ollama server through its native ``/api/generate`` endpoint.
See: https://github.com/ollama/ollama/blob/main/docs/api.md
"""

from __future__ import annotations

from typing import Any, Dict

from llmbatch.core.errors import BackendBusyError, BackendError
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PromptInput, prompt_text
from llmbatch.llm.backends.base import AttemptResult, BackendId, Stopwatch
from llmbatch.llm.backends.local_http import LocalHttpBackend

logger = setup_logger(__name__)

# Ollama answers 503 when its request queue is full (OLLAMA_MAX_QUEUE)
BUSY_STATUS = 503


def _error_text(body: Any) -> str:
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return str(body)


class OllamaBackend(LocalHttpBackend):
    """Local Ollama server; busy responses are retried by the caller."""

    health_path = "/api/version"
    remediation = (
        "Ollama does not appear to be running. Start it with `ollama serve`, "
        "pull the configured model with `ollama pull <model>`, then retry."
    )

    @property
    def identifier(self) -> str:
        return BackendId.OLLAMA.value

    def _build_payload(self, text: str) -> Dict[str, Any]:
        return {
            "model": self.settings.model,
            "prompt": text,
            "stream": False,
            "options": {
                "temperature": self.settings.temperature,
                "top_k": self.settings.top_k,
                "num_predict": self.settings.max_output_tokens,
            },
        }

    async def complete(self, prompt: PromptInput) -> AttemptResult:
        payload = self._build_payload(prompt_text(prompt))

        with Stopwatch() as watch:
            status, body = await self._request("POST", "/api/generate", payload)

        if status == BUSY_STATUS:
            logger.warning("Ollama busy (%s): %s", status, _error_text(body))
            raise BackendBusyError(f"{status}: {_error_text(body)}", code=status)
        if status != 200:
            logger.error("Ollama error (%s): %s", status, _error_text(body))
            raise BackendError(f"{status}: {_error_text(body)}")

        text = body.get("response") if isinstance(body, dict) else None
        if text is None:
            raise BackendError("Empty response from model.")
        return AttemptResult(text=str(text), elapsed_ms=watch.elapsed_ms)
