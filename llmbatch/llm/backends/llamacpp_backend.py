"""llama.cpp server backend (on-device service B, prefix-aware).

Uses the native ``/completion`` endpoint of ``llama-server`` with
``cache_prompt`` enabled and a pinned slot, so the KV cache built for the
batch's shared prefix is reused by every following prompt.
See: https://github.com/ggml-org/llama.cpp/tree/master/tools/server
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from llmbatch.core.errors import BackendBusyError, BackendError
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PrefixedPrompt, PromptInput
from llmbatch.llm.backends.base import AttemptResult, BackendId, Stopwatch
from llmbatch.llm.backends.local_http import LocalHttpBackend

logger = setup_logger(__name__)

# Error code the server reports while the model is loading or all slots are taken
BUSY_ERROR_CODE = 503
# Slot actions answer 501 when the server was started without --slot-save-path
SLOT_ACTIONS_DISABLED_CODE = 501


def _error_details(status: int, body: Any) -> tuple[int, str]:
    """
    Extract ``(code, message)`` from a llama-server error body.

    The server sends ``{"error": {"code": 503, "message": ..., "type": ...}}``;
    the HTTP status is used when the body carries no code.
    """
    code: Optional[int] = None
    message = str(body)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            raw_code = error.get("code")
            if isinstance(raw_code, int):
                code = raw_code
            message = str(error.get("message") or message)
        elif error:
            message = str(error)
    return (code if code is not None else status), message


class LlamaCppBackend(LocalHttpBackend):
    """Local llama.cpp server with prompt-prefix caching."""

    health_path = "/health"
    remediation = (
        "llama-server does not appear to be running. Start it with "
        "`llama-server -m <model.gguf> --port 8080 --slot-save-path <dir>` "
        "(slot actions, used to clear the prompt cache after a run, are "
        "disabled without --slot-save-path), then retry."
    )

    def __init__(self, settings) -> None:
        super().__init__(settings)
        self._cached_prefix: Optional[str] = None

    @property
    def identifier(self) -> str:
        return BackendId.LLAMACPP.value

    @property
    def supports_prefix(self) -> bool:
        return True

    def _is_reachable_status(self, status: int) -> bool:
        # 503 means the server is up and still loading the model
        return status in (200, BUSY_ERROR_CODE)

    def _build_payload(self, prompt: PrefixedPrompt) -> Dict[str, Any]:
        return {
            "prompt": prompt.prefix + prompt.suffix,
            "n_predict": self.settings.max_output_tokens,
            "temperature": self.settings.temperature,
            "top_k": self.settings.top_k,
            "cache_prompt": True,
            "id_slot": self.settings.slot_id,
            "stream": False,
        }

    async def complete(self, prompt: PromptInput) -> AttemptResult:
        if not isinstance(prompt, PrefixedPrompt):
            prompt = PrefixedPrompt(prefix="", suffix=prompt)
        if prompt.prefix and prompt.prefix != self._cached_prefix:
            logger.info("Priming prompt cache with a %d-character shared prefix", len(prompt.prefix))
            self._cached_prefix = prompt.prefix

        payload = self._build_payload(prompt)
        with Stopwatch() as watch:
            status, body = await self._request("POST", "/completion", payload)

        if status != 200:
            code, message = _error_details(status, body)
            if code == BUSY_ERROR_CODE:
                logger.warning("llama-server busy (%s): %s", code, message)
                raise BackendBusyError(f"{code}: {message}", code=code)
            logger.error("llama-server error (%s): %s", code, message)
            raise BackendError(f"{code}: {message}")

        text = body.get("content") if isinstance(body, dict) else None
        if text is None:
            raise BackendError("Empty response from model.")
        return AttemptResult(text=str(text), elapsed_ms=watch.elapsed_ms)

    async def clear_cache(self) -> None:
        """Erase the pinned slot's KV cache on the server."""
        self._cached_prefix = None
        status, body = await self._request(
            "POST", f"/slots/{self.settings.slot_id}?action=erase"
        )
        if status != 200:
            code, message = _error_details(status, body)
            if code == SLOT_ACTIONS_DISABLED_CODE:
                raise BackendError(
                    f"Cannot clear slot {self.settings.slot_id} cache: {message}. "
                    "Restart llama-server with --slot-save-path <dir> to enable slot actions."
                )
            raise BackendError(f"Failed to clear slot {self.settings.slot_id} cache ({status}): {message}")
        logger.info("Cleared llama-server cache for slot %d", self.settings.slot_id)
