"""Factory for constructing backends by identifier."""

from __future__ import annotations

from typing import List, Optional

from llmbatch.config.loader import ConfigLoader, get_config_loader
from llmbatch.config.manager import ConfigManager
from llmbatch.core.errors import BackendError, BackendUnavailableError, LLMBatchError
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PromptInput
from llmbatch.llm.backends.base import AttemptResult, Backend, BackendId

logger = setup_logger(__name__)

UNKNOWN_MODEL_MESSAGE = "Unknown model"


class UnknownModelBackend(Backend):
    """Stand-in for an unrecognized identifier: every prompt fails terminally."""

    def __init__(self, identifier: str) -> None:
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    async def complete(self, prompt: PromptInput) -> AttemptResult:
        raise BackendError(UNKNOWN_MODEL_MESSAGE)


def available_backends() -> List[str]:
    """Identifiers the factory knows how to build."""
    return [backend_id.value for backend_id in BackendId]


def parse_backend_id(identifier: str) -> Optional[BackendId]:
    """Map an identifier string to a BackendId, or None unless it matches exactly."""
    try:
        return BackendId(identifier)
    except ValueError:
        return None


def build_backend(
    identifier: str,
    *,
    api_key: Optional[str] = None,
    config_loader: Optional[ConfigLoader] = None,
) -> Backend:
    """
    Construct (without opening) the backend for ``identifier``.

    Raises:
        ValueError: If the backend's configuration or credential is unusable
    """
    backend_id = parse_backend_id(identifier)
    if backend_id is None:
        logger.warning("Unknown backend identifier '%s'; prompts will be recorded as errors", identifier)
        return UnknownModelBackend(identifier)

    manager = ConfigManager(config_loader or get_config_loader())
    settings = manager.get_backend_settings(backend_id.value)

    if backend_id is BackendId.OLLAMA:
        from llmbatch.llm.backends.ollama_backend import OllamaBackend
        return OllamaBackend(settings)
    if backend_id is BackendId.LLAMACPP:
        from llmbatch.llm.backends.llamacpp_backend import LlamaCppBackend
        return LlamaCppBackend(settings)

    from llmbatch.llm.backends.gemini_backend import GeminiBackend
    return GeminiBackend(settings, api_key or "")


async def create_backend(
    identifier: str,
    *,
    api_key: Optional[str] = None,
    config_loader: Optional[ConfigLoader] = None,
) -> Optional[Backend]:
    """
    Construct and open the backend for ``identifier``.

    Returns None when the backend cannot be initialised (service down,
    invalid configuration, missing credential); the failure is logged and
    callers must treat None as "selected model unavailable".
    """
    try:
        backend = build_backend(identifier, api_key=api_key, config_loader=config_loader)
        await backend.open()
    except BackendUnavailableError as e:
        logger.error("Backend '%s' unavailable: %s", identifier, e)
        return None
    except (ValueError, LLMBatchError) as e:
        logger.error("Backend '%s' could not be initialised: %s", identifier, e)
        return None
    except Exception as e:
        logger.error("Backend '%s' could not be initialised: %s", identifier, e, exc_info=True)
        return None
    return backend


def remediation_for(identifier: str) -> str:
    """Setup instructions shown when the selected backend is unavailable."""
    backend_id = parse_backend_id(identifier)
    if backend_id is BackendId.OLLAMA:
        from llmbatch.llm.backends.ollama_backend import OllamaBackend
        return OllamaBackend.remediation
    if backend_id is BackendId.LLAMACPP:
        from llmbatch.llm.backends.llamacpp_backend import LlamaCppBackend
        return LlamaCppBackend.remediation
    if backend_id is BackendId.GEMINI:
        return "Provide a valid Gemini API key with --api-key or GOOGLE_API_KEY, then retry."
    return f"Choose one of: {', '.join(available_backends())}."
