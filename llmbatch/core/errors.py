"""Exception hierarchy shared by the batch engine, backends and CLI."""

from typing import Optional


class LLMBatchError(Exception):
    """Base class for all LLM Batch errors."""


class BackendError(LLMBatchError):
    """Terminal per-prompt failure; recorded as data, never retried."""


class BackendBusyError(BackendError):
    """Transient overload reported by a local generation service."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class BackendUnavailableError(LLMBatchError):
    """The selected backend could not be initialised, so no run may start."""

    def __init__(self, message: str, remediation: Optional[str] = None) -> None:
        super().__init__(message)
        self.remediation = remediation


class PromptSourceError(LLMBatchError):
    """The prompt file could not be opened, read or decoded."""


class ConfigValidationError(LLMBatchError):
    """A configuration value is missing or has the wrong shape."""
