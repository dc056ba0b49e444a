"""Text-generation backends selectable by identifier."""

from llmbatch.llm.backends.base import (
    AttemptResult,
    Backend,
    BackendId,
)
from llmbatch.llm.backends.factory import (
    UnknownModelBackend,
    available_backends,
    build_backend,
    create_backend,
    parse_backend_id,
    remediation_for,
)

__all__ = [
    "AttemptResult",
    "Backend",
    "BackendId",
    "UnknownModelBackend",
    "available_backends",
    "build_backend",
    "create_backend",
    "parse_backend_id",
    "remediation_for",
]
