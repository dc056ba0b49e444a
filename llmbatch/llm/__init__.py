"""
LLM Batch LLM Module.

Provides the backend abstraction, the concrete on-device and cloud backends,
and the factory that selects one by identifier.
"""

from llmbatch.llm.backends import (
    AttemptResult,
    Backend,
    BackendId,
    create_backend,
    remediation_for,
)

__all__ = [
    "AttemptResult",
    "Backend",
    "BackendId",
    "create_backend",
    "remediation_for",
]
