"""
LLM Batch Configuration Module.

Provides YAML configuration loading and validation.
"""

from llmbatch.config.loader import (
    ConfigLoader,
    get_config_loader,
    clear_config_cache,
)
from llmbatch.config.manager import (
    BackendSettings,
    ConfigManager,
    RetrySettings,
)
from llmbatch.core.errors import ConfigValidationError

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "clear_config_cache",
    "BackendSettings",
    "ConfigManager",
    "ConfigValidationError",
    "RetrySettings",
]
