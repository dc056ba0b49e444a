"""
LLM Batch Core Module.

Provides prompt loading, prefix analysis, record encoding, retry dispatch and
the batch runner.
"""

from llmbatch.core.errors import (
    BackendBusyError,
    BackendError,
    BackendUnavailableError,
    ConfigValidationError,
    LLMBatchError,
    PromptSourceError,
)
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PrefixedPrompt, common_prefix, common_prefix_length
from llmbatch.core.prompt_source import load_prompts, read_prompts
from llmbatch.core.record_encoder import OutputRecord, decode_record, encode_record

__all__ = [
    "BackendBusyError",
    "BackendError",
    "BackendUnavailableError",
    "ConfigValidationError",
    "LLMBatchError",
    "PromptSourceError",
    "setup_logger",
    "PrefixedPrompt",
    "common_prefix",
    "common_prefix_length",
    "load_prompts",
    "read_prompts",
    "OutputRecord",
    "decode_record",
    "encode_record",
]
