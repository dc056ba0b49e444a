"""
LLM Batch CLI Module.

Provides command-line argument parsing and execution framework.
"""

from llmbatch.cli.args_parser import (
    create_run_parser,
    default_output_path,
    resolve_path,
    validate_input_path,
)
from llmbatch.cli.execution_framework import BatchScript

__all__ = [
    "create_run_parser",
    "default_output_path",
    "resolve_path",
    "validate_input_path",
    "BatchScript",
]
