# llmbatch/cli/args_parser.py

"""
CLI argument parsing utilities for LLM Batch scripts.
"""

import argparse
from pathlib import Path
from typing import Optional

from llmbatch.llm.backends.factory import available_backends

RESULTS_SUFFIX = "_results.csv"


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add common arguments used across scripts.

    :param parser: ArgumentParser instance to add arguments to
    """
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress non-essential output"
    )


def create_run_parser() -> argparse.ArgumentParser:
    """Create argument parser for run_batch.py"""
    parser = argparse.ArgumentParser(
        description="Run every prompt of a text file through a text-generation backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run prompts through a local Ollama server
  python main/run_batch.py --input prompts.txt --backend ollama

  # Use llama-server with shared-prefix caching, custom output file
  python main/run_batch.py --input prompts.txt --backend llamacpp --output out/results.csv

  # Use the Gemini API (key from GOOGLE_API_KEY if --api-key is omitted)
  python main/run_batch.py --input prompts.txt --backend gemini
        """
    )

    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Prompt file, one prompt per line (UTF-8)"
    )
    parser.add_argument(
        "--output",
        type=str,
        help=f"Results file (default: <input stem>{RESULTS_SUFFIX} in the configured output_dir or next to the input)"
    )
    parser.add_argument(
        "--backend",
        type=str,
        help=f"Backend identifier: {', '.join(available_backends())} (default: from paths_config.yaml)"
    )
    parser.add_argument(
        "--api-key",
        type=str,
        help="API key for the gemini backend (default: GOOGLE_API_KEY environment variable)"
    )

    add_common_arguments(parser)
    return parser


def resolve_path(path_str: str, base_dir: Optional[Path] = None) -> Path:
    """
    Resolve a path string to an absolute Path object.

    :param path_str: Path string (relative or absolute)
    :param base_dir: Base directory for relative paths (default: current working directory)
    :return: Resolved absolute Path
    """
    path = Path(path_str)

    if path.is_absolute():
        return path

    if base_dir:
        return (base_dir / path).resolve()

    return path.resolve()


def validate_input_path(path: Path) -> None:
    """
    Validate that an input file exists.

    :param path: Path to validate
    :raises ValueError: If path is invalid
    """
    if not path.exists():
        raise ValueError(f"Input path does not exist: {path}")

    if not path.is_file():
        raise ValueError(f"Input path is not a file: {path}")


def default_output_path(input_path: Path, output_dir: Optional[Path] = None) -> Path:
    """
    Derive the results file name from the prompt file name.

    ``prompts.txt`` becomes ``prompts_results.csv``, placed in ``output_dir``
    when given, otherwise next to the input.
    """
    directory = output_dir if output_dir is not None else input_path.parent
    return directory / f"{input_path.stem}{RESULTS_SUFFIX}"
