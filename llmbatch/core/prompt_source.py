# llmbatch/core/prompt_source.py

"""
Prompt loading.

A prompt file is UTF-8 text with one prompt per line. Lines are kept
verbatim: only the line terminator is removed, so leading/trailing whitespace
and empty lines survive as prompts of their own.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, List, Optional

from llmbatch.core.errors import PromptSourceError

logger = logging.getLogger(__name__)


def read_prompts(stream: BinaryIO) -> List[str]:
    """
    Read every line of a binary stream as one prompt.

    ``\\n``, ``\\r\\n`` and a lone ``\\r`` all terminate a line. A terminator at
    end of file does not produce an extra empty prompt.

    :param stream: Readable binary stream holding UTF-8 text
    :return: Prompts in file order
    :raises PromptSourceError: If the stream cannot be read or decoded
    """
    prompts: List[str] = []
    # newline=None enables universal newlines; the wrapper is detached so the
    # caller keeps ownership of the underlying stream.
    reader: Optional[io.TextIOWrapper] = None
    try:
        reader = io.TextIOWrapper(stream, encoding="utf-8", newline=None)
        for line in reader:
            prompts.append(line[:-1] if line.endswith("\n") else line)
    except (OSError, ValueError) as e:
        # UnicodeDecodeError is a ValueError subclass
        logger.error(f"Failed to read prompts: {e}")
        raise PromptSourceError(f"Failed to read prompts: {e}") from e
    finally:
        if reader is not None:
            try:
                reader.detach()
            except ValueError:
                pass
    return prompts


def load_prompts(path: Path) -> List[str]:
    """
    Open a prompt file and read it with :func:`read_prompts`.

    :param path: Path to the prompt file
    :return: Prompts in file order
    :raises PromptSourceError: If the file cannot be opened or read
    """
    try:
        with path.open("rb") as f:
            return read_prompts(f)
    except OSError as e:
        logger.error(f"Cannot open prompt file {path}: {e}")
        raise PromptSourceError(f"Cannot open prompt file {path}: {e}") from e
