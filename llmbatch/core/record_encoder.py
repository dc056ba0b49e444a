# llmbatch/core/record_encoder.py

"""
Output record encoding.

Each record is one line with three always-quoted fields::

    "<prompt>","<response>","<N> milliseconds"

Inside a text field a double quote is doubled and a newline becomes the two
characters backslash-n. Nothing else is escaped. Downstream consumers read
this exact layout, so it is produced by hand rather than through ``csv``.
"""

import re
from dataclasses import dataclass

_DURATION_SUFFIX = " milliseconds"
_FIELD_RE = re.compile(r'"((?:[^"]|"")*)"')


@dataclass(frozen=True)
class OutputRecord:
    """One (prompt, response or error text, duration) result line."""

    prompt: str
    response: str
    elapsed_ms: int

    def encode(self) -> str:
        return encode_record(self.prompt, self.response, self.elapsed_ms)


def _escape(text: str) -> str:
    return text.replace('"', '""').replace("\n", "\\n")


def _unescape(text: str) -> str:
    return text.replace("\\n", "\n").replace('""', '"')


def encode_record(prompt: str, response: str, elapsed_ms: int) -> str:
    """
    Encode a single record as a newline-terminated line.

    :param prompt: Original prompt text
    :param response: Response text or ``"Error: ..."`` message
    :param elapsed_ms: Generation time in milliseconds
    :return: The encoded line, ending in a single ``\\n``
    """
    return f'"{_escape(prompt)}","{_escape(response)}","{int(elapsed_ms)}{_DURATION_SUFFIX}"\n'


def decode_record(line: str) -> OutputRecord:
    """
    Parse a line produced by :func:`encode_record`.

    A literal backslash-n in the original text cannot be told apart from an
    encoded newline and decodes to a newline.

    :raises ValueError: If the line does not have the three quoted fields
    """
    stripped = line[:-1] if line.endswith("\n") else line
    fields = []
    pos = 0
    for expected_sep in ("", ",", ","):
        if not stripped.startswith(expected_sep, pos):
            raise ValueError(f"Malformed record line: {line!r}")
        pos += len(expected_sep)
        match = _FIELD_RE.match(stripped, pos)
        if match is None:
            raise ValueError(f"Malformed record line: {line!r}")
        fields.append(match.group(1))
        pos = match.end()
    if pos != len(stripped):
        raise ValueError(f"Malformed record line: {line!r}")

    duration = fields[2]
    if not duration.endswith(_DURATION_SUFFIX):
        raise ValueError(f"Malformed duration field: {duration!r}")
    try:
        elapsed_ms = int(duration[: -len(_DURATION_SUFFIX)])
    except ValueError as e:
        raise ValueError(f"Malformed duration field: {duration!r}") from e

    return OutputRecord(
        prompt=_unescape(fields[0]),
        response=_unescape(fields[1]),
        elapsed_ms=elapsed_ms,
    )
