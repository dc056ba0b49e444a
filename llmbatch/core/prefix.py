# llmbatch/core/prefix.py

"""
Shared-prefix analysis.

Backends with a prompt cache can skip re-processing context that every prompt
of a batch starts with. The prefix is computed once per run.
"""

from dataclasses import dataclass
from typing import Sequence, Union


@dataclass(frozen=True)
class PrefixedPrompt:
    """A prompt split into the batch-wide shared prefix and its own remainder."""

    prefix: str
    suffix: str

    @property
    def text(self) -> str:
        """The full prompt text."""
        return self.prefix + self.suffix


PromptInput = Union[str, PrefixedPrompt]


def common_prefix_length(prompts: Sequence[str]) -> int:
    """
    Return the length of the longest string that prefixes every prompt.

    Scans column by column and stops at the first index where a prompt is
    too short or characters differ. An empty sequence yields 0.
    """
    if not prompts:
        return 0

    first = prompts[0]
    index = 0
    while index < len(first):
        char = first[index]
        for prompt in prompts[1:]:
            if index >= len(prompt) or prompt[index] != char:
                return index
        index += 1
    return index


def common_prefix(prompts: Sequence[str]) -> str:
    """Return the shared prefix string itself."""
    length = common_prefix_length(prompts)
    return prompts[0][:length] if length else ""


def split_prompt(prompt: str, prefix_length: int) -> PrefixedPrompt:
    """Split ``prompt`` at ``prefix_length`` into a PrefixedPrompt."""
    return PrefixedPrompt(prefix=prompt[:prefix_length], suffix=prompt[prefix_length:])


def prompt_text(prompt: PromptInput) -> str:
    """Flatten a PromptInput to the text a non-prefix-aware backend sends."""
    if isinstance(prompt, PrefixedPrompt):
        return prompt.text
    return prompt
