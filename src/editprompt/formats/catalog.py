"""
Prompt format catalog.

The closed set of wire formats understood by the prediction backends and the
special tokens each one reserves.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

from editprompt.logging_config import logger

from ..exceptions import FormatParseError
from ..schemas import PromptInput
from .markers import (
    CURSOR_MARKER,
    FILE_SEP,
    FIM_MIDDLE,
    FIM_PREFIX,
    FIM_SUFFIX,
    MERGE_END_MARKER,
    MERGE_SEPARATOR,
    MERGE_START_MARKER,
    SEED_FILE_MARKER,
    SEED_FIM_MIDDLE,
    SEED_FIM_PREFIX,
    SEED_FIM_SUFFIX,
)


class PromptFormat(str, Enum):
    """Versioned prompt formats, oldest first. Values are the canonical names."""

    V0112_MIDDLE_AT_END = "V0112MiddleAtEnd"
    V0113_ORDERED = "V0113Ordered"
    V0114_180_EDITABLE_REGION = "V0114180EditableRegion"
    V0120_GIT_MERGE_MARKERS = "V0120GitMergeMarkers"
    V0131_GIT_MERGE_MARKERS_PREFIX = "V0131GitMergeMarkersPrefix"
    V0211_PREFILL = "V0211Prefill"
    V0211_SEED_CODER = "V0211SeedCoder"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def default(cls) -> "PromptFormat":
        return cls.V0114_180_EDITABLE_REGION

    @classmethod
    def options_as_string(cls) -> str:
        """All canonical names, one `- name` line each."""
        return "".join(f"- {fmt.value}\n" for fmt in cls)

    @classmethod
    def parse(cls, name: str) -> "PromptFormat":
        """
        Resolve a (possibly partial) format name.

        Matching is a case-insensitive substring test against the canonical
        names and must select exactly one format.

        Args:
            name: Full or partial format name, e.g. "seedcoder" or "0120"

        Returns:
            The matching PromptFormat

        Raises:
            FormatParseError: If no format or more than one format matches
        """
        needle = name.lower()
        matches = [fmt for fmt in cls if needle in fmt.value.lower()]
        if not matches:
            raise FormatParseError(name, cls.options_as_string())
        if len(matches) > 1:
            raise FormatParseError(name, cls.options_as_string(), ambiguous=True)
        logger.debug(f"Parsed format name '{name}' as {matches[0].value}")
        return matches[0]

    @property
    def special_tokens(self) -> Tuple[str, ...]:
        return SPECIAL_TOKENS[self]


_FIM_TOKENS = (FIM_PREFIX, FIM_SUFFIX, FIM_MIDDLE, FILE_SEP, CURSOR_MARKER)

_GIT_MERGE_TOKENS = (
    FIM_PREFIX,
    FIM_SUFFIX,
    FIM_MIDDLE,
    FILE_SEP,
    MERGE_START_MARKER,
    MERGE_SEPARATOR,
    MERGE_END_MARKER,
    CURSOR_MARKER,
)

_SEED_CODER_TOKENS = (
    SEED_FIM_SUFFIX,
    SEED_FIM_PREFIX,
    SEED_FIM_MIDDLE,
    SEED_FILE_MARKER,
    MERGE_START_MARKER,
    MERGE_SEPARATOR,
    MERGE_END_MARKER,
    CURSOR_MARKER,
)

SPECIAL_TOKENS: Mapping[PromptFormat, Tuple[str, ...]] = MappingProxyType({
    PromptFormat.V0112_MIDDLE_AT_END: _FIM_TOKENS,
    PromptFormat.V0113_ORDERED: _FIM_TOKENS,
    PromptFormat.V0114_180_EDITABLE_REGION: _FIM_TOKENS,
    PromptFormat.V0120_GIT_MERGE_MARKERS: _GIT_MERGE_TOKENS,
    PromptFormat.V0131_GIT_MERGE_MARKERS_PREFIX: _GIT_MERGE_TOKENS,
    PromptFormat.V0211_PREFILL: _GIT_MERGE_TOKENS,
    PromptFormat.V0211_SEED_CODER: _SEED_CODER_TOKENS,
})

assert set(SPECIAL_TOKENS) == set(PromptFormat), "every format needs a token table"


def contains_special_token(prompt_input: PromptInput, fmt: PromptFormat) -> bool:
    """True if the cursor excerpt contains any of the format's reserved tokens."""
    return any(token in prompt_input.cursor_excerpt for token in fmt.special_tokens)


def find_special_tokens(prompt_input: PromptInput, fmt: PromptFormat) -> Tuple[str, ...]:
    """The format's reserved tokens that occur in the cursor excerpt, in table order."""
    return tuple(token for token in fmt.special_tokens if token in prompt_input.cursor_excerpt)
