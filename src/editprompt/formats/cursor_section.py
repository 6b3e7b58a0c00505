"""
Cursor section rendering.

One writer per format family. Each writer marks the editable region and the
cursor inside a resolved CursorRegion with its family's literal markers. The
cursor marker is spliced in at the exact byte offset; no other byte of the
excerpt changes. Marker lines always start at column 0, so segments that do
not already end in a newline get one.

Git merge marker layout (V0120GitMergeMarkers):

    <|file_sep|>path/to/target_file.py
    <|fim_prefix|>code before editable region
    <|fim_suffix|>code after editable region
    <|fim_middle|><<<<<<< CURRENT
    code that
    needs to<|user_cursor|>
    be rewritten
    =======

The model continues with the updated region and closes it with
`>>>>>>> UPDATED`. V0131GitMergeMarkersPrefix moves the CURRENT block into
the prefix so the middle marker is the last token.
"""

from types import MappingProxyType
from typing import Callable, Mapping

from .catalog import PromptFormat
from .markers import (
    CURSOR_MARKER,
    FILE_SEP,
    FIM_MIDDLE,
    FIM_PREFIX,
    FIM_SUFFIX,
    MERGE_SEPARATOR,
    MERGE_START_MARKER,
    SEED_FILE_MARKER,
    SEED_FIM_SUFFIX,
)
from .ranges import CursorRegion


def ensure_newline(text: str) -> str:
    """Append a newline unless `text` already ends with one."""
    if not text.endswith("\n"):
        return text + "\n"
    return text


def _marked_editable(region: CursorRegion) -> str:
    return region.editable_before_cursor + CURSOR_MARKER + region.editable_after_cursor


def write_middle_at_end_section(path: str, region: CursorRegion) -> str:
    """V0112: prefix, suffix, then the current and updated middle blocks."""
    prompt = f"{FILE_SEP}{path}\n"

    prompt += f"{FIM_PREFIX}\n"
    prompt += region.prefix

    prompt += f"{FIM_SUFFIX}\n"
    prompt += region.suffix
    prompt = ensure_newline(prompt)

    prompt += f"{FIM_MIDDLE}current\n"
    prompt += _marked_editable(region)
    prompt = ensure_newline(prompt)

    prompt += f"{FIM_MIDDLE}updated\n"
    return prompt


def write_ordered_section(path: str, region: CursorRegion) -> str:
    """V0113/V0114: prefix, current middle, suffix, updated middle."""
    prompt = f"{FILE_SEP}{path}\n"

    prompt += f"{FIM_PREFIX}\n"
    prompt += region.prefix
    prompt = ensure_newline(prompt)

    prompt += f"{FIM_MIDDLE}current\n"
    prompt += _marked_editable(region)
    prompt = ensure_newline(prompt)

    prompt += f"{FIM_SUFFIX}\n"
    prompt += region.suffix
    prompt = ensure_newline(prompt)

    prompt += f"{FIM_MIDDLE}updated\n"
    return prompt


def write_git_merge_markers_section(path: str, region: CursorRegion) -> str:
    """V0120: the CURRENT block sits in the middle section."""
    prompt = f"{FILE_SEP}{path}\n"

    prompt += FIM_PREFIX
    prompt += region.prefix

    prompt += FIM_SUFFIX
    prompt += region.suffix
    prompt = ensure_newline(prompt)

    prompt += FIM_MIDDLE
    prompt += MERGE_START_MARKER
    prompt += _marked_editable(region)
    prompt = ensure_newline(prompt)
    prompt += MERGE_SEPARATOR
    return prompt


def write_git_merge_markers_prefix_section(path: str, region: CursorRegion) -> str:
    """V0131/V0211Prefill: the CURRENT block closes the prefix section."""
    prompt = f"{FILE_SEP}{path}\n"

    prompt += FIM_PREFIX
    prompt += region.prefix
    prompt += MERGE_START_MARKER
    prompt += _marked_editable(region)
    prompt = ensure_newline(prompt)
    prompt += MERGE_SEPARATOR

    prompt += FIM_SUFFIX
    prompt += region.suffix
    prompt = ensure_newline(prompt)

    prompt += FIM_MIDDLE
    return prompt


def write_seed_coder_suffix_section(region: CursorRegion) -> str:
    """Seed-Coder (SPM) puts the code after the editable region first."""
    return ensure_newline(SEED_FIM_SUFFIX + region.suffix)


def write_seed_coder_cursor_prefix_section(path: str, region: CursorRegion) -> str:
    """Seed-Coder file block: filename, code before the region, CURRENT block."""
    section = f"{SEED_FILE_MARKER}{path}\n"
    section += region.prefix
    section += MERGE_START_MARKER
    section += _marked_editable(region)
    section = ensure_newline(section)
    section += MERGE_SEPARATOR
    return section


CursorSectionWriter = Callable[[str, CursorRegion], str]

CURSOR_SECTION_WRITERS: Mapping[PromptFormat, CursorSectionWriter] = MappingProxyType({
    PromptFormat.V0112_MIDDLE_AT_END: write_middle_at_end_section,
    PromptFormat.V0113_ORDERED: write_ordered_section,
    PromptFormat.V0114_180_EDITABLE_REGION: write_ordered_section,
    PromptFormat.V0120_GIT_MERGE_MARKERS: write_git_merge_markers_section,
    PromptFormat.V0131_GIT_MERGE_MARKERS_PREFIX: write_git_merge_markers_prefix_section,
    PromptFormat.V0211_PREFILL: write_git_merge_markers_prefix_section,
    # The suffix section is rendered separately by the assembler
    PromptFormat.V0211_SEED_CODER: write_seed_coder_cursor_prefix_section,
})

assert set(CURSOR_SECTION_WRITERS) == set(PromptFormat), "every format needs a cursor section writer"


def write_cursor_section(path: str, region: CursorRegion, fmt: PromptFormat) -> str:
    """Render the never-truncated cursor section for `fmt`."""
    return CURSOR_SECTION_WRITERS[fmt](path, region)
