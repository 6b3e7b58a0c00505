"""
Legacy Prompt Package.

The older instruction-style prompt, kept for clients that still prefer the
legacy model.

Components:
- prompt: instruction prompt, events oldest first, fenced excerpt
- output: region extraction and cursor marker conversion
- edits: rewritten region -> buffer edits
"""

from .prompt import (
    LEGACY_CURSOR_MARKER,
    START_OF_FILE_MARKER,
    EDITABLE_REGION_START_MARKER,
    EDITABLE_REGION_END_MARKER,
    format_legacy_prompt,
    format_legacy_event,
    format_legacy_events,
    format_legacy_events_within_budget,
    format_legacy_excerpt,
    format_legacy_from_input,
)

from .output import (
    clean_legacy_output,
    parse_legacy_output,
)

from .edits import (
    compute_edits,
    parse_legacy_edits,
)

__all__ = [
    # Markers
    "LEGACY_CURSOR_MARKER",
    "START_OF_FILE_MARKER",
    "EDITABLE_REGION_START_MARKER",
    "EDITABLE_REGION_END_MARKER",
    # Prompt
    "format_legacy_prompt",
    "format_legacy_event",
    "format_legacy_events",
    "format_legacy_events_within_budget",
    "format_legacy_excerpt",
    "format_legacy_from_input",
    # Output
    "clean_legacy_output",
    "parse_legacy_output",
    "compute_edits",
    "parse_legacy_edits",
]
