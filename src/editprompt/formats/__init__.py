"""
Prompt Formats Package.

Wire formats, their special-token vocabularies and the cursor section each
one renders.

Components:
- catalog: PromptFormat enum, name parsing, special-token tables
- markers: literal marker strings
- ranges: cursor region resolution over UTF-8 byte offsets
- cursor_section: one cursor section writer per format family

Usage:
    from editprompt.formats import PromptFormat, resolve_cursor_region, write_cursor_section
"""

from .catalog import (
    PromptFormat,
    SPECIAL_TOKENS,
    contains_special_token,
    find_special_tokens,
)

from .markers import CURSOR_MARKER

from .ranges import (
    CursorRegion,
    resolve_cursor_region,
    select_excerpt_ranges,
)

from .cursor_section import (
    CURSOR_SECTION_WRITERS,
    ensure_newline,
    write_cursor_section,
    write_seed_coder_suffix_section,
)

__all__ = [
    # Catalog
    "PromptFormat",
    "SPECIAL_TOKENS",
    "contains_special_token",
    "find_special_tokens",
    "CURSOR_MARKER",
    # Ranges
    "CursorRegion",
    "resolve_cursor_region",
    "select_excerpt_ranges",
    # Rendering
    "CURSOR_SECTION_WRITERS",
    "ensure_newline",
    "write_cursor_section",
    "write_seed_coder_suffix_section",
]
