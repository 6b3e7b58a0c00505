"""
editprompt - Prompt compiler for next-edit prediction

Turns an editing context (cursor excerpt, edit history, related files) into
the exact text payload a prediction model expects.
"""

__version__ = "0.3.0"

# Core exports
from editprompt.schemas import (
    BufferChange,
    Event,
    ExcerptRanges,
    ModelKind,
    OffsetRange,
    PromptInput,
    RelatedExcerpt,
    RelatedFile,
    TextEdit,
)
from editprompt.tokens import estimate_tokens
from editprompt.formats import (
    CURSOR_MARKER,
    PromptFormat,
    contains_special_token,
    resolve_cursor_region,
)
from editprompt.budget import (
    MAX_PROMPT_TOKENS,
    AssembledPrompt,
    assemble_prompt,
    format_prompt,
    format_prompt_with_budget,
    write_related_files,
)
from editprompt.prefill import PREFILL_RATIO, get_prefill
from editprompt.cleaning import clean_model_output

# Legacy prompt
from editprompt.legacy import clean_legacy_output, format_legacy_from_input

__all__ = [
    "__version__",
    "BufferChange",
    "Event",
    "ExcerptRanges",
    "ModelKind",
    "OffsetRange",
    "PromptInput",
    "RelatedExcerpt",
    "RelatedFile",
    "TextEdit",
    "estimate_tokens",
    "CURSOR_MARKER",
    "PromptFormat",
    "contains_special_token",
    "resolve_cursor_region",
    "MAX_PROMPT_TOKENS",
    "AssembledPrompt",
    "assemble_prompt",
    "format_prompt",
    "format_prompt_with_budget",
    "write_related_files",
    "PREFILL_RATIO",
    "get_prefill",
    "clean_model_output",
    "clean_legacy_output",
    "format_legacy_from_input",
]
