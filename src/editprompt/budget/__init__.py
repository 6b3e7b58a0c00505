"""
Prompt Budget Package.

Token-budgeted assembly of edit prediction prompts.

Components:
- config: PromptBudgetConfig with env var support
- truncation: edit history and related files within a budget
- assembler: cursor section + context sections in priority order

Usage:
    from editprompt.budget import assemble_prompt, format_prompt_with_budget

Override the default budget via environment:
    EDITPROMPT_MAX_PROMPT_TOKENS=8192 editprompt render request.json
"""

from .config import (
    PromptBudgetConfig,
    get_budget_config,
    reset_budget_config,
    MAX_PROMPT_TOKENS,
    DEFAULT_MAX_PROMPT_TOKENS,
    DEFAULT_LEGACY_MAX_EVENT_TOKENS,
    DEFAULT_FORMAT_NAME,
)

from .truncation import (
    SectionResult,
    format_event,
    format_edit_history_within_budget,
    format_related_files_within_budget,
    write_related_files,
)

from .assembler import (
    AssembledPrompt,
    PromptStats,
    assemble_prompt,
    format_prompt,
    format_prompt_with_budget,
)

__all__ = [
    # Config
    "PromptBudgetConfig",
    "get_budget_config",
    "reset_budget_config",
    "MAX_PROMPT_TOKENS",
    "DEFAULT_MAX_PROMPT_TOKENS",
    "DEFAULT_LEGACY_MAX_EVENT_TOKENS",
    "DEFAULT_FORMAT_NAME",
    # Truncation
    "SectionResult",
    "format_event",
    "format_edit_history_within_budget",
    "format_related_files_within_budget",
    "write_related_files",
    # Assembly
    "AssembledPrompt",
    "PromptStats",
    "assemble_prompt",
    "format_prompt",
    "format_prompt_with_budget",
]
