"""
Budgeted prompt assembly.

The cursor section is always emitted in full. Whatever budget it leaves is
spent on edit history first and related files second; the final text lists
related files, then edit history, then the cursor section.

Seed-Coder uses SPM order: its suffix section and cursor-prefix section are
both mandatory and both are charged before the context budgets are worked
out. The context sections then go between the prefix token and the cursor
file block.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from editprompt.logging_config import logger

from ..formats.catalog import PromptFormat
from ..formats.cursor_section import write_cursor_section, write_seed_coder_suffix_section
from ..formats.markers import (
    EDIT_HISTORY_NAME,
    FILE_SEP,
    SEED_EDIT_HISTORY_NAME,
    SEED_FILE_MARKER,
    SEED_FIM_MIDDLE,
    SEED_FIM_PREFIX,
)
from ..formats.ranges import resolve_cursor_region
from ..schemas import PromptInput
from ..tokens import text_tokens
from .config import get_budget_config
from .truncation import (
    SectionResult,
    format_edit_history_within_budget,
    format_related_files_within_budget,
)


@dataclass
class PromptStats:
    """Token accounting for one assembled prompt."""

    max_tokens: int = 0
    cursor_tokens: int = 0
    edit_history_tokens: int = 0
    related_files_tokens: int = 0
    total_tokens: int = 0
    events_included: int = 0
    events_total: int = 0
    related_files_included: int = 0
    related_files_total: int = 0
    excerpts_included: int = 0

    @property
    def over_budget(self) -> bool:
        """True when the mandatory sections alone exceed the budget."""
        return self.cursor_tokens > self.max_tokens

    def to_dict(self) -> dict:
        return {
            "max_tokens": self.max_tokens,
            "cursor_tokens": self.cursor_tokens,
            "edit_history_tokens": self.edit_history_tokens,
            "related_files_tokens": self.related_files_tokens,
            "total_tokens": self.total_tokens,
            "events_included": self.events_included,
            "events_total": self.events_total,
            "related_files_included": self.related_files_included,
            "related_files_total": self.related_files_total,
            "excerpts_included": self.excerpts_included,
            "over_budget": self.over_budget,
        }


@dataclass
class AssembledPrompt:
    """The wire payload and the accounting behind it."""

    text: str
    format: PromptFormat
    stats: PromptStats = field(default_factory=PromptStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format.value,
            "prompt": self.text,
            "stats": self.stats.to_dict(),
        }


def _fill_context(
    prompt_input: PromptInput,
    file_marker: str,
    history_name: str,
    budget: int,
) -> Tuple[SectionResult, SectionResult]:
    edit_history = format_edit_history_within_budget(
        prompt_input.events, file_marker, history_name, budget
    )
    budget_after_history = max(budget - edit_history.tokens, 0)
    related_files = format_related_files_within_budget(
        prompt_input.related_files, file_marker, budget_after_history
    )
    return edit_history, related_files


def _build_stats(
    max_tokens: int,
    cursor_tokens: int,
    edit_history: SectionResult,
    related_files: SectionResult,
    text: str,
) -> PromptStats:
    return PromptStats(
        max_tokens=max_tokens,
        cursor_tokens=cursor_tokens,
        edit_history_tokens=edit_history.tokens,
        related_files_tokens=related_files.tokens,
        total_tokens=text_tokens(text),
        events_included=edit_history.items_included,
        events_total=edit_history.items_total,
        related_files_included=related_files.items_included,
        related_files_total=related_files.items_total,
        excerpts_included=related_files.excerpts_included,
    )


def _assemble_seed_coder(prompt_input: PromptInput, max_tokens: int) -> AssembledPrompt:
    fmt = PromptFormat.V0211_SEED_CODER
    region = resolve_cursor_region(prompt_input, fmt)
    suffix_section = write_seed_coder_suffix_section(region)
    cursor_prefix_section = write_cursor_section(prompt_input.cursor_path, region, fmt)

    cursor_tokens = text_tokens(suffix_section) + text_tokens(cursor_prefix_section)
    budget_after_cursor = max(max_tokens - cursor_tokens, 0)
    edit_history, related_files = _fill_context(
        prompt_input, SEED_FILE_MARKER, SEED_EDIT_HISTORY_NAME, budget_after_cursor
    )

    prompt = suffix_section + SEED_FIM_PREFIX
    if related_files.text:
        prompt += related_files.text + "\n"
    if edit_history.text:
        prompt += edit_history.text + "\n"
    prompt += cursor_prefix_section + SEED_FIM_MIDDLE

    stats = _build_stats(max_tokens, cursor_tokens, edit_history, related_files, prompt)
    return AssembledPrompt(text=prompt, format=fmt, stats=stats)


def assemble_prompt(
    prompt_input: PromptInput,
    fmt: PromptFormat,
    max_tokens: Optional[int] = None,
) -> AssembledPrompt:
    """
    Assemble the prompt for `fmt` within a token budget.

    Args:
        prompt_input: The request
        fmt: Target prompt format
        max_tokens: Token budget (uses configured max_prompt_tokens if None)

    Returns:
        AssembledPrompt with text and token accounting

    Raises:
        ExcerptRangeError: If the request's ranges do not fit its excerpt
    """
    if max_tokens is None:
        max_tokens = get_budget_config().max_prompt_tokens

    if fmt is PromptFormat.V0211_SEED_CODER:
        assembled = _assemble_seed_coder(prompt_input, max_tokens)
    else:
        region = resolve_cursor_region(prompt_input, fmt)
        cursor_section = write_cursor_section(prompt_input.cursor_path, region, fmt)
        cursor_tokens = text_tokens(cursor_section)
        budget_after_cursor = max(max_tokens - cursor_tokens, 0)
        edit_history, related_files = _fill_context(
            prompt_input, FILE_SEP, EDIT_HISTORY_NAME, budget_after_cursor
        )
        prompt = related_files.text + edit_history.text + cursor_section
        stats = _build_stats(max_tokens, cursor_tokens, edit_history, related_files, prompt)
        assembled = AssembledPrompt(text=prompt, format=fmt, stats=stats)

    stats = assembled.stats
    if stats.over_budget:
        logger.debug(
            f"Cursor section alone ({stats.cursor_tokens} tokens) exceeds budget {max_tokens}"
        )
    logger.debug(
        f"Assembled {fmt.value} prompt: {stats.total_tokens} tokens, "
        f"{stats.events_included}/{stats.events_total} events, "
        f"{stats.related_files_included}/{stats.related_files_total} related files"
    )
    return assembled


def format_prompt_with_budget(prompt_input: PromptInput, fmt: PromptFormat, max_tokens: int) -> str:
    """Prompt text for `fmt` within `max_tokens`."""
    return assemble_prompt(prompt_input, fmt, max_tokens).text


def format_prompt(prompt_input: PromptInput, fmt: Optional[PromptFormat] = None) -> str:
    """Prompt text using the configured budget (and configured default format if `fmt` is None)."""
    if fmt is None:
        fmt = PromptFormat.parse(get_budget_config().default_format)
    return assemble_prompt(prompt_input, fmt).text
