"""
Legacy instruction-style prompt.

Unlike the budgeted formats this prompt is a fixed instruction header, the
edit history oldest first, the cursor excerpt and a response header. It has
its own marker vocabulary.
"""

from pathlib import PurePosixPath
from typing import Optional, Sequence, Tuple

from ..exceptions import ExcerptRangeError
from ..schemas import Event, OffsetRange, PromptInput
from ..tokens import check_range, text_tokens
from ..budget.config import get_budget_config

LEGACY_CURSOR_MARKER = "<|user_cursor_is_here|>"
START_OF_FILE_MARKER = "<|start_of_file|>"
EDITABLE_REGION_START_MARKER = "<|editable_region_start|>"
EDITABLE_REGION_END_MARKER = "<|editable_region_end|>"

INSTRUCTION_HEADER = (
    "### Instruction:\n"
    "You are a code completion assistant and your task is to analyze user edits and then rewrite an "
    "excerpt that the user provides, suggesting the appropriate edits within the excerpt, taking "
    "into account the cursor location.\n\n"
    "### User Edits:\n\n"
)
EXCERPT_HEADER = "\n\n### User Excerpt:\n\n"
RESPONSE_HEADER = "\n\n### Response:\n"

EVENT_SEPARATOR = "\n\n"


def format_legacy_prompt(events_text: str, excerpt_text: str) -> str:
    """Wrap already rendered events and excerpt in the legacy headers."""
    return INSTRUCTION_HEADER + events_text + EXCERPT_HEADER + excerpt_text + RESPONSE_HEADER


def format_legacy_event(event: Event) -> str:
    """Describe one event in prose plus a fenced diff. Empty if there is nothing to say."""
    prompt = ""
    if PurePosixPath(event.old_path) != PurePosixPath(event.path):
        prompt += f"User renamed {event.old_path} to {event.path}\n\n"
    if event.diff:
        prompt += f"User edited {event.path}:\n```diff\n{event.diff}\n```"
    return prompt


def format_legacy_events(events: Sequence[Event]) -> str:
    """All events oldest first, separated by a blank line. Empty events are skipped."""
    rendered = (format_legacy_event(event) for event in events)
    return EVENT_SEPARATOR.join(text for text in rendered if text)


def format_legacy_events_within_budget(
    events: Sequence[Event],
    max_tokens: Optional[int] = None,
) -> Tuple[str, int]:
    """
    Newest events that fit in `max_tokens`, rendered oldest first.

    Stops at the first event (newest to oldest) that does not fit.

    Args:
        events: Events ordered oldest to newest
        max_tokens: Budget (uses configured legacy_max_event_tokens if None)

    Returns:
        Tuple of (text, number of events included)
    """
    if max_tokens is None:
        max_tokens = get_budget_config().legacy_max_event_tokens

    remaining = max_tokens
    included = []
    for event in reversed(events):
        event_text = format_legacy_event(event)
        event_tokens = text_tokens(event_text)
        if event_tokens > remaining:
            break
        included.append(event_text)
        remaining -= event_tokens
    return EVENT_SEPARATOR.join(reversed(included)), len(included)


def format_legacy_excerpt(
    prompt_input: PromptInput,
    editable_range: OffsetRange,
    context_range: OffsetRange,
) -> str:
    """
    Render the fenced excerpt with region and cursor markers.

    Raises:
        ExcerptRangeError: If the ranges or the cursor do not nest inside the excerpt
    """
    data = prompt_input.cursor_excerpt.encode("utf-8")
    cursor = prompt_input.cursor_offset
    check_range(data, context_range.start, context_range.end, "context range")
    check_range(data, editable_range.start, editable_range.end, "editable range")
    check_range(data, cursor, cursor, "cursor offset")
    if not context_range.contains(editable_range):
        raise ExcerptRangeError(
            "editable range", editable_range.start, editable_range.end, len(data),
            f"not inside context range {context_range.start}..{context_range.end}",
        )
    if not editable_range.start <= cursor <= editable_range.end:
        raise ExcerptRangeError(
            "cursor offset", cursor, cursor, len(data),
            f"cursor is outside the editable range {editable_range.start}..{editable_range.end}",
        )

    def text(start: int, end: int) -> str:
        return data[start:end].decode("utf-8")

    prompt = f"```{prompt_input.cursor_path}\n"
    if prompt_input.excerpt_start_row == 0 and context_range.start == 0:
        prompt += f"{START_OF_FILE_MARKER}\n"

    prompt += text(context_range.start, editable_range.start)
    prompt += f"{EDITABLE_REGION_START_MARKER}\n"
    prompt += text(editable_range.start, cursor)
    prompt += LEGACY_CURSOR_MARKER
    prompt += text(cursor, editable_range.end)
    prompt += f"\n{EDITABLE_REGION_END_MARKER}"
    prompt += text(editable_range.end, context_range.end)
    prompt += "\n```"
    return prompt


def format_legacy_from_input(
    prompt_input: PromptInput,
    editable_range: Optional[OffsetRange] = None,
    context_range: Optional[OffsetRange] = None,
) -> str:
    """
    Full legacy prompt for a request.

    Args:
        prompt_input: The request
        editable_range: Byte range to mark editable (defaults to the request's editable range)
        context_range: Byte range of context to show (defaults to the whole excerpt)

    Returns:
        The prompt text; events are neither reordered nor truncated
    """
    if editable_range is None:
        editable_range = prompt_input.editable_range
    if context_range is None:
        context_range = OffsetRange(start=0, end=len(prompt_input.cursor_excerpt.encode("utf-8")))
    events_text = format_legacy_events(prompt_input.events)
    excerpt_text = format_legacy_excerpt(prompt_input, editable_range, context_range)
    return format_legacy_prompt(events_text, excerpt_text)
