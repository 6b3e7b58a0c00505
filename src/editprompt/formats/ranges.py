"""
Cursor region resolution.

Picks the context text, editable range and cursor offset a format should see,
narrowing to precomputed excerpt ranges when the request carries them. All
offsets are UTF-8 byte offsets; every slice is checked before use.
"""

from dataclasses import dataclass, field
from typing import Tuple

from editprompt.logging_config import logger

from ..exceptions import ExcerptRangeError
from ..schemas import OffsetRange, PromptInput
from ..tokens import check_range, slice_bytes
from .catalog import PromptFormat


# Formats still trained on the narrow 150-token editable region
_EDITABLE_150_FORMATS = frozenset({
    PromptFormat.V0112_MIDDLE_AT_END,
    PromptFormat.V0113_ORDERED,
})


@dataclass(frozen=True)
class CursorRegion:
    """
    The excerpt slice a cursor section is rendered from.

    `editable_range` and `cursor_offset` are byte offsets relative to the
    start of `context`.
    """

    context: str
    editable_range: OffsetRange
    cursor_offset: int
    _data: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        data = self.context.encode("utf-8")
        object.__setattr__(self, "_data", data)
        check_range(data, self.editable_range.start, self.editable_range.end, "editable range")
        start, end = self.editable_range.start, self.editable_range.end
        if not start <= self.cursor_offset <= end:
            raise ExcerptRangeError(
                "cursor offset",
                self.cursor_offset,
                self.cursor_offset,
                len(data),
                f"cursor is outside the editable range {start}..{end}",
            )
        check_range(data, self.cursor_offset, self.cursor_offset, "cursor offset")

    @property
    def prefix(self) -> str:
        """Text before the editable region."""
        return slice_bytes(self._data, 0, self.editable_range.start)

    @property
    def suffix(self) -> str:
        """Text after the editable region."""
        return slice_bytes(self._data, self.editable_range.end, len(self._data))

    @property
    def editable_before_cursor(self) -> str:
        return slice_bytes(self._data, self.editable_range.start, self.cursor_offset)

    @property
    def editable_after_cursor(self) -> str:
        return slice_bytes(self._data, self.cursor_offset, self.editable_range.end)

    @property
    def editable_text(self) -> str:
        return slice_bytes(self._data, self.editable_range.start, self.editable_range.end)


def select_excerpt_ranges(prompt_input: PromptInput, fmt: PromptFormat) -> Tuple[OffsetRange, OffsetRange]:
    """
    The (editable, context) range pair a format uses from `excerpt_ranges`.

    Without precomputed ranges the whole excerpt is the context.
    """
    ranges = prompt_input.excerpt_ranges
    if ranges is None:
        whole = OffsetRange(start=0, end=len(prompt_input.cursor_excerpt.encode("utf-8")))
        return prompt_input.editable_range, whole
    if fmt in _EDITABLE_150_FORMATS:
        return ranges.editable_150, ranges.editable_150_context_350
    return ranges.editable_180, ranges.editable_180_context_350


def resolve_cursor_region(prompt_input: PromptInput, fmt: PromptFormat) -> CursorRegion:
    """
    Resolve the context text, local editable range and local cursor offset.

    Args:
        prompt_input: The request
        fmt: Format being rendered; decides which precomputed ranges apply

    Returns:
        CursorRegion with offsets re-based onto the context text

    Raises:
        ExcerptRangeError: If any range or the cursor does not fit the excerpt
    """
    if prompt_input.excerpt_ranges is None:
        return CursorRegion(
            context=prompt_input.cursor_excerpt,
            editable_range=prompt_input.editable_range,
            cursor_offset=prompt_input.cursor_offset,
        )

    editable, context = select_excerpt_ranges(prompt_input, fmt)
    data = prompt_input.cursor_excerpt.encode("utf-8")
    context_text = slice_bytes(data, context.start, context.end, "context range")

    if not context.contains(editable):
        raise ExcerptRangeError(
            "editable range", editable.start, editable.end, len(data),
            f"not inside context range {context.start}..{context.end}",
        )
    if not context.start <= prompt_input.cursor_offset <= context.end:
        raise ExcerptRangeError(
            "cursor offset", prompt_input.cursor_offset, prompt_input.cursor_offset, len(data),
            f"not inside context range {context.start}..{context.end}",
        )

    local_editable = OffsetRange(
        start=editable.start - context.start,
        end=editable.end - context.start,
    )
    local_cursor = prompt_input.cursor_offset - context.start
    logger.debug(
        f"Resolved {fmt.value} region: context {context.start}..{context.end}, "
        f"editable {editable.start}..{editable.end}, cursor {prompt_input.cursor_offset}"
    )
    return CursorRegion(
        context=context_text,
        editable_range=local_editable,
        cursor_offset=local_cursor,
    )
