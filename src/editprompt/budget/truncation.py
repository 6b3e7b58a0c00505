"""
Budgeted rendering of the truncatable prompt sections.

Edit history and related files are filled into whatever budget the cursor
section leaves over. The two sections truncate differently:

- edit history keeps the newest events and stops at the first event that
  does not fit, so no older event is tried after a miss;
- related files are kept in priority order, a file may be cut after any
  excerpt, and a file with no fitting excerpt is skipped while later files
  are still considered. A file whose header alone does not fit ends the scan.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from editprompt.logging_config import logger

from ..formats.cursor_section import ensure_newline
from ..formats.markers import ELLIPSIS_LINE, PREDICTION_ACCEPTED_LINE
from ..schemas import Event, OffsetRange, RelatedExcerpt, RelatedFile
from ..tokens import byte_len, estimate_tokens, text_tokens


@dataclass
class SectionResult:
    """A rendered section and how much of its input made it in."""

    text: str = ""
    items_included: int = 0
    items_total: int = 0
    excerpts_included: int = 0

    @property
    def tokens(self) -> int:
        return text_tokens(self.text)

    @property
    def items_dropped(self) -> int:
        return self.items_total - self.items_included


def _unix_path(path: str) -> str:
    """
    Render a path as `/component/component...`, one slash per component.

    Repeated and trailing separators collapse and interior `.` components
    are dropped, while a leading `.` and any `..` are kept. An absolute
    path's root counts as a component of its own.
    """
    components = ["/"] if path.startswith("/") else []
    for index, part in enumerate(path.split("/")):
        if not part or (part == "." and index > 0):
            continue
        components.append(part)
    return "".join(f"/{part}" for part in components)


def format_event(event: Event) -> str:
    """
    Render one edit history event as a diff block.

    The diff text is emitted verbatim after the `---`/`+++` header lines.
    """
    prompt = ""
    if event.predicted:
        prompt += PREDICTION_ACCEPTED_LINE
    prompt += f"--- a{_unix_path(event.old_path)}\n"
    prompt += f"+++ b{_unix_path(event.path)}\n"
    prompt += event.diff
    return prompt


def format_edit_history_within_budget(
    events: Sequence[Event],
    file_marker: str,
    history_name: str,
    max_tokens: int,
) -> SectionResult:
    """
    Render as many of the newest events as fit in `max_tokens`.

    Args:
        events: Events ordered oldest to newest
        file_marker: Format's file marker token, e.g. "<|file_sep|>"
        history_name: Pseudo file name of the section
        max_tokens: Budget for the whole section, header included

    Returns:
        SectionResult; empty text if the header or the newest event does not fit
    """
    result = SectionResult(items_total=len(events))
    header = f"{file_marker}{history_name}\n"
    header_tokens = text_tokens(header)
    if header_tokens >= max_tokens:
        logger.debug(f"Edit history header ({header_tokens} tokens) exceeds budget {max_tokens}")
        return result

    included: List[str] = []
    total_tokens = header_tokens
    for event in reversed(events):
        event_text = format_event(event)
        event_tokens = text_tokens(event_text)
        if total_tokens + event_tokens > max_tokens:
            break
        total_tokens += event_tokens
        included.append(event_text)

    if not included:
        return result

    result.text = header + "".join(reversed(included))
    result.items_included = len(included)
    if result.items_dropped:
        logger.debug(
            f"Edit history kept {result.items_included}/{result.items_total} events "
            f"({total_tokens}/{max_tokens} tokens)"
        )
    return result


def _excerpt_byte_len(excerpt: RelatedExcerpt, max_row: int) -> int:
    length = byte_len(excerpt.text)
    if not excerpt.text.endswith("\n"):
        length += 1
    if excerpt.row_range.end < max_row:
        length += byte_len(ELLIPSIS_LINE)
    return length


def _write_excerpts(prompt: str, related_file: RelatedFile, excerpts: Sequence[RelatedExcerpt]) -> str:
    for excerpt in excerpts:
        prompt += excerpt.text
        prompt = ensure_newline(prompt)
        if excerpt.row_range.end < related_file.max_row:
            prompt += ELLIPSIS_LINE
    return prompt


def format_related_files_within_budget(
    related_files: Sequence[RelatedFile],
    file_marker: str,
    max_tokens: int,
) -> SectionResult:
    """
    Render related files in priority order within `max_tokens`.

    Args:
        related_files: Files ordered by priority, most important first
        file_marker: Format's file marker token
        max_tokens: Budget for the whole section

    Returns:
        SectionResult counting included files and excerpts
    """
    result = SectionResult(items_total=len(related_files))
    prompt = ""
    total_tokens = 0

    for related_file in related_files:
        header = f"{file_marker}{related_file.path}\n"
        header_tokens = text_tokens(header)
        if total_tokens + header_tokens > max_tokens:
            logger.debug(f"Related file header for {related_file.path} exceeds remaining budget")
            break

        file_tokens = header_tokens
        fitting = 0
        for excerpt in related_file.excerpts:
            excerpt_tokens = estimate_tokens(_excerpt_byte_len(excerpt, related_file.max_row))
            if total_tokens + file_tokens + excerpt_tokens > max_tokens:
                break
            file_tokens += excerpt_tokens
            fitting += 1

        if fitting == 0:
            logger.debug(f"Skipping related file {related_file.path}: no excerpt fits")
            continue

        total_tokens += file_tokens
        prompt += header
        prompt = _write_excerpts(prompt, related_file, related_file.excerpts[:fitting])
        result.items_included += 1
        result.excerpts_included += fitting

    result.text = prompt
    return result


def write_related_files(
    related_files: Sequence[RelatedFile],
    file_marker: str = "<|file_sep|>",
) -> Tuple[str, List[OffsetRange]]:
    """
    Render every related file without a budget.

    Returns:
        Tuple of (text, byte range of each file block inside the text)
    """
    prompt = ""
    ranges: List[OffsetRange] = []
    for related_file in related_files:
        start = byte_len(prompt)
        prompt += f"{file_marker}{related_file.path}\n"
        prompt = _write_excerpts(prompt, related_file, related_file.excerpts)
        ranges.append(OffsetRange(start=start, end=byte_len(prompt)))
    return prompt, ranges
