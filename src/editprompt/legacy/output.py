"""
Legacy model output handling.

The legacy model echoes the excerpt with region markers around its rewrite
and its own cursor marker. Offsets below are UTF-8 byte offsets.
"""

from ..exceptions import LegacyOutputError
from ..formats.markers import CURSOR_MARKER
from ..tokens import floor_char_boundary
from .prompt import (
    EDITABLE_REGION_END_MARKER,
    EDITABLE_REGION_START_MARKER,
    LEGACY_CURSOR_MARKER,
    START_OF_FILE_MARKER,
)

_START = EDITABLE_REGION_START_MARKER.encode("utf-8")
_END = EDITABLE_REGION_END_MARKER.encode("utf-8")
_LEGACY_CURSOR = LEGACY_CURSOR_MARKER.encode("utf-8")


def _region_start(content: bytes) -> int:
    """Offset just after the start marker and one following newline, or 0."""
    pos = content.find(_START)
    if pos == -1:
        return 0
    pos += len(_START)
    if content[pos:pos + 1] == b"\n":
        pos += 1
    return pos


def clean_legacy_output(output: str) -> str:
    """
    Extract the rewritten region and convert the cursor marker.

    The text between the region markers is returned (the whole output when a
    marker is missing) with the legacy cursor marker replaced by the standard
    one at the same position.
    """
    raw = output.encode("utf-8")
    content = raw.replace(_LEGACY_CURSOR, b"")

    content_start = _region_start(content)
    content_end = content.find(_END)
    if content_end == -1:
        content_end = len(content)
    elif content_end > 0 and content[content_end - 1:content_end] == b"\n":
        content_end -= 1

    if content_start > content_end:
        return ""
    extracted = content[content_start:content_end]

    cursor_pos = raw.find(_LEGACY_CURSOR)
    if cursor_pos == -1:
        return extracted.decode("utf-8")

    consumed = _region_start(raw[:cursor_pos])
    offset = floor_char_boundary(extracted, max(cursor_pos - consumed, 0))
    return (
        extracted[:offset].decode("utf-8")
        + CURSOR_MARKER
        + extracted[offset:].decode("utf-8")
    )


def parse_legacy_output(output: str) -> str:
    """
    Strictly extract the rewritten region from legacy output, without cursor.

    Raises:
        LegacyOutputError: If any region or start-of-file marker appears more than once
    """
    content = output.replace(LEGACY_CURSOR_MARKER, "")
    for marker in (EDITABLE_REGION_START_MARKER, EDITABLE_REGION_END_MARKER, START_OF_FILE_MARKER):
        count = content.count(marker)
        if count > 1:
            raise LegacyOutputError(marker, count)

    data = content.encode("utf-8")
    content_start = _region_start(data)
    end_pos = data.find(_END)
    if end_pos == -1:
        content_end = len(data) - 1 if data.endswith(b"\n") else len(data)
    elif end_pos > 0 and data[end_pos - 1:end_pos] == b"\n":
        content_end = end_pos - 1
    else:
        content_end = end_pos

    # Both ends can claim the same newline in "<start>\n<end>"
    return data[min(content_start, content_end):content_end].decode("utf-8")
