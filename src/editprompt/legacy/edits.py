"""
Turn a rewritten editable region into buffer edits.
"""

import difflib
from typing import List

from ..schemas import OffsetRange, TextEdit
from ..tokens import byte_len
from .output import parse_legacy_output


def _common_prefix_len(a: str, b: str) -> int:
    length = 0
    for left, right in zip(a, b):
        if left != right:
            break
        length += 1
    return length


def compute_edits(old_text: str, new_text: str, offset: int = 0) -> List[TextEdit]:
    """
    Minimal edits that turn `old_text` into `new_text`.

    Lines are diffed first, then each changed hunk is trimmed of the text it
    shares with its replacement at both ends.

    Args:
        old_text: Current text of the region
        new_text: Replacement text of the region
        offset: Byte offset of `old_text` inside the buffer

    Returns:
        TextEdits with buffer byte ranges, in buffer order
    """
    old_lines = old_text.splitlines(keepends=True)
    new_lines = new_text.splitlines(keepends=True)

    # Byte offset of each old line start, plus the end of the text
    line_starts = [0]
    for line in old_lines:
        line_starts.append(line_starts[-1] + byte_len(line))

    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    edits: List[TextEdit] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        old_chunk = "".join(old_lines[i1:i2])
        new_chunk = "".join(new_lines[j1:j2])

        prefix = _common_prefix_len(old_chunk, new_chunk)
        suffix = _common_prefix_len(old_chunk[prefix:][::-1], new_chunk[prefix:][::-1])

        start = offset + line_starts[i1] + byte_len(old_chunk[:prefix])
        end = offset + line_starts[i2] - byte_len(old_chunk[len(old_chunk) - suffix:])
        replacement = new_chunk[prefix:len(new_chunk) - suffix]
        if start == end and not replacement:
            continue
        edits.append(TextEdit(range=OffsetRange(start=start, end=end), text=replacement))
    return edits


def parse_legacy_edits(output: str, old_text: str, offset: int = 0) -> List[TextEdit]:
    """
    Edits described by legacy model output for the region `old_text`.

    Raises:
        LegacyOutputError: If the output carries duplicated markers
    """
    return compute_edits(old_text, parse_legacy_output(output), offset)
