"""
Prefill computation for the V0211Prefill format.

The start of the editable region is handed to the model as the beginning of
its answer. That part of the region becomes non-editable, so only a small
share of it is used.
"""

from editprompt.logging_config import logger

from .formats.catalog import PromptFormat
from .schemas import PromptInput
from .tokens import check_range, floor_char_boundary

# Share of the editable region used as prefill
PREFILL_RATIO = 0.1


def compute_prefill(editable_text: str) -> str:
    """
    Cut a prefill from the start of `editable_text` on a token boundary.

    The cut lands after the last newline within the first PREFILL_RATIO of
    the region, swallowing any newlines that follow it (runs of newlines are
    single tokens for the target tokenizer). Without a newline it falls back
    to the last space, and without either the raw prefix is used.
    """
    data = editable_text.encode("utf-8")
    prefill_len = floor_char_boundary(data, int(len(data) * PREFILL_RATIO))
    prefill = data[:prefill_len]

    newline = prefill.rfind(b"\n")
    if newline != -1:
        end = newline + 1
        while end < len(data) and data[end:end + 1] == b"\n":
            end += 1
        return data[:end].decode("utf-8")

    space = prefill.rfind(b" ")
    if space != -1:
        return prefill[:space].decode("utf-8")
    return prefill.decode("utf-8")


def get_prefill(prompt_input: PromptInput, fmt: PromptFormat) -> str:
    """
    Prefill for `fmt`; empty for every format except V0211Prefill.

    Raises:
        ExcerptRangeError: If the editable range does not fit the excerpt
    """
    if fmt is not PromptFormat.V0211_PREFILL:
        return ""

    data = prompt_input.cursor_excerpt.encode("utf-8")
    editable = prompt_input.editable_range
    check_range(data, editable.start, editable.end, "editable range")
    prefill = compute_prefill(data[editable.start:editable.end].decode("utf-8"))
    logger.debug(f"Prefill of {len(prefill.encode('utf-8'))} bytes for {prompt_input.cursor_path}")
    return prefill
