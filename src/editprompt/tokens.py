"""
Token estimation and UTF-8 byte helpers.

Every budget in editprompt is measured with the same fixed approximation:
three bytes of UTF-8 per token, rounded down. It is deliberately not a real
tokenizer; the receiving models were tuned against this ratio.
"""

from .exceptions import ExcerptRangeError

BYTES_PER_TOKEN = 3


def estimate_tokens(byte_len: int) -> int:
    """Approximate token count for `byte_len` bytes of text."""
    return byte_len // BYTES_PER_TOKEN


def byte_len(text: str) -> int:
    """Length of `text` in UTF-8 bytes."""
    return len(text.encode("utf-8"))


def text_tokens(text: str) -> int:
    """Estimated token cost of `text`."""
    return estimate_tokens(byte_len(text))


def is_char_boundary(data: bytes, index: int) -> bool:
    """True if `index` does not fall inside a multi-byte UTF-8 sequence."""
    if index == 0 or index == len(data):
        return True
    if index < 0 or index > len(data):
        return False
    # Continuation bytes look like 0b10xxxxxx
    return (data[index] & 0xC0) != 0x80


def floor_char_boundary(data: bytes, index: int) -> int:
    """Largest character boundary at or below `index`."""
    index = min(max(index, 0), len(data))
    while not is_char_boundary(data, index):
        index -= 1
    return index


def check_range(data: bytes, start: int, end: int, range_name: str) -> None:
    """
    Validate a half-open byte range against `data`.

    Raises:
        ExcerptRangeError: If the range is reversed, out of bounds or splits a character.
    """
    length = len(data)
    if start < 0 or end < start:
        raise ExcerptRangeError(range_name, start, end, length, "range is reversed or negative")
    if end > length:
        raise ExcerptRangeError(range_name, start, end, length, "range extends past the end of the text")
    if not is_char_boundary(data, start) or not is_char_boundary(data, end):
        raise ExcerptRangeError(range_name, start, end, length, "range is not on a character boundary")


def slice_bytes(data: bytes, start: int, end: int, range_name: str = "range") -> str:
    """Decode `data[start:end]` after checking the range is valid."""
    check_range(data, start, end, range_name)
    return data[start:end].decode("utf-8")
