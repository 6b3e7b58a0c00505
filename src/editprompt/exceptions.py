# Custom exceptions for editprompt

class EditPromptError(Exception):
    """Base exception for all application-specific errors."""
    pass


class FormatParseError(EditPromptError):
    """Raised when a format name matches zero or several prompt formats."""

    def __init__(self, name: str, options: str, ambiguous: bool = False):
        self.name = name
        self.options = options
        self.ambiguous = ambiguous
        if ambiguous:
            message = f"`{name}` matched more than one of:\n{options}"
        else:
            message = f"`{name}` did not match any of:\n{options}"
        super().__init__(message)


class ExcerptRangeError(EditPromptError):
    """Raised when a byte range or offset does not fit the text it indexes."""

    def __init__(self, range_name: str, start: int, end: int, length: int, reason: str = ""):
        self.range_name = range_name
        self.start = start
        self.end = end
        self.length = length
        self.reason = reason
        message = f"Invalid {range_name} {start}..{end} for text of {length} bytes"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InputValidationError(EditPromptError):
    """Raised when a request payload cannot be decoded into a PromptInput."""
    pass


class LegacyOutputError(EditPromptError):
    """Raised when legacy model output carries duplicated region markers."""

    def __init__(self, marker: str, count: int):
        self.marker = marker
        self.count = count
        super().__init__(f"expected at most one {marker} marker, found {count}")
