from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import InputValidationError


class OffsetRange(BaseModel):
    """
    Half-open [start, end) range. Byte offsets for excerpt ranges, rows for related excerpts.
    """
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_order(self):
        if self.end < self.start:
            raise ValueError(f"range end {self.end} is before start {self.start}")
        return self

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, other: "OffsetRange") -> bool:
        return self.start <= other.start and other.end <= self.end


class ExcerptRanges(BaseModel):
    """
    Byte ranges inside the cursor excerpt, precomputed upstream for each
    editable/context token budget.
    """
    model_config = ConfigDict(frozen=True)

    # Editable regions sized for 150/180/350-token budgets
    editable_150: OffsetRange
    editable_180: OffsetRange
    editable_350: OffsetRange
    # Surrounding context for each editable region
    editable_150_context_350: OffsetRange
    editable_180_context_350: OffsetRange
    editable_350_context_150: OffsetRange

    @model_validator(mode="after")
    def _check_nesting(self):
        pairs = (
            ("editable_150", self.editable_150, self.editable_150_context_350),
            ("editable_180", self.editable_180, self.editable_180_context_350),
            ("editable_350", self.editable_350, self.editable_350_context_150),
        )
        for name, editable, context in pairs:
            if not context.contains(editable):
                raise ValueError(f"{name} is not inside its context range")
        return self


class BufferChange(BaseModel):
    """
    A change to one buffer, described by an opaque unified diff.
    """
    model_config = ConfigDict(frozen=True)

    event: Literal["BufferChange"] = "BufferChange"
    path: str
    old_path: str
    diff: str
    predicted: bool = False  # The change came from an accepted prediction
    in_open_source_repo: bool = False


# BufferChange is the only event kind so far; new kinds join this alias as a
# discriminated union on the "event" tag.
Event = BufferChange


class RelatedExcerpt(BaseModel):
    """
    A contiguous slice of a related file and the rows it covers.
    """
    model_config = ConfigDict(frozen=True)

    row_range: OffsetRange
    text: str


class RelatedFile(BaseModel):
    """
    A file related to the cursor file, as a list of excerpts in priority order.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    max_row: int = Field(ge=0)  # Total line count of the source file
    excerpts: List[RelatedExcerpt] = Field(default_factory=list)
    in_open_source_repo: bool = False


class ModelKind(str, Enum):
    """The client's preferred prediction model. The server may override it."""
    LEGACY = "legacy"
    CURRENT = "current"


class PromptInput(BaseModel):
    """
    Everything needed to build one edit prediction prompt.

    `events` are ordered oldest to newest and `related_files` by priority
    (earlier files are kept first when the budget is tight). When
    `excerpt_ranges` is absent the excerpt is itself the context region and
    `editable_range` is the only editable range.
    """
    model_config = ConfigDict(frozen=True)

    cursor_path: str
    cursor_excerpt: str
    editable_range: OffsetRange
    cursor_offset: int = Field(ge=0)
    excerpt_start_row: Optional[int] = None
    events: List[Event] = Field(default_factory=list)
    related_files: List[RelatedFile] = Field(default_factory=list)
    excerpt_ranges: Optional[ExcerptRanges] = None
    preferred_model: Optional[ModelKind] = None
    in_open_source_repo: bool = False

    @classmethod
    def from_json(cls, payload: str) -> "PromptInput":
        """
        Decode a request payload.

        Raises:
            InputValidationError: If the payload is not valid JSON or does not match the schema.
        """
        try:
            return cls.model_validate_json(payload)
        except ValidationError as e:
            raise InputValidationError(f"Invalid prompt input: {e}") from e

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class TextEdit(BaseModel):
    """
    Replace the byte range `range` of a buffer with `text`.
    """
    model_config = ConfigDict(frozen=True)

    range: OffsetRange
    text: str
