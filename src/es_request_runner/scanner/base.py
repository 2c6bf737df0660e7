"""Data models for scanned request documents.

The scanner turns a document into a list of Region objects; every
downstream consumer (executor, formatter, navigation, CLI) works on
these models only.
"""

from pydantic import BaseModel, model_validator


class Position(BaseModel):
    """A zero-based line / character position in a document."""

    line: int
    character: int

    def _key(self) -> tuple[int, int]:
        return (self.line, self.character)

    def __lt__(self, other: "Position") -> bool:
        return self._key() < other._key()

    def __le__(self, other: "Position") -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: "Position") -> bool:
        return self._key() > other._key()

    def __ge__(self, other: "Position") -> bool:
        return self._key() >= other._key()


class Range(BaseModel):
    """A span between two positions, both ends inclusive for containment."""

    start: Position
    end: Position

    @classmethod
    def single_line(cls, line: int, length: int) -> "Range":
        return cls(start=Position(line=line, character=0), end=Position(line=line, character=length))

    @classmethod
    def span(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> "Range":
        return cls(
            start=Position(line=start_line, character=start_char),
            end=Position(line=end_line, character=end_char),
        )

    def contains(self, other: "Position | Range") -> bool:
        if isinstance(other, Range):
            return self.contains(other.start) and self.contains(other.end)
        return self.start <= other <= self.end

    def intersects(self, other: "Range") -> bool:
        return self.start <= other.end and other.start <= self.end


class Token(BaseModel):
    """A piece of document text and the range it occupies."""

    text: str
    range: Range


class Region(BaseModel):
    """A single request declaration: header, optional body, selection state."""

    method: Token  # GET / POST / PUT / DELETE / HEAD / PATCH, case preserved
    path: Token  # /index/_search?size=1
    has_body: bool = False
    body: Token | None = None
    is_bulk: bool = False
    file_ref: Token | None = None  # POST /idx/_bulk @data/docs.ndjson
    range: Range
    selected: bool = False

    @model_validator(mode="after")
    def _check_invariants(self) -> "Region":
        if self.has_body != (self.body is not None):
            raise ValueError("has_body must be true exactly when a body is attached")
        if self.is_bulk and not self.has_body:
            raise ValueError("a bulk region needs a body")
        if self.range.start.line != self.method.range.start.line:
            raise ValueError("a region must start on its header line")
        return self

    @property
    def line(self) -> int:
        """Zero-based header line."""
        return self.method.range.start.line

    @property
    def label(self) -> str:
        return f"{self.method.text.upper()} {self.path.text}"
