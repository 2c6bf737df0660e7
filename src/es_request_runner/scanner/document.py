"""In-memory text document with line and offset addressing."""

from dataclasses import dataclass
from pathlib import Path

from .base import Position, Range


@dataclass(frozen=True)
class Line:
    """One document line; start/end offsets are half-open and exclude the newline."""

    text: str
    index: int
    start_offset: int
    end_offset: int

    @property
    def range(self) -> Range:
        return Range.single_line(self.index, len(self.text))

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


class Document:
    """Immutable snapshot of a text document.

    Lines are split on ``\\n``; a trailing ``\\r`` is dropped so CRLF files
    address the same columns as LF files. Offsets count the original
    newline sequence.
    """

    def __init__(self, text: str, path: Path | None = None):
        self.text = text
        self.path = path
        self._lines: list[Line] = []
        offset = 0
        for index, raw in enumerate(text.split("\n")):
            line_text = raw[:-1] if raw.endswith("\r") else raw
            self._lines.append(Line(line_text, index, offset, offset + len(line_text)))
            offset += len(raw) + 1

    @classmethod
    def from_path(cls, path: Path) -> "Document":
        """Read ``path`` keeping its line endings; raises UnicodeDecodeError on non UTF-8 input."""
        with open(path, encoding="utf-8", newline="") as f:
            return cls(f.read(), path=path)

    @property
    def newline(self) -> str:
        """Line ending used by the document, ``\\r\\n`` or ``\\n``."""
        return "\r\n" if "\r\n" in self.text else "\n"

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[Line]:
        return list(self._lines)

    def line_at(self, index: int) -> Line:
        if index < 0 or index >= len(self._lines):
            raise IndexError(f"line {index} out of range (0..{len(self._lines) - 1})")
        return self._lines[index]

    def offset_at(self, position: Position) -> int:
        """Absolute offset of a position, clamped to the document and line."""
        if position.line < 0:
            return 0
        if position.line >= len(self._lines):
            return len(self.text)
        line = self._lines[position.line]
        character = min(max(position.character, 0), len(line.text))
        return line.start_offset + character

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), len(self.text))
        for line in self._lines:
            if offset <= line.end_offset:
                return Position(line=line.index, character=max(offset - line.start_offset, 0))
        last = self._lines[-1]
        return Position(line=last.index, character=len(last.text))

    def get_text(self, rng: Range | None = None) -> str:
        if rng is None:
            return self.text
        return self.text[self.offset_at(rng.start):self.offset_at(rng.end)]

    def replace(self, rng: Range, new_text: str) -> "Document":
        """Return a new document with ``rng`` replaced by ``new_text``."""
        start = self.offset_at(rng.start)
        end = self.offset_at(rng.end)
        return Document(self.text[:start] + new_text + self.text[end:], path=self.path)
