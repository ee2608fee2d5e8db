"""Source text, spans, and line/column resolution."""
from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


#a resolved position, line counted from 1 and column from 0
@dataclass(frozen=True, slots=True)
class Location:
    """A line/column pair derived from a span endpoint."""

    line: int
    column: int

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.line}:{self.column}"


#offsets index the source string, never lines or columns
@dataclass(frozen=True, slots=True)
class Span:
    """Represents a half-open source range [start, end)."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"invalid span [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    @classmethod
    def empty(cls, offset: int) -> Span:
        return cls(offset, offset)

    def extend(self, end: int) -> Span:
        """Return a span with the same start reaching to ``end``."""

        return Span(self.start, max(self.end, end))

    def cover(self, other: Span) -> Span:
        """Return the minimal span that covers both spans."""

        return Span(min(self.start, other.start), max(self.end, other.end))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.start}..{self.end}"


#one parse owns one context; nothing here is shared between parses
@dataclass(frozen=True, slots=True)
class SourceContext:
    """The display name, optional path, and full text of one source.

    The line table holds the offset at which every line starts, so the first
    entry is always 0 and one more entry follows each newline.
    """

    name: str
    text: str
    path: Optional[Path] = None
    line_starts: Tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        starts = [0]
        for index, char in enumerate(self.text):
            if char == "\n":
                starts.append(index + 1)
        object.__setattr__(self, "line_starts", tuple(starts))

    @classmethod
    def from_path(cls, path: Path, text: str) -> SourceContext:
        return cls(name=str(path), text=text, path=path)

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def resolve(self, offset: int) -> Location:
        if offset < 0 or offset > len(self.text):
            raise ValueError(f"offset {offset} outside of source {self.name!r}")
        index = bisect_right(self.line_starts, offset)
        return Location(line=index, column=offset - self.line_starts[index - 1])

    def resolve_span(self, span: Span) -> Tuple[Location, Location]:
        return self.resolve(span.start), self.resolve(span.end)

    def line_text(self, line: int) -> str:
        """Return the text of a 1-based line without its line terminator."""

        if line < 1 or line > self.line_count:
            raise ValueError(f"line {line} outside of source {self.name!r}")
        start = self.line_starts[line - 1]
        if line < self.line_count:
            end = self.line_starts[line] - 1
        else:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")

    def slice(self, span: Span) -> str:
        return self.text[span.start : span.end]


__all__ = ["Location", "Span", "SourceContext"]
