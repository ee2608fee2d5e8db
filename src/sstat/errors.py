"""Error taxonomy for the S-Stat parser."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .source import SourceContext, Span


#normalizes the base exception for every layer of the package
class SstatError(Exception):
    """Base class for S-Stat related errors."""


#the code doubles as the stable identifier printed in diagnostics
class ErrorKind(Enum):
    UNEXPECTED_EOF = "E001"
    UNEXPECTED_TOKEN = "E002"
    EXPECTED_IDENTIFIER = "E003"
    UNKNOWN_NODE_KIND = "E004"
    NESTING_TOO_DEEP = "E005"

    @property
    def code(self) -> str:
        return self.value


#keeps newlines and tabs in found/expected text on a single output line
def printable(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")


#carried inside parse results and raised once by the top-level parse
class ParseError(SstatError):
    """Raised when the source does not match the grammar.

    ``notes`` are human readable context strings ordered innermost first; the
    ``context`` is the source the span points into and is what the
    diagnostic renderer reads the offending lines from.
    """

    def __init__(
        self,
        kind: ErrorKind,
        span: Span,
        context: SourceContext,
        *,
        expected: Optional[str] = None,
        found: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.span = span
        self.context = context
        self.expected = expected
        self.found = found
        self.notes: List[str] = []
        self.message = self._format_message()
        super().__init__(self.message)

    def _format_message(self) -> str:
        expected = printable(self.expected or "")
        found = printable(self.found or "")
        match self.kind:
            case ErrorKind.UNEXPECTED_EOF:
                if self.expected is None:
                    return "unexpected end-of-file"
                return f"unexpected end-of-file, expected '{expected}'"
            case ErrorKind.UNEXPECTED_TOKEN:
                return f"unexpected token '{found}', expected '{expected}'"
            case ErrorKind.EXPECTED_IDENTIFIER:
                return f"expected IDENTIFIER, found '{found}'"
            case ErrorKind.UNKNOWN_NODE_KIND:
                return f"unknown node kind '{found}', expected one of {expected}"
            case ErrorKind.NESTING_TOO_DEEP:
                return f"nodes nested deeper than {expected} levels"
        raise AssertionError(f"unhandled error kind {self.kind}")  # pragma: no cover

    @property
    def label(self) -> str:
        """Short text printed under the offending span."""

        match self.kind:
            case ErrorKind.UNEXPECTED_EOF | ErrorKind.UNEXPECTED_TOKEN:
                if self.expected is None:
                    return "input ends here"
                return f"expected '{printable(self.expected)}'"
            case ErrorKind.EXPECTED_IDENTIFIER:
                return "expected an identifier"
            case ErrorKind.UNKNOWN_NODE_KIND:
                return "unknown node kind"
            case ErrorKind.NESTING_TOO_DEEP:
                return "too deeply nested"
        raise AssertionError(f"unhandled error kind {self.kind}")  # pragma: no cover

    def with_context(self, note: str) -> ParseError:
        self.notes.append(note)
        return self

    def render(self, context_lines: int = 0) -> str:
        from .diagnostics import render

        return render(self, context_lines=context_lines)


#raised before parsing when the input exceeds the configured size limit
class SourceTooLargeError(SstatError):
    def __init__(self, name: str, size: int, limit: int) -> None:
        super().__init__(f"{name}: source is {size:,} characters, limit is {limit:,}")
        self.name = name
        self.size = size
        self.limit = limit


__all__ = [
    "ErrorKind",
    "ParseError",
    "SourceTooLargeError",
    "SstatError",
    "printable",
]
