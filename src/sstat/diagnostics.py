"""Compiler-style rendering of parse errors against their source."""
from __future__ import annotations

from typing import List, Optional

from .errors import ParseError

TAB_WIDTH = 4


#renders summary, annotated excerpt, and the accumulated context notes
def render(error: ParseError, context_lines: int = 0) -> str:
    """Render ``error`` as an annotated excerpt of its source.

    ``context_lines`` extra lines of source are shown before and after the
    offending region. Rendering never changes the error.
    """

    context = error.context
    start, end = context.resolve_span(error.span)
    last_line, last_column = end.line, end.column
    # a span ending right after a newline is shown on the line it ends
    if last_line > start.line and last_column == 0:
        last_line -= 1
        last_column = len(context.line_text(last_line))

    first_shown = max(1, start.line - context_lines)
    last_shown = min(context.line_count, last_line + context_lines)
    width = len(str(last_shown))
    gutter = " " * width

    lines: List[str] = [
        f"error[{error.kind.code}]: {error.message}",
        f"{gutter}--> {context.name}:{start.line}:{start.column + 1}",
        f"{gutter} |",
    ]
    for number in range(first_shown, start.line):
        lines.append(_source_row(number, context.line_text(number), width))

    first_text = context.line_text(start.line)
    lines.append(_source_row(start.line, first_text, width))
    if last_line == start.line:
        lines.append(_marker_row(first_text, start.column, last_column, width, error.label))
    else:
        lines.append(_marker_row(first_text, start.column, len(first_text), width, None))
        if last_line - start.line > 1:
            lines.append(f"{gutter} | ...")
        last_text = context.line_text(last_line)
        lines.append(_source_row(last_line, last_text, width))
        lines.append(_marker_row(last_text, 0, last_column, width, error.label))

    for number in range(last_line + 1, last_shown + 1):
        lines.append(_source_row(number, context.line_text(number), width))

    lines.append(f"{gutter} |")
    for note in error.notes:
        lines.append(f"{gutter} = note: {note}")
    return "\n".join(lines)


def _expand(text: str) -> str:
    return text.replace("\t", " " * TAB_WIDTH)


def _source_row(number: int, text: str, width: int) -> str:
    return f"{number:>{width}} | {_expand(text)}".rstrip()


#carets are aligned on the tab-expanded text so they sit under the source
def _marker_row(text: str, start: int, end: int, width: int, label: Optional[str]) -> str:
    indent = len(_expand(text[:start]))
    carets = "^" * max(1, len(_expand(text[start:end])))
    row = f"{' ' * width} | {' ' * indent}{carets}"
    if label:
        row = f"{row} {label}"
    return row


__all__ = ["render"]
