"""Lexical primitives shared by the grammar parsers.

Every primitive reads the source in place from an offset and only slices out
the text it keeps, so a parse costs time in proportion to the input.

Identifiers start with a Unicode XID_Start character and continue with
XID_Continue characters. ``str.isidentifier`` also lets ``_`` start an
identifier, so the underscore is excluded from the start set explicitly.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from .combinators import Fatal, ParseFn, ParseResult, Recoverable, Success, repeat
from .errors import ErrorKind, ParseError
from .source import SourceContext, Span

WHITESPACE = " \t\n\r\x0c"
COMMENT = ";;"
DELIMITERS = re.compile(r"[()]")
ESCAPE = "\\"


def is_identifier_start(char: str) -> bool:
    return char != "_" and char.isidentifier()


def is_identifier_continue(char: str) -> bool:
    return f"a{char}".isidentifier()


#builds parsers over the text of a single source
@dataclass(frozen=True, slots=True)
class Lexer:
    """Factory for the primitive parsers of one parse.

    The context is only used to attach the source to errors, so every
    primitive stays a pure function of its input and offset.
    """

    context: SourceContext

    def error(
        self,
        kind: ErrorKind,
        span: Span,
        *,
        expected: Optional[str] = None,
        found: Optional[str] = None,
    ) -> ParseError:
        return ParseError(kind, span, self.context, expected=expected, found=found)

    #exact literal; running out of input means no alternative can match either
    def tag(self, literal: str) -> ParseFn[str]:
        def parse(source: str, start: int) -> ParseResult[str]:
            end = start + len(literal)
            if end > len(source):
                span = Span(start, len(source))
                return Fatal(self.error(ErrorKind.UNEXPECTED_EOF, span, expected=literal))
            span = Span(start, end)
            if source.startswith(literal, start):
                return Success(source, literal, span)
            return Recoverable(
                self.error(
                    ErrorKind.UNEXPECTED_TOKEN, span, expected=literal, found=source[start:end]
                )
            )

        return parse

    #longest leading run matching the predicate, possibly empty
    def take_while(self, predicate: Callable[[str], bool]) -> ParseFn[str]:
        def parse(source: str, start: int) -> ParseResult[str]:
            end, size = start, len(source)
            while end < size and predicate(source[end]):
                end += 1
            return Success(source, source[start:end], Span(start, end))

        return parse

    def take_identifier(self) -> ParseFn[str]:
        continue_run = self.take_while(is_identifier_continue)

        def parse(source: str, start: int) -> ParseResult[str]:
            if start >= len(source):
                span = Span.empty(start)
                return Fatal(
                    self.error(ErrorKind.EXPECTED_IDENTIFIER, span, found="end-of-file")
                )
            first = source[start]
            if not is_identifier_start(first):
                span = Span(start, start + 1)
                return Recoverable(self.error(ErrorKind.EXPECTED_IDENTIFIER, span, found=first))
            run = continue_run(source, start + 1)
            assert isinstance(run, Success)
            return Success(source, source[start : run.span.end], Span(start, run.span.end))

        return parse

    #text up to the first '(' or ')' that is not preceded by a backslash
    def take_text(self) -> ParseFn[str]:
        def parse(source: str, start: int) -> ParseResult[str]:
            if start >= len(source):
                span = Span.empty(start)
                return Fatal(self.error(ErrorKind.UNEXPECTED_EOF, span, expected="TEXT"))
            end = len(source)
            match = DELIMITERS.search(source, start)
            while match is not None:
                index = match.start()
                if index == start or source[index - 1] != ESCAPE:
                    end = index
                    break
                match = DELIMITERS.search(source, index + 1)
            return Success(source, source[start:end], Span(start, end))

        return parse

    def take_comment(self) -> ParseFn[None]:
        """Whitespace, optionally followed by a `;;` comment up to the newline.

        Without leading whitespace there is nothing skippable here, which is
        reported as a recoverable failure.
        """

        spaces = self.take_while(lambda char: char in WHITESPACE)
        marker = self.tag(COMMENT)
        line = self.take_while(lambda char: char != "\n")

        def parse(source: str, start: int) -> ParseResult[None]:
            result = spaces(source, start)
            assert isinstance(result, Success)
            if result.span.length < 1:
                found = source[start : start + 1]
                return Recoverable(
                    self.error(
                        ErrorKind.UNEXPECTED_TOKEN,
                        Span(start, start + len(found)),
                        expected="whitespace",
                        found=found or "end-of-file",
                    )
                )
            span = result.span
            comment = marker(source, span.end)
            if not isinstance(comment, Success):
                return Success(source, None, span)
            body = line(source, comment.span.end)
            assert isinstance(body, Success)
            return Success(source, None, span.extend(body.span.end))

        return parse

    #whitespace and comments in any mix; never fails
    def take_non_parseable(self) -> ParseFn[None]:
        comments = repeat(self.take_comment())

        def parse(source: str, start: int) -> ParseResult[None]:
            result = comments(source, start)
            assert isinstance(result, Success)
            return Success(source, None, result.span)

        return parse


__all__ = ["Lexer", "is_identifier_continue", "is_identifier_start"]
