"""Parse results and the generic repeat/optional combinators.

A parser is any callable taking the whole source text and the offset to start
at. It returns a :class:`Success` carrying the value and the span it consumed,
the next parser picking up at the end of that span, or one of two failure
variants:

* :class:`Recoverable` means the alternative does not apply here and another
  may be tried;
* :class:`Fatal` means a production was already committed to and the parse
  must stop.

Failures are returned rather than raised so the combinators below can absorb
exactly the cases they are meant to absorb.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, TypeVar, Union

from .errors import ParseError
from .source import Span

T = TypeVar("T")


#a failed attempt; the concrete subclass says whether it may be retried
@dataclass(frozen=True, slots=True)
class Failure:
    error: ParseError

    @property
    def fatal(self) -> bool:
        return isinstance(self, Fatal)


@dataclass(frozen=True, slots=True)
class Recoverable(Failure):
    pass


@dataclass(frozen=True, slots=True)
class Fatal(Failure):
    pass


#`stopped_by` is only set by repeat and optional: the failure they absorbed
@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    source: str
    value: T
    span: Span
    stopped_by: Optional[Failure] = None

    @property
    def rest(self) -> str:
        """The input left after this success; copies, so keep it off hot paths."""

        return self.source[self.span.end :]


ParseResult = Union[Success[T], Recoverable, Fatal]
ParseFn = Callable[[str, int], ParseResult[T]]


#turns "this does not match" into "this must match" once a production commits
def commit(result: ParseResult[T]) -> ParseResult[T]:
    if isinstance(result, Recoverable):
        return Fatal(result.error)
    return result


#applies the parser until it fails; zero occurrences is a valid outcome
def repeat(parser: ParseFn[T]) -> ParseFn[Tuple[T, ...]]:
    """Collect consecutive successes of ``parser``.

    The repetition never fails: any failure of the inner parser, recoverable
    or fatal, ends it and is kept as ``stopped_by``. The returned span runs
    from the start offset to the end of the last success. A success that
    consumes nothing also ends it, since applying the parser again could not
    make progress.
    """

    def parse(source: str, start: int) -> ParseResult[Tuple[T, ...]]:
        values = []
        span = Span.empty(start)
        while True:
            result = parser(source, span.end)
            if isinstance(result, Failure):
                return Success(source, tuple(values), span, stopped_by=result)
            values.append(result.value)
            if result.span.end == span.end:
                return Success(source, tuple(values), span)
            span = span.extend(result.span.end)

    return parse


#absence is reported as None with a zero-length span at the attempted start
def optional(parser: ParseFn[T]) -> ParseFn[Optional[T]]:
    def parse(source: str, start: int) -> ParseResult[Optional[T]]:
        result = parser(source, start)
        if isinstance(result, Failure):
            return Success(source, None, Span.empty(start), stopped_by=result)
        return result

    return parse


__all__ = [
    "Failure",
    "Fatal",
    "ParseFn",
    "ParseResult",
    "Recoverable",
    "Success",
    "commit",
    "optional",
    "repeat",
]
