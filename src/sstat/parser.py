"""Grammar parsers that turn S-Stat source into an AST.

```
page          = ws attribute* ws doc_node
attribute     = ws "[" ws identifier ws text_until("]") ws "]"
doc_node      = ws "(" ws "doc" ws attribute* ws node* ws ")"
node          = regular_node | text_run
regular_node  = "(" ws identifier ws attribute* ws node* ws ")"
```

Every production is invoked with the source and an offset and spans from that
offset, leading whitespace included, to its last token. Productions only fail
fatally after consuming an opening delimiter, so a repetition that was stopped
by a fatal failure hands that failure on to the enclosing production.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from . import ast, token
from .combinators import (
    Failure,
    Fatal,
    ParseFn,
    ParseResult,
    Recoverable,
    Success,
    commit,
    optional,
    repeat,
)
from .errors import ErrorKind
from .lexer import Lexer
from .source import SourceContext, Span
from .token import KEYWORDS, NESTABLE_KINDS, NodeKind

logger = logging.getLogger(__name__)

DOC_NOTE = "while parsing document node"
ATTRIBUTE_NOTE = "while parsing attribute"
NODE_NOTE = "while parsing node"
EXPECTED_KINDS = ", ".join(f"'{kind.value}'" for kind in NESTABLE_KINDS)

# Each nesting level takes four interpreter frames; the ceiling keeps the
# deepest parse well inside the default recursion limit.
MAX_DEPTH = 100
MAX_DEPTH_CEILING = 150


def _committed(result: Success) -> Optional[Failure]:
    if isinstance(result.stopped_by, Fatal):
        return result.stopped_by
    return None


def _annotate(failure: Failure, note: str) -> Failure:
    failure.error.with_context(note)
    return failure


#recursive descent over one source; build a new parser for every parse
@dataclass(slots=True)
class Parser:
    context: SourceContext
    max_depth: int = MAX_DEPTH
    lexer: Lexer = field(init=False, repr=False)
    _depth: int = field(default=0, init=False, repr=False)
    _skip: ParseFn[None] = field(init=False, repr=False)
    _identifier: ParseFn[str] = field(init=False, repr=False)
    _lparen: ParseFn[str] = field(init=False, repr=False)
    _maybe_lparen: ParseFn[Optional[str]] = field(init=False, repr=False)
    _rparen: ParseFn[str] = field(init=False, repr=False)
    _lbracket: ParseFn[str] = field(init=False, repr=False)
    _rbracket: ParseFn[str] = field(init=False, repr=False)
    _attribute_value: ParseFn[str] = field(init=False, repr=False)
    _text: ParseFn[str] = field(init=False, repr=False)
    _attributes: ParseFn[Tuple[ast.Attribute, ...]] = field(init=False, repr=False)
    _nodes: ParseFn[Tuple[ast.Node, ...]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0 < self.max_depth <= MAX_DEPTH_CEILING:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_CEILING}")
        self.lexer = Lexer(self.context)
        self._skip = self.lexer.take_non_parseable()
        self._identifier = self.lexer.take_identifier()
        self._lparen = self.lexer.tag("(")
        self._maybe_lparen = optional(self._lparen)
        self._rparen = self.lexer.tag(")")
        self._lbracket = self.lexer.tag("[")
        self._rbracket = self.lexer.tag("]")
        self._attribute_value = self.lexer.take_while(lambda char: char != "]")
        self._text = self.lexer.take_text()
        self._attributes = repeat(self.parse_attribute)
        self._nodes = repeat(self.parse_node)

    @classmethod
    def from_text(
        cls, name: str, text: str, path: Optional[Path] = None, max_depth: int = MAX_DEPTH
    ) -> Parser:
        return cls(SourceContext(name=name, text=text, path=path), max_depth=max_depth)

    def parse(self) -> ast.Page:
        page, _rest = self.parse_partial()
        return page

    def parse_partial(self) -> Tuple[ast.Page, str]:
        """Parse the page and return it with the input left after it."""

        logger.debug("parsing %s (%d characters)", self.context.name, len(self.context.text))
        result = self.parse_page(self.context.text, 0)
        if isinstance(result, Failure):
            logger.debug("parse of %s failed: %s", self.context.name, result.error.message)
            raise result.error
        logger.debug(
            "parsed %s: %d page attributes, %d top level nodes",
            self.context.name,
            len(result.value.attributes),
            len(result.value.doc.nodes),
        )
        return result.value, result.rest

    # Productions ----------------------------------------------------------------

    #page attributes followed by exactly one document node
    def parse_page(self, source: str, start: int) -> ParseResult[ast.Page]:
        ws = self._skip(source, start)
        attributes = self._attributes(source, ws.span.end)
        failure = _committed(attributes)
        if failure is not None:
            return failure
        doc = self.parse_doc_node(source, attributes.span.end)
        if isinstance(doc, Failure):
            return doc
        span = Span(start, doc.span.end)
        page = ast.Page(span=span, attributes=attributes.value, doc=doc.value)
        return Success(source, page, span)

    #`[name value]`; everything after the bracket is committed
    def parse_attribute(self, source: str, start: int) -> ParseResult[ast.Attribute]:
        ws = self._skip(source, start)
        lbracket = self._lbracket(source, ws.span.end)
        if isinstance(lbracket, Failure):
            # no bracket means no attribute, at the end of input too
            return Recoverable(lbracket.error)

        ws = self._skip(source, lbracket.span.end)
        name = commit(self._identifier(source, ws.span.end))
        if isinstance(name, Failure):
            return _annotate(name, ATTRIBUTE_NOTE)

        ws = self._skip(source, name.span.end)
        value = self._attribute_value(source, ws.span.end)
        ws = self._skip(source, value.span.end)
        rbracket = commit(self._rbracket(source, ws.span.end))
        if isinstance(rbracket, Failure):
            return _annotate(rbracket, f"{ATTRIBUTE_NOTE} '{name.value}'")

        span = Span(start, rbracket.span.end)
        attribute = ast.Attribute(
            span=span,
            lbracket=token.LBracket(lbracket.span),
            name=ast.Identifier(span=name.span, name=name.value),
            value=ast.Text(span=value.span, text=value.value),
            rbracket=token.RBracket(rbracket.span),
        )
        return Success(source, attribute, span)

    def parse_doc_node(self, source: str, start: int) -> ParseResult[ast.DocNode]:
        ws = self._skip(source, start)
        lparen = self._lparen(source, ws.span.end)
        if isinstance(lparen, Failure):
            return _annotate(lparen, DOC_NOTE)

        ws = self._skip(source, lparen.span.end)
        doc = self._keyword(NodeKind.DOC.value, source, ws.span.end)
        if isinstance(doc, Failure):
            return _annotate(doc, DOC_NOTE)

        ws = self._skip(source, doc.span.end)
        body = self._parse_body(source, ws.span.end)
        if isinstance(body, Failure):
            return _annotate(body, DOC_NOTE)
        attributes, nodes, rparen = body.value

        span = Span(start, rparen.span.end)
        node = ast.DocNode(
            span=span,
            lparen=token.LParen(lparen.span),
            doc=token.Doc(doc.span),
            attributes=attributes,
            nodes=nodes,
            rparen=rparen,
        )
        return Success(source, node, span)

    #an opening parenthesis selects a regular node, anything else is text
    def parse_node(self, source: str, start: int) -> ParseResult[ast.Node]:
        ws = self._skip(source, start)
        lparen = self._maybe_lparen(source, ws.span.end)
        if lparen.value is not None:
            if self._depth >= self.max_depth:
                error = self.lexer.error(
                    ErrorKind.NESTING_TOO_DEEP, lparen.span, expected=str(self.max_depth)
                )
                return _annotate(Fatal(error), NODE_NOTE)
            self._depth += 1
            try:
                return self._parse_element(token.LParen(lparen.span), start, source)
            finally:
                self._depth -= 1

        text = self._text(source, ws.span.end)
        if isinstance(text, Failure):
            # the enclosing node reports the missing ')' instead
            return Recoverable(text.error)
        if text.span.length == 0:
            # only a closing parenthesis can stop a text run before it starts
            end = text.span.end
            return Recoverable(
                self.lexer.error(
                    ErrorKind.UNEXPECTED_TOKEN,
                    Span(end, end + 1),
                    expected="node",
                    found=source[end : end + 1],
                )
            )
        span = Span(start, text.span.end)
        node = ast.TextNode(span=span, inner=ast.Text(span=text.span, text=text.value))
        return Success(source, node, span)

    # Helpers --------------------------------------------------------------------

    #the rest of a regular node once its '(' has been consumed
    def _parse_element(
        self, lparen: token.LParen, start: int, source: str
    ) -> ParseResult[ast.Node]:
        ws = self._skip(source, lparen.span.end)
        name = commit(self._identifier(source, ws.span.end))
        if isinstance(name, Failure):
            return _annotate(name, NODE_NOTE)

        node_type: type[ast.ElementNode]
        match KEYWORDS.get(name.value):
            case NodeKind.SEC:
                keyword, node_type = token.Sec(name.span), ast.SecNode
            case NodeKind.TITLE:
                keyword, node_type = token.Title(name.span), ast.TitleNode
            case NodeKind.P:
                keyword, node_type = token.P(name.span), ast.PNode
            case _:
                error = self.lexer.error(
                    ErrorKind.UNKNOWN_NODE_KIND,
                    name.span,
                    expected=EXPECTED_KINDS,
                    found=name.value,
                )
                return _annotate(Fatal(error), NODE_NOTE)

        ws = self._skip(source, name.span.end)
        body = self._parse_body(source, ws.span.end)
        if isinstance(body, Failure):
            return _annotate(body, f"while parsing '{name.value}' node")
        attributes, nodes, rparen = body.value

        span = Span(start, rparen.span.end)
        node = node_type(
            span=span,
            lparen=lparen,
            keyword=keyword,
            attributes=attributes,
            nodes=nodes,
            rparen=rparen,
        )
        return Success(source, node, span)

    #`attribute* node* ")"`, shared by the document node and regular nodes
    def _parse_body(
        self, source: str, start: int
    ) -> ParseResult[Tuple[Tuple[ast.Attribute, ...], Tuple[ast.Node, ...], token.RParen]]:
        attributes = self._attributes(source, start)
        failure = _committed(attributes)
        if failure is not None:
            return failure

        ws = self._skip(source, attributes.span.end)
        nodes = self._nodes(source, ws.span.end)
        failure = _committed(nodes)
        if failure is not None:
            return failure

        ws = self._skip(source, nodes.span.end)
        rparen = commit(self._rparen(source, ws.span.end))
        if isinstance(rparen, Failure):
            return rparen
        value = (attributes.value, nodes.value, token.RParen(rparen.span))
        return Success(source, value, Span(start, rparen.span.end))

    #a keyword is a whole identifier, so `(document` does not match `doc`
    def _keyword(self, keyword: str, source: str, start: int) -> ParseResult[str]:
        result = self._identifier(source, start)
        if isinstance(result, Success):
            if result.value == keyword:
                return result
            span, found = result.span, result.value
        elif isinstance(result, Fatal):
            error = self.lexer.error(ErrorKind.UNEXPECTED_EOF, result.error.span, expected=keyword)
            return Fatal(error)
        else:
            span, found = result.error.span, result.error.found
        error = self.lexer.error(ErrorKind.UNEXPECTED_TOKEN, span, expected=keyword, found=found)
        return Fatal(error)


#parses one complete source; raises ParseError on malformed input
def parse(
    name: str, text: str, path: Optional[Path] = None, max_depth: int = MAX_DEPTH
) -> ast.Page:
    return Parser.from_text(name, text, path, max_depth).parse()


__all__ = ["MAX_DEPTH", "MAX_DEPTH_CEILING", "Parser", "parse"]
