"""Abstract syntax tree definitions for S-Stat documents."""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterator, Optional, Tuple

from .source import Span
from .token import Doc, Keyword, LBracket, LParen, NodeKind, RBracket, RParen


#notes that every AST node tracks a span for diagnostics
@dataclass(frozen=True, slots=True)
class SyntaxNode:
    span: Span


#an identifier sliced out of the source
@dataclass(frozen=True, slots=True)
class Identifier(SyntaxNode):
    name: str


#a raw run of text; escapes are kept exactly as written
@dataclass(frozen=True, slots=True)
class Text(SyntaxNode):
    text: str


#`[name value]`, attached to a page or to a node
@dataclass(frozen=True, slots=True)
class Attribute(SyntaxNode):
    lbracket: LBracket
    name: Identifier
    value: Text
    rbracket: RBracket


#free text between nodes; the node span includes leading whitespace
@dataclass(frozen=True, slots=True)
class TextNode(SyntaxNode):
    inner: Text

    @property
    def text(self) -> str:
        return self.inner.text


#shared shape of every parenthesized node that has a keyword
@dataclass(frozen=True, slots=True)
class ElementNode(SyntaxNode):
    lparen: LParen
    keyword: Keyword
    attributes: Tuple[Attribute, ...]
    nodes: Tuple["Node", ...]
    rparen: RParen

    kind: ClassVar[NodeKind]

    def attribute(self, name: str) -> Optional[Attribute]:
        return _find_attribute(self.attributes, name)


#`(sec ...)`
@dataclass(frozen=True, slots=True)
class SecNode(ElementNode):
    kind: ClassVar[NodeKind] = NodeKind.SEC


#`(title ...)`
@dataclass(frozen=True, slots=True)
class TitleNode(ElementNode):
    kind: ClassVar[NodeKind] = NodeKind.TITLE


#`(p ...)`
@dataclass(frozen=True, slots=True)
class PNode(ElementNode):
    kind: ClassVar[NodeKind] = NodeKind.P


Node = TextNode | SecNode | TitleNode | PNode


#the single `(doc ...)` node of a page
@dataclass(frozen=True, slots=True)
class DocNode(SyntaxNode):
    lparen: LParen
    doc: Doc
    attributes: Tuple[Attribute, ...]
    nodes: Tuple[Node, ...]
    rparen: RParen

    def attribute(self, name: str) -> Optional[Attribute]:
        return _find_attribute(self.attributes, name)


#represents the root of a parsed source: page attributes then the document
@dataclass(frozen=True, slots=True)
class Page(SyntaxNode):
    attributes: Tuple[Attribute, ...]
    doc: DocNode

    def attribute(self, name: str) -> Optional[Attribute]:
        return _find_attribute(self.attributes, name)


#first match wins; attributes are never deduplicated
def _find_attribute(attributes: Tuple[Attribute, ...], name: str) -> Optional[Attribute]:
    for attribute in attributes:
        if attribute.name.name == name:
            return attribute
    return None


#depth-first, in source order
def walk(nodes: Tuple[Node, ...]) -> Iterator[Node]:
    for node in nodes:
        yield node
        if isinstance(node, ElementNode):
            yield from walk(node.nodes)
