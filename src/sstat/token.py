"""Delimiter and keyword markers for the S-Stat markup language."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from .source import Span


#the closed vocabulary of node keywords
class NodeKind(Enum):
    DOC = "doc"
    SEC = "sec"
    TITLE = "title"
    P = "p"


#keyword lookup used when dispatching on the identifier after '('
KEYWORDS: Final[dict[str, NodeKind]] = {kind.value: kind for kind in NodeKind}

#kinds allowed inside a document node; `doc` is only valid at the root
NESTABLE_KINDS: Final[tuple[NodeKind, ...]] = (NodeKind.SEC, NodeKind.TITLE, NodeKind.P)


#every marker only remembers where it was found
@dataclass(frozen=True, slots=True)
class Marker:
    span: Span


# Delimiters -------------------------------------------------------------------


#`(`
@dataclass(frozen=True, slots=True)
class LParen(Marker):
    pass


#`)`
@dataclass(frozen=True, slots=True)
class RParen(Marker):
    pass


#`[`
@dataclass(frozen=True, slots=True)
class LBracket(Marker):
    pass


#`]`
@dataclass(frozen=True, slots=True)
class RBracket(Marker):
    pass


# Keywords ---------------------------------------------------------------------


#`doc`, the top level document node
@dataclass(frozen=True, slots=True)
class Doc(Marker):
    pass


#`sec`, a section
@dataclass(frozen=True, slots=True)
class Sec(Marker):
    pass


#`title`, a title
@dataclass(frozen=True, slots=True)
class Title(Marker):
    pass


#`p`, a paragraph
@dataclass(frozen=True, slots=True)
class P(Marker):
    pass


Keyword = Doc | Sec | Title | P


__all__ = [
    "Doc",
    "KEYWORDS",
    "Keyword",
    "LBracket",
    "LParen",
    "Marker",
    "NESTABLE_KINDS",
    "NodeKind",
    "P",
    "RBracket",
    "RParen",
    "Sec",
    "Title",
]
