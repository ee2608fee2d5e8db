"""S-Stat: a parser for a small S-expression flavored markup language."""

#makes package exports explicit for downstream imports
from . import ast, combinators, diagnostics, errors, lexer, outline, parser, source, token
from .errors import ParseError, SstatError
from .parser import Parser, parse
from .source import SourceContext, Span

__all__ = [
    "ParseError",
    "Parser",
    "SourceContext",
    "Span",
    "SstatError",
    "ast",
    "combinators",
    "diagnostics",
    "errors",
    "lexer",
    "outline",
    "parse",
    "parser",
    "source",
    "token",
]
