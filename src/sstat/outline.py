"""Human-readable outline of a parsed page."""
from __future__ import annotations

from typing import List, Tuple

from . import ast
from .errors import printable
from .source import Span


#nice string formatter used by CLI/tests for debugging
def outline_page(page: ast.Page) -> str:
    lines: List[str] = [f"page {_span(page.span)}"]
    lines.extend(_outline_attributes(page.attributes, depth=1))
    doc = page.doc
    lines.append(f"  doc {_span(doc.span)}")
    lines.extend(_outline_attributes(doc.attributes, depth=2))
    lines.extend(_outline_nodes(doc.nodes, depth=2))
    return "\n".join(lines)


def _outline_attributes(attributes: Tuple[ast.Attribute, ...], depth: int) -> List[str]:
    indent = "  " * depth
    return [
        f"{indent}[{attribute.name.name}] '{printable(attribute.value.text)}' {_span(attribute.span)}"
        for attribute in attributes
    ]


#handles node-specific formatting, recursing into element children
def _outline_nodes(nodes: Tuple[ast.Node, ...], depth: int) -> List[str]:
    indent = "  " * depth
    lines: List[str] = []
    for node in nodes:
        if isinstance(node, ast.TextNode):
            lines.append(f"{indent}text '{printable(node.text)}' {_span(node.inner.span)}")
            continue
        lines.append(f"{indent}{node.kind.value} {_span(node.span)}")
        lines.extend(_outline_attributes(node.attributes, depth + 1))
        lines.extend(_outline_nodes(node.nodes, depth + 1))
    return lines


def _span(span: Span) -> str:
    return f"@{span.start}..{span.end}"


__all__ = ["outline_page"]
