from concurrent.futures import ThreadPoolExecutor

import pytest

from sstat import ast
from sstat.combinators import Success
from sstat.errors import ErrorKind, ParseError
from sstat.parser import MAX_DEPTH, Parser, parse
from sstat.source import Span
from sstat.token import Doc, LBracket, LParen, NodeKind, RBracket, RParen


#builds a parser whose context holds the text under test
def parser_for(text: str) -> Parser:
    return Parser.from_text("test", text)


#runs a production on the whole text and insists it succeeds
def run(production: str, text: str) -> Success:
    parser = parser_for(text)
    result = getattr(parser, production)(text, 0)
    assert isinstance(result, Success), result
    return result


#parses a page expected to fail and hands back the error
def parse_error(text: str) -> ParseError:
    with pytest.raises(ParseError) as excinfo:
        parse("test", text)
    return excinfo.value


#shorthand for the attribute nodes the fixtures compare against
def attribute(start: int, name: str, name_at: int, value: str, value_at: int) -> ast.Attribute:
    value_end = value_at + len(value)
    return ast.Attribute(
        span=Span(start, value_end + 1),
        lbracket=LBracket(Span(name_at - 1, name_at)),
        name=ast.Identifier(span=Span(name_at, name_at + len(name)), name=name),
        value=ast.Text(span=Span(value_at, value_end), text=value),
        rbracket=RBracket(Span(value_end, value_end + 1)),
    )


# Pages and attributes ---------------------------------------------------------


#reproduces the full tree, spans included, for an indented page
def test_parse_page_with_exact_spans() -> None:
    text = "\n\t\t\t[title test]\n\t\t\t[author test]\n\n\t\t\t(doc [id main])\n\n\n\t\t\trest\n\t\t"
    result = run("parse_page", text)
    assert result.rest == "\n\n\n\t\t\trest\n\t\t"
    assert result.span == Span(0, 53)
    assert result.value == ast.Page(
        span=Span(0, 53),
        attributes=(
            attribute(4, "title", 5, "test", 11),
            attribute(16, "author", 21, "test", 28),
        ),
        doc=ast.DocNode(
            span=Span(33, 53),
            lparen=LParen(Span(38, 39)),
            doc=Doc(Span(39, 42)),
            attributes=(attribute(43, "id", 44, "main", 47),),
            nodes=(),
            rparen=RParen(Span(52, 53)),
        ),
    )


#page attributes and doc attributes keep their names and values
def test_parse_page_example() -> None:
    text = "[title test]\n[author test]\n\n(doc [id main])\n\nrest"
    result = run("parse_page", text)
    page = result.value
    assert [(a.name.name, a.value.text) for a in page.attributes] == [
        ("title", "test"),
        ("author", "test"),
    ]
    assert [(a.name.name, a.value.text) for a in page.doc.attributes] == [("id", "main")]
    assert page.doc.nodes == ()
    assert page.attribute("author") is page.attributes[1]
    assert page.doc.attribute("missing") is None
    assert result.rest == "\n\nrest"


#attribute values are not parenthesis aware
def test_parse_attribute_with_parentheses() -> None:
    text = "[example_name (lots of example values)] rest"
    result = run("parse_attribute", text)
    assert result.rest == " rest"
    assert result.span == Span(0, 39)
    assert result.value == attribute(0, "example_name", 1, "(lots of example values)", 14)


#a missing value is an empty run right before the closing bracket
def test_parse_attribute_without_value() -> None:
    result = run("parse_attribute", "[example_name] rest")
    assert result.rest == " rest"
    assert result.value.value == ast.Text(span=Span(13, 13), text="")
    assert result.value.rbracket == RBracket(Span(13, 14))
    assert result.span == Span(0, 14)


#leading comments belong to the span of the node that follows them
def test_parse_empty_doc_after_comment() -> None:
    result = run("parse_doc_node", "  ;; comment\n\t\t(doc) rest")
    assert result.rest == " rest"
    assert result.value == ast.DocNode(
        span=Span(0, 20),
        lparen=LParen(Span(15, 16)),
        doc=Doc(Span(16, 19)),
        attributes=(),
        nodes=(),
        rparen=RParen(Span(19, 20)),
    )


#the empty document leaves everything after it alone
def test_parse_empty_doc() -> None:
    result = run("parse_doc_node", "(doc) rest")
    assert result.value.attributes == ()
    assert result.value.nodes == ()
    assert result.rest == " rest"


# Nodes ------------------------------------------------------------------------


#nested nodes, attributes and text keep their source order
def test_nested_nodes() -> None:
    page = parse(
        "test",
        "(doc (sec [id intro] [class wide] (title Hello) (p Some \\(escaped\\) text)) trailing)",
    )
    sec, trailing = page.doc.nodes
    assert isinstance(sec, ast.SecNode)
    assert sec.kind is NodeKind.SEC
    assert [a.name.name for a in sec.attributes] == ["id", "class"]
    title, paragraph = sec.nodes
    assert isinstance(title, ast.TitleNode)
    assert isinstance(paragraph, ast.PNode)
    assert [node.text for node in title.nodes] == ["Hello"]
    assert [node.text for node in paragraph.nodes] == ["Some \\(escaped\\) text"]
    assert isinstance(trailing, ast.TextNode)
    assert trailing.text == "trailing"


#text runs keep trailing whitespace; whitespace before them only widens the node span
def test_text_node_spans() -> None:
    text = "(doc hello (p world) b)"
    page = parse("test", text)
    hello, paragraph, tail = page.doc.nodes
    assert hello.text == "hello "
    assert hello.span == hello.inner.span == Span(5, 11)
    assert paragraph.span == Span(11, 20)
    assert paragraph.keyword.span == Span(12, 13)
    assert text[paragraph.span.start : paragraph.span.end] == "(p world)"
    assert tail.inner.span == Span(21, 22)
    assert tail.span == Span(20, 22)


#walk visits every node depth first in source order
def test_walk_order() -> None:
    page = parse("test", "(doc (sec (title a) (p b)) (p c))")
    kinds = [
        node.text if isinstance(node, ast.TextNode) else node.kind.value
        for node in ast.walk(page.doc.nodes)
    ]
    assert kinds == ["sec", "title", "a", "p", "b", "p", "c"]


#consumed prefix plus remaining input reproduces the source text
@pytest.mark.parametrize(
    "text",
    [
        "(doc)",
        "(doc) rest",
        "  ;; lead\n[a 1]\n(doc (p x)) tail (more)",
        "[title t]\n(doc\n  (sec [id s] (title T)\n    (p one) (p two)))\n;; done\n",
    ],
)
def test_remaining_input_reconstructs_source(text: str) -> None:
    page, rest = parser_for(text).parse_partial()
    assert page.span.start == 0
    assert text[: page.span.end] + rest == text
    assert page.span.end == len(text) - len(rest)


#each parse owns its context, so parses can run side by side
def test_parses_are_independent_across_threads() -> None:
    sources = [f"[n {index}]\n(doc (p {index}))" for index in range(16)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        pages = list(pool.map(lambda text: parse("test", text), sources))
    for index, page in enumerate(pages):
        assert page.attributes[0].value.text == str(index)
        assert page.doc.nodes[0].nodes[0].text == str(index)


# Errors -----------------------------------------------------------------------


#the closed vocabulary rejects unknown keywords with the enclosing chain
def test_unknown_node_kind() -> None:
    error = parse_error("(doc (foo bar))")
    assert error.kind is ErrorKind.UNKNOWN_NODE_KIND
    assert error.found == "foo"
    assert error.span == Span(6, 9)
    assert error.notes == ["while parsing node", "while parsing document node"]
    assert error.context.name == "test"


#`doc` is only valid as the root node
def test_nested_doc_is_rejected() -> None:
    error = parse_error("(doc (doc))")
    assert error.kind is ErrorKind.UNKNOWN_NODE_KIND
    assert error.found == "doc"


#context notes are collected innermost first
def test_error_notes_follow_nesting() -> None:
    error = parse_error("(doc (sec (p (bogus))))")
    assert error.span == Span(14, 19)
    assert error.notes == [
        "while parsing node",
        "while parsing 'p' node",
        "while parsing 'sec' node",
        "while parsing document node",
    ]


#an unclosed document fails at the end of input
def test_unclosed_doc() -> None:
    error = parse_error("(doc (p hello)")
    assert error.kind is ErrorKind.UNEXPECTED_EOF
    assert error.expected == ")"
    assert error.span == Span(14, 14)
    assert error.notes == ["while parsing document node"]


#a page needs a document node after its attributes
def test_missing_doc_node() -> None:
    error = parse_error("[title x]")
    assert error.kind is ErrorKind.UNEXPECTED_EOF
    assert error.expected == "("
    assert error.span == Span(9, 9)


#the root keyword must be exactly `doc`
@pytest.mark.parametrize("text, found", [("(sec)", "sec"), ("(document)", "document")])
def test_wrong_root_keyword(text: str, found: str) -> None:
    error = parse_error(text)
    assert error.kind is ErrorKind.UNEXPECTED_TOKEN
    assert error.expected == "doc"
    assert error.found == found
    assert error.span == Span(1, 1 + len(found))


#an attribute is committed once its bracket is consumed
def test_malformed_page_attribute() -> None:
    error = parse_error("[1 x] (doc)")
    assert error.kind is ErrorKind.EXPECTED_IDENTIFIER
    assert error.found == "1"
    assert error.span == Span(1, 2)
    assert error.notes == ["while parsing attribute"]


#an unterminated attribute names the attribute it was reading
def test_unterminated_attribute() -> None:
    error = parse_error("[title test")
    assert error.kind is ErrorKind.UNEXPECTED_EOF
    assert error.expected == "]"
    assert error.span == Span(11, 11)
    assert error.notes == ["while parsing attribute 'title'"]


#a node needs an identifier right after its parenthesis
def test_node_without_identifier() -> None:
    error = parse_error("(doc ( ))")
    assert error.kind is ErrorKind.EXPECTED_IDENTIFIER
    assert error.found == ")"
    assert error.span == Span(7, 8)


#text that never ends leaves the node open
def test_unclosed_node_at_end_of_input() -> None:
    error = parse_error("(doc (p open text")
    assert error.kind is ErrorKind.UNEXPECTED_EOF
    assert error.expected == ")"
    assert error.notes == ["while parsing 'p' node", "while parsing document node"]


#a committed attribute inside the document is not read back as text
def test_malformed_attribute_inside_doc() -> None:
    error = parse_error("(doc [1 x])")
    assert error.kind is ErrorKind.EXPECTED_IDENTIFIER
    assert error.found == "1"
    assert error.span == Span(6, 7)
    assert error.notes == ["while parsing attribute", "while parsing document node"]


#the same holds for attributes of nested nodes
def test_malformed_attribute_inside_node() -> None:
    error = parse_error("(doc (p [1 x]))")
    assert error.kind is ErrorKind.EXPECTED_IDENTIFIER
    assert error.span == Span(9, 10)
    assert error.notes == [
        "while parsing attribute",
        "while parsing 'p' node",
        "while parsing document node",
    ]


#attribute names cannot start with an underscore
def test_attribute_name_starting_with_underscore() -> None:
    error = parse_error("[_x y] (doc)")
    assert error.kind is ErrorKind.EXPECTED_IDENTIFIER
    assert error.found == "_"
    assert error.span == Span(1, 2)


#an unfinished bracket at end of input is still a committed attribute
def test_bracket_at_end_of_doc() -> None:
    error = parse_error("(doc [")
    assert error.kind is ErrorKind.EXPECTED_IDENTIFIER
    assert error.found == "end-of-file"
    assert error.notes == ["while parsing attribute", "while parsing document node"]


# Nesting ----------------------------------------------------------------------


#builds a document with `depth` nested paragraphs around one word
def nested(depth: int) -> str:
    return "(doc " + "(p " * depth + "x" + ")" * depth + ")"


#nesting up to the limit parses into a tree of that depth
def test_nesting_up_to_the_limit() -> None:
    page = parse("test", nested(MAX_DEPTH))
    paragraphs = [node for node in ast.walk(page.doc.nodes) if isinstance(node, ast.PNode)]
    assert len(paragraphs) == MAX_DEPTH


#deeper documents end in one diagnostic at the first parenthesis past the limit
def test_deep_nesting_is_reported() -> None:
    error = parse_error(nested(400))
    assert error.kind is ErrorKind.NESTING_TOO_DEEP
    offset = 5 + 3 * MAX_DEPTH
    assert error.span == Span(offset, offset + 1)
    assert str(error) == f"nodes nested deeper than {MAX_DEPTH} levels"
    assert error.notes[:2] == ["while parsing node", "while parsing 'p' node"]
    assert error.notes[-1] == "while parsing document node"
    assert len(error.notes) == MAX_DEPTH + 2


#the limit can be lowered per parse
def test_custom_nesting_limit() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("test", "(doc (sec (p (p x))))", max_depth=2)
    assert excinfo.value.kind is ErrorKind.NESTING_TOO_DEEP
    assert excinfo.value.span == Span(13, 14)
    assert parse("test", "(doc (sec (p x)))", max_depth=2).doc.nodes[0].kind is NodeKind.SEC


#limits the interpreter stack cannot honour are refused up front
@pytest.mark.parametrize("max_depth", [0, 10_000])
def test_nesting_limit_bounds(max_depth: int) -> None:
    with pytest.raises(ValueError):
        Parser.from_text("test", "(doc)", max_depth=max_depth)


# Cost -------------------------------------------------------------------------


#a str that tallies how many characters are copied out of it
class CountingText(str):
    copied = 0

    def __getitem__(self, key):  # type: ignore[override]
        piece = super().__getitem__(key)
        CountingText.copied += len(piece)
        return piece


#the parser reads in place, so copying stays proportional to the input
def test_parse_copies_linear_amount_of_text() -> None:
    text = CountingText("(doc " + "(p a) " * 2_000 + ")")
    CountingText.copied = 0
    page = parse("test", text)
    assert len(page.doc.nodes) == 2_000
    assert CountingText.copied < 50 * len(text)
