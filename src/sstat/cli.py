"""Command-line entry point for S-Stat."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from . import ast
from .errors import ParseError, SourceTooLargeError
from .lexer import Lexer
from .outline import outline_page
from .parser import Parser
from .settings import Settings
from .source import SourceContext

logger = logging.getLogger(__name__)


#reads the whole file up front; the parser never does I/O
def load_source(path: Path, settings: Settings) -> SourceContext:
    text = path.read_text(encoding="utf-8")
    if len(text) > settings.max_source_size:
        raise SourceTooLargeError(str(path), len(text), settings.max_source_size)
    return SourceContext.from_path(path, text)


#trailing matter is reported, not treated as a parse failure
def parse_file(path: Path, settings: Optional[Settings] = None) -> Tuple[ast.Page, str]:
    settings = settings or Settings()
    context = load_source(path, settings)
    page, rest = Parser(context, max_depth=settings.max_depth).parse_partial()
    skipped = Lexer(context).take_non_parseable()(context.text, page.span.end)
    trailing = len(context.text) - skipped.span.end
    if trailing:
        location = context.resolve(skipped.span.end)
        logger.warning(
            "%s:%d:%d: %d trailing characters after the document node were ignored",
            context.name,
            location.line,
            location.column + 1,
            trailing,
        )
    return page, rest


#handles the `sstat check` subcommand
def cmd_check(args: argparse.Namespace, settings: Settings) -> int:
    page, _rest = parse_file(Path(args.source), settings)
    print(
        f"{args.source}: ok ({len(page.attributes)} page attributes, "
        f"{len(page.doc.nodes)} top level nodes)"
    )
    return 0


#prints a human-readable view of the document tree
def cmd_dump(args: argparse.Namespace, settings: Settings) -> int:
    page, _rest = parse_file(Path(args.source), settings)
    print(outline_page(page))
    return 0


#configures the CLI surface across check/dump
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sstat", description="S-Stat markup tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="log parser activity")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_check = subparsers.add_parser("check", help="parse a source file and report errors")
    p_check.add_argument("source", help="path to source file")
    p_check.set_defaults(func=cmd_check)

    p_dump = subparsers.add_parser("dump", help="print the parsed document tree")
    p_dump.add_argument("source", help="path to source file")
    p_dump.set_defaults(func=cmd_dump)

    return parser


#entry point used by both console script and module execution
def main(argv: Optional[list[str]] = None, settings: Optional[Settings] = None) -> int:
    settings = settings or Settings()
    parser = build_parser()
    args = parser.parse_args(argv)
    level = "DEBUG" if args.verbose else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args, settings)
    except ParseError as exc:
        print(exc.render(context_lines=settings.context_lines), file=sys.stderr)
    except (OSError, SourceTooLargeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
