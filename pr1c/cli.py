#!/usr/bin/env python3
"""
pr1c command line driver

Tokenizes and parses one PR1 source file and prints the scanner output, the
parse tree and the parser diagnostics, in that order.

Author: xwest
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import CommentPolicy, FrontEndOptions
from .logging_config import setup_logging
from .parser import ParseError, ParseResult, parse_file

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SYNTAX_ERRORS = 1
EXIT_UNREADABLE = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr1c",
        description="Tokenize and parse a PR1 source file"
    )
    parser.add_argument("file", help="PR1 source file")
    parser.add_argument("--no-tokens", action="store_true", help="Do not print the scanner output")
    parser.add_argument("--no-tree", action="store_true", help="Do not print the parse tree")
    parser.add_argument("--files", action="store_true",
                        help="Show the originating file of tree nodes and diagnostics")
    parser.add_argument("--trace", action="store_true", help="List every matched terminal")
    parser.add_argument("--comments", choices=[p.value for p in CommentPolicy],
                        help="Where comments may appear (default: from PR1C_COMMENT_POLICY or boundaries)")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level")
    parser.add_argument("--log-file", help="Also write DEBUG logs to this file")
    parser.add_argument("--strict", action="store_true",
                        help="On any error print only the diagnostics, without tokens or tree")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def options_from_args(args: argparse.Namespace) -> FrontEndOptions:
    """Environment defaults, overridden by whatever was given on the command line."""
    env = FrontEndOptions.from_env()
    return FrontEndOptions(
        record_matches=args.trace or env.record_matches,
        comment_policy=CommentPolicy(args.comments) if args.comments else env.comment_policy,
        encoding=env.encoding,
        show_file_info=args.files or env.show_file_info,
        max_nesting=env.max_nesting,
    )


def _format_diagnostic(diagnostic, show_files: bool) -> str:
    if show_files:
        return str(diagnostic)
    return f"Line #: {diagnostic.line}: {diagnostic.message}"


def render_report(result: ParseResult, options: FrontEndOptions,
                  show_tokens: bool = True, show_tree: bool = True) -> str:
    """Build the three-section text report for one parse."""
    out: List[str] = []

    if show_tokens:
        out.append("=== Scanner Output ===")
        out.extend(str(token) for token in result.tokens)
        out.append("")

    if show_tree:
        out.append("=== Parse Tree ===")
        out.append(result.tree.render(options.show_file_info))

    out.append("=== Parser Output ===")
    if options.record_matches:
        out.append("Parser Match Success:")
        out.extend(_format_diagnostic(m, options.show_file_info) for m in result.matches)
        out.append("")

    errors = [d for d in result.diagnostics if d.is_error]
    if errors:
        out.append("Syntax errors:")
        out.extend(_format_diagnostic(d, options.show_file_info) for d in errors)
    else:
        out.append("No syntax errors found.")
        out.extend(_format_matched_rule(node, options.show_file_info)
                   for node in result.tree.matched_rules())

    out.append("")
    out.append(f"Total NO of errors: {len(errors)}")
    return "\n".join(out) + "\n"


def _format_matched_rule(node, show_files: bool) -> str:
    file_info = f" [File: {node.filename}]" if show_files and node.filename else ""
    return f"Line #: {node.line}{file_info} Matched Rule Used: {node.name}"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        options = options_from_args(args)
    except ValueError as e:
        print(f"pr1c: invalid configuration: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    try:
        result = parse_file(args.file, options, strict=args.strict)
    except ParseError as e:
        for diagnostic in e.diagnostics:
            if diagnostic.is_error:
                print(_format_diagnostic(diagnostic, options.show_file_info), file=sys.stderr)
        return EXIT_SYNTAX_ERRORS
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", args.file, e)
        print(f"pr1c: cannot read {args.file}: {e}", file=sys.stderr)
        return EXIT_UNREADABLE

    sys.stdout.write(render_report(result, options,
                                   show_tokens=not args.no_tokens,
                                   show_tree=not args.no_tree))
    return EXIT_SYNTAX_ERRORS if result.has_errors() else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
