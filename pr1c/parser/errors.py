"""
Error handling for the PR1 parser.

The parser never raises: every failure becomes a ``Diagnostic`` and parsing
continues. The helpers below build those diagnostics with consistent
messages and codes. ``ParseError`` exists for callers that want a failed
parse to be an exception (strict helpers, the command line driver).

Author: xwest
"""

from typing import List, Optional

from ..lexer.tokens import Token, TokenType
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Raised on request when a parse produced error diagnostics.

    Carries every diagnostic of the parse, not just the first one.
    """

    def __init__(self, diagnostics: List[Diagnostic]):
        self.diagnostics = list(diagnostics)
        errors = [d for d in self.diagnostics if d.is_error]
        first = errors[0] if errors else None
        summary = str(first) if first else "parse failed"
        if len(errors) > 1:
            summary += f" (and {len(errors) - 1} more)"
        super().__init__(summary)


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Expected token not found",
    "P002": "No applicable production",
    "P003": "Unterminated block comment",
    "P004": "Unexpected input after End statement",
    "P005": "Nesting too deep",
}


def _line_of(token: Optional[Token]) -> int:
    return token.line if token is not None else -1


def _file_of(token: Optional[Token]) -> Optional[str]:
    return token.filename if token is not None else None


def describe_found(token: Optional[Token]) -> str:
    return token.type.name if token is not None else "EOF"


# Helper functions for creating common parser diagnostics

def create_mismatch_diagnostic(expected: TokenType, found: Optional[Token],
                               expected_lexeme: Optional[str] = None) -> Diagnostic:
    """The current token is not the terminal a rule requires."""
    expected_str = expected.name
    if expected_lexeme is not None:
        expected_str += f" '{expected_lexeme}'"
    found_str = describe_found(found)
    if found is not None and expected_lexeme is not None and found.type == expected:
        found_str += f" '{found.lexeme}'"

    return Diagnostic(
        line=_line_of(found),
        message=f"Expected {expected_str} but found {found_str}",
        filename=_file_of(found),
        code="P001",
    )


def create_expected_construct_diagnostic(construct: str, found: Optional[Token]) -> Diagnostic:
    """A nonterminal (type, expression operand) is missing."""
    return Diagnostic(
        line=_line_of(found),
        message=f"Expected {construct} but found {describe_found(found)}",
        filename=_file_of(found),
        code="P001",
    )


def create_no_production_diagnostic(context: str, found: Token) -> Diagnostic:
    """No alternative of the active nonterminal can start with this token."""
    return Diagnostic(
        line=found.line,
        message=f"Unexpected token in {context}: {found.type.name} '{found.lexeme}'",
        filename=found.filename,
        code="P002",
    )


def create_unterminated_comment_diagnostic(opener: Token) -> Diagnostic:
    return Diagnostic(
        line=opener.line,
        message="Unterminated block comment, expected '##//' before end of input",
        filename=opener.filename,
        code="P003",
    )


def create_trailing_input_diagnostic(found: Token) -> Diagnostic:
    return Diagnostic(
        line=found.line,
        message=f"Unexpected input after End statement: {found.type.name} '{found.lexeme}'",
        filename=found.filename,
        code="P004",
    )


def create_match_record(token: Token) -> Diagnostic:
    """Success trace entry for a matched terminal."""
    return Diagnostic(
        line=token.line,
        message=f"Matched {token.type.name}: {token.lexeme}",
        filename=token.filename,
        severity="info",
    )


def create_nesting_diagnostic(context: str, found: Optional[Token], limit: int) -> Diagnostic:
    return Diagnostic(
        line=_line_of(found),
        message=f"Nesting too deep in {context} (limit {limit}), found {describe_found(found)}",
        filename=_file_of(found),
        code="P005",
    )
