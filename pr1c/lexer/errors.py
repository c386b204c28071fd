"""
Diagnostics for the PR1 front end.

Diagnostics are plain immutable records: the lexer and the parser collect
them instead of raising, so a single pass always reports every problem it
finds. ``InclusionError`` is the only lexer exception and it never leaves
the lexer.

Author: xwest
"""

from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class Diagnostic:
    """A positioned failure (or, with severity "info", a successful match)."""
    line: int
    message: str
    filename: Optional[str] = None
    severity: str = "error"  # "error", "warning", "info"
    code: Optional[str] = None

    def __str__(self) -> str:
        location = f"Line #: {self.line}"
        if self.filename:
            location += f" File: {self.filename}"
        return f"{location}: {self.message}"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


class InclusionError(Exception):
    """
    Raised when a ``Using("...")`` target cannot be spliced in.

    The lexer turns it into an ERROR token plus a diagnostic; callers of
    ``Lexer.tokenize`` never see it.
    """

    def __init__(self, message: str, path: str, code: str):
        super().__init__(message)
        self.path = path
        self.code = code

    def to_diagnostic(self, line: int, filename: Optional[str]) -> Diagnostic:
        return Diagnostic(line=line, message=str(self), filename=filename, code=self.code)


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Included file not found",
    "L002": "Included file could not be read",
    "L003": "Circular inclusion",
}


# Helper functions for creating common errors
def create_missing_include_error(path: str) -> InclusionError:
    """Create an error for an inclusion target that does not exist."""
    return InclusionError(f"File not found: {path}", path, code="L001")


def create_unreadable_include_error(path: str, reason: str) -> InclusionError:
    """Create an error for an inclusion target that exists but cannot be read."""
    return InclusionError(f"Cannot read included file {path}: {reason}", path, code="L002")


def create_circular_include_error(path: str) -> InclusionError:
    """Create an error for an inclusion that re-enters a file being tokenized."""
    return InclusionError(f"Circular inclusion: {path}", path, code="L003")
