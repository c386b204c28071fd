"""
PR1 Front End Package

Lexical and syntax analysis for the PR1 teaching language: a tokenizer that
splices Using("...") inclusions, and a recursive descent parser that builds a
concrete parse tree and collects diagnostics instead of stopping at the first
error.

Architecture:
    pr1c/
    ├── lexer/           # Tokens, inclusion splicing, lexer diagnostics
    ├── parser/          # Parse tree, lookahead checks, recursive descent
    ├── config.py        # Front end options
    ├── logging_config.py
    └── cli.py           # pr1c command

Author: xwest
License: MIT
"""

__version__ = "0.3.0"
__author__ = "xwest"
__license__ = "MIT"

from .config import FrontEndOptions, CommentPolicy
from .lexer import Lexer, Token, TokenType, tokenize_string, tokenize_file
from .parser import Parser, ParseTree, ParseResult, ParseError, parse_string, parse_file

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "ParseTree",
    "ParseResult",
    "Token",
    "TokenType",

    # Options and errors
    "FrontEndOptions",
    "CommentPolicy",
    "ParseError",

    # Convenience functions
    "tokenize_string",
    "tokenize_file",
    "parse_string",
    "parse_file",

    # Version info
    "__version__",
    "__author__",
    "__license__",
]
