"""
PR1 Parser Package

Recursive descent parser producing a concrete parse tree with source
positions on every matched rule and terminal.

Key Features:
- Side-effect-free lookahead to choose between declarations, assignments
  and calls that share a prefix
- Error recovery that always terminates and always returns a full tree
- Optional trace of every matched terminal

Author: xwest
"""

from .parse_tree import ParseTree, ParseTreeNode
from .parser import Parser, ParseResult, ParseStats, parse_tokens, parse_string, parse_file
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser",
    "ParseResult",
    "ParseStats",

    # Tree
    "ParseTree",
    "ParseTreeNode",

    # Error handling
    "ParseError",

    # Convenience functions
    "parse_tokens",
    "parse_string",
    "parse_file",
]
