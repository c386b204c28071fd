"""
PR1 Lexer Package

Line-oriented tokenizer for PR1 source files.

Key Features:
- Keyword table lookup before operator and literal classification
- Multi-line /## ... ##// comments tracked as explicit scanner state
- Using("file"); inclusion spliced at tokenization time
- Inclusion cycles and missing files reported as ERROR tokens, never raised

Author: xwest
"""

from .tokens import Token, TokenType, KEYWORDS, OPERATORS
from .lexer import Lexer, LexState, scan_line, classify, tokenize_string, tokenize_file
from .errors import Diagnostic, InclusionError

__all__ = [
    "Lexer",
    "LexState",
    "Token",
    "TokenType",
    "KEYWORDS",
    "OPERATORS",
    "Diagnostic",
    "InclusionError",
    "scan_line",
    "classify",
    "tokenize_string",
    "tokenize_file",
]
