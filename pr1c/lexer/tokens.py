"""
Token definitions for the PR1 lexer.

This module defines all token types of the PR1 language, including:
- Keywords (class, type, control-flow and program markers)
- Operators (arithmetic, logic, relational, assignment, member access)
- Literals (strings, characters, integer constants)
- Punctuation, comments and recovery tokens

Author: xwest
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class TokenType(Enum):
    """
    Enumeration of all token types in PR1.

    Each member carries the human readable description shown in scanner
    output and used as the leaf name in parse trees.
    """

    def __new__(cls, name: str, description: str):
        member = object.__new__(cls)
        member._value_ = name
        member.description = description
        return member

    # ========================================================================
    # Keywords
    # ========================================================================
    CLASS = ("CLASS", "Class")                          # Division
    INHERITANCE = ("INHERITANCE", "Inheritance")        # InferedFrom
    CONDITION = ("CONDITION", "Condition")              # WhetherDoElse
    ELSE = ("ELSE", "Else")                             # Else

    # Primitive types
    INTEGER = ("INTEGER", "Integer")                    # Ire
    SINTEGER = ("SINTEGER", "SInteger")                 # Sire
    CHARACTER = ("CHARACTER", "Character")              # Clo
    STRING = ("STRING", "String")                       # SetOfClo
    FLOAT = ("FLOAT", "Float")                          # FBU
    SFLOAT = ("SFLOAT", "SFloat")                       # SFBU
    VOID = ("VOID", "Void")                             # None
    BOOLEAN = ("BOOLEAN", "Boolean")                    # Logical

    # Control flow
    BREAK = ("BREAK", "Terminate_this/Break")           # terminatethis
    CONDITION_LOOP = ("CONDITION_LOOP", "Loop")         # Rotatewhen
    COUNTED_LOOP = ("COUNTED_LOOP", "Loop")             # Continuewhen
    RETURN = ("RETURN", "Return")                       # Replywith
    STRUCT = ("STRUCT", "Struct")                       # Seop
    SWITCH = ("SWITCH", "Switch")                       # Check
    READ = ("READ", "Read")                             # Read
    WRITE = ("WRITE", "Write")                          # Write

    # Program markers
    START_STATEMENT = ("START_STATEMENT", "Start Statement")    # Program
    END_STATEMENT = ("END_STATEMENT", "End Statement")          # End
    INCLUSION = ("INCLUSION", "Inclusion")                      # Using

    # ========================================================================
    # Operators
    # ========================================================================
    ARITH_OP = ("ARITH_OP", "Arithmetic Operation")     # + - * /
    LOGIC_OP = ("LOGIC_OP", "Logic operators")          # && || ~
    REL_OP = ("REL_OP", "relational operators")         # == != <= >= <> < >
    ASSIGN_OP = ("ASSIGN_OP", "Assignment operator")    # =
    ACCESS_OP = ("ACCESS_OP", "Access Operator")        # .

    # ========================================================================
    # Punctuation, literals and structure
    # ========================================================================
    BRACES = ("BRACES", "Braces")                       # { } ( ) [ ]
    SEMICOLON = ("SEMICOLON", ";")
    COMMA = ("COMMA", ",")
    STRING_LITERAL = ("STRING_LITERAL", "String Literal")           # "text"
    CHARACTER_LITERAL = ("CHARACTER_LITERAL", "Character Literal")  # 'c'
    CONSTANT = ("CONSTANT", "Constant")                 # 42
    IDENTIFIER = ("IDENTIFIER", "Identifier")
    COMMENT = ("COMMENT", "Comment")                    # /- ... and /## ... ##//

    # ========================================================================
    # Error and Recovery Tokens
    # ========================================================================
    ERROR = ("ERROR", "Error")                          # Failed inclusion
    UNKNOWN = ("UNKNOWN", "Unknown")                    # Unrecognized text


@dataclass(frozen=True)
class Token:
    """
    A lexical token of a PR1 program.

    Tokens are created once by the lexer and never mutated. ``filename`` is
    the file the token was read from; tokens spliced in from an inclusion
    carry the included file's path.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    line: int                       # 1-based line in ``filename``
    filename: Optional[str] = None

    def __str__(self) -> str:
        return (f"Line #: {self.line} Token Text: {self.lexeme} "
                f"Token Type: {self.type.description}")

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, {self.line}, {self.filename!r})"

    @property
    def is_type(self) -> bool:
        """Check if this token is a primitive type keyword."""
        return self.type in TYPE_KEYWORDS

    def is_brace(self, text: str) -> bool:
        return self.type == TokenType.BRACES and self.lexeme == text


# Lookup tables for token classification

KEYWORDS = {
    "Division": TokenType.CLASS,
    "InferedFrom": TokenType.INHERITANCE,
    "WhetherDoElse": TokenType.CONDITION,
    "Else": TokenType.ELSE,
    "Ire": TokenType.INTEGER,
    "Sire": TokenType.SINTEGER,
    "Clo": TokenType.CHARACTER,
    "SetOfClo": TokenType.STRING,
    "FBU": TokenType.FLOAT,
    "SFBU": TokenType.SFLOAT,
    "None": TokenType.VOID,
    "Logical": TokenType.BOOLEAN,
    "terminatethis": TokenType.BREAK,
    "Rotatewhen": TokenType.CONDITION_LOOP,
    "Continuewhen": TokenType.COUNTED_LOOP,
    "Replywith": TokenType.RETURN,
    "Seop": TokenType.STRUCT,
    "Check": TokenType.SWITCH,
    "Read": TokenType.READ,
    "Write": TokenType.WRITE,
    "Program": TokenType.START_STATEMENT,
    "End": TokenType.END_STATEMENT,
    "Using": TokenType.INCLUSION,
}

OPERATORS = {
    # Arithmetic
    "+": TokenType.ARITH_OP,
    "-": TokenType.ARITH_OP,
    "*": TokenType.ARITH_OP,
    "/": TokenType.ARITH_OP,

    # Logic
    "&&": TokenType.LOGIC_OP,
    "||": TokenType.LOGIC_OP,
    "~": TokenType.LOGIC_OP,

    # Relational
    "==": TokenType.REL_OP,
    "!=": TokenType.REL_OP,
    "<=": TokenType.REL_OP,
    ">=": TokenType.REL_OP,
    "<>": TokenType.REL_OP,
    "<": TokenType.REL_OP,
    ">": TokenType.REL_OP,

    # Assignment and access
    "=": TokenType.ASSIGN_OP,
    ".": TokenType.ACCESS_OP,

    # Punctuation
    "{": TokenType.BRACES,
    "}": TokenType.BRACES,
    "(": TokenType.BRACES,
    ")": TokenType.BRACES,
    "[": TokenType.BRACES,
    "]": TokenType.BRACES,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
}

TYPE_KEYWORDS = frozenset({
    TokenType.INTEGER,
    TokenType.SINTEGER,
    TokenType.CHARACTER,
    TokenType.STRING,
    TokenType.FLOAT,
    TokenType.SFLOAT,
    TokenType.VOID,
    TokenType.BOOLEAN,
})

# Comment markers
LINE_COMMENT_START = "/-"
BLOCK_COMMENT_START = "/##"
BLOCK_COMMENT_END = "##//"


def closes_block_comment(lexeme: str) -> bool:
    """Check if a comment token's text finishes a ``/## ... ##//`` block.

    The opening and closing markers may not share characters, so ``/##//``
    is an opener only.
    """
    if not lexeme.endswith(BLOCK_COMMENT_END):
        return False
    if lexeme.startswith(BLOCK_COMMENT_START):
        return len(lexeme) >= len(BLOCK_COMMENT_START) + len(BLOCK_COMMENT_END)
    return True
