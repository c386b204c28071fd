"""
Lookahead checks used to pick between productions that share a prefix.

A type keyword can start a method declaration, a typed assignment or a
variable declaration; a bare identifier can start a function call, an
assignment, or a declaration whose type is a class name. Each check looks at
the token buffer from a given index and answers yes or no. They read the
buffer only: they never build tree nodes, report diagnostics or move the
parser's cursor.

Author: xwest
"""

from typing import Optional, Sequence, Tuple

from ..lexer.tokens import Token, TokenType, TYPE_KEYWORDS


# Tokens that may appear between the parentheses of a method declaration
PARAMETER_TOKENS = TYPE_KEYWORDS | {TokenType.IDENTIFIER, TokenType.COMMA}


def token_at(tokens: Sequence[Token], index: int,
             skip_comments: bool) -> Tuple[Optional[Token], int]:
    """The first significant token at or after ``index`` and its position."""
    if skip_comments:
        while index < len(tokens) and tokens[index].type == TokenType.COMMENT:
            index += 1
    if index < len(tokens):
        return tokens[index], index
    return None, index


def starts_type(token: Optional[Token]) -> bool:
    """A primitive type keyword, or an identifier naming a class."""
    return token is not None and (token.is_type or token.type == TokenType.IDENTIFIER)


def looks_like_method_declaration(tokens: Sequence[Token], index: int,
                                  skip_comments: bool = False) -> bool:
    """Type IDENTIFIER ( parameters ) followed by '{' (or ';' for a prototype)."""
    token, index = token_at(tokens, index, skip_comments)
    if not starts_type(token):
        return False

    token, index = token_at(tokens, index + 1, skip_comments)
    if token is None or token.type != TokenType.IDENTIFIER:
        return False

    token, index = token_at(tokens, index + 1, skip_comments)
    if token is None or not token.is_brace("("):
        return False

    while True:
        token, index = token_at(tokens, index + 1, skip_comments)
        if token is None:
            return False
        if token.is_brace(")"):
            break
        if token.type not in PARAMETER_TOKENS:
            return False

    token, index = token_at(tokens, index + 1, skip_comments)
    return token is not None and (token.is_brace("{") or token.type == TokenType.SEMICOLON)


def looks_like_var_declaration(tokens: Sequence[Token], index: int,
                               skip_comments: bool = False) -> bool:
    """Type IDENTIFIER (, IDENTIFIER)* ;"""
    token, index = token_at(tokens, index, skip_comments)
    if not starts_type(token):
        return False

    token, index = token_at(tokens, index + 1, skip_comments)
    if token is None or token.type != TokenType.IDENTIFIER:
        return False

    token, index = token_at(tokens, index + 1, skip_comments)
    while token is not None and token.type == TokenType.COMMA:
        token, index = token_at(tokens, index + 1, skip_comments)
        if token is None or token.type != TokenType.IDENTIFIER:
            return False
        token, index = token_at(tokens, index + 1, skip_comments)

    return token is not None and token.type == TokenType.SEMICOLON


def looks_like_assignment(tokens: Sequence[Token], index: int,
                          skip_comments: bool = False) -> bool:
    """[Type] IDENTIFIER ="""
    token, index = token_at(tokens, index, skip_comments)
    if token is None:
        return False

    if token.type in TYPE_KEYWORDS:
        token, index = token_at(tokens, index + 1, skip_comments)
    elif token.type == TokenType.IDENTIFIER:
        following, following_index = token_at(tokens, index + 1, skip_comments)
        if following is not None and following.type == TokenType.IDENTIFIER:
            token, index = following, following_index

    if token is None or token.type != TokenType.IDENTIFIER:
        return False

    token, _ = token_at(tokens, index + 1, skip_comments)
    return token is not None and token.type == TokenType.ASSIGN_OP


def looks_like_function_call(tokens: Sequence[Token], index: int,
                             skip_comments: bool = False) -> bool:
    """IDENTIFIER ("""
    token, index = token_at(tokens, index, skip_comments)
    if token is None or token.type != TokenType.IDENTIFIER:
        return False

    token, _ = token_at(tokens, index + 1, skip_comments)
    return token is not None and token.is_brace("(")
