"""
PR1 Lexer - turns source text into tokens

Works one physical line at a time. The only state that crosses a line
boundary is whether we are inside a /## ... ##// block comment, and that is
passed in and out of scan_line explicitly.

Using("file"); lines are expanded here, not in the parser: the included
file is tokenized on its own (with its own name on every token) and the
result is spliced in where the directive was.

xwest
"""

import logging
import re
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import DEFAULT_OPTIONS, FrontEndOptions
from .tokens import (
    Token, TokenType, KEYWORDS, OPERATORS,
    LINE_COMMENT_START, BLOCK_COMMENT_START, BLOCK_COMMENT_END
)
from .errors import (
    Diagnostic, InclusionError, create_missing_include_error,
    create_unreadable_include_error, create_circular_include_error
)

logger = logging.getLogger(__name__)


class LexState(Enum):
    """Scanner state carried from one line to the next."""
    NORMAL = auto()
    INSIDE_COMMENT = auto()


# One alternative per lexeme shape, tried left to right at each position.
# Two-character operators come before their one-character prefixes and the
# final \S makes sure every non-space character ends up in some token.
_TOKEN_PATTERN = re.compile(r'''
      "(?:\\.|[^"\\])*"                          # string literal
    | '(?:\\.|[^'\\])'                           # character literal
    | [0-9]+                                     # integer constant
    | [A-Za-z_][A-Za-z0-9_]*                     # identifier or keyword
    | &&|\|\||==|!=|<=|>=|<>                     # two-character operators
    | [~=<>+\-*/.,;{}()\[\]]                     # one-character operators
    | \S                                         # anything else
''', re.VERBOSE)

_STRING_SHAPE = re.compile(r'"(?:\\.|[^"\\])*"')
_CHARACTER_SHAPE = re.compile(r"'(?:\\.|[^'\\])'")
_CONSTANT_SHAPE = re.compile(r'[0-9]+')
_IDENTIFIER_SHAPE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

_INCLUSION_DIRECTIVE = re.compile(r'\s*Using\s*\(\s*"([^"]+)"\s*\)\s*;')

# Only \n, \r\n and \r end a line; form feeds and other separators stay in the text
_LINE_BREAK = re.compile(r'\r\n|\r|\n')


def classify(lexeme: str) -> TokenType:
    """
    Determine the token type of a single lexeme.

    Keywords win over everything, then operators and punctuation, then the
    literal shapes. Anything left over is UNKNOWN.
    """
    keyword = KEYWORDS.get(lexeme)
    if keyword is not None:
        return keyword

    operator = OPERATORS.get(lexeme)
    if operator is not None:
        return operator

    if lexeme.startswith((LINE_COMMENT_START, BLOCK_COMMENT_START)):
        return TokenType.COMMENT
    if _STRING_SHAPE.fullmatch(lexeme):
        return TokenType.STRING_LITERAL
    if _CHARACTER_SHAPE.fullmatch(lexeme):
        return TokenType.CHARACTER_LITERAL
    if _CONSTANT_SHAPE.fullmatch(lexeme):
        return TokenType.CONSTANT
    if _IDENTIFIER_SHAPE.fullmatch(lexeme):
        return TokenType.IDENTIFIER

    return TokenType.UNKNOWN


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def scan_line(state: LexState, text: str, line: int,
              filename: Optional[str] = None) -> Tuple[LexState, List[Token]]:
    """
    Tokenize one physical line.

    Args:
        state: Scanner state left by the previous line
        text: Line text without its line terminator
        line: 1-based line number
        filename: File name stamped on the tokens

    Returns:
        The state for the next line and the tokens found on this one
    """
    tokens: List[Token] = []
    pos = _skip_whitespace(text, 0)

    if state is LexState.INSIDE_COMMENT:
        end = text.find(BLOCK_COMMENT_END, pos)
        if end < 0:
            if pos < len(text):
                tokens.append(Token(TokenType.COMMENT, text[pos:].rstrip(), line, filename))
            return state, tokens
        close = end + len(BLOCK_COMMENT_END)
        tokens.append(Token(TokenType.COMMENT, text[pos:close], line, filename))
        state = LexState.NORMAL
        pos = close

    while True:
        pos = _skip_whitespace(text, pos)
        if pos >= len(text):
            break

        if text.startswith(BLOCK_COMMENT_START, pos):
            end = text.find(BLOCK_COMMENT_END, pos + len(BLOCK_COMMENT_START))
            if end < 0:
                tokens.append(Token(TokenType.COMMENT, text[pos:].rstrip(), line, filename))
                return LexState.INSIDE_COMMENT, tokens
            close = end + len(BLOCK_COMMENT_END)
            tokens.append(Token(TokenType.COMMENT, text[pos:close], line, filename))
            pos = close
            continue

        if text.startswith(LINE_COMMENT_START, pos):
            tokens.append(Token(TokenType.COMMENT, text[pos:].rstrip(), line, filename))
            break

        match = _TOKEN_PATTERN.match(text, pos)
        lexeme = match.group(0)
        tokens.append(Token(classify(lexeme), lexeme, line, filename))
        pos = match.end()

    return state, tokens


class Lexer:
    """
    PR1 lexical analyzer.

    Converts source text into a list of tokens, expanding inclusion
    directives in place. Never raises for bad input: unrecognized text
    becomes UNKNOWN tokens and failed inclusions become ERROR tokens.
    """

    def __init__(self, source: str, filename: Optional[str] = None,
                 options: Optional[FrontEndOptions] = None,
                 _including: Tuple[Path, ...] = ()):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Path of the source file, used to resolve relative
                inclusions and stamped on every token
            options: Front end options (encoding of included files)
        """
        self.source = source
        self.filename = filename
        self.options = options or DEFAULT_OPTIONS
        self.tokens: List[Token] = []
        self.diagnostics: List[Diagnostic] = []
        self.end_state = LexState.NORMAL

        # Files currently being tokenized, outermost first
        self._active = _including
        if filename:
            self._active = _including + (Path(filename).resolve(),)

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source.

        Returns:
            List of tokens in source order, inclusions spliced in
        """
        self.tokens = []
        self.diagnostics = []
        state = LexState.NORMAL

        for line_number, text in enumerate(_LINE_BREAK.split(self.source), start=1):
            if state is LexState.NORMAL:
                directive = _INCLUSION_DIRECTIVE.match(text)
                if directive:
                    state = self._splice_inclusion(directive.group(1), line_number)
                    text = text[directive.end():]

            state, line_tokens = scan_line(state, text, line_number, self.filename)
            self.tokens.extend(line_tokens)

        if state is LexState.INSIDE_COMMENT:
            logger.debug("%s ends inside a block comment", self.filename or "<input>")

        self.end_state = state
        logger.debug("Tokenized %s: %d tokens, %d diagnostics",
                     self.filename or "<input>", len(self.tokens), len(self.diagnostics))
        return self.tokens

    def _splice_inclusion(self, included_path: str, line: int) -> LexState:
        """
        Tokenize an included file and append its tokens, or an ERROR token.

        Returns:
            The scanner state the included text ends in, so a block comment
            left open there continues in the including file
        """
        try:
            target = self._resolve_inclusion(included_path)
            content = self._read_inclusion(target, included_path)
        except InclusionError as e:
            logger.warning("Line %d of %s: %s", line, self.filename or "<input>", e)
            self.diagnostics.append(e.to_diagnostic(line, self.filename))
            self.tokens.append(Token(TokenType.ERROR, str(e), line, self.filename))
            return LexState.NORMAL

        logger.debug("Including %s from line %d of %s", target, line, self.filename or "<input>")
        child = Lexer(content, str(target), self.options, _including=self._active)
        self.tokens.extend(child.tokenize())
        self.diagnostics.extend(child.diagnostics)
        return child.end_state

    def _resolve_inclusion(self, included_path: str) -> Path:
        """Resolve a directive path against the including file's directory."""
        try:
            path = Path(included_path)
            if not path.is_absolute():
                base = Path(self.filename).parent if self.filename else Path.cwd()
                path = base / path
            path = path.resolve()
        except (OSError, ValueError) as e:
            # Over-long names, embedded NUL bytes, unsearchable directories
            raise create_unreadable_include_error(included_path, str(e)) from e

        if path in self._active:
            raise create_circular_include_error(included_path)
        return path

    def _read_inclusion(self, target: Path, included_path: str) -> str:
        try:
            target.stat()
        except FileNotFoundError as e:
            raise create_missing_include_error(included_path) from e
        except (OSError, ValueError) as e:
            raise create_unreadable_include_error(included_path, str(e)) from e

        try:
            return target.read_text(encoding=self.options.encoding)
        except (OSError, ValueError) as e:
            raise create_unreadable_include_error(included_path, str(e)) from e

    def has_errors(self) -> bool:
        """Check if the lexer produced any error diagnostics."""
        return any(d.is_error for d in self.diagnostics)


def tokenize_string(source: str, filename: Optional[str] = None,
                    options: Optional[FrontEndOptions] = None) -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for inclusion resolution and diagnostics

    Returns:
        List of tokens
    """
    return Lexer(source, filename, options).tokenize()


def tokenize_file(filepath: str, options: Optional[FrontEndOptions] = None) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Args:
        filepath: Path to source file

    Returns:
        List of tokens

    Raises:
        OSError: If the file itself cannot be read
    """
    options = options or DEFAULT_OPTIONS
    with open(filepath, 'r', encoding=options.encoding) as f:
        source = f.read()

    return tokenize_string(source, filepath, options)
