"""
PR1 Recursive Descent Parser

One method per grammar rule, each wrapped in a parse tree rule node.
Productions that share a leading token (declarations, assignments, calls)
are told apart with the read-only checks in ``lookahead`` before the parser
commits to one of them.

Errors never abort the parse. A terminal that is not there is reported and
left for the enclosing rule to deal with; a token that cannot start anything
is reported and skipped. Every loop in the grammar consumes at least one
token per iteration, so a parse is linear in the number of tokens.

Author: xwest
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import DEFAULT_OPTIONS, FrontEndOptions
from ..lexer.tokens import (
    Token, TokenType, TYPE_KEYWORDS, BLOCK_COMMENT_START, BLOCK_COMMENT_END,
    closes_block_comment
)
from ..lexer.errors import Diagnostic
from . import lookahead
from .parse_tree import ParseTree
from .errors import (
    ParseError, create_mismatch_diagnostic, create_expected_construct_diagnostic,
    create_no_production_diagnostic, create_unterminated_comment_diagnostic,
    create_trailing_input_diagnostic, create_nesting_diagnostic, create_match_record
)

logger = logging.getLogger(__name__)


ADDITIVE_OPERATORS = frozenset({"+", "-"})
MULTIPLICATIVE_OPERATORS = frozenset({"*", "/"})

# Tokens an enclosing rule is waiting for; a missing operand or type in
# front of one of these is reported without consuming it.
SYNC_BRACES = frozenset({")", "{", "}"})


@dataclass
class ParseStats:
    """Work counters for one parse."""
    matched: int = 0    # terminals consumed by match()
    skipped: int = 0    # tokens consumed by error recovery
    failed: int = 0     # match() calls that did not find their terminal

    @property
    def consumed(self) -> int:
        return self.matched + self.skipped


class Parser:
    """
    PR1 parser.

    Single use: construct it over a token list, call ``parse()`` once, then
    read ``tree``, ``errors`` and ``matches``.
    """

    def __init__(self, tokens: Sequence[Token], options: Optional[FrontEndOptions] = None):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: Tokens from the lexer; copied into an immutable buffer
            options: Front end options (match trace, comment policy)
        """
        self.tokens = tuple(tokens)
        self.options = options or DEFAULT_OPTIONS
        self.pos = 0
        self.tree = ParseTree()
        self.errors: List[Diagnostic] = []
        self.matches: List[Diagnostic] = []
        self.stats = ParseStats()
        self._used = False

    def parse(self) -> ParseTree:
        """
        Parse the token buffer into a parse tree.

        Returns:
            The complete tree; problems are collected in ``errors``
        """
        if self._used:
            raise RuntimeError("Parser instances are single-use")
        self._used = True

        logger.debug("Parsing %d tokens", len(self.tokens))
        self._parse_program()
        logger.debug("Parse finished: %d nodes, %d errors, %d matched, %d skipped",
                     len(self.tree.nodes), len(self.errors),
                     self.stats.matched, self.stats.skipped)
        return self.tree

    # Cursor

    @property
    def current(self) -> Optional[Token]:
        """The token under the cursor, None past the end."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def position(self) -> int:
        return self.pos

    def seek(self, index: int):
        """Move the cursor to an absolute token index."""
        self.pos = min(max(index, 0), len(self.tokens))

    def _advance(self):
        if self.pos < len(self.tokens):
            self.pos += 1

    def _at(self) -> Optional[Token]:
        """Current token, after stepping over comments when they may appear anywhere."""
        if self.options.comments_anywhere:
            while self.current is not None and self.current.type == TokenType.COMMENT:
                self._parse_comment()
        return self.current

    def _check(self, token_type: TokenType, lexeme: Optional[str] = None) -> bool:
        token = self._at()
        return (token is not None and token.type == token_type and
                (lexeme is None or token.lexeme == lexeme))

    def _check_operator(self, operators: frozenset) -> bool:
        token = self._at()
        return token is not None and token.type == TokenType.ARITH_OP and token.lexeme in operators

    def _following(self) -> Optional[Token]:
        """The significant token after the current one."""
        token, _ = lookahead.token_at(self.tokens, self.pos + 1, self.options.comments_anywhere)
        return token

    def _at_block_end(self) -> bool:
        token = self._at()
        return (token is None or token.type == TokenType.END_STATEMENT or
                token.is_brace("}"))

    @staticmethod
    def _is_sync(token: Optional[Token]) -> bool:
        return (token is None or
                token.type in (TokenType.SEMICOLON, TokenType.END_STATEMENT) or
                (token.type == TokenType.BRACES and token.lexeme in SYNC_BRACES))

    # Matching and recovery

    def match(self, token_type: TokenType, lexeme: Optional[str] = None) -> bool:
        """
        Consume the current token if it is of the expected type.

        On success a leaf is added under the open rule; on failure a
        diagnostic is recorded and the cursor stays where it is.
        """
        token = self.current if token_type == TokenType.COMMENT else self._at()
        if (token is not None and token.type == token_type and
                (lexeme is None or token.lexeme == lexeme)):
            self.tree.add_node(token)
            if self.options.record_matches:
                self.matches.append(create_match_record(token))
            self.stats.matched += 1
            self._advance()
            return True

        self.stats.failed += 1
        self.errors.append(create_mismatch_diagnostic(token_type, token, lexeme))
        return False

    def _skip(self, context: str):
        """Report a token no alternative of ``context`` can start with, and drop it."""
        token = self.current
        self.errors.append(create_no_production_diagnostic(context, token))
        self.stats.skipped += 1
        self._advance()

    def _missing(self, construct: str):
        """Report a missing type or operand in front of a token the caller still needs."""
        self.stats.failed += 1
        self.errors.append(create_expected_construct_diagnostic(construct, self.current))

    def _too_deep(self) -> bool:
        return self.tree.depth >= self.options.max_nesting

    def _skip_nested(self, context: str):
        """Refuse to descend any further; drop one token so the enclosing loop moves on."""
        token = self.current
        self.errors.append(create_nesting_diagnostic(context, token, self.options.max_nesting))
        if token is not None:
            self.stats.skipped += 1
            self._advance()

    def _rule(self, name: str):
        """Open a rule node tagged with the current token's position."""
        token = self._at()
        if token is None:
            return self.tree.rule(name)
        return self.tree.rule(name, token.line, token.filename)

    # Lookahead checks

    def looks_like_method_declaration(self) -> bool:
        return lookahead.looks_like_method_declaration(
            self.tokens, self.pos, self.options.comments_anywhere)

    def looks_like_var_declaration(self) -> bool:
        return lookahead.looks_like_var_declaration(
            self.tokens, self.pos, self.options.comments_anywhere)

    def looks_like_assignment(self) -> bool:
        return lookahead.looks_like_assignment(
            self.tokens, self.pos, self.options.comments_anywhere)

    def looks_like_function_call(self) -> bool:
        return lookahead.looks_like_function_call(
            self.tokens, self.pos, self.options.comments_anywhere)

    # Program structure

    def _parse_program(self):
        with self._rule("Program"):
            self._parse_comments()
            self.match(TokenType.START_STATEMENT)
            self._parse_class_declaration_list()
            self.match(TokenType.END_STATEMENT)
            self._parse_comments()

        trailing = self._at()
        if trailing is not None:
            self.errors.append(create_trailing_input_diagnostic(trailing))

    def _parse_comments(self):
        while self.current is not None and self.current.type == TokenType.COMMENT:
            self._parse_comment()

    def _parse_class_declaration_list(self):
        with self._rule("ClassDeclarationList"):
            while True:
                token = self._at()
                if token is None or token.type == TokenType.END_STATEMENT:
                    break
                if token.type == TokenType.CLASS:
                    self._parse_class_declaration()
                elif token.type == TokenType.COMMENT:
                    self._parse_comment()
                elif token.type == TokenType.INCLUSION:
                    self._parse_using_command()
                else:
                    self._skip("class declaration list")

    def _parse_class_declaration(self):
        with self._rule("ClassDeclaration"):
            self.match(TokenType.CLASS)
            self.match(TokenType.IDENTIFIER)

            if self._check(TokenType.INHERITANCE):
                self.match(TokenType.INHERITANCE)
                self.match(TokenType.IDENTIFIER)

            self.match(TokenType.BRACES, "{")
            self._parse_class_implementation()
            self.match(TokenType.BRACES, "}")

    def _parse_class_implementation(self):
        with self._rule("ClassImplementation"):
            while not self._at_block_end():
                self._parse_class_item()

    def _parse_class_item(self):
        if self._too_deep():
            self._skip_nested("class implementation")
            return

        with self._rule("ClassItem"):
            token = self._at()
            if token.type == TokenType.CLASS:
                self._parse_class_declaration()
            elif token.type in TYPE_KEYWORDS or token.type == TokenType.IDENTIFIER:
                self._parse_declaration("class implementation")
            elif token.type == TokenType.INCLUSION:
                self._parse_using_command()
            elif token.type == TokenType.COMMENT:
                self._parse_comment()
            else:
                self._skip("class implementation")

    def _parse_declaration(self, context: str):
        """Pick between the productions that start with a type or an identifier."""
        if self._at().type in TYPE_KEYWORDS:
            if self.looks_like_method_declaration():
                self._parse_method_declaration()
            elif self.looks_like_assignment():
                self._parse_assignment()
            else:
                self._parse_var_declaration()
            return

        if self.looks_like_function_call():
            self._parse_func_call()
        elif self.looks_like_assignment():
            self._parse_assignment()
        elif self.looks_like_method_declaration():
            self._parse_method_declaration()
        elif self.looks_like_var_declaration():
            self._parse_var_declaration()
        else:
            self._skip(context)

    def _parse_using_command(self):
        # The lexer has already spliced well-formed directives; what reaches
        # the parser is checked for shape only.
        with self._rule("UsingCommand"):
            self.match(TokenType.INCLUSION)
            self.match(TokenType.BRACES, "(")
            self.match(TokenType.STRING_LITERAL)
            self.match(TokenType.BRACES, ")")
            self.match(TokenType.SEMICOLON)

    def _parse_comment(self):
        opener = self.current
        with self.tree.rule("Comment", opener.line, opener.filename):
            self.match(TokenType.COMMENT)
            if (not opener.lexeme.startswith(BLOCK_COMMENT_START) or
                    closes_block_comment(opener.lexeme)):
                return

            while True:
                token = self.current
                if token is None or token.type != TokenType.COMMENT:
                    self.errors.append(create_unterminated_comment_diagnostic(opener))
                    return
                self.match(TokenType.COMMENT)
                if token.lexeme.endswith(BLOCK_COMMENT_END):
                    return

    # Declarations

    def _parse_method_declaration(self):
        with self._rule("MethodDeclaration"):
            self._parse_func_declaration()

            if self._check(TokenType.SEMICOLON):
                self.match(TokenType.SEMICOLON)
            else:
                self.match(TokenType.BRACES, "{")
                self._parse_statements()
                self.match(TokenType.BRACES, "}")

    def _parse_func_declaration(self):
        with self._rule("FuncDeclaration"):
            self._parse_type()
            self.match(TokenType.IDENTIFIER)
            self.match(TokenType.BRACES, "(")
            self._parse_parameter_list()
            self.match(TokenType.BRACES, ")")

    def _parse_parameter_list(self):
        with self._rule("ParameterList"):
            token = self._at()
            if token is None or token.is_brace(")"):
                return
            following = self._following()
            if token.type == TokenType.VOID and following is not None and following.is_brace(")"):
                self.match(TokenType.VOID)
                return
            self._parse_non_empty_parameter_list()

    def _parse_non_empty_parameter_list(self):
        with self._rule("NonEmptyParameterList"):
            self._parse_type()
            self.match(TokenType.IDENTIFIER)

            while self._check(TokenType.COMMA):
                self.match(TokenType.COMMA)
                self._parse_type()
                self.match(TokenType.IDENTIFIER)

    def _parse_var_declaration(self):
        with self._rule("VarDeclaration"):
            self._parse_type()
            self._parse_id_list()
            self.match(TokenType.SEMICOLON)

    def _parse_type(self):
        with self._rule("Type"):
            token = self._at()
            if token is not None and (token.type in TYPE_KEYWORDS or
                                      token.type == TokenType.IDENTIFIER):
                self.match(token.type)
            elif self._is_sync(token):
                self._missing("type")
            else:
                self._skip("type")

    def _parse_id_list(self):
        with self._rule("IDList"):
            self.match(TokenType.IDENTIFIER)
            while self._check(TokenType.COMMA):
                self.match(TokenType.COMMA)
                self.match(TokenType.IDENTIFIER)

    def _parse_assignment(self):
        with self._rule("Assignment"):
            self._parse_assignment_target()
            self.match(TokenType.ASSIGN_OP)
            self._parse_expression()
            self.match(TokenType.SEMICOLON)

    def _parse_assignment_target(self):
        """[Type] IDENTIFIER, where the type may itself be a class name."""
        token = self._at()
        following = self._following()
        if token is not None and (
                token.type in TYPE_KEYWORDS or
                (token.type == TokenType.IDENTIFIER and following is not None and
                 following.type == TokenType.IDENTIFIER)):
            self._parse_type()
        self.match(TokenType.IDENTIFIER)

    # Statements

    def _parse_statements(self):
        with self._rule("Statements"):
            while not self._at_block_end():
                self._parse_statement()

    def _parse_statement(self):
        if self._too_deep():
            self._skip_nested("statement")
            return

        with self._rule("Statement"):
            token = self._at()
            token_type = token.type

            if token_type in TYPE_KEYWORDS or token_type == TokenType.IDENTIFIER:
                self._parse_declaration("statement")
            elif token_type == TokenType.CONDITION:
                self._parse_whether_do_statement()
            elif token_type == TokenType.CONDITION_LOOP:
                self._parse_rotate_when_statement()
            elif token_type == TokenType.COUNTED_LOOP:
                self._parse_continue_when_statement()
            elif token_type == TokenType.RETURN:
                self._parse_reply_with_statement()
            elif token_type == TokenType.BREAK:
                self._parse_terminate_this_statement()
            elif token_type == TokenType.READ:
                self._parse_read_statement()
            elif token_type == TokenType.WRITE:
                self._parse_write_statement()
            elif token_type == TokenType.COMMENT:
                self._parse_comment()
            else:
                self._skip("statement")

    def _parse_block_statements(self):
        with self._rule("BlockStatements"):
            self.match(TokenType.BRACES, "{")
            self._parse_statements()
            self.match(TokenType.BRACES, "}")

    def _parse_whether_do_statement(self):
        with self._rule("WhetherDoStatement"):
            self.match(TokenType.CONDITION)
            self.match(TokenType.BRACES, "(")
            self._parse_condition_expression()
            self.match(TokenType.BRACES, ")")
            self._parse_block_statements()

            if self._check(TokenType.ELSE):
                self.match(TokenType.ELSE)
                self._parse_block_statements()

    def _parse_rotate_when_statement(self):
        with self._rule("RotateWhenStatement"):
            self.match(TokenType.CONDITION_LOOP)
            self.match(TokenType.BRACES, "(")
            self._parse_condition_expression()
            self.match(TokenType.BRACES, ")")
            self._parse_block_statements()

    def _parse_continue_when_statement(self):
        with self._rule("ContinueWhenStatement"):
            self.match(TokenType.COUNTED_LOOP)
            self.match(TokenType.BRACES, "(")
            self._parse_loop_clause()               # initialization
            self.match(TokenType.SEMICOLON)
            self._parse_condition_expression()      # condition
            self.match(TokenType.SEMICOLON)
            self._parse_loop_clause()               # increment
            self.match(TokenType.BRACES, ")")
            self._parse_block_statements()

    def _parse_loop_clause(self):
        with self._rule("LoopClause"):
            if self.looks_like_assignment():
                self._parse_assignment_target()
                self.match(TokenType.ASSIGN_OP)
            self._parse_expression()

    def _parse_reply_with_statement(self):
        with self._rule("ReplyWithStatement"):
            self.match(TokenType.RETURN)
            if not self._check(TokenType.SEMICOLON):
                self._parse_expression()
            self.match(TokenType.SEMICOLON)

    def _parse_terminate_this_statement(self):
        with self._rule("TerminateThisStatement"):
            self.match(TokenType.BREAK)
            self.match(TokenType.SEMICOLON)

    def _parse_read_statement(self):
        with self._rule("ReadStatement"):
            self.match(TokenType.READ)
            self.match(TokenType.BRACES, "(")
            self._parse_id_list()
            self.match(TokenType.BRACES, ")")
            self.match(TokenType.SEMICOLON)

    def _parse_write_statement(self):
        with self._rule("WriteStatement"):
            self.match(TokenType.WRITE)
            self.match(TokenType.BRACES, "(")
            self._parse_argument()
            while self._check(TokenType.COMMA):
                self.match(TokenType.COMMA)
                self._parse_argument()
            self.match(TokenType.BRACES, ")")
            self.match(TokenType.SEMICOLON)

    def _parse_func_call(self):
        with self._rule("FuncCall"):
            self.match(TokenType.IDENTIFIER)
            self.match(TokenType.BRACES, "(")
            self._parse_argument_list()
            self.match(TokenType.BRACES, ")")
            self.match(TokenType.SEMICOLON)

    def _parse_argument_list(self):
        with self._rule("ArgumentList"):
            token = self._at()
            if token is not None and not token.is_brace(")"):
                self._parse_non_empty_argument_list()

    def _parse_non_empty_argument_list(self):
        with self._rule("NonEmptyArgumentList"):
            self._parse_argument()
            while self._check(TokenType.COMMA):
                self.match(TokenType.COMMA)
                self._parse_argument()

    def _parse_argument(self):
        """A quoted literal or an arithmetic expression."""
        token = self._at()
        if token is not None and token.type in (TokenType.STRING_LITERAL, TokenType.CHARACTER_LITERAL):
            self.match(token.type)
        else:
            self._parse_expression()

    # Conditions and expressions

    def _parse_condition_expression(self):
        with self._rule("ConditionExpression"):
            self._parse_condition()
            while self._check(TokenType.LOGIC_OP):
                self.match(TokenType.LOGIC_OP)
                self._parse_condition()

    def _parse_condition(self):
        with self._rule("Condition"):
            self._parse_expression()
            self.match(TokenType.REL_OP)
            self._parse_expression()

    def _parse_expression(self):
        with self._rule("Expression"):
            self._parse_term()
            while self._check_operator(ADDITIVE_OPERATORS):
                self.match(TokenType.ARITH_OP)
                self._parse_term()

    def _parse_term(self):
        with self._rule("Term"):
            self._parse_factor()
            while self._check_operator(MULTIPLICATIVE_OPERATORS):
                self.match(TokenType.ARITH_OP)
                self._parse_factor()

    def _parse_factor(self):
        if self._too_deep():
            self._skip_nested("expression")
            return

        with self._rule("Factor"):
            token = self._at()
            if token is not None and token.type in (TokenType.IDENTIFIER, TokenType.CONSTANT):
                self.match(token.type)
            elif token is not None and token.is_brace("("):
                self.match(TokenType.BRACES, "(")
                self._parse_expression()
                self.match(TokenType.BRACES, ")")
            elif self._is_sync(token):
                self._missing("expression operand")
            else:
                self._skip("expression")


@dataclass
class ParseResult:
    """Everything one tokenize + parse pass produced."""
    tokens: List[Token]
    tree: ParseTree
    errors: List[Diagnostic]
    matches: List[Diagnostic] = field(default_factory=list)
    lexer_diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Lexer diagnostics followed by parser diagnostics."""
        return self.lexer_diagnostics + self.errors

    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    def raise_for_errors(self):
        """
        Raises:
            ParseError: If the lexer or the parser reported an error
        """
        if self.has_errors():
            raise ParseError(self.diagnostics)


def parse_tokens(tokens: Sequence[Token], options: Optional[FrontEndOptions] = None,
                 lexer_diagnostics: Optional[List[Diagnostic]] = None) -> ParseResult:
    parser = Parser(tokens, options)
    tree = parser.parse()
    return ParseResult(
        tokens=list(parser.tokens),
        tree=tree,
        errors=parser.errors,
        matches=parser.matches,
        lexer_diagnostics=list(lexer_diagnostics or []),
    )


def parse_string(source: str, filename: Optional[str] = None,
                 options: Optional[FrontEndOptions] = None, strict: bool = False) -> ParseResult:
    """
    Convenience function to tokenize and parse a source string.

    Args:
        source: Source code string
        filename: Filename for inclusion resolution and diagnostics
        options: Front end options
        strict: Raise instead of returning a result with errors

    Returns:
        ParseResult with tokens, tree and diagnostics

    Raises:
        ParseError: If ``strict`` and any error was reported
    """
    from ..lexer import Lexer

    lexer = Lexer(source, filename, options)
    tokens = lexer.tokenize()
    result = parse_tokens(tokens, options, lexer.diagnostics)
    if strict:
        result.raise_for_errors()
    return result


def parse_file(filepath: str, options: Optional[FrontEndOptions] = None,
               strict: bool = False) -> ParseResult:
    """
    Convenience function to tokenize and parse a source file.

    Args:
        filepath: Path to source file

    Returns:
        ParseResult with tokens, tree and diagnostics

    Raises:
        ParseError: If ``strict`` and any error was reported
        OSError: If the file itself cannot be read
    """
    options = options or DEFAULT_OPTIONS
    with open(filepath, 'r', encoding=options.encoding) as f:
        source = f.read()

    return parse_string(source, filepath, options, strict)
