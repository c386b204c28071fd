"""
Test suite for the PR1 lexer.

Tests cover:
- Keyword, operator and literal classification
- Line and block comments, including comments spanning lines
- Using("...") inclusion splicing, missing files and inclusion cycles

Author: xwest
"""

import unittest
import sys
import os
import tempfile
from pathlib import Path

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from pr1c.lexer.lexer import Lexer, LexState, scan_line, classify, tokenize_string, tokenize_file
from pr1c.lexer.tokens import TokenType


class TestClassification(unittest.TestCase):
    """Single lexemes and short lines."""

    def _types(self, source: str):
        return [t.type for t in tokenize_string(source)]

    def test_program_with_one_class(self):
        tokens = tokenize_string("Program Division Foo { Ire x; } End")

        self.assertEqual([t.type for t in tokens], [
            TokenType.START_STATEMENT, TokenType.CLASS, TokenType.IDENTIFIER,
            TokenType.BRACES, TokenType.INTEGER, TokenType.IDENTIFIER,
            TokenType.SEMICOLON, TokenType.BRACES, TokenType.END_STATEMENT,
        ])
        self.assertEqual(tokens[2].lexeme, "Foo")
        self.assertEqual(tokens[5].lexeme, "x")
        self.assertTrue(all(t.line == 1 for t in tokens))

    def test_keywords_take_precedence_over_identifiers(self):
        self.assertEqual(classify("Division"), TokenType.CLASS)
        self.assertEqual(classify("None"), TokenType.VOID)
        self.assertEqual(classify("Divisions"), TokenType.IDENTIFIER)
        self.assertEqual(classify("division"), TokenType.IDENTIFIER)

    def test_loop_keywords_have_distinct_kinds(self):
        self.assertEqual(classify("Rotatewhen"), TokenType.CONDITION_LOOP)
        self.assertEqual(classify("Continuewhen"), TokenType.COUNTED_LOOP)

    def test_two_character_operators(self):
        tokens = tokenize_string("a<=b<>c&&d==e")
        operators = [(t.type, t.lexeme) for t in tokens if t.type != TokenType.IDENTIFIER]
        self.assertEqual(operators, [
            (TokenType.REL_OP, "<="),
            (TokenType.REL_OP, "<>"),
            (TokenType.LOGIC_OP, "&&"),
            (TokenType.REL_OP, "=="),
        ])

    def test_comma_and_access_operator(self):
        self.assertEqual(self._types("a, b.c"), [
            TokenType.IDENTIFIER, TokenType.COMMA, TokenType.IDENTIFIER,
            TokenType.ACCESS_OP, TokenType.IDENTIFIER,
        ])

    def test_string_literal_with_escapes(self):
        tokens = tokenize_string(r'Write("say \"hi\" now");')
        literal = tokens[2]
        self.assertEqual(literal.type, TokenType.STRING_LITERAL)
        self.assertEqual(literal.lexeme, r'"say \"hi\" now"')

    def test_character_literals(self):
        tokens = tokenize_string(r"'a' '\n'")
        self.assertEqual([t.type for t in tokens],
                         [TokenType.CHARACTER_LITERAL, TokenType.CHARACTER_LITERAL])

    def test_literals_are_not_types(self):
        self.assertEqual(classify('"text"'), TokenType.STRING_LITERAL)
        self.assertEqual(classify("SetOfClo"), TokenType.STRING)

    def test_unknown_characters(self):
        tokens = tokenize_string("x @ ! $")
        self.assertEqual([t.type for t in tokens[1:]], [TokenType.UNKNOWN] * 3)

    def test_constants(self):
        tokens = tokenize_string("x = 42;")
        self.assertEqual(tokens[2].type, TokenType.CONSTANT)
        self.assertEqual(tokens[2].lexeme, "42")

    def test_token_rendering(self):
        token = tokenize_string("Ire")[0]
        self.assertEqual(str(token), "Line #: 1 Token Text: Ire Token Type: Integer")

    def test_line_numbers(self):
        tokens = tokenize_string("Program\n\n  Division A\n{ }\nEnd")
        self.assertEqual([t.line for t in tokens], [1, 3, 3, 4, 4, 5])

    def test_source_reconstructed_from_tokens(self):
        source = "Program Division Foo {\n  Ire x;\n  x = (a+b)*3; /- note\n} End"
        tokens = tokenize_string(source)
        kept = [t.lexeme for t in tokens if t.type not in (TokenType.COMMENT, TokenType.ERROR)]
        self.assertEqual("".join(kept), "ProgramDivisionFoo{Irex;x=(a+b)*3;}End")


class TestComments(unittest.TestCase):
    """Comment tokens and the scanner state across lines."""

    def test_line_comment_runs_to_end_of_line(self):
        tokens = tokenize_string("Ire x; /- a trailing note\nEnd")
        self.assertEqual(tokens[3].type, TokenType.COMMENT)
        self.assertEqual(tokens[3].lexeme, "/- a trailing note")
        self.assertEqual(tokens[4].type, TokenType.END_STATEMENT)

    def test_block_comment_on_one_line(self):
        tokens = tokenize_string("/## short ##// Ire")
        self.assertEqual([(t.type, t.lexeme) for t in tokens], [
            (TokenType.COMMENT, "/## short ##//"),
            (TokenType.INTEGER, "Ire"),
        ])

    def test_block_comment_spanning_lines(self):
        tokens = tokenize_string("/## one\n   two\n\n##// Ire")
        self.assertEqual([(t.type, t.lexeme, t.line) for t in tokens], [
            (TokenType.COMMENT, "/## one", 1),
            (TokenType.COMMENT, "two", 2),
            (TokenType.COMMENT, "##//", 4),
            (TokenType.INTEGER, "Ire", 4),
        ])

    def test_scan_line_threads_state(self):
        state, tokens = scan_line(LexState.NORMAL, "Ire /## open", 1)
        self.assertIs(state, LexState.INSIDE_COMMENT)
        self.assertEqual(len(tokens), 2)

        state, tokens = scan_line(state, "Ire x;", 2)
        self.assertIs(state, LexState.INSIDE_COMMENT)
        self.assertEqual([(t.type, t.lexeme) for t in tokens], [(TokenType.COMMENT, "Ire x;")])

        state, tokens = scan_line(state, "done ##// x", 3)
        self.assertIs(state, LexState.NORMAL)
        self.assertEqual([t.type for t in tokens], [TokenType.COMMENT, TokenType.IDENTIFIER])

    def test_form_feed_does_not_end_a_line(self):
        tokens = tokenize_string("Ire x; /- note \x0c more\nEnd")
        self.assertEqual([(t.type, t.line) for t in tokens], [
            (TokenType.INTEGER, 1),
            (TokenType.IDENTIFIER, 1),
            (TokenType.SEMICOLON, 1),
            (TokenType.COMMENT, 1),
            (TokenType.END_STATEMENT, 2),
        ])
        self.assertIn("more", tokens[3].lexeme)

    def test_carriage_return_line_endings(self):
        tokens = tokenize_string("Program\r\nDivision A { }\rEnd\r\n")
        self.assertEqual([t.line for t in tokens], [1, 2, 2, 2, 2, 3])

    def test_directive_inside_block_comment_is_not_expanded(self):
        lexer = Lexer('/## start\nUsing("nowhere.pr1");\n##//')
        tokens = lexer.tokenize()
        self.assertTrue(all(t.type == TokenType.COMMENT for t in tokens))
        self.assertEqual(lexer.diagnostics, [])


class TestInclusion(unittest.TestCase):
    """Splicing included files into the token stream."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, name: str, content: str) -> str:
        path = self.dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    def test_included_tokens_are_spliced_in_place(self):
        lib = self._write("lib.pr1", "Division Lib { }\n")
        main = self._write("main.pr1", 'Program\nUsing("lib.pr1");\nEnd\n')

        tokens = tokenize_file(main)

        self.assertEqual([t.type for t in tokens], [
            TokenType.START_STATEMENT, TokenType.CLASS, TokenType.IDENTIFIER,
            TokenType.BRACES, TokenType.BRACES, TokenType.END_STATEMENT,
        ])
        self.assertEqual(tokens[0].filename, main)
        self.assertEqual(tokens[1].filename, str(Path(lib).resolve()))
        self.assertEqual(tokens[1].line, 1)
        self.assertEqual(tokens[5].line, 3)

    def test_inclusion_relative_to_including_file(self):
        self._write("sub/inner.pr1", "Ire deep;\n")
        self._write("sub/outer.pr1", 'Using("inner.pr1");\n')
        main = self._write("main.pr1", 'Using("sub/outer.pr1");\n')

        tokens = tokenize_file(main)
        self.assertEqual([t.lexeme for t in tokens], ["Ire", "deep", ";"])

    def test_text_after_directive_is_tokenized(self):
        self._write("lib.pr1", "Division Lib { }")
        main = self._write("main.pr1", 'Using("lib.pr1"); Ire x;')

        tokens = tokenize_file(main)
        self.assertEqual([t.lexeme for t in tokens[-3:]], ["Ire", "x", ";"])
        self.assertEqual(tokens[-1].filename, main)

    def test_missing_file_becomes_error_token(self):
        main = str(self.dir / "main.pr1")
        lexer = Lexer('Using("missing.pr1");\nIre x;', main)

        with self.assertLogs("pr1c.lexer.lexer", level="WARNING"):
            tokens = lexer.tokenize()

        errors = [t for t in tokens if t.type == TokenType.ERROR]
        self.assertEqual(len(errors), 1)
        self.assertIn("missing.pr1", errors[0].lexeme)
        self.assertEqual(errors[0].line, 1)
        self.assertEqual([t.lexeme for t in tokens[1:]], ["Ire", "x", ";"])

        self.assertEqual(len(lexer.diagnostics), 1)
        self.assertEqual(lexer.diagnostics[0].code, "L001")
        self.assertTrue(lexer.has_errors())

    def test_undecodable_file(self):
        (self.dir / "binary.pr1").write_bytes(b"\xff\xfe\xfa")
        main = self._write("main.pr1", 'Using("binary.pr1");')

        lexer = Lexer(Path(main).read_text(encoding="utf-8"), main)
        with self.assertLogs("pr1c.lexer.lexer", level="WARNING"):
            tokens = lexer.tokenize()

        self.assertEqual([t.type for t in tokens], [TokenType.ERROR])
        self.assertEqual(lexer.diagnostics[0].code, "L002")

    def test_inclusion_cycle_is_reported_once(self):
        a = self._write("a.pr1", 'Using("b.pr1");\nDivision A { }\n')
        b = self._write("b.pr1", 'Using("a.pr1");\nDivision B { }\n')

        lexer = Lexer(Path(a).read_text(encoding="utf-8"), a)
        with self.assertLogs("pr1c.lexer.lexer", level="WARNING"):
            tokens = lexer.tokenize()

        errors = [t for t in tokens if t.type == TokenType.ERROR]
        self.assertEqual(len(errors), 1)
        self.assertIn("a.pr1", errors[0].lexeme)
        self.assertEqual(errors[0].filename, str(Path(b).resolve()))

        names = [t.lexeme for t in tokens if t.type == TokenType.IDENTIFIER]
        self.assertEqual(names, ["B", "A"])
        self.assertEqual([d.code for d in lexer.diagnostics], ["L003"])

    def test_self_inclusion(self):
        a = self._write("self.pr1", 'Using("self.pr1");\n')
        lexer = Lexer(Path(a).read_text(encoding="utf-8"), a)
        with self.assertLogs("pr1c.lexer.lexer", level="WARNING"):
            tokens = lexer.tokenize()
        self.assertEqual([t.type for t in tokens], [TokenType.ERROR])

    def test_same_file_included_twice_is_not_a_cycle(self):
        self._write("lib.pr1", "Ire x;\n")
        main = self._write("main.pr1", 'Using("lib.pr1");\nUsing("lib.pr1");\n')

        lexer = Lexer(Path(main).read_text(encoding="utf-8"), main)
        tokens = lexer.tokenize()
        self.assertEqual(len(tokens), 6)
        self.assertEqual(lexer.diagnostics, [])

    def test_over_long_inclusion_path(self):
        main = str(self.dir / "main.pr1")
        lexer = Lexer('Using("' + "a" * 300 + '.pr1");\nIre x;', main)

        with self.assertLogs("pr1c.lexer.lexer", level="WARNING"):
            tokens = lexer.tokenize()

        self.assertEqual(tokens[0].type, TokenType.ERROR)
        self.assertEqual([t.lexeme for t in tokens[1:]], ["Ire", "x", ";"])
        self.assertEqual([d.code for d in lexer.diagnostics], ["L002"])

    def test_inclusion_path_with_nul_byte(self):
        main = str(self.dir / "main.pr1")
        lexer = Lexer('Using("a\x00b.pr1");\nIre x;', main)

        with self.assertLogs("pr1c.lexer.lexer", level="WARNING"):
            tokens = lexer.tokenize()

        self.assertEqual([t.type for t in tokens],
                         [TokenType.ERROR, TokenType.INTEGER, TokenType.IDENTIFIER, TokenType.SEMICOLON])
        self.assertEqual([d.code for d in lexer.diagnostics], ["L002"])

    def test_open_block_comment_continues_after_inclusion(self):
        self._write("open.pr1", "/## opened in the library\n")
        main = self._write("main.pr1", 'Using("open.pr1");\nIre x;\n##//\nEnd\n')

        tokens = tokenize_file(main)

        self.assertEqual([(t.type, t.lexeme) for t in tokens], [
            (TokenType.COMMENT, "/## opened in the library"),
            (TokenType.COMMENT, "Ire x;"),
            (TokenType.COMMENT, "##//"),
            (TokenType.END_STATEMENT, "End"),
        ])

    def test_malformed_directive_is_tokenized_normally(self):
        lexer = Lexer("Using(lib);")
        tokens = lexer.tokenize()
        self.assertEqual([t.type for t in tokens], [
            TokenType.INCLUSION, TokenType.BRACES, TokenType.IDENTIFIER,
            TokenType.BRACES, TokenType.SEMICOLON,
        ])
        self.assertEqual(lexer.diagnostics, [])


if __name__ == '__main__':
    unittest.main()
