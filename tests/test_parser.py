"""
Test suite for the Monkey parser.

Tests cover:
- Let, return and expression statements
- Diagnostics and statement-local recovery
- Operator precedence and associativity
- Prefix, infix, grouped, if, function and call expressions
- Lookahead window behaviour
"""

import os
import sys
import tempfile
import unittest
from typing import Any

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from monkey.lexer import Lexer, TokenStream, Token, TokenType, SourceLocation
from monkey.parser import (
    Parser, ParserConfig, ParseDiagnostic, ParseError, parse_string, parse_file,
    Program, LetStatement, ReturnStatement, ExpressionStatement,
    Identifier, IntegerLiteral, Boolean, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression,
)


class ParserTestCase(unittest.TestCase):
    """Shared helpers for parser tests."""

    def _parse(self, source: str, config: ParserConfig = None):
        parser = Parser(Lexer(source), config)
        program = parser.parse_program()
        return program, parser

    def _parse_clean(self, source: str) -> Program:
        """Parse and fail the test if the parser reported anything."""
        program, parser = self._parse(source)
        self.assertEqual(parser.errors, [], f"parser errors for {source!r}")
        return program

    def _single_expression(self, source: str):
        program = self._parse_clean(source)
        self.assertEqual(len(program.statements), 1)
        stmt = program.statements[0]
        self.assertIsInstance(stmt, ExpressionStatement)
        return stmt.expression

    def assertLiteral(self, expr, expected: Any):
        if isinstance(expected, bool):
            self.assertIsInstance(expr, Boolean)
            self.assertEqual(expr.value, expected)
            self.assertEqual(expr.token_literal(), str(expected).lower())
        elif isinstance(expected, int):
            self.assertIsInstance(expr, IntegerLiteral)
            self.assertEqual(expr.value, expected)
            self.assertEqual(expr.token_literal(), str(expected))
        else:
            self.assertIsInstance(expr, Identifier)
            self.assertEqual(expr.value, expected)
            self.assertEqual(expr.token_literal(), expected)

    def assertInfix(self, expr, left: Any, operator: str, right: Any):
        self.assertIsInstance(expr, InfixExpression)
        self.assertLiteral(expr.left, left)
        self.assertEqual(expr.operator, operator)
        self.assertLiteral(expr.right, right)


class TestStatements(ParserTestCase):
    """Test cases for statement parsing."""

    def test_let_statements(self):
        """Test let statements bind the declared names."""
        source = """
        let x = 100;
        let y = 10;
        let result = true;
        """
        program = self._parse_clean(source)

        self.assertEqual(len(program.statements), 3)
        for stmt, name, value in zip(program.statements, ["x", "y", "result"], [100, 10, True]):
            self.assertIsInstance(stmt, LetStatement)
            self.assertEqual(stmt.token_literal(), "let")
            self.assertEqual(stmt.name.value, name)
            self.assertEqual(stmt.name.token_literal(), name)
            self.assertLiteral(stmt.value, value)

    def test_let_statement_with_expression(self):
        """Test that the bound value is parsed as a full expression."""
        program = self._parse_clean("let total = a + b * 2;")

        stmt = program.statements[0]
        self.assertEqual(str(stmt.value), "(a + (b * 2))")
        self.assertEqual(str(program), "let total = (a + (b * 2));")

    def test_let_statement_span(self):
        """Test that a statement spans from its keyword to its terminator."""
        program = self._parse_clean("let x = 5;")
        span = program.statements[0].span

        self.assertEqual((span.start.line, span.start.column), (1, 1))
        self.assertEqual((span.end.line, span.end.column), (1, 10))

    def test_return_statements(self):
        """Test return statements and their values."""
        source = """
        return 5;
        return a;
        return 5123;
        """
        program = self._parse_clean(source)

        self.assertEqual(len(program.statements), 3)
        for stmt, value in zip(program.statements, [5, "a", 5123]):
            self.assertIsInstance(stmt, ReturnStatement)
            self.assertEqual(stmt.token_literal(), "return")
            self.assertLiteral(stmt.return_value, value)

    def test_return_without_value(self):
        """Test that a bare return has no value."""
        program = self._parse_clean("return; return")

        self.assertEqual(len(program.statements), 2)
        for stmt in program.statements:
            self.assertIsInstance(stmt, ReturnStatement)
            self.assertIsNone(stmt.return_value)

    def test_let_skips_unclaimed_tokens(self):
        """Test that tokens left after a let value are skipped through the `;`."""
        program = self._parse_clean("let x = 5 6 7; let y = 1;")

        self.assertEqual(len(program.statements), 2)
        for stmt, name, value in zip(program.statements, ["x", "y"], [5, 1]):
            self.assertIsInstance(stmt, LetStatement)
            self.assertEqual(stmt.name.value, name)
            self.assertLiteral(stmt.value, value)

    def test_return_skips_unclaimed_tokens(self):
        """Test that tokens left after a return value are skipped through the `;`."""
        program = self._parse_clean("return a b; return c;")

        self.assertEqual(len(program.statements), 2)
        for stmt, value in zip(program.statements, ["a", "c"]):
            self.assertIsInstance(stmt, ReturnStatement)
            self.assertLiteral(stmt.return_value, value)

    def test_skip_stops_before_closing_brace(self):
        """Test that skipping inside a block leaves the `}` for the block."""
        expr = self._single_expression("fn() { return x y z }")

        self.assertIsInstance(expr, FunctionLiteral)
        self.assertEqual(len(expr.body.statements), 1)
        self.assertLiteral(expr.body.statements[0].return_value, "x")

    def test_empty_input(self):
        """Test that empty input gives an empty program and no errors."""
        for source in ("", "   \n\t"):
            program, parser = self._parse(source)
            self.assertEqual(len(program.statements), 0)
            self.assertEqual(parser.errors, [])

    def test_statements_are_immutable_after_parse(self):
        """Test that the finished program exposes a tuple."""
        program = self._parse_clean("1; 2;")
        self.assertIsInstance(program.statements, tuple)
        self.assertEqual(len(program), 2)

    def test_parser_is_single_use(self):
        """Test that a second parse of the same parser is refused."""
        parser = Parser(Lexer("1;"))
        parser.parse_program()
        with self.assertRaises(RuntimeError):
            parser.parse_program()


class TestDiagnostics(ParserTestCase):
    """Test cases for error reporting and recovery."""

    def test_parser_errors(self):
        """Test that each malformed let yields exactly one diagnostic."""
        source = """
        let 8999;
        let 1 = a;
        let = 5;
        """
        program, parser = self._parse(source)

        self.assertEqual(parser.errors, [
            "expected next token to be 'IDENT', got 'INT' instead",
            "expected next token to be 'IDENT', got 'INT' instead",
            "expected next token to be 'IDENT', got '=' instead",
        ])
        self.assertFalse(any(isinstance(s, LetStatement) for s in program.statements))

    def test_malformed_let_does_not_block_following_statements(self):
        """Test recovery continues with the next statement."""
        program, parser = self._parse("let 8999; let x = 1;")

        self.assertEqual(len(parser.errors), 1)
        lets = [s for s in program.statements if isinstance(s, LetStatement)]
        self.assertEqual(len(lets), 1)
        self.assertEqual(lets[0].name.value, "x")

    def test_missing_assign(self):
        """Test a let without '=' is reported and dropped."""
        program, parser = self._parse("let x 5;")

        self.assertEqual(parser.errors, ["expected next token to be '=', got 'INT' instead"])
        self.assertFalse(any(isinstance(s, LetStatement) for s in program.statements))

    def test_unclosed_group(self):
        """Test that a missing ')' is reported once."""
        _, parser = self._parse("(1 + 2;")
        self.assertEqual(parser.errors, ["expected next token to be ')', got ';' instead"])

    def test_diagnostic_details(self):
        """Test the structured diagnostic behind each message."""
        _, parser = self._parse("let = 5;")

        diagnostic = parser.diagnostics[0]
        self.assertEqual(diagnostic.code, "P001")
        self.assertEqual(diagnostic.severity, "error")
        self.assertEqual(diagnostic.token.type, TokenType.ASSIGN)
        self.assertEqual((diagnostic.location.line, diagnostic.location.column), (1, 5))
        self.assertIn("--> <unknown>:1:5", diagnostic.format())
        self.assertEqual(diagnostic.category, "Unexpected token")

    def test_unknown_error_code_rejected(self):
        """Test that diagnostics only accept registered error codes."""
        token = Token(TokenType.ILLEGAL, "@", None, SourceLocation("<test>", 1, 1, 0))
        with self.assertRaises(ValueError):
            ParseDiagnostic("bad", token, code="P999")

    def test_missing_prefix_is_silent_by_default(self):
        """Test that tokens which cannot start an expression are skipped quietly."""
        program, parser = self._parse("; ) = 5;")

        self.assertEqual(parser.errors, [])
        self.assertEqual(len(program.statements), 1)
        self.assertLiteral(program.statements[0].expression, 5)

    def test_missing_prefix_reported_when_configured(self):
        """Test the optional no-prefix diagnostic."""
        config = ParserConfig(report_missing_prefix=True)
        _, parser = self._parse("let = 5;", config)

        self.assertEqual(parser.errors, [
            "expected next token to be 'IDENT', got '=' instead",
            "no prefix parse function for '=' found",
        ])
        self.assertEqual(parser.diagnostics[1].code, "P002")

    def test_malformed_lets_with_missing_prefix_reporting(self):
        """Test diagnostic counts change when no-prefix reporting is on."""
        source = "let 8999; let 1 = a; let = 5;"
        _, parser = self._parse(source, ParserConfig(report_missing_prefix=True))
        self.assertEqual(len(parser.errors), 5)

    def test_invalid_integer_token(self):
        """Test an INT token whose text is not a number."""
        location = SourceLocation("<test>", 1, 1, 0)
        tokens = [
            Token(TokenType.INT, "12x", None, location),
            Token(TokenType.SEMICOLON, ";", None, location),
        ]
        parser = Parser(TokenStream(tokens))
        program = parser.parse_program()

        self.assertEqual(parser.errors, ["could not parse '12x' as integer"])
        self.assertEqual(len(program.statements), 0)

    def test_garbage_input_terminates(self):
        """Test that arbitrary token soup still parses to the end."""
        source = ") ) } ; = let let return if ( fn { , else 7"
        program, parser = self._parse(source)

        self.assertIsInstance(program, Program)
        self.assertTrue(parser.cur_token_is(TokenType.EOF))

    def test_deep_nesting_within_limit(self):
        """Test that a few hundred nested groups parse normally."""
        source = "(" * 300 + "1" + ")" * 300 + ";"
        program = self._parse_clean(source)

        self.assertEqual(str(program), "1")

    def test_nesting_too_deep_is_reported(self):
        """Test that nesting past the stack limit becomes a diagnostic."""
        source = "(" * 5000 + "1" + ")" * 5000 + "; let x = 1;"
        for config in (ParserConfig(), ParserConfig(trace=True)):
            program, parser = self._parse(source, config)

            self.assertEqual(parser.errors, ["expression nested too deeply"])
            self.assertEqual(parser.diagnostics[0].code, "P004")
            self.assertTrue(parser.cur_token_is(TokenType.EOF))
            self.assertEqual(len(program.statements), 0)

    def test_parse_string_strict(self):
        """Test that strict parsing raises with every diagnostic attached."""
        with self.assertRaises(ParseError) as ctx:
            parse_string("let 8999; let = 5;", strict=True)

        self.assertEqual(len(ctx.exception.diagnostics), 2)
        self.assertEqual(ctx.exception.messages[1],
                         "expected next token to be 'IDENT', got '=' instead")
        self.assertIn("2 syntax errors", str(ctx.exception))

    def test_parse_string_lenient(self):
        """Test that lenient parsing returns the errors."""
        program, errors = parse_string("let 8999;")
        self.assertEqual(errors, ["expected next token to be 'IDENT', got 'INT' instead"])
        self.assertIsInstance(program, Program)

    def test_parse_file(self):
        """Test parsing from a file on disk."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "prog.mk")
            with open(path, "w", encoding="utf-8") as f:
                f.write("let x = 1;\nreturn x;\n")

            program, errors = parse_file(path)

        self.assertEqual(errors, [])
        self.assertEqual(str(program), "let x = 1;return x;")
        self.assertEqual(program.statements[1].token.location.filename, path)


class TestExpressions(ParserTestCase):
    """Test cases for expression parsing."""

    def test_identifier_expression(self):
        """Test a lone identifier without terminator."""
        expr = self._single_expression("foobar")
        self.assertLiteral(expr, "foobar")

    def test_integer_literal_expression(self):
        """Test an integer literal statement."""
        expr = self._single_expression("5;")
        self.assertLiteral(expr, 5)

    def test_boolean_expression(self):
        """Test true and false literals."""
        self.assertLiteral(self._single_expression("true;"), True)
        self.assertLiteral(self._single_expression("false;"), False)

    def test_prefix_expressions(self):
        """Test '!' and '-' prefix operators."""
        tests = [
            ("!5;", "!", 5),
            ("-15;", "-", 15),
            ("!foobar;", "!", "foobar"),
            ("!true;", "!", True),
            ("!false;", "!", False),
        ]
        for source, operator, value in tests:
            with self.subTest(source=source):
                expr = self._single_expression(source)
                self.assertIsInstance(expr, PrefixExpression)
                self.assertEqual(expr.operator, operator)
                self.assertLiteral(expr.right, value)

    def test_infix_expressions(self):
        """Test every binary operator."""
        tests = [
            ("5 + 5;", 5, "+", 5),
            ("5 - 5;", 5, "-", 5),
            ("5 * 5;", 5, "*", 5),
            ("5 / 5;", 5, "/", 5),
            ("5 > 5;", 5, ">", 5),
            ("5 < 5;", 5, "<", 5),
            ("5 == 5;", 5, "==", 5),
            ("5 != 5;", 5, "!=", 5),
            ("alice * bob;", "alice", "*", "bob"),
            ("true == true", True, "==", True),
            ("true != false", True, "!=", False),
        ]
        for source, left, operator, right in tests:
            with self.subTest(source=source):
                self.assertInfix(self._single_expression(source), left, operator, right)

    def test_operator_precedence(self):
        """Test precedence and left associativity via the rendered tree."""
        tests = [
            ("-a * b", "((-a) * b)"),
            ("!-a", "(!(-a))"),
            ("a + b + c", "((a + b) + c)"),
            ("a + b - c", "((a + b) - c)"),
            ("a * b * c", "((a * b) * c)"),
            ("a * b / c", "((a * b) / c)"),
            ("a + b / c", "(a + (b / c))"),
            ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
            ("3 + 4; -5 * 5", "(3 + 4)((-5) * 5)"),
            ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
            ("5 < 4 != 3 > 4", "((5 < 4) != (3 > 4))"),
            ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
            ("true", "true"),
            ("3 > 5 == false", "((3 > 5) == false)"),
            ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
            ("(5 + 5) * 2", "((5 + 5) * 2)"),
            ("2 / (5 + 5)", "(2 / (5 + 5))"),
            ("-(5 + 5)", "(-(5 + 5))"),
            ("!(true == true)", "(!(true == true))"),
            ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
            ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
             "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
            ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
        ]
        for source, expected in tests:
            with self.subTest(source=source):
                self.assertEqual(str(self._parse_clean(source)), expected)

    def test_if_expression(self):
        """Test an if without else."""
        expr = self._single_expression("if (x < y) { x }")

        self.assertIsInstance(expr, IfExpression)
        self.assertInfix(expr.condition, "x", "<", "y")
        self.assertEqual(len(expr.consequence.statements), 1)
        self.assertLiteral(expr.consequence.statements[0].expression, "x")
        self.assertIsNone(expr.alternative)

    def test_if_else_expression(self):
        """Test an if with an else block."""
        expr = self._single_expression("if (x < y) { x } else { y }")

        self.assertIsInstance(expr, IfExpression)
        self.assertLiteral(expr.alternative.statements[0].expression, "y")
        self.assertEqual(str(expr), "if(x < y) xelse y")

    def test_block_with_statements(self):
        """Test nested let and return inside a block."""
        expr = self._single_expression("if (ok) { let y = 1; return y; }")

        statements = expr.consequence.statements
        self.assertEqual(len(statements), 2)
        self.assertIsInstance(statements[0], LetStatement)
        self.assertIsInstance(statements[1], ReturnStatement)

    def test_function_literal(self):
        """Test parameters and body of a function literal."""
        expr = self._single_expression("fn(x, y) { x + y; }")

        self.assertIsInstance(expr, FunctionLiteral)
        self.assertEqual([p.value for p in expr.parameters], ["x", "y"])
        self.assertEqual(len(expr.body.statements), 1)
        self.assertInfix(expr.body.statements[0].expression, "x", "+", "y")

    def test_function_parameters(self):
        """Test empty, single and multiple parameter lists."""
        tests = [
            ("fn() {};", []),
            ("fn(x) {};", ["x"]),
            ("fn(x, y, z) {};", ["x", "y", "z"]),
        ]
        for source, expected in tests:
            with self.subTest(source=source):
                expr = self._single_expression(source)
                self.assertEqual([p.value for p in expr.parameters], expected)

    def test_bad_function_parameter(self):
        """Test that a non-identifier parameter is reported."""
        _, parser = self._parse("fn(1) {};")
        self.assertEqual(parser.errors[0], "expected next token to be 'IDENT', got 'INT' instead")

    def test_call_expression(self):
        """Test call arguments are full expressions."""
        expr = self._single_expression("add(1, 2 * 3, 4 + 5);")

        self.assertIsInstance(expr, CallExpression)
        self.assertLiteral(expr.function, "add")
        self.assertEqual(len(expr.arguments), 3)
        self.assertLiteral(expr.arguments[0], 1)
        self.assertInfix(expr.arguments[1], 2, "*", 3)
        self.assertInfix(expr.arguments[2], 4, "+", 5)

    def test_call_on_function_literal(self):
        """Test immediately invoking a function literal."""
        expr = self._single_expression("fn(x) { x; }(5)")

        self.assertIsInstance(expr, CallExpression)
        self.assertIsInstance(expr.function, FunctionLiteral)
        self.assertLiteral(expr.arguments[0], 5)

    def test_literal_round_trip(self):
        """Test that literal nodes keep their source text exactly."""
        for text in ("x", "foo_bar", "a1", "0", "42", "1234567890"):
            with self.subTest(text=text):
                expr = self._single_expression(text)
                self.assertEqual(expr.token_literal(), text)


class TestLookahead(ParserTestCase):
    """Test cases for the two-token window."""

    def _tokens(self, *lexemes):
        location = SourceLocation("<test>", 1, 1, 0)
        return [Token(TokenType.IDENT, lexeme, None, location) for lexeme in lexemes]

    def test_priming(self):
        """Test that construction draws exactly two tokens."""
        tokens = self._tokens("a", "b", "c")
        stream = TokenStream(tokens)
        parser = Parser(stream)

        self.assertIs(parser.cur_token, tokens[0])
        self.assertIs(parser.peek_token, tokens[1])
        self.assertEqual(stream.pos, 2)

    def test_advance_walks_the_stream(self):
        """Test that after N advances the current token is token N+1."""
        tokens = self._tokens("a", "b", "c", "d", "e")
        parser = Parser(TokenStream(tokens))

        for n, token in enumerate(tokens):
            with self.subTest(n=n):
                self.assertIs(parser.cur_token, token)
                self.assertTrue(parser.cur_token_is(TokenType.IDENT))
            parser.next_token()

        for _ in range(3):
            self.assertTrue(parser.cur_token_is(TokenType.EOF))
            self.assertTrue(parser.peek_token_is(TokenType.EOF))
            parser.next_token()

    def test_expect_peek(self):
        """Test expect_peek consumes on match and reports otherwise."""
        parser = Parser(Lexer("let x"))

        self.assertFalse(parser.expect_peek(TokenType.INT))
        self.assertTrue(parser.cur_token_is(TokenType.LET))
        self.assertEqual(parser.errors, ["expected next token to be 'INT', got 'IDENT' instead"])

        self.assertTrue(parser.expect_peek(TokenType.IDENT))
        self.assertTrue(parser.cur_token_is(TokenType.IDENT))
        self.assertEqual(len(parser.errors), 1)


if __name__ == '__main__':
    unittest.main()
