"""
Monkey Pratt Parser Implementation

Statements are parsed by recursive descent; expressions by top-down
operator precedence (Pratt) parsing driven by two registries keyed on
token type: prefix parse functions for tokens that can start an expression
and infix parse functions for tokens that can continue one.

The parser pulls tokens lazily from its source and reasons about a
two-token window (``cur_token`` and ``peek_token``). Malformed input never
raises: problems are recorded as diagnostics, the offending statement is
dropped, and parsing resumes with the next token.
"""

import logging
from typing import Callable, Dict, List, Optional, Protocol, Tuple
from enum import IntEnum

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType
from .ast_nodes import (
    Program, Statement, Expression, SourceSpan,
    LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, Boolean, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression,
)
from .config import ParserConfig
from .errors import (
    ParseDiagnostic, ParseError, create_unexpected_token_error,
    create_no_prefix_parse_error, create_invalid_integer_error,
    create_nesting_too_deep_error,
)
from .tracing import install_tracing

logger = logging.getLogger(__name__)

# Parse methods that log BEGIN/END records when tracing is enabled
TRACED_METHODS = (
    "parse_statement", "parse_let_statement", "parse_return_statement",
    "parse_expression_statement", "parse_block_statement", "parse_expression",
    "parse_prefix_expression", "parse_grouped_expression", "parse_if_expression",
    "parse_function_literal", "parse_infix_expression", "parse_call_expression",
)


class Precedence(IntEnum):
    """Operator precedence levels for Pratt parsing, lowest binding first."""
    LOWEST = 1
    EQUALS = 2          # ==, !=
    LESSGREATER = 3     # <, >
    SUM = 4             # +, -
    PRODUCT = 5         # *, /
    PREFIX = 6          # -x, !x
    CALL = 7            # f(x)


PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


class TokenSource(Protocol):
    """Anything that hands out tokens one at a time and repeats EOF at the end."""

    def next_token(self) -> Token:
        ...


class Parser:
    """
    Monkey Pratt parser.

    A parser is bound to one token source and is single-use: construct it,
    call ``parse_program()`` once, then read ``errors``.
    """

    def __init__(self, source: TokenSource, config: Optional[ParserConfig] = None):
        """
        Initialize parser over a token source.

        Args:
            source: Object with a ``next_token()`` method, e.g. a Lexer
            config: Parser options; defaults to ``ParserConfig()``
        """
        self.source = source
        self.config = config if config is not None else ParserConfig()
        self.diagnostics: List[ParseDiagnostic] = []

        self.prefix_parse_fns: Dict[TokenType, PrefixParseFn] = {}
        self.infix_parse_fns: Dict[TokenType, InfixParseFn] = {}
        self.precedences: Dict[TokenType, Precedence] = {}

        self._started = False
        self._trace_depth = 0

        if self.config.trace:
            install_tracing(self, TRACED_METHODS)
        self._init_parsing_tables()

        # Read two tokens so cur_token and peek_token are both set
        self.cur_token: Optional[Token] = None
        self.peek_token: Optional[Token] = None
        self.next_token()
        self.next_token()

    def _init_parsing_tables(self):
        """Register the built-in prefix and infix parse functions."""

        # Literals and identifiers
        self.register_prefix(TokenType.IDENT, self.parse_identifier)
        self.register_prefix(TokenType.INT, self.parse_integer_literal)
        self.register_prefix(TokenType.TRUE, self.parse_boolean)
        self.register_prefix(TokenType.FALSE, self.parse_boolean)

        # Unary operators
        self.register_prefix(TokenType.BANG, self.parse_prefix_expression)
        self.register_prefix(TokenType.MINUS, self.parse_prefix_expression)

        # Grouping and compound expressions
        self.register_prefix(TokenType.LPAREN, self.parse_grouped_expression)
        self.register_prefix(TokenType.IF, self.parse_if_expression)
        self.register_prefix(TokenType.FUNCTION, self.parse_function_literal)

        # Binary operators
        for token_type, precedence in (
            (TokenType.EQ, Precedence.EQUALS),
            (TokenType.NOT_EQ, Precedence.EQUALS),
            (TokenType.LT, Precedence.LESSGREATER),
            (TokenType.GT, Precedence.LESSGREATER),
            (TokenType.PLUS, Precedence.SUM),
            (TokenType.MINUS, Precedence.SUM),
            (TokenType.ASTERISK, Precedence.PRODUCT),
            (TokenType.SLASH, Precedence.PRODUCT),
        ):
            self.register_infix(token_type, self.parse_infix_expression, precedence)

        # Function call
        self.register_infix(TokenType.LPAREN, self.parse_call_expression, Precedence.CALL)

    # Registry

    def register_prefix(self, token_type: TokenType, fn: PrefixParseFn, replace: bool = False):
        """
        Register the function that parses expressions starting with ``token_type``.

        Raises:
            RuntimeError: If parsing has already started
            ValueError: If a function is already registered and ``replace`` is false
        """
        self._check_registration(self.prefix_parse_fns, token_type, "prefix", replace)
        self.prefix_parse_fns[token_type] = fn

    def register_infix(self, token_type: TokenType, fn: InfixParseFn,
                       precedence: Optional[Precedence] = None, replace: bool = False):
        """
        Register the function that continues an expression at ``token_type``.

        ``precedence`` sets the token's binding power; a token without one binds
        at LOWEST and is therefore never picked up by the climbing loop.
        """
        self._check_registration(self.infix_parse_fns, token_type, "infix", replace)
        self.infix_parse_fns[token_type] = fn
        if precedence is not None:
            self.precedences[token_type] = precedence

    def _check_registration(self, table: Dict, token_type: TokenType, kind: str, replace: bool):
        if self._started:
            raise RuntimeError(f"cannot register {kind} parse function after parsing has started")
        if token_type in table and not replace:
            raise ValueError(f"{kind} parse function for '{token_type.value}' already registered")

    # Token window

    def next_token(self):
        """Shift the peek token into the current slot and pull a new peek token."""
        self.cur_token = self.peek_token
        self.peek_token = self.source.next_token()

    def cur_token_is(self, token_type: TokenType) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: TokenType) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: TokenType) -> bool:
        """Advance if the peek token has the given type, otherwise record an error."""
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self._peek_error(token_type)
        return False

    def peek_precedence(self) -> Precedence:
        return self.precedences.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return self.precedences.get(self.cur_token.type, Precedence.LOWEST)

    # Diagnostics

    @property
    def errors(self) -> List[str]:
        """All diagnostic messages collected so far, in source order."""
        return [str(d) for d in self.diagnostics]

    def _record(self, diagnostic: ParseDiagnostic):
        logger.debug("%s: %s", diagnostic.location, diagnostic.message)
        self.diagnostics.append(diagnostic)

    def _peek_error(self, token_type: TokenType):
        self._record(create_unexpected_token_error(token_type, self.peek_token))

    def _no_prefix_parse_fn_error(self, token: Token):
        if self.config.report_missing_prefix:
            self._record(create_no_prefix_parse_error(token))

    # Statements

    def parse_program(self) -> Program:
        """
        Parse the whole token stream into a Program.

        Statements that fail to parse are dropped; the loop always advances
        one token after each attempt, so it terminates at EOF.
        Input nested deeper than the interpreter stack allows is recorded as
        a diagnostic and ends the parse.

        Raises:
            RuntimeError: If this parser has already been used
        """
        if self._started:
            raise RuntimeError("Parser is single-use; create a new Parser for each token source")
        self._started = True

        program = Program()
        try:
            while not self.cur_token_is(TokenType.EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    program.append(stmt)
                self.next_token()
        except RecursionError:
            self._record(create_nesting_too_deep_error(self.cur_token))
            while not self.cur_token_is(TokenType.EOF):
                self.next_token()

        logger.debug("parsed %d statements, %d errors", len(program), len(self.diagnostics))
        return program.freeze()

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_token_is(TokenType.LET):
            return self.parse_let_statement()
        elif self.cur_token_is(TokenType.RETURN):
            return self.parse_return_statement()
        else:
            return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        """Parse ``let <identifier> = <expression>;``."""
        start_token = self.cur_token

        if not self.expect_peek(TokenType.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.lexeme)

        if not self.expect_peek(TokenType.ASSIGN):
            return None

        value = None
        if not self._peek_is_terminator():
            self.next_token()
            value = self.parse_expression(Precedence.LOWEST)

        self._skip_to_terminator()

        return LetStatement(start_token, name, value, self._span_from(start_token))

    def parse_return_statement(self) -> ReturnStatement:
        """Parse ``return <expression>;``; the value is optional."""
        start_token = self.cur_token

        return_value = None
        if not self._peek_is_terminator():
            self.next_token()
            return_value = self.parse_expression(Precedence.LOWEST)

        self._skip_to_terminator()

        return ReturnStatement(start_token, return_value, self._span_from(start_token))

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        start_token = self.cur_token

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return ExpressionStatement(start_token, expression, self._span_from(start_token))

    def parse_block_statement(self) -> BlockStatement:
        """Parse statements up to the closing brace; ``cur_token`` is the opening one."""
        start_token = self.cur_token
        statements = []

        self.next_token()
        while not self.cur_token_is(TokenType.RBRACE) and not self.cur_token_is(TokenType.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()

        return BlockStatement(start_token, statements, self._span_from(start_token))

    # Expressions

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        """Parse an expression whose operators bind tighter than ``precedence``."""
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self._no_prefix_parse_fn_error(self.cur_token)
            return None
        left = prefix()

        while (left is not None
               and not self.peek_token_is(TokenType.SEMICOLON)
               and precedence < self.peek_precedence()):
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)

        return left

    # Prefix parsers (tokens that can start expressions)

    def parse_identifier(self) -> Identifier:
        return Identifier(self.cur_token, self.cur_token.lexeme)

    def parse_integer_literal(self) -> Optional[IntegerLiteral]:
        token = self.cur_token
        if isinstance(token.value, int):
            return IntegerLiteral(token, token.value)
        try:
            value = int(token.lexeme, 10)
        except ValueError:
            self._record(create_invalid_integer_error(token))
            return None
        return IntegerLiteral(token, value)

    def parse_boolean(self) -> Boolean:
        return Boolean(self.cur_token, self.cur_token_is(TokenType.TRUE))

    def parse_prefix_expression(self) -> Optional[PrefixExpression]:
        operator_token = self.cur_token

        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None

        span = SourceSpan(operator_token.location, right.span.end)
        return PrefixExpression(operator_token, operator_token.lexeme, right, span)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()  # Consume (

        expr = self.parse_expression(Precedence.LOWEST)

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return expr

    def parse_if_expression(self) -> Optional[IfExpression]:
        """Parse ``if (<condition>) { ... } else { ... }``."""
        start_token = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenType.RPAREN):
            return None
        if not self.expect_peek(TokenType.LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if not self.expect_peek(TokenType.LBRACE):
                return None
            alternative = self.parse_block_statement()

        return IfExpression(start_token, condition, consequence, alternative,
                            self._span_from(start_token))

    def parse_function_literal(self) -> Optional[FunctionLiteral]:
        """Parse ``fn(<parameters>) { <body> }``."""
        start_token = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None
        parameters = self._parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None
        body = self.parse_block_statement()

        return FunctionLiteral(start_token, parameters, body, self._span_from(start_token))

    def _parse_function_parameters(self) -> Optional[List[Identifier]]:
        params: List[Identifier] = []

        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return params

        if not self.expect_peek(TokenType.IDENT):
            return None
        params.append(Identifier(self.cur_token, self.cur_token.lexeme))

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENT):
                return None
            params.append(Identifier(self.cur_token, self.cur_token.lexeme))

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return params

    # Infix parsers (binary operators and calls)

    def parse_infix_expression(self, left: Expression) -> Optional[InfixExpression]:
        """Parse a left-associative binary operation."""
        operator_token = self.cur_token
        precedence = self.cur_precedence()

        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None

        span = SourceSpan(left.span.start, right.span.end)
        return InfixExpression(operator_token, left, operator_token.lexeme, right, span)

    def parse_call_expression(self, function: Expression) -> Optional[CallExpression]:
        call_token = self.cur_token

        arguments = self._parse_call_arguments()
        if arguments is None:
            return None

        span = SourceSpan(function.span.start, self.cur_token.location)
        return CallExpression(call_token, function, arguments, span)

    def _parse_call_arguments(self) -> Optional[List[Expression]]:
        args: List[Expression] = []

        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return args

        self.next_token()
        arg = self.parse_expression(Precedence.LOWEST)
        if arg is None:
            return None
        args.append(arg)

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            arg = self.parse_expression(Precedence.LOWEST)
            if arg is None:
                return None
            args.append(arg)

        if not self.expect_peek(TokenType.RPAREN):
            return None
        return args

    # Utility methods

    def _skip_to_terminator(self):
        """Skip unclaimed tokens through the next `;`, stopping before `}` or EOF."""
        while not self._peek_is_terminator():
            self.next_token()
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

    def _peek_is_terminator(self) -> bool:
        return (self.peek_token_is(TokenType.SEMICOLON) or
                self.peek_token_is(TokenType.RBRACE) or
                self.peek_token_is(TokenType.EOF))

    def _span_from(self, start_token: Token) -> SourceSpan:
        return SourceSpan(start_token.location, self.cur_token.location)


def parse_string(source: str, filename: str = "<string>", strict: bool = False,
                 config: Optional[ParserConfig] = None) -> Tuple[Program, List[str]]:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        strict: Raise instead of returning a non-empty error list
        config: Parser options

    Returns:
        The Program and the list of diagnostic messages

    Raises:
        ParseError: If ``strict`` is set and any diagnostic was recorded
    """
    parser = Parser(Lexer(source, filename), config)
    program = parser.parse_program()

    if strict and parser.diagnostics:
        raise ParseError(parser.diagnostics)

    return program, parser.errors


def parse_file(filepath: str, strict: bool = False,
               config: Optional[ParserConfig] = None) -> Tuple[Program, List[str]]:
    """
    Convenience function to parse a source file.

    Raises:
        ParseError: If ``strict`` is set and any diagnostic was recorded
        OSError: If the file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return parse_string(source, filepath, strict=strict, config=config)
