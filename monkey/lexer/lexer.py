"""
Monkey Lexer - turns source text into tokens on demand

The parser pulls one token at a time through ``next_token()``; nothing is
buffered ahead. Once the input is exhausted every further call returns
another EOF token at the end position.
"""

import re
from typing import Iterable, Iterator, List

from .tokens import (
    Token, TokenType, SourceLocation, OPERATORS, lookup_identifier
)
from .errors import LexerWarning, create_invalid_character_warning


class Lexer:
    """
    Monkey lexical analyzer.

    Converts source code text into a stream of tokens. Unrecognized
    characters become ILLEGAL tokens and are recorded as warnings.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.warnings: List[LexerWarning] = []

        self._compile_patterns()

    def _compile_patterns(self):
        """Compile regex patterns used by the lexer."""
        self.integer_pattern = re.compile(r'[0-9]+')
        self.identifier_pattern = re.compile(r'[a-zA-Z_][a-zA-Z0-9_]*')
        self.whitespace_pattern = re.compile(r'\s+')

    def next_token(self) -> Token:
        """Scan and return the next token from the source."""
        self._skip_whitespace()

        start = self._location()
        if self.pos >= len(self.source):
            return Token(TokenType.EOF, "", None, start)

        current_char = self.source[self.pos]

        # Integers
        match = self.integer_pattern.match(self.source, self.pos)
        if match:
            lexeme = match.group()
            self._advance_by(len(lexeme))
            return Token(TokenType.INT, lexeme, int(lexeme), start)

        # Identifiers and keywords
        match = self.identifier_pattern.match(self.source, self.pos)
        if match:
            lexeme = match.group()
            self._advance_by(len(lexeme))
            return Token(lookup_identifier(lexeme), lexeme, None, start)

        # Operators and delimiters (two-character first)
        for op_len in (2, 1):
            potential_op = self.source[self.pos:self.pos + op_len]
            if len(potential_op) == op_len and potential_op in OPERATORS:
                self._advance_by(op_len)
                return Token(OPERATORS[potential_op], potential_op, None, start)

        self.warnings.append(create_invalid_character_warning(current_char, start))
        self._advance()
        return Token(TokenType.ILLEGAL, current_char, None, start)

    def tokenize(self) -> List[Token]:
        """
        Tokenize the remaining source.

        Returns:
            List of tokens ending with a single EOF token
        """
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def _skip_whitespace(self):
        match = self.whitespace_pattern.match(self.source, self.pos)
        if match:
            self._advance_by(len(match.group()))

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance(self):
        """Advance position by one character, updating line/column."""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_by(self, count: int):
        for _ in range(count):
            self._advance()

    def has_warnings(self) -> bool:
        """Check if lexer encountered any unrecognized characters."""
        return len(self.warnings) > 0


class TokenStream:
    """
    Token source over an already materialized sequence of tokens.

    Behaves like ``Lexer.next_token()``: after the last token it keeps
    returning an EOF token, so the sequence need not end with one.
    """

    def __init__(self, tokens: Iterable[Token], filename: str = "<tokens>"):
        self.tokens = list(tokens)
        self.filename = filename
        self.pos = 0

    def next_token(self) -> Token:
        if self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            return token
        return self._eof()

    def _eof(self) -> Token:
        if self.tokens and self.tokens[-1].type == TokenType.EOF:
            return self.tokens[-1]
        if self.tokens:
            location = self.tokens[-1].location
        else:
            location = SourceLocation(self.filename, 1, 1, 0)
        return Token(TokenType.EOF, "", None, location)


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens including the EOF token
    """
    return Lexer(source, filename).tokenize()
