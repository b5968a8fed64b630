"""
Token definitions for the Monkey lexer.

This module defines the fixed catalog of token kinds the parser understands:
- Keywords (fn, let, true, false, if, else, return)
- Identifiers and integer literals
- Operators and delimiters
- End-of-input and illegal characters

Each TokenType value is the display name used in diagnostics, so
``TokenType.IDENT`` prints as ``IDENT`` and ``TokenType.ASSIGN`` as ``=``.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict


class TokenType(Enum):
    """
    Enumeration of all token types in Monkey.

    Organized by category for clarity.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    ILLEGAL = "ILLEGAL"             # Unrecognized character
    EOF = "EOF"                     # End of input

    # ========================================================================
    # Identifiers and Literals
    # ========================================================================
    IDENT = "IDENT"                 # add, foobar, x, y
    INT = "INT"                     # 1343456

    # ========================================================================
    # Operators
    # ========================================================================
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"

    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # ========================================================================
    # Delimiters
    # ========================================================================
    COMMA = ","
    SEMICOLON = ";"

    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"

    # ========================================================================
    # Keywords
    # ========================================================================
    FUNCTION = "FUNCTION"
    LET = "LET"
    TRUE = "TRUE"
    FALSE = "FALSE"
    IF = "IF"
    ELSE = "ELSE"
    RETURN = "RETURN"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and debugging information.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Monkey language.

    Contains the token type, lexeme (raw text), semantic value
    and source location.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # Parsed/semantic value (int for INT)
    location: SourceLocation        # Source location

    def __str__(self) -> str:
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORDS.values()

    @property
    def is_identifier(self) -> bool:
        """Check if this token is an identifier."""
        return self.type == TokenType.IDENT


# Reserved words, looked up after an identifier has been scanned
KEYWORDS: Dict[str, TokenType] = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
}

# Operators and delimiters; two-character entries are matched first
OPERATORS: Dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NOT_EQ,
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "!": TokenType.BANG,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}


def lookup_identifier(word: str) -> TokenType:
    """Return the keyword type for ``word``, or IDENT."""
    return KEYWORDS.get(word, TokenType.IDENT)
