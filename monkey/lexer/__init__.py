"""
Monkey Lexer Package

Pull-based lexical analyzer for the Monkey language. Supplies tokens one at
a time to the parser and keeps returning EOF once the input is exhausted.
"""

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, lookup_identifier
from .lexer import Lexer, TokenStream, tokenize_string
from .errors import Diagnostic, LexerWarning

__all__ = [
    "Lexer",
    "TokenStream",
    "Token",
    "TokenType",
    "SourceLocation",
    "KEYWORDS",
    "lookup_identifier",
    "tokenize_string",
    "Diagnostic",
    "LexerWarning",
]
