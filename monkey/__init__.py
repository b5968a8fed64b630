"""
Monkey Language Front-end

Lexer and Pratt parser for the Monkey programming language.

Architecture:
    monkey/
    ├── lexer/           # Tokenization
    └── parser/          # Syntax analysis and AST generation
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .lexer import Lexer, TokenStream, Token, TokenType
from .parser import Parser, ParserConfig, ParseError, parse_string, parse_file

__all__ = [
    # Core classes
    "Lexer",
    "TokenStream",
    "Token",
    "TokenType",
    "Parser",
    "ParserConfig",
    "ParseError",
    "parse_string",
    "parse_file",

    # Version info
    "__version__",
    "__license__",
]
