"""
Monkey Parser Package

Implements a Pratt-based recursive descent parser for the Monkey language.
Produces an Abstract Syntax Tree plus a list of diagnostics; malformed
statements are reported and skipped rather than aborting the parse.

Key Features:
- Top-down operator precedence (Pratt parsing) with pluggable
  prefix/infix parse functions
- Lazy two-token lookahead over any token source
- Statement-local error recovery
- Optional parse tracing through ``logging``
"""

from .ast_nodes import *
from .parser import Parser, Precedence, TokenSource, parse_string, parse_file
from .config import ParserConfig
from .errors import ParseDiagnostic, ParseError

__all__ = [
    # Core parser
    "Parser", "Precedence", "TokenSource", "ParserConfig",
    "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "ASTNodeType", "SourceSpan", "walk",
    "Program", "Statement", "Expression",
    "LetStatement", "ReturnStatement", "ExpressionStatement", "BlockStatement",
    "Identifier", "IntegerLiteral", "Boolean",
    "PrefixExpression", "InfixExpression", "IfExpression",
    "FunctionLiteral", "CallExpression",

    # Error handling
    "ParseDiagnostic", "ParseError",
]
