"""
Error handling for the Monkey parser.

The parser never raises for malformed input. Every problem is recorded as a
``ParseDiagnostic`` and parsing continues; ``ParseError`` only exists for
callers that want to turn a non-empty diagnostic list into an exception.
"""

from typing import Optional, List, Sequence

from ..lexer.tokens import Token, TokenType
from ..lexer.errors import Diagnostic


class ParseDiagnostic(Diagnostic):
    """
    A recorded, non-fatal syntax problem.

    ``str()`` yields the bare message, which is the form callers compare
    against; ``format()`` adds location and help text.
    """

    def __init__(
        self,
        message: str,
        token: Token,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        if code is not None and code not in PARSER_ERROR_CODES:
            raise ValueError(f"Unknown parser error code: {code}")
        super().__init__(
            message=message,
            location=token.location,
            severity="error",
            code=code,
            help_text=help_text
        )
        self.token = token

    @property
    def category(self) -> Optional[str]:
        """Short description of the error code, if any."""
        return PARSER_ERROR_CODES.get(self.code)


class ParseError(Exception):
    """
    Exception carrying every diagnostic of a failed parse.

    Raised by the strict convenience entry points, never by the parser
    engine itself.
    """

    def __init__(self, diagnostics: Sequence[ParseDiagnostic]):
        self.diagnostics: List[ParseDiagnostic] = list(diagnostics)
        count = len(self.diagnostics)
        summary = f"{count} syntax error{'s' if count != 1 else ''}"
        if self.diagnostics:
            summary += f": {self.diagnostics[0]}"
        super().__init__(summary)

    @property
    def messages(self) -> List[str]:
        return [str(d) for d in self.diagnostics]

    def format(self) -> str:
        return "".join(d.format() for d in self.diagnostics)


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "No prefix parse function",
    "P003": "Invalid integer literal",
    "P004": "Nesting too deep",
}


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: TokenType, found: Token) -> ParseDiagnostic:
    """Create an error for a peek token that does not match the expected kind."""
    return ParseDiagnostic(
        message=f"expected next token to be '{expected.value}', got '{found.type.value}' instead",
        token=found,
        code="P001",
        help_text=f"The parser expected to see {expected.value} at this position, "
                  f"but found {found.lexeme or found.type.value!r} instead."
    )


def create_no_prefix_parse_error(found: Token) -> ParseDiagnostic:
    """Create an error for a token that cannot start an expression."""
    return ParseDiagnostic(
        message=f"no prefix parse function for '{found.type.value}' found",
        token=found,
        code="P002",
        help_text="This token cannot start an expression."
    )


def create_invalid_integer_error(found: Token) -> ParseDiagnostic:
    """Create an error for an INT token whose text is not a decimal integer."""
    return ParseDiagnostic(
        message=f"could not parse {found.lexeme!r} as integer",
        token=found,
        code="P003",
        help_text="Integer literals must be written as decimal digits."
    )


def create_nesting_too_deep_error(found: Token) -> ParseDiagnostic:
    """Create an error for input nested beyond the interpreter's recursion limit."""
    return ParseDiagnostic(
        message="expression nested too deeply",
        token=found,
        code="P004",
        help_text="Reduce the nesting depth of parentheses, blocks or calls."
    )
