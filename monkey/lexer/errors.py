"""
Diagnostic records shared by the Monkey lexer and parser.

The lexer never raises for bad input; unrecognized characters become
ILLEGAL tokens and are described by a warning diagnostic.
"""

from typing import Optional
from dataclasses import dataclass

from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """Base record for diagnostics (errors, warnings, info)."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "info"
    code: Optional[str] = None
    help_text: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def format(self) -> str:
        """Render the diagnostic with location and help text."""
        result = f"{self.severity.upper()}: {self.message}\n"
        if self.location is not None:
            result += f"  --> {self.location}\n"
        if self.help_text:
            result += f"  help: {self.help_text}\n"
        return result


class LexerWarning:
    """
    Represents a lexer warning that doesn't stop tokenization.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        if code is not None and code not in ERROR_CODES:
            raise ValueError(f"Unknown lexer error code: {code}")
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="warning",
            code=code,
            help_text=help_text
        )

    def __str__(self) -> str:
        return str(self.diagnostic)

    @property
    def category(self) -> Optional[str]:
        return ERROR_CODES.get(self.diagnostic.code)


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
}


def create_invalid_character_warning(char: str, location: SourceLocation) -> LexerWarning:
    """Create a warning for a character the lexer does not recognize."""
    if char.isprintable():
        help_text = f"The character '{char}' is not valid in Monkey source code."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    return LexerWarning(
        message=f"Invalid character: {char!r}",
        location=location,
        code="L001",
        help_text=help_text
    )
