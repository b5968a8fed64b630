"""
Parser configuration.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class ParserConfig:
    """
    Options for a single parse.

    Attributes:
        trace: Log BEGIN/END records for every parse function on the
            ``monkey.parser.trace`` logger at DEBUG level.
        report_missing_prefix: Record a diagnostic when a token cannot start
            an expression. When off, such statements are dropped silently and
            only unexpected-token diagnostics are produced.
    """
    trace: bool = False
    report_missing_prefix: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ParserConfig':
        """Build a config from MONKEY_PARSER_TRACE and MONKEY_PARSER_STRICT_PREFIX."""
        if environ is None:
            environ = os.environ
        return cls(
            trace=_env_flag(environ, "MONKEY_PARSER_TRACE"),
            report_missing_prefix=_env_flag(environ, "MONKEY_PARSER_STRICT_PREFIX"),
        )
