"""
Call tracing for the parser's recursive descent.

When a parser runs with ``ParserConfig(trace=True)``, each traced parse
method is replaced on that instance by a wrapper that logs an indented
BEGIN record on entry and a matching END record on exit, naming the current
token. Untraced parsers call the plain methods, so tracing costs no stack
depth unless it is switched on.
"""

import functools
import logging
from typing import Any, Callable, Iterable

trace_logger = logging.getLogger("monkey.parser.trace")

INDENT = "  "


def traced(parser: Any, method: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a bound parse method so each call logs BEGIN/END records."""
    label = method.__name__.lstrip("_")

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        indent = INDENT * parser._trace_depth
        trace_logger.debug("%sBEGIN %s (%s)", indent, label, parser.cur_token)
        parser._trace_depth += 1
        try:
            return method(*args, **kwargs)
        finally:
            parser._trace_depth -= 1
            trace_logger.debug("%sEND %s", indent, label)

    return wrapper


def install_tracing(parser: Any, names: Iterable[str]):
    """Shadow the named methods on ``parser`` with traced wrappers."""
    for name in names:
        setattr(parser, name, traced(parser, getattr(parser, name)))
