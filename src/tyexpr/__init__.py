"""Parser and printer for type expressions."""

from __future__ import annotations

__version__ = "0.1.0"

from tyexpr.errors import CompileError, ParseError  # noqa: E402
from tyexpr.parser import parse_str, parse_type, parse_type_without_plus  # noqa: E402
from tyexpr.printer import render, to_source, to_tokens  # noqa: E402

__all__ = [
    "CompileError",
    "ParseError",
    "__version__",
    "parse_str",
    "parse_type",
    "parse_type_without_plus",
    "render",
    "to_source",
    "to_tokens",
]
