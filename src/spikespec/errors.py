"""
Custom exception classes for spikespec.

This module provides:
1. Hierarchical exception classes for the different failure stages
2. Source locations attached to specification diagnostics

Exception Hierarchy:
====================
SpikespecError (base) - Base exception for all spikespec errors
├── SpecificationError - Malformed model specification text (parse time)
├── GenerationError - Unbound or misused identifier (generation time)
└── ConfigurationError - Invalid construction arguments or config values

Generated units never raise errors of their own; every failure surfaces
either while a specification is parsed/generated or while a runtime unit
is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceLocation:
    """Position of a token in specification text.

    Attributes:
        line: 1-based line number
        column: 0-based column within the line
        offset: 0-based character offset from the start of the text
    """

    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


# =============================================================================
# Exception Hierarchy
# =============================================================================


class SpikespecError(Exception):
    """Base exception for all spikespec errors."""


class SpecificationError(SpikespecError):
    """Malformed model specification.

    Raised by the lexer and parser. Carries the location of the offending
    token so editors and test output can point at it.
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        self.message = message
        self.location = location
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)


class GenerationError(SpikespecError):
    """Identifier used in a specification with no binding in its scope.

    Attributes:
        identifier: The offending name
        context: Human-readable description of where it was used
            (e.g. "time_step equation 2 `v @= ...`")
    """

    def __init__(
        self,
        identifier: str,
        context: str,
        location: Optional[SourceLocation] = None,
        reason: str = "is not bound by a parameter, initializer or reserved name",
    ):
        self.identifier = identifier
        self.context = context
        self.location = location
        message = f"`{identifier}` {reason} (in {context})"
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)


class ConfigurationError(SpikespecError):
    """Invalid configuration or construction arguments.

    Raised when configuration values are out of valid range or when a
    runtime unit is built from values that do not satisfy the quantity
    interface.
    """
