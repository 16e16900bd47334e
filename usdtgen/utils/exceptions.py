"""
Custom exception definitions.

This module defines the exception hierarchy for usdtgen. Every stage of the
pipeline raises one of these typed failures instead of partially succeeding:
syntax errors from the parser, validation issues from the validator,
invocation errors from the call-site checker and generation/emission errors
from the code generators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from ..model import SourcePosition


class UsdtError(Exception):
    """
    Base exception for all usdtgen errors.

    This is the root exception class for all usdtgen-specific errors,
    providing a message plus optional structured details.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize usdtgen error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Parse errors
# =============================================================================

class ProbeSyntaxError(UsdtError):
    """
    Raised when provider source text cannot be parsed.

    Carries the position of the offending input. Parsing stops at the first
    syntax error, so at most one of these is produced per source.
    """

    def __init__(self, message: str, position: "SourcePosition", details: Optional[dict] = None):
        super().__init__(message, details)
        self.position = position

    def __str__(self) -> str:
        return f"{self.position}: {super().__str__()}"


class UnexpectedToken(ProbeSyntaxError):
    """Raised when the parser finds a token that does not fit the grammar."""

    def __init__(self, found: str, position: "SourcePosition", expected: str = ""):
        message = f"unexpected {found}"
        if expected:
            message += f", expected {expected}"
        super().__init__(message, position)
        self.found = found
        self.expected = expected


class UnterminatedBlock(ProbeSyntaxError):
    """Raised when a provider block or comment is still open at end of input."""

    def __init__(self, what: str, position: "SourcePosition"):
        super().__init__(f"unterminated {what}", position)
        self.what = what


class UnknownType(ProbeSyntaxError):
    """Raised when an argument type is not part of the closed type table."""

    def __init__(self, name: str, position: "SourcePosition"):
        super().__init__(f"unknown type '{name}'", position, {"type": name})
        self.name = name


# =============================================================================
# Validation errors
# =============================================================================

class ValidationIssue(UsdtError):
    """Base class for a single semantic violation found by the validator."""


class DuplicateName(ValidationIssue):
    """Raised when a provider, probe or generated symbol name is declared twice."""

    def __init__(self, kind: str, name: str, position: Optional["SourcePosition"] = None):
        super().__init__(f"duplicate {kind} name '{name}'", {"kind": kind, "name": name})
        self.kind = kind
        self.name = name
        self.position = position


class InvalidIdentifier(ValidationIssue):
    """Raised when a name cannot be used as a fragment of a generated symbol."""

    def __init__(self, name: str, reason: str = "", position: Optional["SourcePosition"] = None):
        message = f"invalid identifier '{name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"name": name})
        self.name = name
        self.reason = reason
        self.position = position


class ArityTooLarge(ValidationIssue):
    """Raised when a probe declares more arguments than trampolines support."""

    def __init__(self, probe: str, count: int, limit: int, position: Optional["SourcePosition"] = None):
        super().__init__(
            f"probe '{probe}' declares {count} arguments, at most {limit} are supported",
            {"probe": probe, "count": count},
        )
        self.probe = probe
        self.count = count
        self.limit = limit
        self.position = position


class ValidationError(UsdtError):
    """
    Raised when validation finds one or more violations.

    Validation is exhaustive, so this aggregates every issue found rather
    than only the first.
    """

    def __init__(self, errors: Sequence[UsdtError]):
        self.errors: List[UsdtError] = list(errors)
        count = len(self.errors)
        summary = "; ".join(str(error) for error in self.errors)
        super().__init__(f"{count} validation error{'s' if count != 1 else ''}: {summary}")


# =============================================================================
# Invocation errors
# =============================================================================

class InvocationError(UsdtError):
    """
    Base class for fire call sites that do not match a probe signature.

    Errors are attributed to the call site, not to the probe declaration.
    """

    def __init__(self, message: str, probe: str, call_site: Optional["SourcePosition"] = None,
                 filename: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details)
        self.probe = probe
        self.call_site = call_site
        self.filename = filename

    def __str__(self) -> str:
        text = super().__str__()
        if self.call_site is None:
            return text
        location = f"{self.filename}:{self.call_site}" if self.filename else str(self.call_site)
        return f"{location}: {text}"


class ArityMismatch(InvocationError):
    """Raised when a thunk produces a different number of values than declared."""

    def __init__(self, probe: str, expected: int, actual: int,
                 call_site: Optional["SourcePosition"] = None, filename: Optional[str] = None):
        super().__init__(
            f"probe '{probe}' expects {expected} argument{'s' if expected != 1 else ''}, "
            f"thunk supplies {actual}",
            probe, call_site, filename,
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class TypeMismatch(InvocationError):
    """Raised when a supplied value cannot be assigned to the declared type."""

    def __init__(self, probe: str, position: int, expected: str, actual: str,
                 call_site: Optional["SourcePosition"] = None, filename: Optional[str] = None):
        super().__init__(
            f"probe '{probe}' argument {position} expects {expected}, got {actual}",
            probe, call_site, filename,
            {"position": position},
        )
        self.position = position
        self.expected = expected
        self.actual = actual


# =============================================================================
# Generation and environment errors
# =============================================================================

class GenerationError(UsdtError):
    """Raised when an artifact cannot be rendered."""

    def __init__(self, message: str, artifact: str = ""):
        details = {"artifact": artifact} if artifact else None
        super().__init__(message, details)
        self.artifact = artifact


class ArtifactWriteError(UsdtError):
    """Raised when generated artifacts cannot be written to disk."""

    def __init__(self, message: str, path: str = ""):
        details = {"path": path} if path else None
        super().__init__(message, details)
        self.path = path


class ConfigError(UsdtError):
    """Raised when a configuration file cannot be parsed."""


class ProbeLibraryError(UsdtError):
    """Raised when a loaded probe library does not export an expected symbol."""

    def __init__(self, message: str, library: str = "", symbol: str = ""):
        details = {}
        if library:
            details["library"] = library
        if symbol:
            details["symbol"] = symbol
        super().__init__(message, details)
        self.library = library
        self.symbol = symbol
