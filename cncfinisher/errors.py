"""Exception types for cncfinisher.

Configuration and no-motion errors abort a run.  Per-instruction problems
(malformed lines, geometry contract violations) are recovered inside the
pipeline and reported as advisories instead.
"""

from __future__ import annotations

from typing import Iterable


class FinisherError(Exception):
    """Base exception for all cncfinisher errors."""


# ============================================================================
# CONFIGURATION
# ============================================================================

class ConfigurationError(FinisherError):
    """The run cannot start with the supplied settings."""


class InvalidAllowanceError(ConfigurationError):
    """Allowance is negative or not a finite number."""

    def __init__(self, value) -> None:
        self.value = value
        super().__init__(f"allowance must be a non-negative number, got {value!r}")


class InvalidStrategyError(ConfigurationError):
    """Strategy name does not match any known variant."""

    def __init__(self, kind: str, value: str, valid: Iterable[str]) -> None:
        self.kind = kind
        self.value = value
        self.valid = tuple(valid)
        super().__init__(
            f"invalid {kind} strategy: {value!r} (valid: {', '.join(self.valid)})"
        )


# ============================================================================
# PROGRAM CONTENT
# ============================================================================

class NoMotionFoundError(FinisherError):
    """Threshold resolution found no G0/G1 moves."""

    def __init__(self, message: str = "no motion instructions found") -> None:
        super().__init__(message)


class GcodeError(FinisherError):
    """Base exception for G-code content errors."""


class MalformedInstructionError(GcodeError):
    """A line could not be parsed into an Instruction."""

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        line_content: str | None = None,
    ) -> None:
        self.line_number = line_number
        self.line_content = line_content
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class GcodeFileError(GcodeError):
    """Error reading or writing a G-code file."""


# ============================================================================
# GEOMETRY
# ============================================================================

class GeometryError(FinisherError):
    """An intersection could not be computed for a move."""


class NotCrossingError(GeometryError):
    """The move does not cross the threshold within its own segment."""
