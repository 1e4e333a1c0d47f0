"""Error taxonomy for tool filtering.

Every error surfaces to the caller of the operation that raised it. Errors
raised by an embedding provider are never wrapped by the core.
"""

from __future__ import annotations


class ToolFilterError(Exception):
    """Base class for all tool filter errors."""


class UninitializedError(ToolFilterError):
    """Filter invoked before the tool registry was built."""

    def __init__(self, message: str = "ToolFilter not initialized. Call initialize() first.") -> None:
        super().__init__(message)


class DimensionMismatchError(ToolFilterError, ValueError):
    """Two vectors compared in one scoring pass have different lengths."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vectors must have the same length (expected {expected}, got {actual})"
        )


class InvalidInputError(ToolFilterError, ValueError):
    """Structurally malformed catalog or configuration input."""


class EmbeddingProviderError(ToolFilterError):
    """Raised by the bundled embedding providers for HTTP, transport or payload errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
