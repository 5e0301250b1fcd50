"""Error taxonomy for DistrictRAG.

Every error carries a human-readable message plus an optional ``details``
dict that the request dispatcher attaches to server-error responses.
"""

from typing import Any, Optional


class DistrictRAGError(Exception):
    """Base class for all DistrictRAG errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(DistrictRAGError):
    """Missing or malformed client input. Never retried."""


class EmbeddingUnavailable(DistrictRAGError):
    """The embedding model failed to load or to infer."""


class CompletionRequestFailed(DistrictRAGError):
    """The completion call failed on every allowed attempt."""

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.attempts = attempts


class StoreUnavailable(DistrictRAGError):
    """The corpus store could not be read or written."""


class DimensionMismatch(DistrictRAGError, ValueError):
    """Two vectors that must share a length do not."""

    def __init__(self, expected: int, actual: int, index: Optional[int] = None):
        where = f" at corpus index {index}" if index is not None else ""
        super().__init__(
            f"Vector dimension mismatch{where}: expected {expected}, got {actual}",
            {"expected": expected, "actual": actual, "index": index},
        )
        self.expected = expected
        self.actual = actual
        self.index = index
