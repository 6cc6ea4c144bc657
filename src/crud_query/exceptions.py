"""Exceptions raised by the query pipeline.

All exceptions inherit from ``QueryError`` and provide ``to_dict()`` for
API-friendly error responses.
"""

from __future__ import annotations

from typing import Any


class QueryError(Exception):
    """Root exception for the query toolkit."""

    status_code: int = 500

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ValidationError(QueryError):
    """Raised when a query intent violates its endpoint's field policy.

    Carries every violation found in one pass, so a client can fix the whole
    request in a single round-trip.
    """

    status_code = 400

    def __init__(self, errors: list[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("Failed to validate request: " + "; ".join(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "statusCode": self.status_code,
            "message": str(self),
            "errors": list(self.errors),
        }


class ConstraintError(QueryError):
    """Raised when a mandatory server-side constraint cannot be built."""

    status_code = 403
