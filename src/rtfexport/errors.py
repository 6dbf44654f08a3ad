"""Exceptions raised by rtfexport.

The serializer recovers locally from malformed trees and unusable style
values, so the only failure a caller normally sees is
:class:`NestingTooDeepError`.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Stable error codes, also used in HTTP error bodies."""

    E_NESTING_TOO_DEEP = "E_NESTING_TOO_DEEP"
    E_INVALID_INPUT = "E_INVALID_INPUT"


ERROR_MESSAGES = {
    ErrorCode.E_NESTING_TOO_DEEP: "input too deeply nested",
    ErrorCode.E_INVALID_INPUT: "input could not be read",
}


class RtfExportError(Exception):
    """Base class for rtfexport errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "conversion failed")
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Response body for the HTTP service."""
        return {
            "error_code": self.code.value,
            "error_message": self.message,
        }


class NestingTooDeepError(RtfExportError):
    """The document tree is nested deeper than the configured limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            ErrorCode.E_NESTING_TOO_DEEP,
            detail=f"Nesting limit: {limit}",
        )


class InvalidInputError(RtfExportError):
    """The source text could not be decoded or parsed."""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(ErrorCode.E_INVALID_INPUT, detail=detail)
