"""Error envelope for the form inspection and submission API."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException


class ApiErrorCode(StrEnum):
    """Stable codes returned in the ``error_code`` field."""

    # Client input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_TARGET_URL = "MISSING_TARGET_URL"
    INVALID_TARGET_URL = "INVALID_TARGET_URL"
    MISSING_ACTION_OR_ANSWERS = "MISSING_ACTION_OR_ANSWERS"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    # Form host
    UPSTREAM_FETCH_FAILED = "UPSTREAM_FETCH_FAILED"
    UPSTREAM_SUBMIT_FAILED = "UPSTREAM_SUBMIT_FAILED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


UPSTREAM_STATUS_CODE = 502


class ApiError(HTTPException):
    """HTTPException whose detail is the ``{error_code, message}`` envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )
        self.error_code = error_code

    @classmethod
    def bad_request(cls, error_code: ApiErrorCode, message: str) -> "ApiError":
        return cls(status_code=400, error_code=error_code, message=message)

    @classmethod
    def upstream(cls, error_code: ApiErrorCode, exc: BaseException) -> "ApiError":
        """The form host could not be reached or refused the fetch."""
        return cls(
            status_code=UPSTREAM_STATUS_CODE,
            error_code=error_code,
            message=str(exc) or type(exc).__name__,
        )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Flatten any HTTPException detail into ``{error_code, message}``.

    Details raised by FastAPI itself are plain strings, so they get an
    ``HTTP_<status>`` code.
    """
    if isinstance(detail, dict):
        return {
            "error_code": str(detail.get("error_code") or f"HTTP_{status_code}"),
            "message": str(detail.get("message") or detail.get("detail") or "HTTP error"),
        }
    return {"error_code": f"HTTP_{status_code}", "message": str(detail or "HTTP error")}
