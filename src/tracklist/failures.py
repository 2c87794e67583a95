"""Classified route failures returned (not raised) by services.

Services return ``Err(Failure(...))`` to signal an expected, classified
outcome. ``RouteCall.reject`` in the pipeline turns a failure into the
standard error envelope: {"error": "...", "message": "...", "code": "..."}.

``cause`` holds the collaborator's raw error. It is logged as metadata and
never serialized into a response body.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Machine-stable error codes. Each route uses a closed subset (see DESIGN.md)."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ID = "INVALID_ID"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    REGISTRATION_ERROR = "REGISTRATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    TRACK_ALREADY_IN_PLAYLIST = "TRACK_ALREADY_IN_PLAYLIST"
    ALREADY_PROCESSED = "ALREADY_PROCESSED"
    TRACK_CREATION_ERROR = "TRACK_CREATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FailureKind(StrEnum):
    INVALID = "invalid"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    BACKEND = "backend"


_DEFAULT_STATUS: dict[FailureKind, int] = {
    FailureKind.INVALID: 400,
    FailureKind.UNAUTHORIZED: 401,
    FailureKind.FORBIDDEN: 403,
    FailureKind.NOT_FOUND: 404,
    FailureKind.REJECTED: 400,
    FailureKind.BACKEND: 500,
}


@dataclass(frozen=True)
class Failure:
    """A classified failure with everything needed to build the error envelope."""

    kind: FailureKind
    code: ErrorCode
    summary: str
    detail: str | None = None
    status: int | None = None
    cause: Any = None

    @property
    def http_status(self) -> int:
        return self.status or _DEFAULT_STATUS[self.kind]

    @property
    def is_client_error(self) -> bool:
        """Client mistakes are logged at warning; everything else at error."""
        return self.kind in (
            FailureKind.INVALID,
            FailureKind.UNAUTHORIZED,
            FailureKind.FORBIDDEN,
            FailureKind.NOT_FOUND,
        )


def invalid_id(entity: str) -> Failure:
    return Failure(
        FailureKind.INVALID,
        ErrorCode.INVALID_ID,
        f"Invalid {entity} ID",
        f"{entity.capitalize()} ID must be a valid UUID",
    )


def not_found(entity: str) -> Failure:
    return Failure(
        FailureKind.NOT_FOUND,
        ErrorCode.NOT_FOUND,
        f"{entity.capitalize()} not found",
        f"The requested {entity} does not exist",
    )


def unauthorized(detail: str = "Authentication required") -> Failure:
    return Failure(FailureKind.UNAUTHORIZED, ErrorCode.UNAUTHORIZED, "Unauthorized", detail)


def forbidden(detail: str) -> Failure:
    return Failure(FailureKind.FORBIDDEN, ErrorCode.FORBIDDEN, "Forbidden", detail)


def database_error(summary: str, cause: Any = None) -> Failure:
    return Failure(
        FailureKind.BACKEND,
        ErrorCode.DATABASE_ERROR,
        summary,
        "Database query error",
        cause=cause,
    )
