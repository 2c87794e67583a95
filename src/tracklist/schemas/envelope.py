"""Response envelopes.

Every JSON body returned by the API is exactly one of two shapes:

- success: {"success": true, "data": {...}, ...top-level keys mirrored from data}
- error:   {"error": "...", "message": "...", "code": "...", "details": {...}}

Optional error fields are omitted when unset. The builders are pure and never
raise.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from tracklist.failures import ErrorCode
from tracklist.validation import Issue

_RESERVED_KEYS = frozenset({"success", "data"})


class ErrorResponse(BaseModel):
    """Error envelope. ``error`` is a non-empty human summary."""

    error: str
    message: str | None = None
    code: str | None = None
    details: dict[str, Any] | None = None


def build_success(data: Any) -> dict[str, Any]:
    """Wrap ``data`` in the success envelope.

    When ``data`` is a mapping its keys are mirrored at the top level so
    clients can read ``body["playlists"]`` as well as ``body["data"]["playlists"]``.
    """
    envelope: dict[str, Any] = {"success": True, "data": data}
    if isinstance(data, Mapping):
        for key, value in data.items():
            if key not in _RESERVED_KEYS:
                envelope[key] = value
    return envelope


def build_error(
    summary: str,
    detail: str | None = None,
    code: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the error envelope as a dict for JSONResponse."""
    return ErrorResponse(
        error=summary or "Request failed",
        message=detail,
        code=code,
        details=details,
    ).model_dump(exclude_none=True)


def format_issue(issue: Issue) -> str:
    return f"{issue.path}: {issue.message}" if issue.path else issue.message


def issues_to_error(issues: Iterable[Issue]) -> dict[str, Any]:
    """Flatten validation issues into one error envelope, first failing field first."""
    ordered = list(issues)
    summary = "; ".join(format_issue(issue) for issue in ordered) or "Validation failed"
    return build_error(
        summary,
        "Validation failed",
        ErrorCode.VALIDATION_ERROR,
        {"issues": [{"path": issue.path, "message": issue.message} for issue in ordered]},
    )
