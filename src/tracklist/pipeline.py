"""The route handler pipeline shared by every endpoint.

A route builds a ``pipeline(call)`` coroutine that parses and validates its
input, checks identifier preconditions, makes one primary backend call and
classifies the outcome into a ``Reply``. ``run_route`` runs it:

1. captures the start time;
2. awaits the pipeline;
3. converts any exception escaping the pipeline into a 500 INTERNAL_ERROR
   (this is the only place that happens inside a route);
4. logs ``api_response`` with the final status and duration, whatever the outcome;
5. returns exactly one JSON envelope.
"""

import json
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse

from tracklist.failures import ErrorCode, Failure
from tracklist.logging import ApiLogger, redact_secrets
from tracklist.monitoring import report_exception
from tracklist.result import Err, Ok, Result
from tracklist.schemas.envelope import build_error, build_success, issues_to_error
from tracklist.validation import Issue, validate

T = TypeVar("T")
M = TypeVar("M")

INTERNAL_ERROR_BODY = build_error(
    "Internal server error", "An unexpected error occurred", ErrorCode.INTERNAL_ERROR
)


@dataclass(frozen=True)
class CookieChange:
    """Set (``value`` given) or clear (``value is None``) one response cookie."""

    name: str
    value: str | None
    max_age: int | None = None
    secure: bool = True


@dataclass(frozen=True)
class Reply:
    """A committed HTTP outcome. Status and body always agree."""

    status: int
    body: dict[str, Any]
    cookies: tuple[CookieChange, ...] = ()

    def __post_init__(self) -> None:
        if 200 <= self.status < 300:
            if self.body.get("success") is not True:
                raise ValueError("2xx replies must carry a success envelope")
        elif self.status >= 400:
            if not self.body.get("error") or "success" in self.body:
                raise ValueError(">=400 replies must carry a non-empty error envelope")
        else:
            raise ValueError(f"Unsupported reply status {self.status}")

    @classmethod
    def ok(cls, data: Any, status: int = 200) -> "Reply":
        return cls(status, build_success(data))

    @classmethod
    def error(cls, status: int, body: dict[str, Any]) -> "Reply":
        return cls(status, body)

    def with_cookie(self, change: CookieChange) -> "Reply":
        return replace(self, cookies=(*self.cookies, change))

    def render(self) -> JSONResponse:
        response = JSONResponse(status_code=self.status, content=self.body)
        for change in self.cookies:
            if change.value is None:
                response.delete_cookie(
                    change.name, httponly=True, secure=change.secure, samesite="lax"
                )
            else:
                response.set_cookie(
                    change.name,
                    change.value,
                    max_age=change.max_age,
                    httponly=True,
                    secure=change.secure,
                    samesite="lax",
                )
        return response


@dataclass
class RouteCall:
    """Per-invocation context handed to a route pipeline."""

    request: Request
    logger: ApiLogger
    started: float = field(default_factory=time.perf_counter)

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.url.path

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000

    def request_received(self, **extra: Any) -> None:
        self.logger.api_request(self.method, self.path, **extra)

    def invalid(self, issues: Iterable[Issue], attempted: Any = None) -> Reply:
        """Reject input that failed validation (400). Secrets are never logged."""
        ordered = list(issues)
        self.logger.warn(
            "Invalid request",
            issues=[{"path": issue.path, "message": issue.message} for issue in ordered],
            attempted=redact_secrets(attempted),
        )
        return Reply.error(400, issues_to_error(ordered))

    def reject(self, failure: Failure, **metadata: Any) -> Reply:
        """Turn a classified failure into its error envelope, logging at the right level."""
        if failure.is_client_error:
            self.logger.warn(failure.summary, code=failure.code, **metadata)
        else:
            self.logger.error(failure.summary, code=failure.code, cause=failure.cause, **metadata)
        body = build_error(failure.summary, failure.detail, failure.code)
        return Reply.error(failure.http_status, body)

    def settle(
        self, outcome: Result[T, Failure], on_ok: Callable[[T], Reply], **metadata: Any
    ) -> Reply:
        """Map a service result to a reply: ``on_ok`` for success, ``reject`` otherwise."""
        match outcome:
            case Ok(value):
                return on_ok(value)
            case Err(failure):
                return self.reject(failure, **metadata)


async def read_json(request: Request) -> Result[Any, tuple[Issue, ...]]:
    """Parse the request body as JSON. A malformed body becomes a validation issue."""
    raw = await request.body()
    if not raw.strip():
        return Err((Issue("", "Request body is required"),))
    try:
        return Ok(json.loads(raw))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return Err((Issue("", "Request body must be valid JSON"),))


async def parse_body(call: RouteCall, schema: type[M]) -> Result[M, Reply]:
    """Read and validate the body; ``Err`` holds the ready-made 400 reply."""
    match await read_json(call.request):
        case Err(issues):
            return Err(call.invalid(issues))
        case Ok(payload):
            pass
    match validate(schema, payload):  # type: ignore[arg-type]
        case Ok(model):
            return Ok(model)
        case Err(issues):
            return Err(call.invalid(issues, attempted=payload))


def parse_query(call: RouteCall, schema: type[M], params: Mapping[str, Any]) -> Result[M, Reply]:
    match validate(schema, dict(params)):  # type: ignore[arg-type]
        case Ok(model):
            return Ok(model)
        case Err(issues):
            return Err(call.invalid(issues, attempted=dict(params)))


async def run_route(
    request: Request,
    logger: ApiLogger,
    pipeline: Callable[[RouteCall], Awaitable[Reply]],
) -> JSONResponse:
    """Run one route invocation and commit to exactly one envelope."""
    call = RouteCall(request=request, logger=logger)
    try:
        reply = await pipeline(call)
    except Exception as exc:
        logger.error("Unexpected error", error=repr(exc), exc_info=exc)
        report_exception(exc)
        reply = Reply.error(500, INTERNAL_ERROR_BODY)
    logger.api_response(call.method, call.path, reply.status, call.elapsed_ms())
    return reply.render()
