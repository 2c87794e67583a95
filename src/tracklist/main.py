from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tracklist.backend import create_supabase
from tracklist.config import get_settings
from tracklist.failures import ErrorCode
from tracklist.logging import get_logger
from tracklist.middleware import RequestIDMiddleware
from tracklist.monitoring import report_exception
from tracklist.routers import auth, playlists, submissions, tracks
from tracklist.schemas.envelope import build_error, issues_to_error
from tracklist.validation import Issue, format_path

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager: code before yield runs on startup, after yield on shutdown.

    Startup: create the shared async Supabase client.
    """
    settings = get_settings()
    app.state.supabase = await create_supabase(settings)
    logger.info("Supabase client ready", environment=settings.environment)
    yield


app = FastAPI(lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)

app.include_router(auth.router)
app.include_router(tracks.router)
app.include_router(playlists.router)
app.include_router(submissions.router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with the standard validation envelope for framework-level parameter errors."""
    issues = [Issue(path=format_path(error["loc"]), message=error["msg"]) for error in exc.errors()]
    logger.warn("Invalid request parameters", path=request.url.path, issues=len(issues))
    return JSONResponse(status_code=400, content=issues_to_error(issues))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort boundary for failures outside a route pipeline.

    - Logs the exception (includes request_id from context)
    - Forwards it to the error reporter
    - Returns a generic error to the client (no raw exception text)
    """
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=repr(exc),
        exc_info=exc,
    )
    report_exception(exc)
    return JSONResponse(
        status_code=500,
        content=build_error(
            "Internal server error", "An unexpected error occurred", ErrorCode.INTERNAL_ERROR
        ),
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check used by load balancers and container orchestrators."""
    return {"status": "ok"}
