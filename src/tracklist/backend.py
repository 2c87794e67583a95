"""Boundary to the Supabase collaborator.

supabase-py raises on failure (``PostgrestAPIError`` for queries,
``AuthError`` for auth calls). ``Backend`` converts those into
``Err(BackendError)`` right here, times every call and logs it as a
``db_query`` record, so code above this module only ever matches on
``Ok | Err``. Anything else (network failures, bugs) propagates to the
route's catch-all.
"""

import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from supabase import (
    AsyncClient,
    AsyncClientOptions,
    AuthError,
    PostgrestAPIError,
    acreate_client,
)

from tracklist.config import Settings
from tracklist.logging import ApiLogger
from tracklist.result import Err, Ok, Result

NO_ROWS_CODE = "PGRST116"


@dataclass(frozen=True)
class BackendError:
    """A failure reported by the collaborator. Never serialized to clients."""

    message: str
    code: str | None = None
    details: Any = None
    status: int | None = None

    @property
    def is_no_rows(self) -> bool:
        return self.code == NO_ROWS_CODE


@dataclass
class Backend:
    """Per-request view of the shared Supabase client."""

    client: AsyncClient
    logger: ApiLogger

    def table(self, name: str) -> Any:
        return self.client.table(name)

    @property
    def auth(self) -> Any:
        return self.client.auth

    async def query(self, query: Any, description: str, **extra: Any) -> Result[Any, BackendError]:
        """Execute a PostgREST query builder; ``Ok`` holds the response ``data``."""
        return await self._run(query.execute(), description, extra, _query_error)

    async def query_with_count(
        self, query: Any, description: str, **extra: Any
    ) -> Result[tuple[Any, int], BackendError]:
        match await self._run(query.execute(), description, extra, _query_error, raw=True):
            case Ok(response):
                return Ok((response.data, response.count or 0))
            case Err() as failed:
                return failed

    async def call_auth(self, call: Awaitable[Any], description: str) -> Result[Any, BackendError]:
        """Await an auth API call; ``Ok`` holds the raw auth response."""
        return await self._run(call, description, {}, _auth_error, raw=True)

    async def _run(
        self,
        awaitable: Awaitable[Any],
        description: str,
        extra: dict[str, Any],
        convert: Any,
        *,
        raw: bool = False,
    ) -> Result[Any, BackendError]:
        started = time.perf_counter()
        try:
            response = await awaitable
        except (PostgrestAPIError, AuthError) as exc:
            self.logger.db_query(description, _elapsed_ms(started), failed=True, **extra)
            return Err(convert(exc))
        self.logger.db_query(description, _elapsed_ms(started), **extra)
        return Ok(response if raw else response.data)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _query_error(exc: PostgrestAPIError) -> BackendError:
    return BackendError(message=exc.message or str(exc), code=exc.code, details=exc.details)


def _auth_error(exc: AuthError) -> BackendError:
    return BackendError(
        message=exc.message,
        code=getattr(exc, "code", None),
        status=getattr(exc, "status", None),
    )


def to_plain(value: Any) -> Any:
    """Convert supabase-py models (users, sessions) into JSON-ready dicts."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


async def create_supabase(settings: Settings) -> AsyncClient:
    """Create the process-wide async client (called from the app lifespan)."""
    return await acreate_client(settings.supabase_url, settings.supabase_key)


async def create_auth_client(settings: Settings) -> AsyncClient:
    """Create a short-lived client for auth calls that start a session.

    supabase-py rewrites a client's ``Authorization`` header to the user's
    access token when a session starts, so sign-in and sign-up must never run
    on the shared data client.
    """
    options = AsyncClientOptions(auto_refresh_token=False, persist_session=False)
    return await acreate_client(settings.supabase_url, settings.supabase_key, options=options)
