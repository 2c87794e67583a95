"""Client-side state containers for consuming the API over HTTP.

A hook owns one ``ResourceState``. Loading a resource moves it through
``loading=True`` to exactly one terminal state: items replaced (success) or
``error`` set with items untouched (failure). Mutations never touch the
shared ``loading`` flag; each returns its own ``MutationResult``.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx

from tracklist.result import Err, Ok, Result

FALLBACK_ERROR = "An error occurred"

T = TypeVar("T")


@dataclass
class ResourceState(Generic[T]):
    items: list[T] = field(default_factory=list)
    loading: bool = False
    error: str | None = None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of one mutation, returned to the caller instead of stored."""

    success: bool
    error: str | None = None


@dataclass(frozen=True)
class PlaylistResult(MutationResult):
    """``createPlaylist`` outcome: the created row on success."""

    playlist: dict[str, Any] | None = None


@dataclass(frozen=True)
class PlaylistTrackResult(MutationResult):
    playlist_track: dict[str, Any] | None = None


def _message(exc: Exception) -> str:
    return str(exc) or FALLBACK_ERROR


async def request_json(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    default_error: str,
    **kwargs: Any,
) -> Result[dict[str, Any], str]:
    """Send one request and return the JSON body, or the message to show the user.

    For a non-2xx response the message is the body's ``error`` field, falling
    back to ``default_error``. Transport and decoding failures use the
    exception text.
    """
    try:
        response = await http.request(method, url, **kwargs)
        body = response.json() if response.content else {}
    except (httpx.HTTPError, ValueError) as exc:
        return Err(_message(exc))
    if not isinstance(body, dict):
        body = {}
    if not response.is_success:
        return Err(body.get("error") or default_error)
    return Ok(body)


class Hook(Generic[T]):
    """Base for resource hooks: one ``httpx.AsyncClient`` and one ``ResourceState``."""

    key = "id"

    def __init__(self, http: httpx.AsyncClient) -> None:
        self.http = http
        self.state: ResourceState[T] = ResourceState()

    async def _load(self, url: str, field_name: str, default_error: str, **kwargs: Any) -> None:
        self.state.loading = True
        self.state.error = None
        try:
            match await request_json(self.http, "GET", url, default_error=default_error, **kwargs):
                case Ok(body):
                    self.state.items = list(body.get(field_name) or [])
                case Err(message):
                    self.state.error = message
        finally:
            self.state.loading = False

    def _prepend(self, item: T) -> None:
        self.state.items = [item, *self.state.items]

    def _remove(self, key_value: Any) -> None:
        self.state.items = [
            item for item in self.state.items if _key_of(item, self.key) != key_value
        ]


def _key_of(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)
