"""Tagged result type used at every boundary that can fail in an expected way.

Callers match exhaustively instead of probing ``data``/``error`` fields::

    match await repo.get_track(backend, track_id):
        case Ok(track):
            ...
        case Err(error):
            ...

Unexpected failures are still exceptions; they are converted to a 500 in
exactly one place (``tracklist.pipeline.run_route``).
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Expected failure carrying a description of what went wrong."""

    error: E


Result = Union[Ok[T], Err[E]]
