"""Validation layer.

``validate`` parses untrusted input against a pydantic model and always
returns a value: ``Ok(model)`` or ``Err(issues)``. Issues keep pydantic's
field-declaration order, so the first failing field comes first.

Also home to the pure identifier predicates routes check before touching
the backend.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ValidationError
from pydantic_core import PydanticCustomError

from tracklist.result import Err, Ok, Result

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_YOUTUBE_PATTERNS = (
    re.compile(r"^https?://(www\.)?youtube\.com/watch\?v=([a-zA-Z0-9_-]{11})"),
    re.compile(r"^https?://(www\.)?youtu\.be/([a-zA-Z0-9_-]{11})"),
    re.compile(r"^https?://(www\.)?youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
)
_SPOTIFY_PATTERNS = (
    re.compile(r"^https?://open\.spotify\.com/track/([a-zA-Z0-9]{22})"),
    re.compile(r"^https?://spotify\.com/track/([a-zA-Z0-9]{22})"),
)


@dataclass(frozen=True, slots=True)
class Issue:
    """A single field-level validation failure."""

    path: str
    message: str


def format_path(loc: Sequence[int | str]) -> str:
    """Render a pydantic location as ``field.sub[0].leaf``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


M = TypeVar("M", bound=BaseModel)


def validate(schema: type[M], raw: Any) -> Result[M, tuple[Issue, ...]]:
    """Parse ``raw`` into ``schema``. Never raises for bad input."""
    try:
        return Ok(schema.model_validate(raw))
    except ValidationError as exc:
        return Err(
            tuple(
                Issue(path=format_path(error["loc"]), message=error["msg"])
                for error in exc.errors(include_url=False)
            )
        )


def is_uuid(value: object) -> bool:
    """True when ``value`` has the shape of a UUID v1-v5."""
    return isinstance(value, str) and UUID_PATTERN.fullmatch(value) is not None


def youtube_video_id(url: str) -> str | None:
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group(2)
    return None


def spotify_track_id(url: str) -> str | None:
    for pattern in _SPOTIFY_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group(1)
    return None


# ---------------------------------------------------------------------------
# Reusable field types with stable, human-readable messages
# ---------------------------------------------------------------------------


def _fail(kind: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(kind, message)


def text(
    *,
    min_length: int,
    max_length: int,
    required: str,
    too_long: str,
    too_short: str | None = None,
    strip: bool = True,
) -> Any:
    """A string field trimmed (optionally) and bounded with custom messages."""

    def check(value: str) -> str:
        if strip:
            value = value.strip()
        if not value:
            raise _fail("required", required)
        if len(value) < min_length:
            raise _fail("too_short", too_short or required)
        if len(value) > max_length:
            raise _fail("too_long", too_long)
        return value

    return Annotated[str, AfterValidator(check)]


def matching(pattern: re.Pattern[str], message: str) -> Any:
    """A string field that must match ``pattern``."""

    def check(value: str) -> str:
        if not pattern.fullmatch(value):
            raise _fail("pattern_mismatch", message)
        return value

    return Annotated[str, AfterValidator(check)]


def satisfying(predicate: Callable[[str], object], message: str) -> Any:
    """A string field accepted only when ``predicate(value)`` is truthy."""

    def check(value: str) -> str:
        value = value.strip()
        if not predicate(value):
            raise _fail("invalid_value", message)
        return value

    return Annotated[str, AfterValidator(check)]
