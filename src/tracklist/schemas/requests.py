"""Request schemas for bodies and query strings.

Messages are written for end users; ``tracklist.validation.validate`` turns
failures into ordered ``Issue`` values.
"""

from typing import Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from tracklist.validation import (
    EMAIL_PATTERN,
    UUID_PATTERN,
    matching,
    satisfying,
    spotify_track_id,
    text,
    youtube_video_id,
)

Genre = Literal["Ambient", "Classical", "Electronic", "Jazz", "Other"]
SubmissionStatus = Literal["pending", "approved", "rejected"]

Email = matching(EMAIL_PATTERN, "Must be a valid email address")
PlaylistName = text(
    min_length=1,
    max_length=100,
    required="Playlist name is required",
    too_long="Playlist name cannot exceed 100 characters",
)
Title = text(
    min_length=1,
    max_length=255,
    required="Title is required",
    too_long="Title cannot exceed 255 characters",
)
Artist = text(
    min_length=1,
    max_length=255,
    required="Artist is required",
    too_long="Artist cannot exceed 255 characters",
)
Description = text(
    min_length=10,
    max_length=1000,
    required="Description is required",
    too_short="Description must be at least 10 characters",
    too_long="Description cannot exceed 1000 characters",
)
YouTubeUrl = satisfying(youtube_video_id, "Must be a valid YouTube URL")
SpotifyUrl = satisfying(spotify_track_id, "Must be a valid Spotify track URL")
TrackId = matching(UUID_PATTERN, "Must be a valid track ID")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: Email
    password: str
    confirm_password: str | None = Field(default=None, alias="confirmPassword")

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < 8:
            raise PydanticCustomError("too_short", "Password must be at least 8 characters")
        return value

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: str | None, info: ValidationInfo) -> str | None:
        password = info.data.get("password")
        if value is not None and password is not None and value != password:
            raise PydanticCustomError("mismatch", "Passwords do not match")
        return value


class LoginRequest(BaseModel):
    email: Email
    password: str

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise PydanticCustomError("too_short", "Password must be at least 6 characters")
        return value


# ---------------------------------------------------------------------------
# Playlists
# ---------------------------------------------------------------------------


class CreatePlaylistRequest(BaseModel):
    name: PlaylistName


class UpdatePlaylistRequest(BaseModel):
    name: PlaylistName


class AddTrackRequest(BaseModel):
    track_id: TrackId = Field(validation_alias=AliasChoices("trackId", "track_id"))


# ---------------------------------------------------------------------------
# Tracks and search
# ---------------------------------------------------------------------------


class TracksQuery(BaseModel):
    genre: str | None = None
    search: str | None = None
    limit: int | None = Field(default=None, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class SearchQuery(BaseModel):
    q: text(
        min_length=1,
        max_length=255,
        required="Search query is required",
        too_long="Search query cannot exceed 255 characters",
    )
    type: Literal["tracks", "playlists", "all"] = "all"
    genre: str | None = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


class CreateSubmissionRequest(BaseModel):
    title: Title
    artist: Artist
    genre: Genre
    duration: int = Field(ge=1, le=86400)
    youtube_url: YouTubeUrl | None = None
    spotify_url: SpotifyUrl | None = None
    description: Description

    @model_validator(mode="after")
    def _requires_a_url(self) -> "CreateSubmissionRequest":
        if not (self.youtube_url or self.spotify_url):
            raise PydanticCustomError(
                "missing_url", "At least one URL (YouTube or Spotify) is required"
            )
        return self


class UpdateSubmissionRequest(BaseModel):
    status: SubmissionStatus
    admin_notes: str | None = Field(default=None, max_length=500)


class SubmissionsQuery(BaseModel):
    status: SubmissionStatus | None = None
    admin: bool = False
