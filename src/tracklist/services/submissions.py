"""Track submission workflow.

Users submit tracks for review; admins approve or reject pending
submissions. Approving a submission publishes it as a new track; the track
is inserted before the status changes, and removed again if the status
update fails, so an approved submission always has its track.
"""

from typing import Any

from tracklist.backend import Backend
from tracklist.failures import ErrorCode, Failure, FailureKind, database_error, not_found
from tracklist.repositories import submissions as repo
from tracklist.repositories import tracks as track_repo
from tracklist.result import Err, Ok, Result
from tracklist.schemas.requests import CreateSubmissionRequest, UpdateSubmissionRequest

PENDING = "pending"
APPROVED = "approved"


async def create_submission(
    backend: Backend, user_id: str, payload: CreateSubmissionRequest
) -> Result[dict[str, Any], Failure]:
    row = {
        "title": payload.title,
        "artist": payload.artist,
        "genre": payload.genre,
        "duration": payload.duration,
        "youtube_url": payload.youtube_url or None,
        "spotify_url": payload.spotify_url or None,
        "description": payload.description,
        "submitted_by": user_id,
        "status": PENDING,
    }
    match await repo.insert_submission(backend, row):
        case Ok([submission, *_]):
            return Ok(submission)
        case Ok(_):
            return Err(database_error("Failed to submit track", cause="insert returned no rows"))
        case Err(error):
            return Err(database_error("Failed to submit track", cause=error))


async def list_submissions(
    backend: Backend, *, submitted_by: str | None, status: str | None
) -> Result[list[dict[str, Any]], Failure]:
    """List submissions; ``submitted_by=None`` is the admin view of all of them."""
    match await repo.list_submissions(backend, submitted_by=submitted_by, status=status):
        case Ok(rows):
            return Ok(rows or [])
        case Err(error):
            return Err(database_error("Failed to fetch submissions", cause=error))


def track_from_submission(submission: dict[str, Any]) -> dict[str, Any]:
    """Build the track row published for an approved submission.

    ``audio_url`` prefers the YouTube link and falls back to Spotify.
    """
    youtube_url = submission.get("youtube_url") or None
    spotify_url = submission.get("spotify_url") or None
    return {
        "title": submission["title"],
        "artist": submission["artist"],
        "genre": submission["genre"],
        "duration": submission["duration"],
        "youtube_url": youtube_url,
        "spotify_url": spotify_url,
        "audio_url": youtube_url or spotify_url,
    }


async def review_submission(
    backend: Backend, submission_id: str, payload: UpdateSubmissionRequest
) -> Result[dict[str, Any], Failure]:
    """Apply an admin decision to a pending submission.

    The caller must already have checked the admin role.
    """
    match await repo.get_submission(backend, submission_id):
        case Ok(submission):
            pass
        case Err(error) if error.is_no_rows:
            return Err(not_found("submission"))
        case Err(error):
            return Err(database_error("Failed to fetch submission", cause=error))

    if submission.get("status") != PENDING:
        return Err(
            Failure(
                FailureKind.REJECTED,
                ErrorCode.ALREADY_PROCESSED,
                "Submission already processed",
                "This submission has already been reviewed",
                cause=f"status is {submission.get('status')!r}",
            )
        )

    track = None
    if payload.status == APPROVED:
        match await track_repo.insert_track(backend, track_from_submission(submission)):
            case Ok([track, *_]):
                pass
            case Ok(_):
                return Err(_track_creation_failed("insert returned no rows"))
            case Err(error):
                return Err(_track_creation_failed(error))

    outcome = await repo.update_submission(
        backend, submission_id, status=payload.status, admin_notes=payload.admin_notes
    )
    match outcome:
        case Ok([updated, *_]):
            return Ok(updated)
        case Ok(_):
            failure = not_found("submission")
        case Err(error):
            failure = database_error("Failed to update submission", cause=error)

    if track is not None:
        await _unpublish(backend, track)
    return Err(failure)


def _track_creation_failed(cause: Any) -> Failure:
    return Failure(
        FailureKind.BACKEND,
        ErrorCode.TRACK_CREATION_ERROR,
        "Failed to create track for submission",
        "Database query error",
        cause=cause,
    )


async def _unpublish(backend: Backend, track: dict[str, Any]) -> None:
    """Delete a track published for an approval whose status update then failed."""
    match await track_repo.delete_track(backend, track["id"]):
        case Ok(_):
            backend.logger.warn("Removed track after failed approval", track_id=track["id"])
        case Err(error):
            backend.logger.error(
                "Track left published after failed approval",
                track_id=track["id"],
                cause=error.message,
            )
