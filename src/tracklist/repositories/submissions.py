"""Track submission data-access layer."""

from datetime import UTC, datetime
from typing import Any

from tracklist.backend import Backend, BackendError
from tracklist.result import Result

TABLE = "track_submissions"

Rows = list[dict[str, Any]]


async def insert_submission(backend: Backend, row: dict[str, Any]) -> Result[Rows, BackendError]:
    query = backend.table(TABLE).insert(row)
    return await backend.query(query, "INSERT submission", submitted_by=row.get("submitted_by"))


async def list_submissions(
    backend: Backend, *, submitted_by: str | None, status: str | None
) -> Result[Rows, BackendError]:
    """Return submissions, newest first. ``submitted_by=None`` means every user's."""
    query = backend.table(TABLE).select("*")
    if submitted_by is not None:
        query = query.eq("submitted_by", submitted_by)
    if status:
        query = query.eq("status", status)
    query = query.order("created_at", desc=True)
    return await backend.query(query, "SELECT submissions", status=status)


async def get_submission(
    backend: Backend, submission_id: str
) -> Result[dict[str, Any], BackendError]:
    query = backend.table(TABLE).select("*").eq("id", submission_id).single()
    return await backend.query(query, "SELECT submission by ID", submission_id=submission_id)


async def update_submission(
    backend: Backend, submission_id: str, *, status: str, admin_notes: str | None
) -> Result[Rows, BackendError]:
    query = (
        backend.table(TABLE)
        .update(
            {
                "status": status,
                "admin_notes": admin_notes or None,
                "updated_at": datetime.now(UTC).isoformat(),
            }
        )
        .eq("id", submission_id)
    )
    return await backend.query(query, "UPDATE submission", submission_id=submission_id)
