"""Shared FastAPI dependencies.

Reusable type aliases and dependency functions that routers import.
Defined here (not in main.py) to avoid circular imports when routers
are registered in main.
"""

from typing import Annotated

from fastapi import Depends, Request
from supabase import AsyncClient

from tracklist.backend import create_auth_client
from tracklist.config import Settings, get_settings

AppSettings = Annotated[Settings, Depends(get_settings)]


def get_supabase(request: Request) -> AsyncClient:
    """Return the process-wide Supabase client created by the lifespan."""
    return request.app.state.supabase


async def get_auth_supabase(settings: AppSettings) -> AsyncClient:
    """Return a fresh client for sign-in and sign-up.

    A session started on it rewrites only its own headers, never those of the
    shared client every other request queries through.
    """
    return await create_auth_client(settings)


def get_session_token(request: Request, settings: AppSettings) -> str | None:
    """Session JWT from ``Authorization: Bearer`` or, failing that, the session cookie."""
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(settings.session_cookie_name) or None


Supabase = Annotated[AsyncClient, Depends(get_supabase)]
AuthSupabase = Annotated[AsyncClient, Depends(get_auth_supabase)]
SessionToken = Annotated[str | None, Depends(get_session_token)]
