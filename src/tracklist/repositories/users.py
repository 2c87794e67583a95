"""Auth and user profile access.

Auth calls return the raw supabase-py response models; the services layer
decides what to expose.
"""

from typing import Any

from tracklist.backend import Backend, BackendError
from tracklist.result import Result

PROFILES = "user_profiles"


async def sign_up(backend: Backend, email: str, password: str) -> Result[Any, BackendError]:
    call = backend.auth.sign_up({"email": email, "password": password})
    return await backend.call_auth(call, "auth.sign_up")


async def sign_in(backend: Backend, email: str, password: str) -> Result[Any, BackendError]:
    call = backend.auth.sign_in_with_password({"email": email, "password": password})
    return await backend.call_auth(call, "auth.sign_in_with_password")


async def get_user(backend: Backend, jwt: str) -> Result[Any, BackendError]:
    """Verify a session JWT and return the user response it belongs to."""
    return await backend.call_auth(backend.auth.get_user(jwt), "auth.get_user")


async def sign_out(backend: Backend, jwt: str) -> Result[Any, BackendError]:
    """Revoke the session behind ``jwt`` (admin API, works with the service key)."""
    return await backend.call_auth(backend.auth.admin.sign_out(jwt), "auth.admin.sign_out")


async def get_role(backend: Backend, user_id: str) -> Result[dict[str, Any], BackendError]:
    query = backend.table(PROFILES).select("role").eq("id", user_id).single()
    return await backend.query(query, "SELECT user role", user_id=user_id)
