"""Authentication business logic.

Collaborator auth errors are classified here. Their raw text is kept as the
failure's ``cause`` (logged only); the public message is fixed.
"""

from dataclasses import dataclass
from typing import Any

from tracklist.backend import Backend, to_plain
from tracklist.failures import ErrorCode, Failure, FailureKind, forbidden, unauthorized
from tracklist.repositories import users
from tracklist.result import Err, Ok, Result
from tracklist.schemas.requests import LoginRequest, RegisterRequest


@dataclass(frozen=True)
class SignedIn:
    """A successful login: the public user and session plus the raw access token."""

    user: dict[str, Any]
    session: dict[str, Any]
    access_token: str


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str | None = None


async def register(
    backend: Backend, payload: RegisterRequest
) -> Result[dict[str, Any] | None, Failure]:
    match await users.sign_up(backend, payload.email, payload.password):
        case Ok(response):
            return Ok(to_plain(response.user))
        case Err(error):
            return Err(
                Failure(
                    FailureKind.REJECTED,
                    ErrorCode.REGISTRATION_ERROR,
                    "Registration failed",
                    "Unable to register with the provided details",
                    cause=error,
                )
            )


async def login(backend: Backend, payload: LoginRequest) -> Result[SignedIn, Failure]:
    match await users.sign_in(backend, payload.email, payload.password):
        case Ok(response) if response.session is not None:
            return Ok(
                SignedIn(
                    user=to_plain(response.user),
                    session=to_plain(response.session),
                    access_token=response.session.access_token,
                )
            )
        case Ok(_):
            return Err(_auth_failed("sign-in returned no session"))
        case Err(error):
            return Err(_auth_failed(error))


def _auth_failed(cause: Any) -> Failure:
    return Failure(
        FailureKind.REJECTED,
        ErrorCode.AUTH_ERROR,
        "Authentication failed",
        "Invalid email or password",
        cause=cause,
    )


async def logout(backend: Backend, token: str | None) -> bool:
    """Revoke the session if there is one. Returns whether a session was revoked.

    A token the collaborator no longer accepts is already signed out, so a
    rejected revocation still counts as a completed logout.
    """
    if token is None:
        return False
    match await users.sign_out(backend, token):
        case Ok(_):
            return True
        case Err(_):
            return False


async def authenticate(backend: Backend, token: str | None) -> Result[CurrentUser, Failure]:
    """Resolve the session token to a user, or fail with 401."""
    if token is None:
        return Err(unauthorized())
    match await users.get_user(backend, token):
        case Ok(response) if response is not None and response.user is not None:
            return Ok(CurrentUser(id=response.user.id, email=response.user.email))
        case Ok(_):
            return Err(unauthorized("Invalid authentication"))
        case Err(error):
            return Err(
                Failure(
                    FailureKind.UNAUTHORIZED,
                    ErrorCode.UNAUTHORIZED,
                    "Unauthorized",
                    "Invalid authentication",
                    cause=error,
                )
            )


async def require_admin(backend: Backend, user: CurrentUser) -> Result[None, Failure]:
    """Succeed only when the user's profile carries the admin role."""
    match await users.get_role(backend, user.id):
        case Ok(profile) if profile and profile.get("role") == "admin":
            return Ok(None)
        case Ok(_):
            return Err(forbidden("Admin access required"))
        case Err(error) if error.is_no_rows:
            return Err(forbidden("Admin access required"))
        case Err(error):
            return Err(
                Failure(
                    FailureKind.BACKEND,
                    ErrorCode.DATABASE_ERROR,
                    "Failed to verify admin status",
                    "Database query error",
                    cause=error,
                )
            )
