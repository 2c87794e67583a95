import os
from collections.abc import AsyncIterator

# Settings are read from the environment on first use; set them before the app is imported.
os.environ.setdefault("SUPABASE_URL", "https://tracklist-test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test-key")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from tests.fakes import FakeSupabase  # noqa: E402
from tracklist.dependencies import get_auth_supabase, get_supabase  # noqa: E402
from tracklist.main import app  # noqa: E402


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest_asyncio.fixture
async def client(supabase: FakeSupabase) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app with the Supabase client replaced by the fake."""
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_auth_supabase] = lambda: supabase

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_client(client: AsyncClient) -> AsyncClient:
    """Client carrying a bearer token the fake resolves to ``USER_ID``."""
    client.headers["Authorization"] = "Bearer user-jwt"
    return client
