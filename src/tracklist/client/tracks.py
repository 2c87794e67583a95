"""Track hook: the catalogue, filtered by genre and search text."""

from typing import Any

import httpx

from tracklist.client.state import Hook, request_json
from tracklist.result import Err, Ok


class TracksHook(Hook[dict[str, Any]]):
    """Tracks matching the current filters.

    Without ``limit`` the whole filtered catalogue is loaded at once. With
    ``limit`` the hook loads one page and ``load_more`` appends the next.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        genre: str | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> None:
        super().__init__(http)
        self.genre = genre
        self.search = search
        self.limit = limit
        self.has_more = False

    @property
    def tracks(self) -> list[dict[str, Any]]:
        return self.state.items

    def params(self, offset: int = 0) -> dict[str, str]:
        """Query string for the current filters. ``"All"`` means no genre filter."""
        params: dict[str, str] = {}
        if self.genre and self.genre != "All":
            params["genre"] = self.genre
        if self.search:
            params["search"] = self.search
        if self.limit is not None:
            params["limit"] = str(self.limit)
            if offset:
                params["offset"] = str(offset)
        return params

    async def mount(self) -> None:
        await self._load("/api/tracks", "tracks", "Failed to fetch tracks", params=self.params())
        self.has_more = self._full_page(self.state.items)

    async def load_more(self) -> None:
        """Append the next page. Does nothing unless paging and more rows may exist."""
        if self.limit is None or not self.has_more:
            return
        self.state.loading = True
        self.state.error = None
        try:
            outcome = await request_json(
                self.http,
                "GET",
                "/api/tracks",
                default_error="Failed to fetch tracks",
                params=self.params(offset=len(self.state.items)),
            )
            match outcome:
                case Ok(body):
                    page = list(body.get("tracks") or [])
                    self.state.items = [*self.state.items, *page]
                    self.has_more = self._full_page(page)
                case Err(message):
                    self.state.error = message
        finally:
            self.state.loading = False

    async def set_filters(self, *, genre: str | None = None, search: str | None = None) -> None:
        """Change the filters and reload, like re-rendering with new props."""
        self.genre = genre
        self.search = search
        await self.mount()

    def _full_page(self, page: list[dict[str, Any]]) -> bool:
        return self.limit is not None and len(page) == self.limit
