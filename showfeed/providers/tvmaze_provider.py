"""TVmaze provider.

Keyless and always available, so it is the guaranteed fallback target. Its
schema is what the unified models are modelled on, so mapping is mostly a
passthrough plus stamping the provider tag onto every show.
"""

import logging
from typing import Any, List, Optional

import niquests
from aiolimiter import AsyncLimiter

from showfeed.core.config import Settings
from showfeed.models.media import (
    ContentProviderName,
    Episode,
    ScheduleEntry,
    SearchResult,
    Show,
    ShowImage,
)
from showfeed.providers.base import ContentProvider, ProviderError

logger = logging.getLogger(__name__)


class TVMazeError(ProviderError):
    """Domain exception for TVmaze failures."""


class TVMazeProvider(ContentProvider):
    """TVmaze provider implementation."""

    def __init__(self, settings: Settings | None = None):
        super().__init__(settings)
        self.base_url = self._settings.tvmaze_base_url
        # TVmaze allows roughly 20 calls every 10 seconds per IP
        self.rate_limiter = AsyncLimiter(self._settings.tvmaze_rate_limit, 10.0)

    @property
    def name(self) -> ContentProviderName:
        return "tvmaze"

    def is_available(self) -> bool:
        return True

    async def _get(
        self, path: str, params: dict | None = None, error: str = "TVmaze request failed"
    ) -> Any:
        """GET a TVmaze endpoint and decode the JSON body."""
        try:
            async with self.rate_limiter:
                response = await self.session.get(f"{self.base_url}{path}", params=params)
            response.raise_for_status()
            return response.json()
        except niquests.exceptions.RequestException as exc:
            logger.debug(f"{error} ({path}): {exc}")
            raise TVMazeError(error, exc) from exc

    def _schedule_entry(self, entry: dict) -> ScheduleEntry:
        show = entry.get("show") or (entry.get("_embedded") or {}).get("show") or {}
        return ScheduleEntry.model_validate({**entry, "show": self._stamp(show)})

    async def search_shows(self, query: str) -> List[SearchResult]:
        data = await self._get(
            "/search/shows", {"q": query}, error="Failed to search shows"
        )
        return [
            SearchResult.model_validate({**entry, "show": self._stamp(entry["show"])})
            for entry in data
        ]

    async def get_show(self, show_id: int) -> Show:
        data = await self._get(f"/shows/{show_id}", error="Failed to fetch show")
        return Show.model_validate(self._stamp(data))

    async def get_show_episodes(
        self, show_id: int, season_number: Optional[int] = None
    ) -> List[Episode]:
        """Fetch every episode, narrowed to one season when asked.

        TVmaze only addresses seasons by their own ids, so the season filter
        is applied to the full list.
        """
        data = await self._get(
            f"/shows/{show_id}/episodes", error="Failed to fetch episodes"
        )
        episodes = [Episode.model_validate(ep) for ep in data]
        if season_number is not None:
            episodes = [ep for ep in episodes if ep.season == season_number]
        return episodes

    async def get_show_images(self, show_id: int) -> List[ShowImage]:
        data = await self._get(
            f"/shows/{show_id}/images", error="Failed to fetch show images"
        )
        return [ShowImage.model_validate(image) for image in data]

    async def get_schedule(
        self, country_code: Optional[str] = None, date: Optional[str] = None
    ) -> List[ScheduleEntry]:
        params = {"country": country_code or self._settings.default_country}
        if date:
            params["date"] = date
        data = await self._get("/schedule", params, error="Failed to fetch schedule")
        return [self._schedule_entry(entry) for entry in data]

    async def get_web_schedule(
        self, date: Optional[str] = None, country_code: Optional[str] = None
    ) -> List[ScheduleEntry]:
        params = {}
        if date:
            params["date"] = date
        # An empty country asks for global web channels only
        if country_code is not None:
            params["country"] = country_code
        data = await self._get(
            "/schedule/web", params, error="Failed to fetch web schedule"
        )
        return [self._schedule_entry(entry) for entry in data]
