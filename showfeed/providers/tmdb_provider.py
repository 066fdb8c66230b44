"""TMDB provider.

The primary metadata source: richer per-show detail than TVmaze, but every
request needs an API key. Without ``TMDB_API_KEY`` the provider reports
itself unavailable and the fallback orchestrator never calls it.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

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

POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"
ORIGINAL_SIZE = "original"


class TMDBError(ProviderError):
    """Domain exception for TMDB failures."""


class GenreCache:
    """Genre id -> name table, loaded once and read-only afterwards.

    Search results only carry genre ids, so the table is fetched on first use
    and kept for the lifetime of the owning provider. Callers arriving while
    the first load is still in flight await that same load instead of
    issuing their own request. A failed load is not remembered; the next
    caller starts a fresh one.
    """

    def __init__(self) -> None:
        self._genres: Optional[Dict[int, str]] = None
        self._loading: Optional[asyncio.Future] = None

    @property
    def loaded(self) -> bool:
        return self._genres is not None

    async def get(
        self, loader: Callable[[], Awaitable[Dict[int, str]]]
    ) -> Dict[int, str]:
        """Return the genre table, starting a load if none is in progress."""
        if self.loaded:
            return self._genres
        if self._loading is None:
            self._loading = asyncio.ensure_future(loader())
            self._loading.add_done_callback(self._on_loaded)
        # Shielded so one waiter being cancelled doesn't cancel the shared load
        return await asyncio.shield(self._loading)

    def _on_loaded(self, task: asyncio.Future) -> None:
        self._loading = None
        if not task.cancelled() and task.exception() is None:
            self._genres = task.result()

    def lookup(self, genre_id: int) -> str:
        """Return the genre name, or an empty string for unknown ids."""
        return (self._genres or {}).get(genre_id, "")


def _round_rating(value: Any) -> Optional[float]:
    return round(float(value), 1) if value else None


def _now() -> int:
    return int(time.time())


class TMDBProvider(ContentProvider):
    """TMDB provider implementation."""

    def __init__(
        self,
        settings: Settings | None = None,
        genre_cache: GenreCache | None = None,
    ):
        super().__init__(settings)
        self.base_url = self._settings.tmdb_base_url
        self.image_base_url = self._settings.tmdb_image_base_url
        self.genre_cache = genre_cache or GenreCache()
        self.rate_limiter = AsyncLimiter(self._settings.tmdb_rate_limit, 1.0)

    @property
    def name(self) -> ContentProviderName:
        return "tmdb"

    def is_available(self) -> bool:
        return bool(self._settings.tmdb_api_key)

    async def _get(self, path: str, params: dict | None = None) -> Any:
        """GET a TMDB endpoint with the API key and language attached."""
        api_key = self._settings.tmdb_api_key
        if not api_key:
            raise TMDBError("Missing TMDB API key")

        query = {"api_key": api_key, "language": self._settings.tmdb_language}
        query.update(params or {})
        try:
            async with self.rate_limiter:
                response = await self.session.get(f"{self.base_url}{path}", params=query)
            response.raise_for_status()
            return response.json()
        except niquests.exceptions.RequestException as exc:
            logger.debug(f"TMDB request failed for {path}: {exc}")
            raise TMDBError(f"TMDB request failed: {path}", exc) from exc

    async def _load_genres(self) -> Dict[int, str]:
        data = await self._get("/genre/tv/list")
        return {genre["id"]: genre["name"] for genre in data.get("genres", [])}

    async def _genre_map(self) -> Dict[int, str]:
        return await self.genre_cache.get(self._load_genres)

    def _image_url(self, path: Optional[str], size: str = POSTER_SIZE) -> Optional[str]:
        return f"{self.image_base_url}/{size}{path}" if path else None

    def _map_show(self, show: dict, fetched_at: int = 0) -> Show:
        """Map a TMDB show payload (search hit or full detail) onto a Show.

        Search hits only carry ``genre_ids``; those are resolved through the
        genre cache, which callers load beforehand.
        """
        if show.get("genres"):
            genres = [g["name"] for g in show["genres"]]
        else:
            genres = [self.genre_cache.lookup(gid) for gid in show.get("genre_ids") or []]
        genres = [g for g in genres if g]

        poster = self._image_url(show.get("poster_path"), POSTER_SIZE)
        backdrop = self._image_url(show.get("backdrop_path"), BACKDROP_SIZE)
        image_url = poster or backdrop

        networks = show.get("networks") or []
        network = None
        if networks:
            origin = networks[0].get("origin_country") or ""
            network = {
                "id": networks[0]["id"],
                "name": networks[0]["name"],
                "country": {"name": origin, "code": origin},
            }

        status = show.get("status") or "Running"
        run_times = show.get("episode_run_time") or []
        next_episode = show.get("next_episode_to_air") or {}

        return Show(
            provider=self.name,
            id=show["id"],
            name=show.get("name") or show.get("original_name") or "",
            type=show.get("type") or "Scripted",
            language=show.get("original_language") or "",
            genres=genres,
            status=status,
            runtime=run_times[0] if run_times else None,
            premiered=show.get("first_air_date") or None,
            ended=(show.get("last_air_date") or None) if status == "Ended" else None,
            official_site=show.get("homepage") or None,
            schedule={"time": "", "days": []},
            rating={"average": _round_rating(show.get("vote_average"))},
            weight=0,
            network=network,
            web_channel=None,
            image={"medium": image_url, "original": image_url} if image_url else None,
            summary=show.get("overview") or None,
            updated=fetched_at,
            season_count=show.get("number_of_seasons"),
            next_episode_air_date=next_episode.get("air_date"),
            links={"self": {"href": f"{self.base_url}/tv/{show['id']}"}},
        )

    def _map_episode(self, show_id: int, episode: dict) -> Episode:
        """Map a TMDB season-detail episode onto an Episode."""
        still = self._image_url(episode.get("still_path"), POSTER_SIZE)
        season = episode["season_number"]
        number = episode.get("episode_number")
        air_date = episode.get("air_date") or ""

        return Episode(
            id=episode["id"],
            url=f"{self.base_url}/tv/{show_id}/season/{season}/episode/{number}",
            name=episode.get("name") or "",
            season=season,
            number=number,
            type="regular",
            airdate=air_date,
            airtime="",
            airstamp=air_date,
            runtime=episode.get("runtime"),
            rating={"average": _round_rating(episode.get("vote_average"))},
            image={"medium": still, "original": still} if still else None,
            summary=episode.get("overview") or None,
            links={"self": {"href": f"{self.base_url}/tv/{show_id}"}},
        )

    def _map_schedule_entry(
        self, show: dict, air_date: str, fetched_at: int
    ) -> ScheduleEntry:
        """Build a show-level placeholder entry for an "airing today" show.

        TMDB does not say which episode airs, so the entry carries no episode
        name or number and is flagged as a placeholder.
        """
        poster_path = show.get("poster_path")
        run_times = show.get("episode_run_time") or []
        image = None
        if poster_path:
            image = {
                "medium": self._image_url(poster_path, POSTER_SIZE),
                "original": self._image_url(poster_path, ORIGINAL_SIZE),
            }

        return ScheduleEntry(
            id=show["id"],
            url=f"{self.base_url}/tv/{show['id']}",
            name="",
            season=0,
            number=None,
            type="regular",
            airdate=air_date,
            airtime="",
            airstamp=air_date,
            runtime=run_times[0] if run_times else None,
            rating={"average": _round_rating(show.get("vote_average"))},
            image=image,
            summary=show.get("overview") or None,
            show=self._map_show(show, fetched_at),
            is_placeholder=True,
        )

    async def _get_season(self, show_id: int, season_number: int) -> List[Episode]:
        data = await self._get(f"/tv/{show_id}/season/{season_number}")
        return [self._map_episode(show_id, ep) for ep in data.get("episodes", [])]

    async def search_shows(self, query: str) -> List[SearchResult]:
        await self._genre_map()
        data = await self._get("/search/tv", {"query": query})
        fetched_at = _now()
        return [
            SearchResult(score=1.0, show=self._map_show(show, fetched_at))
            for show in data.get("results", [])
        ]

    async def get_show(self, show_id: int) -> Show:
        data = await self._get(f"/tv/{show_id}")
        return self._map_show(data, fetched_at=_now())

    async def get_show_episodes(
        self, show_id: int, season_number: Optional[int] = None
    ) -> List[Episode]:
        """Fetch one season, or every season concurrently.

        For the full list each season is fetched in its own request. A
        season that fails contributes nothing instead of failing the whole
        show, results are kept in season order, and episodes without an air
        date are dropped.
        """
        if season_number is not None:
            return await self._get_season(show_id, season_number)

        show = await self._get(f"/tv/{show_id}")
        season_count = show.get("number_of_seasons") or 0
        if season_count == 0:
            return []

        async def fetch_season(season: int) -> List[Episode]:
            try:
                return await self._get_season(show_id, season)
            except Exception as e:
                logger.warning(
                    f"Error fetching season {season} of show {show_id} from {self.name}: {e}",
                    exc_info=e,
                )
                return []

        season_results = await asyncio.gather(
            *[fetch_season(season) for season in range(1, season_count + 1)]
        )

        episodes: List[Episode] = []
        for season_episodes in season_results:
            episodes.extend(season_episodes)

        return [ep for ep in episodes if ep.is_scheduled]

    async def get_show_images(self, show_id: int) -> List[ShowImage]:
        language = self._settings.tmdb_language.split("-")[0]
        data = await self._get(
            f"/tv/{show_id}/images", {"include_image_language": f"{language},null"}
        )

        images = []
        for index, poster in enumerate(data.get("posters", [])):
            width = poster.get("width") or 0
            height = poster.get("height") or 0
            images.append(
                ShowImage(
                    id=index + 1,
                    type="poster",
                    main=index == 0,
                    resolutions={
                        "original": {
                            "url": self._image_url(poster["file_path"], ORIGINAL_SIZE),
                            "width": width,
                            "height": height,
                        },
                        "medium": {
                            "url": self._image_url(poster["file_path"], POSTER_SIZE),
                            "width": (width + 1) // 2,
                            "height": (height + 1) // 2,
                        },
                    },
                )
            )
        return images

    async def get_schedule(
        self, country_code: Optional[str] = None, date: Optional[str] = None
    ) -> List[ScheduleEntry]:
        # airing_today is global; country_code has no TMDB equivalent
        await self._genre_map()
        data = await self._get("/tv/airing_today", {"air_date": date} if date else {})
        air_date = date or datetime.now(timezone.utc).date().isoformat()
        fetched_at = _now()
        return [
            self._map_schedule_entry(show, air_date, fetched_at)
            for show in data.get("results", [])
        ]

    async def get_web_schedule(
        self, date: Optional[str] = None, country_code: Optional[str] = None
    ) -> List[ScheduleEntry]:
        return await self.get_schedule(country_code, date)
