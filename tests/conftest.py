import pytest

from showfeed.core.config import Settings
from showfeed.models.media import (
    Episode,
    ScheduleEntry,
    SearchResult,
    Show,
    ShowImage,
)
from showfeed.providers import ProviderRegistry
from showfeed.providers.base import ContentProvider


class FakeProvider(ContentProvider):
    """In-memory provider that records every call and can be made to fail."""

    def __init__(self, name: str, available: bool = True, error: Exception | None = None):
        super().__init__(Settings(_env_file=None))
        self._name = name
        self.available = available
        self.error = error
        self.calls: list[tuple] = []

    @property
    def name(self):
        return self._name

    def is_available(self) -> bool:
        return self.available

    def _show(self, show_id: int = 1) -> Show:
        return Show(id=show_id, provider=self._name, name=f"{self._name} show")

    def _episode(self) -> dict:
        return {"id": 10, "name": "Pilot", "season": 1, "number": 1, "airdate": "2024-01-01"}

    def _record(self, op: str, *args) -> None:
        self.calls.append((op, args))
        if self.error is not None:
            raise self.error

    async def search_shows(self, query):
        self._record("search_shows", query)
        return [SearchResult(score=0.9, show=self._show())]

    async def get_show(self, show_id):
        self._record("get_show", show_id)
        return self._show(show_id)

    async def get_show_episodes(self, show_id, season_number=None):
        self._record("get_show_episodes", show_id, season_number)
        return [Episode(**self._episode())]

    async def get_show_images(self, show_id):
        self._record("get_show_images", show_id)
        return [ShowImage(id=1, type="poster")]

    async def get_schedule(self, country_code=None, date=None):
        self._record("get_schedule", country_code, date)
        return [ScheduleEntry(**self._episode(), show=self._show())]

    async def get_web_schedule(self, date=None, country_code=None):
        self._record("get_web_schedule", date, country_code)
        return [ScheduleEntry(**self._episode(), show=self._show())]


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def settings():
    """Settings with a TMDB key, isolated from the environment and .env."""
    return Settings(_env_file=None, tmdb_api_key="test-key")


@pytest.fixture
def keyless_settings():
    return Settings(_env_file=None, tmdb_api_key=None)


@pytest.fixture
def clean_registry():
    """Empty the provider registry for the test and restore it afterwards."""
    saved = dict(ProviderRegistry._providers)
    ProviderRegistry.clear()
    yield ProviderRegistry
    ProviderRegistry.clear()
    ProviderRegistry._providers.update(saved)


@pytest.fixture
def tmdb_show_payload():
    """A trimmed /tv/{id} response."""
    return {
        "id": 1399,
        "name": "Game of Thrones",
        "original_name": "Game of Thrones",
        "original_language": "en",
        "type": "Scripted",
        "overview": "<p>Seven noble families fight for control.</p>",
        "poster_path": "/poster.jpg",
        "backdrop_path": "/backdrop.jpg",
        "first_air_date": "2011-04-17",
        "last_air_date": "2019-05-19",
        "status": "Ended",
        "vote_average": 8.456,
        "genres": [{"id": 18, "name": "Drama"}, {"id": 10765, "name": "Sci-Fi & Fantasy"}],
        "number_of_seasons": 8,
        "episode_run_time": [60],
        "next_episode_to_air": None,
        "networks": [
            {"id": 49, "name": "HBO", "origin_country": "US"},
            {"id": 50, "name": "Other", "origin_country": "GB"},
        ],
        "homepage": "https://www.hbo.com/game-of-thrones",
    }


@pytest.fixture
def tmdb_genre_payload():
    return {"genres": [{"id": 18, "name": "Drama"}, {"id": 35, "name": "Comedy"}]}


@pytest.fixture
def tvmaze_show_payload():
    """A trimmed /shows/{id} response."""
    return {
        "id": 82,
        "url": "https://www.tvmaze.com/shows/82/game-of-thrones",
        "name": "Game of Thrones",
        "type": "Scripted",
        "language": "English",
        "genres": ["Drama", "Adventure", "Fantasy"],
        "status": "Ended",
        "runtime": 60,
        "averageRuntime": 61,
        "premiered": "2011-04-17",
        "ended": "2019-05-19",
        "officialSite": "http://www.hbo.com/game-of-thrones",
        "schedule": {"time": "21:00", "days": ["Sunday"]},
        "rating": {"average": 8.9},
        "weight": 98,
        "network": {
            "id": 8,
            "name": "HBO",
            "country": {"name": "United States", "code": "US", "timezone": "America/New_York"},
            "officialSite": "https://www.hbo.com/",
        },
        "webChannel": None,
        "externals": {"tvrage": 24493, "thetvdb": 121361, "imdb": "tt0944947"},
        "image": {
            "medium": "https://static.tvmaze.com/uploads/images/medium_portrait/190/476117.jpg",
            "original": "https://static.tvmaze.com/uploads/images/original_untouched/190/476117.jpg",
        },
        "summary": "<p>Based on the bestseller book series <b>A Song of Ice and Fire</b>.</p>",
        "updated": 1704794122,
        "_links": {
            "self": {"href": "https://api.tvmaze.com/shows/82"},
            "previousepisode": {"href": "https://api.tvmaze.com/episodes/1623968"},
        },
    }


@pytest.fixture
def tvmaze_episode_payload():
    return {
        "id": 4952,
        "url": "https://www.tvmaze.com/episodes/4952/game-of-thrones-1x01-winter-is-coming",
        "name": "Winter is Coming",
        "season": 1,
        "number": 1,
        "type": "regular",
        "airdate": "2011-04-17",
        "airtime": "21:00",
        "airstamp": "2011-04-18T01:00:00+00:00",
        "runtime": 60,
        "rating": {"average": 8.1},
        "image": None,
        "summary": "<p>Lord Eddard Stark is torn.</p>",
        "_links": {"self": {"href": "https://api.tvmaze.com/episodes/4952"}},
    }
