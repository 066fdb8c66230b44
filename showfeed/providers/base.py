"""Provider base classes and interfaces."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

import niquests
from niquests.packages import urllib3

from showfeed.core.config import Settings, get_settings
from showfeed.models.media import (
    ContentProviderName,
    Episode,
    ScheduleEntry,
    SearchResult,
    Show,
    ShowImage,
)


class ProviderError(Exception):
    """Domain exception for metadata provider failures."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class ContentProvider(ABC):
    """Abstract base class for metadata providers.

    Every provider maps its upstream schema onto the unified models in
    ``showfeed.models.media`` and stamps its own name onto every Show it
    returns, including shows embedded in search results and schedule entries.

    ``is_available`` must be cheap and must not touch the network: the
    fallback orchestrator calls it before every request.
    """

    # No transport-level retries: the orchestrator fallback is the only retry.
    retry_config = urllib3.Retry(total=0)

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self._settings = settings
        self.session = niquests.AsyncSession(retries=self.retry_config)
        if settings.proxy:
            self.session.proxies = {"http": settings.proxy, "https": settings.proxy}

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if hasattr(self, "session") and self.session:
            await self.session.close()

    @property
    @abstractmethod
    def name(self) -> ContentProviderName:
        """Return the provider tag stamped onto every Show."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the provider is configured well enough to be called."""
        pass

    @abstractmethod
    async def search_shows(self, query: str) -> List[SearchResult]:
        """Search shows by free-text query."""
        pass

    @abstractmethod
    async def get_show(self, show_id: int) -> Show:
        """Fetch a single show."""
        pass

    @abstractmethod
    async def get_show_episodes(
        self, show_id: int, season_number: Optional[int] = None
    ) -> List[Episode]:
        """Fetch the episodes of a show, optionally limited to one season.

        Args:
            show_id: The provider-specific show id.
            season_number: If given, only that season's episodes are returned.

        Returns:
            Episodes in season order, then episode order.
        """
        pass

    @abstractmethod
    async def get_show_images(self, show_id: int) -> List[ShowImage]:
        """Fetch the artwork available for a show."""
        pass

    @abstractmethod
    async def get_schedule(
        self, country_code: Optional[str] = None, date: Optional[str] = None
    ) -> List[ScheduleEntry]:
        """Fetch the broadcast schedule for a country and ISO date (default today)."""
        pass

    @abstractmethod
    async def get_web_schedule(
        self, date: Optional[str] = None, country_code: Optional[str] = None
    ) -> List[ScheduleEntry]:
        """Fetch the streaming/web schedule for an ISO date (default today)."""
        pass

    def _stamp(self, show: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of a raw show payload tagged with this provider."""
        return {**show, "provider": self.name}
