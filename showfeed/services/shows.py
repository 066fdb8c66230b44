"""Show metadata facade.

The only entry points consumers should call. Each operation is answered by
the configured primary provider, or by the fallback provider when the
primary is unavailable or fails. Which one answered is visible only through
``Show.provider``.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from showfeed.core.config import get_settings
from showfeed.models.media import (
    Episode,
    ScheduleEntry,
    SearchResult,
    Show,
    ShowImage,
)
from showfeed.providers import ProviderRegistry, register_provider
from showfeed.providers.base import ContentProvider
from showfeed.providers.tmdb_provider import TMDBProvider
from showfeed.providers.tvmaze_provider import TVMazeProvider
from showfeed.services.fallback import with_provider_fallback

logger = logging.getLogger(__name__)


def register_default_providers() -> None:
    """Register the TMDB and TVmaze providers if they are not registered yet."""
    if ProviderRegistry.get("tmdb") is None:
        register_provider(TMDBProvider())
    if ProviderRegistry.get("tvmaze") is None:
        register_provider(TVMazeProvider())


def _resolve_providers() -> tuple[ContentProvider, ContentProvider]:
    settings = get_settings()
    register_default_providers()
    primary = ProviderRegistry.get(settings.primary_provider)
    fallback = ProviderRegistry.get(settings.fallback_provider)
    if primary is None or fallback is None:
        raise LookupError(
            f"Providers not registered: {settings.primary_provider}, {settings.fallback_provider}"
        )
    return primary, fallback


def provider_for(show: Show) -> ContentProvider:
    """Return the registered provider that issued ``show``.

    Show ids are only meaningful to the provider that produced them, so
    follow-up requests for a known show bypass the fallback order.
    """
    register_default_providers()
    provider = ProviderRegistry.get(show.provider)
    if provider is None:
        raise LookupError(f"Provider not registered: {show.provider}")
    return provider


async def search_shows(query: str) -> List[SearchResult]:
    primary, fallback = _resolve_providers()
    return await with_provider_fallback(
        primary, fallback, lambda provider: provider.search_shows(query)
    )


async def get_show(show_id: int) -> Show:
    primary, fallback = _resolve_providers()
    return await with_provider_fallback(
        primary, fallback, lambda provider: provider.get_show(show_id)
    )


async def get_show_episodes(
    show_id: int, season_number: Optional[int] = None
) -> List[Episode]:
    primary, fallback = _resolve_providers()
    return await with_provider_fallback(
        primary,
        fallback,
        lambda provider: provider.get_show_episodes(show_id, season_number),
    )


async def get_show_images(show_id: int) -> List[ShowImage]:
    primary, fallback = _resolve_providers()
    return await with_provider_fallback(
        primary, fallback, lambda provider: provider.get_show_images(show_id)
    )


async def get_schedule(
    country_code: Optional[str] = None, date: Optional[str] = None
) -> List[ScheduleEntry]:
    """Fetch the broadcast schedule; each provider applies its own country default."""
    primary, fallback = _resolve_providers()
    return await with_provider_fallback(
        primary, fallback, lambda provider: provider.get_schedule(country_code, date)
    )


async def get_web_schedule(
    date: Optional[str] = None, country_code: Optional[str] = None
) -> List[ScheduleEntry]:
    primary, fallback = _resolve_providers()
    return await with_provider_fallback(
        primary,
        fallback,
        lambda provider: provider.get_web_schedule(date, country_code),
    )


async def aclose_providers() -> None:
    """Close the HTTP sessions of every registered provider."""
    for provider in ProviderRegistry.all():
        try:
            await provider.aclose()
        except Exception as e:
            logger.error(f"Error closing provider {provider.name}: {e}")


@asynccontextmanager
async def providers_lifespan():
    """Register the default providers and close their sessions on exit."""
    register_default_providers()
    try:
        yield
    finally:
        await aclose_providers()
