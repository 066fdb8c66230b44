"""Date-bucketed episode views for daily lists and weekly calendars.

Episodes without an air date are unscheduled: they belong in a show's full
episode list but never in anything keyed by date, so every function here
drops them.
"""

import asyncio
from datetime import date, timedelta
from typing import Dict, Iterable, List, NamedTuple, Optional

from showfeed.models.media import Episode, Show
from showfeed.services.shows import provider_for


class ShowEpisode(NamedTuple):
    """An episode together with the show it belongs to."""

    show: Show
    episode: Episode


def air_date(episode: Episode) -> Optional[date]:
    """Parse an episode's air date, None when it is empty or malformed."""
    if not episode.airdate:
        return None
    try:
        return date.fromisoformat(episode.airdate[:10])
    except ValueError:
        return None


def scheduled_episodes(episodes: Iterable[Episode]) -> List[Episode]:
    """Return only the episodes that have a usable air date."""
    return [ep for ep in episodes if air_date(ep) is not None]


def pair_episodes(show: Show, episodes: Iterable[Episode]) -> List[ShowEpisode]:
    return [ShowEpisode(show, ep) for ep in scheduled_episodes(episodes)]


async def load_scheduled_episodes(shows: List[Show]) -> List[ShowEpisode]:
    """Fetch the episodes of several shows concurrently and pair them up.

    Each show is fetched from the provider that issued it, since its id means
    nothing to the other one.
    """
    results = await asyncio.gather(
        *[provider_for(show).get_show_episodes(show.id) for show in shows]
    )
    items: List[ShowEpisode] = []
    for show, episodes in zip(shows, results):
        items.extend(pair_episodes(show, episodes))
    return items


def _day_order(item: ShowEpisode) -> tuple:
    # Timed episodes first, in time order; the rest by show name
    airtime = item.episode.airtime
    return (0, airtime, "") if airtime else (1, "", item.show.name)


def episodes_airing_on(items: Iterable[ShowEpisode], day: date) -> List[ShowEpisode]:
    """Return the episodes airing on ``day``, ordered for a daily list."""
    matches = [item for item in items if air_date(item.episode) == day]
    return sorted(matches, key=_day_order)


def week_days(day: date, week_starts_on: int = 0) -> List[date]:
    """Return the seven dates of the week containing ``day``.

    ``week_starts_on`` uses ``date.weekday()`` numbering (0 is Monday).
    """
    start = day - timedelta(days=(day.weekday() - week_starts_on) % 7)
    return [start + timedelta(days=offset) for offset in range(7)]


def bucket_episodes_by_day(
    items: Iterable[ShowEpisode], days: List[date]
) -> Dict[str, List[ShowEpisode]]:
    """Group episodes by ISO air date, one key per requested day.

    Days without episodes map to an empty list; episodes outside ``days`` are
    left out.
    """
    buckets: Dict[str, List[ShowEpisode]] = {day.isoformat(): [] for day in days}
    for item in items:
        aired = air_date(item.episode)
        if aired is None:
            continue
        key = aired.isoformat()
        if key in buckets:
            buckets[key].append(item)
    return buckets


def next_air_date(items: Iterable[ShowEpisode], today: date) -> Optional[date]:
    """Return the earliest air date on or after ``today``, if any."""
    upcoming = [
        aired
        for aired in (air_date(item.episode) for item in items)
        if aired is not None and aired >= today
    ]
    return min(upcoming, default=None)
