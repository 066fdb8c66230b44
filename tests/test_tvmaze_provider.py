from unittest.mock import AsyncMock, MagicMock, patch

import niquests
import pytest

from showfeed.providers.tvmaze_provider import TVMazeError, TVMazeProvider


def test_tvmaze_provider_is_always_available(keyless_settings):
    provider = TVMazeProvider(keyless_settings)
    assert provider.name == "tvmaze"
    assert provider.is_available() is True


@pytest.mark.asyncio
async def test_tvmaze_search_stamps_provider(settings, tvmaze_show_payload):
    provider = TVMazeProvider(settings)

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = [{"score": 0.9, "show": tvmaze_show_payload}]
        results = await provider.search_shows("thrones")

    assert mock_get.call_args.args[:2] == ("/search/shows", {"q": "thrones"})
    assert results[0].score == 0.9
    assert results[0].show.provider == "tvmaze"
    assert results[0].show.name == "Game of Thrones"


@pytest.mark.asyncio
async def test_tvmaze_get_show(settings, tvmaze_show_payload):
    provider = TVMazeProvider(settings)

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = tvmaze_show_payload
        show = await provider.get_show(82)

    assert mock_get.call_args.args[0] == "/shows/82"
    assert show.provider == "tvmaze"
    assert show.schedule.time == "21:00"
    assert show.rating.average == 8.9


@pytest.mark.asyncio
async def test_tvmaze_episodes_keep_unscheduled(settings, tvmaze_episode_payload):
    provider = TVMazeProvider(settings)
    special = {**tvmaze_episode_payload, "id": 9, "season": 2, "number": None, "airdate": ""}

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = [tvmaze_episode_payload, special]
        episodes = await provider.get_show_episodes(82)

    assert [ep.id for ep in episodes] == [4952, 9]
    assert episodes[1].is_scheduled is False


@pytest.mark.asyncio
async def test_tvmaze_episodes_filtered_by_season(settings, tvmaze_episode_payload):
    provider = TVMazeProvider(settings)
    second = {**tvmaze_episode_payload, "id": 5000, "season": 2}

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = [tvmaze_episode_payload, second]
        episodes = await provider.get_show_episodes(82, 2)

    assert [ep.id for ep in episodes] == [5000]


@pytest.mark.asyncio
async def test_tvmaze_images(settings):
    provider = TVMazeProvider(settings)
    payload = [
        {
            "id": 1,
            "type": "poster",
            "main": True,
            "resolutions": {
                "original": {"url": "https://img/o.jpg", "width": 680, "height": 1000},
                "medium": {"url": "https://img/m.jpg", "width": 210, "height": 295},
            },
        },
        {"id": 2, "type": "background", "main": False, "resolutions": {}},
    ]

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = payload
        images = await provider.get_show_images(82)

    assert [img.type for img in images] == ["poster", "background"]
    assert images[0].resolutions.medium.url == "https://img/m.jpg"
    assert images[1].resolutions.original is None


@pytest.mark.asyncio
async def test_tvmaze_schedule_uses_default_country(settings, tvmaze_episode_payload, tvmaze_show_payload):
    provider = TVMazeProvider(settings)

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = [{**tvmaze_episode_payload, "show": tvmaze_show_payload}]
        entries = await provider.get_schedule(date="2011-04-17")

    assert mock_get.call_args.args[:2] == ("/schedule", {"country": "US", "date": "2011-04-17"})
    assert entries[0].airtime == "21:00"
    assert entries[0].show.provider == "tvmaze"
    assert entries[0].is_placeholder is False


@pytest.mark.asyncio
async def test_tvmaze_web_schedule_embedded_show(settings, tvmaze_episode_payload, tvmaze_show_payload):
    provider = TVMazeProvider(settings)
    web_show = {**tvmaze_show_payload, "network": None, "webChannel": {"id": 1, "name": "Netflix", "country": None}}

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = [{**tvmaze_episode_payload, "_embedded": {"show": web_show}}]
        entries = await provider.get_web_schedule("2024-01-01", "")

    assert mock_get.call_args.args[:2] == ("/schedule/web", {"date": "2024-01-01", "country": ""})
    assert entries[0].show.provider == "tvmaze"
    assert entries[0].show.web_channel.name == "Netflix"


@pytest.mark.asyncio
async def test_tvmaze_web_schedule_without_arguments(settings):
    provider = TVMazeProvider(settings)

    with patch.object(provider, "_get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = []
        assert await provider.get_web_schedule() == []

    assert mock_get.call_args.args[:2] == ("/schedule/web", {})


@pytest.mark.asyncio
async def test_tvmaze_http_error_wrapped(settings):
    provider = TVMazeProvider(settings)
    response = MagicMock()
    response.raise_for_status.side_effect = niquests.exceptions.HTTPError("404 Client Error")

    with patch.object(provider.session, "get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = response
        with pytest.raises(TVMazeError, match="Failed to fetch show"):
            await provider.get_show(0)

    assert mock_get.call_args.args[0] == "https://api.tvmaze.com/shows/0"


@pytest.mark.asyncio
async def test_tvmaze_request_failure_logged_at_debug(settings):
    provider = TVMazeProvider(settings)
    response = MagicMock()
    response.raise_for_status.side_effect = niquests.exceptions.HTTPError("503 Server Error")

    with patch.object(provider.session, "get", new_callable=AsyncMock) as mock_get, \
            patch("showfeed.providers.tvmaze_provider.logger") as mock_logger:
        mock_get.return_value = response
        with pytest.raises(TVMazeError):
            await provider.get_show(82)

    mock_logger.error.assert_not_called()
    mock_logger.debug.assert_called_once_with("Failed to fetch show (/shows/82): 503 Server Error")
