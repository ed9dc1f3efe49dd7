"""Tests for playlist listings and YouTube playlist classification."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from tunebridge.application.pagination import Page
from tunebridge.application.services.playlist_service import PlaylistService
from tunebridge.domain.entities import PlaylistRef
from tunebridge.domain.exceptions import ExternalServiceError


def playlist(playlist_id: str) -> PlaylistRef:
    return PlaylistRef(id=playlist_id, name=f"List {playlist_id}", item_count=3)


@pytest.fixture
def youtube() -> MagicMock:
    client = MagicMock()
    client.sample_video_ids = AsyncMock(return_value=["v1", "v2", "v3", "v4"])
    client.get_video_categories = AsyncMock()
    return client


@pytest.fixture
def clients(youtube: MagicMock) -> MagicMock:
    clients = MagicMock()
    clients.youtube.return_value = youtube
    return clients


class TestIsPlaylistMusic:
    """Test the majority-music threshold."""

    @pytest.mark.parametrize(
        ("categories", "expected"),
        [
            ({"v1": "10", "v2": "10", "v3": "22", "v4": "22"}, True),  # 2 of 4
            ({"v1": "10", "v2": "22", "v3": "22", "v4": "22"}, False),  # 1 of 4
            ({"v1": "10", "v2": "10", "v3": "22"}, True),  # 2 of 3
            ({"v1": "10", "v2": "22", "v3": "24"}, False),  # 1 of 3
            ({"v1": "10"}, True),
        ],
    )
    async def test_threshold_is_half_of_returned_videos_rounded_up(
        self,
        clients: MagicMock,
        youtube: MagicMock,
        categories: dict[str, str],
        expected: bool,
    ) -> None:
        youtube.get_video_categories.return_value = categories

        assert await PlaylistService(clients).is_playlist_music(youtube, "pl") is expected

    async def test_empty_playlist_is_not_music(
        self, clients: MagicMock, youtube: MagicMock
    ) -> None:
        youtube.sample_video_ids.return_value = []

        assert await PlaylistService(clients).is_playlist_music(youtube, "pl") is False
        youtube.get_video_categories.assert_not_awaited()

    async def test_no_videos_returned_is_not_music(
        self, clients: MagicMock, youtube: MagicMock
    ) -> None:
        youtube.get_video_categories.return_value = {}

        assert await PlaylistService(clients).is_playlist_music(youtube, "pl") is False

    async def test_samples_configured_number_of_videos(
        self, clients: MagicMock, youtube: MagicMock
    ) -> None:
        youtube.get_video_categories.return_value = {"v1": "10"}

        await PlaylistService(clients, sample_size=3).is_playlist_music(youtube, "pl")

        youtube.sample_video_ids.assert_awaited_once_with("pl", 3)


class TestClassifyPlaylists:
    """Test the bounded fan-out."""

    async def test_failure_degrades_single_playlist_to_not_music(
        self, clients: MagicMock, youtube: MagicMock
    ) -> None:
        async def categories(ids: list[str]) -> dict[str, str]:
            return {video_id: "10" for video_id in ids}

        async def sample(playlist_id: str, n: int) -> list[str]:
            if playlist_id == "broken":
                raise ExternalServiceError("403 forbidden", status_code=403)
            return ["v1"]

        youtube.sample_video_ids.side_effect = sample
        youtube.get_video_categories.side_effect = categories

        result = await PlaylistService(clients).classify_playlists(
            youtube, [playlist("a"), playlist("broken"), playlist("c")]
        )

        assert [(entry.playlist.id, entry.is_music) for entry in result] == [
            ("a", True),
            ("broken", False),
            ("c", True),
        ]

    async def test_concurrency_is_bounded(
        self, clients: MagicMock, youtube: MagicMock
    ) -> None:
        in_flight = 0
        peak = 0

        async def sample(playlist_id: str, n: int) -> list[str]:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return []

        youtube.sample_video_ids.side_effect = sample

        await PlaylistService(clients, classification_concurrency=2).classify_playlists(
            youtube, [playlist(str(i)) for i in range(6)]
        )

        assert peak == 2


class TestListings:
    """Test the listing entry points."""

    async def test_source_listing_follows_pages(self, clients: MagicMock) -> None:
        spotify = MagicMock()
        spotify.get_my_playlists_page = AsyncMock(
            side_effect=[
                Page([playlist("1")], next_cursor="https://api.spotify.com/next"),
                Page([playlist("2")], next_cursor=None),
            ]
        )
        clients.spotify.return_value = spotify

        result = await PlaylistService(clients).list_source_playlists("sp-tok")

        clients.spotify.assert_called_once_with("sp-tok")
        assert [p.id for p in result] == ["1", "2"]
        assert spotify.get_my_playlists_page.await_args_list[1].args == (
            "https://api.spotify.com/next",
            50,
        )

    async def test_destination_listing_returns_only_music(
        self, clients: MagicMock, youtube: MagicMock
    ) -> None:
        youtube.get_my_playlists_page = AsyncMock(
            return_value=Page([playlist("music"), playlist("vlogs")])
        )

        async def sample(playlist_id: str, n: int) -> list[str]:
            return [playlist_id]

        async def categories(ids: list[str]) -> dict[str, str]:
            return {ids[0]: "10" if ids[0] == "music" else "22"}

        youtube.sample_video_ids.side_effect = sample
        youtube.get_video_categories.side_effect = categories

        result = await PlaylistService(clients).list_destination_playlists("gg-tok")

        clients.youtube.assert_called_once_with("gg-tok")
        assert [entry.playlist.id for entry in result] == ["music"]
        assert all(entry.is_music for entry in result)
