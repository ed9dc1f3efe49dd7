"""Tests for the YouTube Data API client."""

import json
from collections.abc import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from tunebridge.config import GoogleSettings
from tunebridge.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    TokenRefreshException,
)
from tunebridge.infrastructure.integrations.youtube_client import YouTubeClient
from tunebridge.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(requests_seen: list[httpx.Request]) -> Callable[..., YouTubeClient]:
    def factory(handler: Handler, token: str | None = "gg-token") -> YouTubeClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return handler(request)

        return YouTubeClient(
            GoogleSettings(client_id="gid", client_secret="gsecret"),
            token,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(recording_handler)),
            rate_limiter=RateLimiter(RateLimiterConfig(max_tokens=100, refill_rate=1000.0)),
        )

    return factory


class TestYouTubeClientRefresh:
    """Test the Google refresh-token grant."""

    async def test_client_credentials_go_in_the_form(
        self, make_client, requests_seen
    ) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200, json={"access_token": "fresh", "expires_in": 3599}
            )
        )

        grant = await client.refresh_access_token("g-r")

        assert grant.access_token == "fresh"
        assert grant.expires_in == 3599
        form = parse_qs(requests_seen[0].content.decode())
        assert form == {
            "client_id": ["gid"],
            "client_secret": ["gsecret"],
            "grant_type": ["refresh_token"],
            "refresh_token": ["g-r"],
        }
        assert "Authorization" not in requests_seen[0].headers

    async def test_response_without_access_token(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"foo": "bar"}))

        with pytest.raises(TokenRefreshException):
            await client.refresh_access_token("g-r")

    async def test_non_json_error_body(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(TokenRefreshException) as exc_info:
            await client.refresh_access_token("g-r")

        assert exc_info.value.http_status == 503
        assert exc_info.value.error_code is None

    async def test_missing_client_credentials(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(200))
        client.settings = GoogleSettings(client_id="", client_secret="")

        with pytest.raises(ConfigurationError):
            await client.refresh_access_token("g-r")


class TestYouTubeClientPlaylists:
    """Test playlist reads and writes."""

    async def test_playlists_page_prefers_medium_thumbnail(
        self, make_client, requests_seen
    ) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": "PL1",
                            "snippet": {
                                "title": "Workout",
                                "thumbnails": {
                                    "default": {"url": "https://i/default.jpg"},
                                    "medium": {"url": "https://i/medium.jpg"},
                                },
                            },
                            "contentDetails": {"itemCount": 42},
                        }
                    ],
                    "nextPageToken": "CAUQAA",
                },
            )
        )

        page = await client.get_my_playlists_page("CAIQAA")

        params = requests_seen[0].url.params
        assert params["mine"] == "true"
        assert params["pageToken"] == "CAIQAA"
        assert params["part"] == "snippet,contentDetails"
        playlist = page.items[0]
        assert (playlist.id, playlist.name, playlist.item_count) == ("PL1", "Workout", 42)
        assert playlist.image_url == "https://i/medium.jpg"
        assert page.next_cursor == "CAUQAA"

    async def test_videos_page_drops_unusable_items_but_counts_them(
        self, make_client
    ) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "snippet": {
                                "title": "Daft Punk - Get Lucky",
                                "resourceId": {"videoId": "v1"},
                            }
                        },
                        {"snippet": {"title": "Deleted video", "resourceId": {}}},
                        {"snippet": {"title": "", "resourceId": {"videoId": "v3"}}},
                    ]
                },
            )
        )

        page = await client.get_playlist_videos_page("PL1", None, 50)

        assert [(v.video_id, v.title) for v in page.items] == [
            ("v1", "Daft Punk - Get Lucky")
        ]
        assert page.raw_count == 3
        assert page.next_cursor is None

    async def test_create_playlist_is_unlisted(self, make_client, requests_seen) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"id": "PLnew"}))

        playlist_id = await client.create_playlist("Imported — Mix")

        assert playlist_id == "PLnew"
        request = requests_seen[0]
        assert request.url.params["part"] == "snippet,status"
        assert json.loads(request.content) == {
            "snippet": {"title": "Imported — Mix", "description": "Imported from Spotify"},
            "status": {"privacyStatus": "unlisted"},
        }

    async def test_add_video(self, make_client, requests_seen) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"id": "item"}))

        await client.add_video("PL1", "v9")

        body = json.loads(requests_seen[0].content)
        assert body["snippet"]["playlistId"] == "PL1"
        assert body["snippet"]["resourceId"] == {"kind": "youtube#video", "videoId": "v9"}

    async def test_quota_error_maps_to_external_service_error(self, make_client) -> None:
        client = make_client(
            lambda request: httpx.Response(
                403, json={"error": {"code": 403, "message": "quotaExceeded"}}
            )
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.add_video("PL1", "v9")

        assert exc_info.value.status_code == 403
        assert "quotaExceeded" in exc_info.value.message


class TestYouTubeClientSearchAndClassification:
    """Test search and category lookups."""

    async def test_search_first_video_id(self, make_client, requests_seen) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200, json={"items": [{"id": {"kind": "youtube#video", "videoId": "abc"}}]}
            )
        )

        assert await client.search_first_video_id("Intro The xx") == "abc"
        params = requests_seen[0].url.params
        assert params["type"] == "video"
        assert params["maxResults"] == "1"

    async def test_search_without_hits(self, make_client) -> None:
        client = make_client(lambda request: httpx.Response(200, json={"items": []}))
        assert await client.search_first_video_id("zzz") is None

    async def test_sample_video_ids(self, make_client, requests_seen) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "items": [
                        {"contentDetails": {"videoId": "a"}},
                        {"contentDetails": {}},
                        {"contentDetails": {"videoId": "c"}},
                    ]
                },
            )
        )

        assert await client.sample_video_ids("PL1", 5) == ["a", "c"]
        assert requests_seen[0].url.params["maxResults"] == "5"

    async def test_video_categories(self, make_client, requests_seen) -> None:
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "items": [
                        {"id": "a", "snippet": {"categoryId": "10"}},
                        {"id": "c", "snippet": {"categoryId": "22"}},
                    ]
                },
            )
        )

        categories = await client.get_video_categories(["a", "b", "c"])

        assert categories == {"a": "10", "c": "22"}
        assert requests_seen[0].url.params["id"] == "a,b,c"

    async def test_video_categories_for_no_ids_skips_request(
        self, make_client, requests_seen
    ) -> None:
        client = make_client(lambda request: httpx.Response(200, json={}))

        assert await client.get_video_categories([]) == {}
        assert requests_seen == []
