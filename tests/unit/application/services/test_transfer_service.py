"""Tests for the transfer pipeline and its direction wiring."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tunebridge.application.services.transfer_service import (
    TransferPipeline,
    TransferService,
)
from tunebridge.config import TransferSettings
from tunebridge.domain.entities import FailedItem, SourceTrack
from tunebridge.domain.exceptions import ExternalServiceError, TransferFailedError
from tunebridge.domain.ports import ITrackDestination, ITrackSource
from tunebridge.domain.value_objects import StepResult
from tunebridge.infrastructure.plugins import (
    SpotifyDestination,
    SpotifyTrackSource,
    YouTubeDestination,
    YouTubeTrackSource,
)

TRACKS = [
    SourceTrack("Song One", ("Artist A",)),
    SourceTrack("Song Two", ("Artist B", "Artist C")),
    SourceTrack("Song Three", ("Artist D",)),
]


def make_source(tracks: list[SourceTrack]) -> AsyncMock:
    source = AsyncMock(spec=ITrackSource)
    source.fetch_tracks.return_value = tracks
    return source


def make_destination(*, bulk: bool) -> AsyncMock:
    destination = AsyncMock(spec=ITrackDestination)
    destination.supports_bulk_add = bulk
    destination.create_playlist.return_value = "new-playlist"

    async def resolve(track: SourceTrack) -> StepResult[str]:
        if track.title == "Song Two":
            return StepResult.not_found(step="match")
        return StepResult.ok(f"id-{track.title}", step="match")

    destination.resolve.side_effect = resolve
    return destination


class TestTransferPipelinePerItem:
    """Test the per-item write path (YouTube-style destinations)."""

    async def test_unmatched_track_is_reported_and_others_are_added(self) -> None:
        destination = make_destination(bulk=False)
        pipeline = TransferPipeline(make_source(TRACKS), destination)

        result = await pipeline.run("src-1", "Road Trip")

        assert result.created_playlist_id == "new-playlist"
        assert result.total_source_items == 3
        assert result.succeeded_count == 2
        assert result.failed_items == [FailedItem("Song Two", ("Artist B", "Artist C"))]
        destination.create_playlist.assert_awaited_once_with("Imported — Road Trip")
        assert [c.args for c in destination.add_item.await_args_list] == [
            ("new-playlist", "id-Song One"),
            ("new-playlist", "id-Song Three"),
        ]
        destination.add_items.assert_not_awaited()

    async def test_failed_insert_is_a_failed_item(self) -> None:
        destination = make_destination(bulk=False)
        destination.add_item.side_effect = [ExternalServiceError("500"), None]
        pipeline = TransferPipeline(make_source(TRACKS), destination)

        result = await pipeline.run("src-1", "Mix")

        assert result.succeeded_count == 1
        assert [item.title for item in result.failed_items] == ["Song One", "Song Two"]

    async def test_search_failure_is_a_failed_item(self) -> None:
        destination = make_destination(bulk=False)
        destination.resolve.side_effect = None
        destination.resolve.return_value = StepResult.failed("quota", step="match")
        pipeline = TransferPipeline(make_source(TRACKS[:1]), destination)

        result = await pipeline.run("src-1", "Mix")

        assert result.succeeded_count == 0
        assert result.failed_items == [FailedItem.from_track(TRACKS[0])]
        destination.add_item.assert_not_awaited()

    async def test_empty_source_still_creates_playlist(self) -> None:
        destination = make_destination(bulk=False)
        pipeline = TransferPipeline(make_source([]), destination)

        result = await pipeline.run("src-1", "Empty")

        assert result.total_source_items == 0
        assert result.succeeded_count == 0
        destination.create_playlist.assert_awaited_once()

    async def test_custom_title_prefix(self) -> None:
        destination = make_destination(bulk=False)
        pipeline = TransferPipeline(make_source([]), destination, title_prefix="From YT: ")

        await pipeline.run("src-1", "Chill")

        destination.create_playlist.assert_awaited_once_with("From YT: Chill")


class TestTransferPipelineBulk:
    """Test the bulk write path (Spotify-style destinations)."""

    async def test_matched_ids_are_written_in_one_chunk(self) -> None:
        destination = make_destination(bulk=True)
        pipeline = TransferPipeline(make_source(TRACKS), destination)

        result = await pipeline.run("yt-1", "Faves")

        destination.add_items.assert_awaited_once_with(
            "new-playlist", ["id-Song One", "id-Song Three"]
        )
        destination.add_item.assert_not_awaited()
        assert result.succeeded_count == 2
        assert len(result.failed_items) == 1

    async def test_250_matches_are_written_as_100_100_50(self) -> None:
        tracks = [SourceTrack(f"T{i}", ("A",)) for i in range(250)]
        destination = make_destination(bulk=True)
        pipeline = TransferPipeline(make_source(tracks), destination)

        result = await pipeline.run("yt-1", "Big")

        sizes = [len(c.args[1]) for c in destination.add_items.await_args_list]
        assert sizes == [100, 100, 50]
        assert result.succeeded_count == 250

    async def test_failed_chunk_marks_its_tracks_failed(self) -> None:
        tracks = [SourceTrack(f"T{i}", ("A",)) for i in range(5)]
        destination = make_destination(bulk=True)
        destination.add_items.side_effect = [ExternalServiceError("502"), None, None]
        pipeline = TransferPipeline(make_source(tracks), destination, batch_size=2)

        result = await pipeline.run("yt-1", "Chunks")

        assert destination.add_items.await_count == 3
        assert result.succeeded_count == 3
        assert [item.title for item in result.failed_items] == ["T0", "T1"]


class TestTransferPipelineAborts:
    """Test the phases that abort the whole run."""

    async def test_fetch_failure_raises_and_creates_nothing(self) -> None:
        source = AsyncMock(spec=ITrackSource)
        source.fetch_tracks.side_effect = ExternalServiceError("404", status_code=404)
        destination = make_destination(bulk=False)

        with pytest.raises(TransferFailedError) as exc_info:
            await TransferPipeline(source, destination).run("gone", "X")

        assert exc_info.value.phase == "fetch_source"
        destination.create_playlist.assert_not_awaited()

    async def test_create_failure_raises_before_any_match(self) -> None:
        destination = make_destination(bulk=False)
        destination.create_playlist.side_effect = ExternalServiceError("403")

        with pytest.raises(TransferFailedError) as exc_info:
            await TransferPipeline(make_source(TRACKS), destination).run("src", "X")

        assert exc_info.value.phase == "create_destination_playlist"
        destination.resolve.assert_not_awaited()


class TestTransferService:
    """Test direction wiring."""

    @pytest.fixture
    def clients(self) -> MagicMock:
        clients = MagicMock()
        clients.spotify.return_value = MagicMock(name="spotify")
        clients.youtube.return_value = MagicMock(name="youtube")
        return clients

    @pytest.fixture
    def pipeline_cls(self, mocker) -> MagicMock:
        pipeline_cls = mocker.patch(
            "tunebridge.application.services.transfer_service.TransferPipeline"
        )
        pipeline_cls.return_value.run = AsyncMock(return_value="result")
        return pipeline_cls

    async def test_forward_direction_uses_spotify_source_and_youtube_destination(
        self, clients: MagicMock, pipeline_cls: MagicMock
    ) -> None:
        result = await TransferService(clients).transfer_to_youtube(
            "sp-tok", "gg-tok", "p1", "Name"
        )

        assert result == "result"
        clients.spotify.assert_called_once_with("sp-tok")
        clients.youtube.assert_called_once_with("gg-tok")
        source, destination = pipeline_cls.call_args.args
        assert isinstance(source, SpotifyTrackSource)
        assert isinstance(destination, YouTubeDestination)
        pipeline_cls.return_value.run.assert_awaited_once_with("p1", "Name")

    async def test_reverse_direction_caps_source_videos(
        self, clients: MagicMock, pipeline_cls: MagicMock
    ) -> None:
        settings = TransferSettings(reverse_source_limit=25, batch_size=50)

        await TransferService(clients, settings).transfer_to_spotify(
            "gg-tok", "sp-tok", "yt1", "Name"
        )

        source, destination = pipeline_cls.call_args.args
        assert isinstance(source, YouTubeTrackSource)
        assert source.limit == 25
        assert isinstance(destination, SpotifyDestination)
        assert pipeline_cls.call_args.kwargs["batch_size"] == 50
