"""Cross-platform playlist transfer.

Hey future me - a transfer is a strictly SEQUENTIAL state machine:

    FETCH_SOURCE → CREATE_DESTINATION_PLAYLIST → per item (MATCH → WRITE) → DONE

Nothing runs in parallel. Upstream quotas are per minute; a parallel burst of searches or
inserts is how you get 429s and half-finished playlists. Only the first two phases can abort
the whole run (TransferFailedError → 500). Everything per item is recorded in the result.

Re-running a transfer ALWAYS creates a new destination playlist. If the request dies midway,
the created playlist stays behind (no cleanup).
"""

import logging
from enum import Enum

from tunebridge.application.batching import DEFAULT_CHUNK_SIZE, BatchWriter
from tunebridge.config import TransferSettings
from tunebridge.domain.entities import FailedItem, SourceTrack, TransferResult
from tunebridge.domain.exceptions import TransferFailedError
from tunebridge.domain.ports import ITrackDestination, ITrackSource
from tunebridge.domain.value_objects import OutcomeKind
from tunebridge.infrastructure.integrations import ProviderClientFactory
from tunebridge.infrastructure.plugins import (
    SpotifyDestination,
    SpotifyTrackSource,
    YouTubeDestination,
    YouTubeTrackSource,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE_PREFIX = "Imported — "


class TransferPhase(str, Enum):
    """Phases of one transfer run (used in logs and TransferFailedError.phase)."""

    FETCH_SOURCE = "fetch_source"
    CREATE_DESTINATION_PLAYLIST = "create_destination_playlist"
    MATCH = "match"
    WRITE = "write"
    DONE = "done"


class TransferPipeline:
    """Copies one source playlist into a newly created destination playlist."""

    def __init__(
        self,
        source: ITrackSource,
        destination: ITrackDestination,
        *,
        batch_size: int = DEFAULT_CHUNK_SIZE,
        title_prefix: str = DEFAULT_TITLE_PREFIX,
    ) -> None:
        """Initialize the pipeline.

        Args:
            source: Where tracks are read from (caps, if any, live in the adapter)
            destination: Where matches are searched and written
            batch_size: Chunk size for bulk destinations
            title_prefix: Prepended to the source playlist name
        """
        self._source = source
        self._destination = destination
        self._batch_size = batch_size
        self._title_prefix = title_prefix

    async def run(self, playlist_id: str, playlist_name: str) -> TransferResult:
        """Run the transfer.

        Args:
            playlist_id: Source playlist id
            playlist_name: Source playlist name (used for the new title)

        Returns:
            TransferResult with counts and the unmatched/unwritten items

        Raises:
            TransferFailedError: Fetching the source or creating the playlist failed
        """
        try:
            tracks = await self._source.fetch_tracks(playlist_id)
        except Exception as e:
            logger.error("Fetching source playlist %s failed: %s", playlist_id, e)
            raise TransferFailedError(
                f"Failed to fetch source playlist: {e}",
                phase=TransferPhase.FETCH_SOURCE.value,
            ) from e

        title = f"{self._title_prefix}{playlist_name}"
        try:
            created_id = await self._destination.create_playlist(title)
        except Exception as e:
            logger.error("Creating destination playlist failed: %s", e)
            raise TransferFailedError(
                f"Failed to create destination playlist: {e}",
                phase=TransferPhase.CREATE_DESTINATION_PLAYLIST.value,
            ) from e

        result = TransferResult(
            created_playlist_id=created_id, total_source_items=len(tracks)
        )
        logger.info(
            "Transferring %d items into playlist %s (bulk=%s)",
            len(tracks),
            created_id,
            self._destination.supports_bulk_add,
        )

        pending: list[tuple[SourceTrack, str]] = []
        for track in tracks:
            match = await self._destination.resolve(track)
            if match.kind is not OutcomeKind.OK or not match.value:
                logger.debug("No match for %r (%s)", track.title, match.kind.value)
                result.failed_items.append(FailedItem.from_track(track))
                continue

            if self._destination.supports_bulk_add:
                pending.append((track, match.value))
                continue

            try:
                await self._destination.add_item(created_id, match.value)
            except Exception as e:
                logger.warning("Adding %r failed: %s", track.title, e)
                result.failed_items.append(FailedItem.from_track(track))
                continue
            result.succeeded_count += 1

        if pending:
            await self._write_bulk(created_id, pending, result)

        logger.info(
            "Transfer done: %d/%d added, %d failed",
            result.succeeded_count,
            result.total_source_items,
            len(result.failed_items),
        )
        return result

    # Failed chunk → every track in it is a failed item; the next chunk still goes out.
    async def _write_bulk(
        self,
        playlist_id: str,
        pending: list[tuple[SourceTrack, str]],
        result: TransferResult,
    ) -> None:
        writer: BatchWriter[tuple[SourceTrack, str]] = BatchWriter(
            lambda chunk: self._destination.add_items(
                playlist_id, [item_id for _, item_id in chunk]
            ),
            chunk_size=self._batch_size,
        )
        for outcome in await writer.write(pending):
            if outcome.result.is_ok:
                result.succeeded_count += len(outcome.items)
            else:
                result.failed_items.extend(
                    FailedItem.from_track(track) for track, _ in outcome.items
                )


class TransferService:
    """Wires the pipeline for both directions from live provider tokens."""

    def __init__(
        self,
        clients: ProviderClientFactory,
        settings: TransferSettings | None = None,
    ) -> None:
        self._clients = clients
        self._settings = settings or TransferSettings()

    async def transfer_to_youtube(
        self,
        spotify_token: str,
        google_token: str,
        playlist_id: str,
        playlist_name: str,
    ) -> TransferResult:
        """Copy a Spotify playlist into a new unlisted YouTube playlist."""
        pipeline = TransferPipeline(
            SpotifyTrackSource(self._clients.spotify(spotify_token)),
            YouTubeDestination(self._clients.youtube(google_token)),
            batch_size=self._settings.batch_size,
            title_prefix=self._settings.playlist_title_prefix,
        )
        return await pipeline.run(playlist_id, playlist_name)

    async def transfer_to_spotify(
        self,
        google_token: str,
        spotify_token: str,
        playlist_id: str,
        playlist_name: str,
    ) -> TransferResult:
        """Copy (up to reverse_source_limit videos of) a YouTube playlist into Spotify."""
        pipeline = TransferPipeline(
            YouTubeTrackSource(
                self._clients.youtube(google_token),
                limit=self._settings.reverse_source_limit,
            ),
            SpotifyDestination(self._clients.spotify(spotify_token)),
            batch_size=self._settings.batch_size,
            title_prefix=self._settings.playlist_title_prefix,
        )
        return await pipeline.run(playlist_id, playlist_name)
