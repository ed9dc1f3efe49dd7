"""Transfer entities: tracks read from a source and the per-run result summary."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceTrack:
    """A track as read from the source platform (immutable)."""

    title: str
    artists: tuple[str, ...] = ()
    isrc: str | None = None

    @property
    def first_artist(self) -> str:
        return self.artists[0] if self.artists else ""


@dataclass(frozen=True)
class SourceVideo:
    """A raw YouTube playlist item (reverse direction)."""

    video_id: str
    title: str


@dataclass(frozen=True)
class FailedItem:
    """A source item that could not be matched or written."""

    title: str
    artists: tuple[str, ...] = ()

    @classmethod
    def from_track(cls, track: SourceTrack) -> "FailedItem":
        return cls(title=track.title, artists=track.artists)


# Hey future me - TransferResult is request-scoped! Built once per run, returned, discarded.
# total_source_items is the FETCHED list length, so it stays correct even if some items never
# get matched. succeeded_count only counts writes the destination acknowledged.
@dataclass
class TransferResult:
    """Summary of one transfer invocation."""

    created_playlist_id: str
    total_source_items: int
    succeeded_count: int = 0
    failed_items: list[FailedItem] = field(default_factory=list)


@dataclass(frozen=True)
class PlaylistRef:
    """Read-only projection of a playlist for listings."""

    id: str
    name: str
    item_count: int
    image_url: str | None = None
