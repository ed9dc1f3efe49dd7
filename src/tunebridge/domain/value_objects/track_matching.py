"""Heuristics for turning source titles into destination search queries.

Hey future me - these are PURE functions on purpose! No HTTP, no clients. Iterate on matching
quality here and test it with plain strings; the destination adapters only call into this.
"""

from dataclasses import dataclass

from tunebridge.domain.entities import SourceTrack

# Priority order matters: " - " beats the em-dash variant, which beats the bare pipe.
# "|" has no surrounding spaces because video titles use it both ways.
ARTIST_TITLE_DELIMITERS: tuple[str, ...] = (" - ", " — ", "|")


@dataclass(frozen=True)
class ParsedTitle:
    """Result of splitting a free-text title into artist and title."""

    title: str
    artist: str | None = None


def parse_artist_title(raw: str) -> ParsedTitle:
    """Split "Artist - Title" style strings.

    The first delimiter (in priority order) that occurs in `raw` wins, and the
    string is split on its FIRST occurrence only. Without any delimiter the
    whole string is the title.

    Args:
        raw: Free-text title, e.g. a YouTube video title

    Returns:
        ParsedTitle with trimmed artist (or None) and title

    Example:
        >>> parse_artist_title("Daft Punk - One More Time")
        ParsedTitle(title='One More Time', artist='Daft Punk')
    """
    for delimiter in ARTIST_TITLE_DELIMITERS:
        if delimiter in raw:
            artist, _, title = raw.partition(delimiter)
            return ParsedTitle(title=title.strip(), artist=artist.strip() or None)
    return ParsedTitle(title=raw)


def parsed_to_track(parsed: ParsedTitle) -> SourceTrack:
    """Build a SourceTrack with zero or one artist from a parsed title."""
    artists = (parsed.artist,) if parsed.artist else ()
    return SourceTrack(title=parsed.title, artists=artists)


def build_search_query(track: SourceTrack) -> str:
    """Build a free-text search query for a track.

    With an ISRC the query is title + first artist + ISRC (best chance of an
    exact hit); otherwise title + all artists separated by spaces.
    """
    if track.isrc:
        return f"{track.title} {track.first_artist} {track.isrc}"
    return f"{track.title} {' '.join(track.artists)}"


def build_field_query(title: str, artist: str | None = None) -> str:
    """Build a Spotify field-filter query ("track:... artist:...")."""
    parts = []
    if title:
        parts.append(f"track:{title}")
    if artist:
        parts.append(f"artist:{artist}")
    return " ".join(parts)
