"""Tests for title parsing and search query building."""

from tunebridge.domain.entities import SourceTrack
from tunebridge.domain.value_objects import (
    ParsedTitle,
    build_field_query,
    build_search_query,
    parse_artist_title,
    parsed_to_track,
)


class TestParseArtistTitle:
    """Test the "Artist - Title" heuristic."""

    def test_hyphen_delimiter(self) -> None:
        assert parse_artist_title("Daft Punk - One More Time") == ParsedTitle(
            title="One More Time", artist="Daft Punk"
        )

    def test_em_dash_delimiter(self) -> None:
        parsed = parse_artist_title("Daft Punk — One More Time")
        assert parsed.artist == "Daft Punk"
        assert parsed.title == "One More Time"

    def test_pipe_delimiter_without_spaces(self) -> None:
        parsed = parse_artist_title("Daft Punk|One More Time")
        assert parsed.artist == "Daft Punk"
        assert parsed.title == "One More Time"

    def test_no_delimiter_keeps_whole_title(self) -> None:
        parsed = parse_artist_title("One More Time (Official Video)")
        assert parsed.artist is None
        assert parsed.title == "One More Time (Official Video)"

    def test_splits_on_first_occurrence_only(self) -> None:
        """Everything after the first delimiter belongs to the title."""
        parsed = parse_artist_title("Artist - Title - Live")
        assert parsed.artist == "Artist"
        assert parsed.title == "Title - Live"

    def test_hyphen_takes_priority_over_pipe(self) -> None:
        """Even when the pipe appears first in the string."""
        parsed = parse_artist_title("A | B - C")
        assert parsed.artist == "A | B"
        assert parsed.title == "C"

    def test_hyphen_without_spaces_is_not_a_delimiter(self) -> None:
        parsed = parse_artist_title("Jay-Z Empire State of Mind")
        assert parsed.artist is None

    def test_empty_artist_becomes_none(self) -> None:
        parsed = parse_artist_title(" - Intro")
        assert parsed.artist is None
        assert parsed.title == "Intro"

    def test_parsed_to_track(self) -> None:
        track = parsed_to_track(ParsedTitle(title="One More Time", artist="Daft Punk"))
        assert track == SourceTrack(title="One More Time", artists=("Daft Punk",))

        no_artist = parsed_to_track(ParsedTitle(title="Intro"))
        assert no_artist.artists == ()


class TestBuildSearchQuery:
    """Test free-text query building for YouTube search."""

    def test_with_isrc_uses_title_first_artist_and_isrc(self) -> None:
        track = SourceTrack(
            title="One More Time", artists=("Daft Punk", "Romanthony"), isrc="GBDUW0000053"
        )
        assert build_search_query(track) == "One More Time Daft Punk GBDUW0000053"

    def test_without_isrc_joins_all_artists(self) -> None:
        track = SourceTrack(title="One More Time", artists=("Daft Punk", "Romanthony"))
        assert build_search_query(track) == "One More Time Daft Punk Romanthony"

    def test_without_artists(self) -> None:
        assert build_search_query(SourceTrack(title="Intro")) == "Intro "


class TestBuildFieldQuery:
    """Test Spotify field-filter query building."""

    def test_title_and_artist(self) -> None:
        assert build_field_query("One More Time", "Daft Punk") == (
            "track:One More Time artist:Daft Punk"
        )

    def test_title_only(self) -> None:
        assert build_field_query("One More Time") == "track:One More Time"
