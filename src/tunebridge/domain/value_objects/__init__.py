"""Domain value objects."""

from tunebridge.domain.value_objects.results import OutcomeKind, StepResult
from tunebridge.domain.value_objects.track_matching import (
    ARTIST_TITLE_DELIMITERS,
    ParsedTitle,
    build_field_query,
    build_search_query,
    parse_artist_title,
    parsed_to_track,
)

__all__ = [
    "OutcomeKind",
    "StepResult",
    "ARTIST_TITLE_DELIMITERS",
    "ParsedTitle",
    "build_field_query",
    "build_search_query",
    "parse_artist_title",
    "parsed_to_track",
]
