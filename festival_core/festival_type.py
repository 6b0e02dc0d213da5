"""Festival Type Classifier.

Maps free-text genre and notes fields to a closed set of labels using
ordered keyword tables. The first matching group wins, so the order of the
tables encodes their priority.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping


class DatasetKind(Enum):
    """The independent CSV datasets."""

    FESTIVALS = "festivals"
    CITY_FESTIVALS = "cityfestivals"
    SALES_REPS = "salesreps"


DEFAULT_FESTIVAL_TYPE = "Verschiedene"
DEFAULT_CITY_FESTIVAL_TYPE = "Stadtfest"
UNKNOWN_EVENT_TYPE = "Unbekannt"

FESTIVAL_TYPE_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("metal", "rock", "punk", "hardcore", "thrash"), "Rock/Metal"),
    (("electro", "techno", "house", "trance", "edm", "dance"), "Electronic"),
    (("hip-hop", "rap"), "Hip-Hop"),
    (("pop",), "Pop"),
    (("jazz", "blues"), "Jazz/Blues"),
    (("folk", "country", "mittelalter", "weltmusik", "genreübergreifend"), "Folk/World"),
    (("klassik", "classic"), "Classical"),
    (("reggae", "ska"), "Reggae/Ska"),
    (("schlager",), "Schlager"),
]

CITY_FESTIVAL_TYPE_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("historisch",), "Historisches Stadtfest"),
    (("markt",), "Marktfest"),
]

FESTIVAL_TYPES = [label for _, label in FESTIVAL_TYPE_KEYWORDS] + [DEFAULT_FESTIVAL_TYPE]
CITY_FESTIVAL_TYPES = [label for _, label in CITY_FESTIVAL_TYPE_KEYWORDS] + [DEFAULT_CITY_FESTIVAL_TYPE]


def _classify(
    text: str | None,
    table: list[tuple[tuple[str, ...], str]],
    default: str,
) -> str:
    if not text:
        return default

    lowered = str(text).lower()
    for keywords, label in table:
        if any(keyword in lowered for keyword in keywords):
            return label

    return default


def determine_general_festival_type(genre: str | None) -> str:
    """Classify a music festival by its genre string.

    Examples:
        >>> determine_general_festival_type("Punk, Ska")
        'Rock/Metal'
        >>> determine_general_festival_type("Techno / House")
        'Electronic'
        >>> determine_general_festival_type("")
        'Verschiedene'
    """
    return _classify(genre, FESTIVAL_TYPE_KEYWORDS, DEFAULT_FESTIVAL_TYPE)


def determine_city_festival_type(notes: str | None) -> str:
    """Classify a city festival by its notes ("Anmerkungen")."""
    return _classify(notes, CITY_FESTIVAL_TYPE_KEYWORDS, DEFAULT_CITY_FESTIVAL_TYPE)


def determine_event_type(row: Mapping[str, str], kind: DatasetKind) -> str:
    """Classify a raw row according to the dataset it came from."""
    if kind is DatasetKind.FESTIVALS:
        return determine_general_festival_type(row.get("Genre"))
    if kind is DatasetKind.CITY_FESTIVALS:
        return determine_city_festival_type(row.get("Anmerkungen"))
    return UNKNOWN_EVENT_TYPE
