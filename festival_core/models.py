"""Event records.

Each CSV row is assembled into one immutable record. Filters and statistics
select records, they never modify them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from .parser import Region


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True)
class Festival:
    """One music festival from the general festival list."""

    id: int
    name: str
    location: str
    plz: str
    date: str
    month: int
    duration: int
    genre: str
    visitors: int
    insta_followers: int
    region: Region
    website: str
    contact: str
    festival_type: str
    description: str
    lat: float | None
    lon: float | None

    @property
    def event_type(self) -> str:
        return self.festival_type

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["region"] = self.region.value
        return data


@dataclass(frozen=True)
class CityFestival:
    """One city festival ("Stadtfest")."""

    id: int
    bundesland: str
    stadt: str
    fest_name: str
    plz: str
    datum_raw: str
    besucher: int
    anmerkungen: str
    lat: float | None
    lon: float | None
    monat: int
    region: Region
    beschreibung: str
    event_type: str

    @property
    def name(self) -> str:
        return self.fest_name

    @property
    def location(self) -> str:
        return self.stadt

    @property
    def month(self) -> int:
        return self.monat

    @property
    def visitors(self) -> int:
        return self.besucher

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["region"] = self.region.value
        return data
