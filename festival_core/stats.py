"""Dashboard filters and statistics over assembled events."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Iterable, Sequence, TypeVar

from .festival_type import FESTIVAL_TYPES
from .models import Festival
from .parser import Region

REGIONS = [Region.OST, Region.NORD, Region.WEST, Region.SUED]
MONTHS = [
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
]


@dataclass(frozen=True)
class VisitorRange:
    label: str
    min: int
    max: float

    def contains(self, visitors: int) -> bool:
        return self.min <= visitors < self.max


VISITOR_RANGES = [
    VisitorRange("Klein (< 1.000)", 0, 1_000),
    VisitorRange("Mittel (1.000 - 10.000)", 1_000, 10_000),
    VisitorRange("Groß (10.000 - 50.000)", 10_000, 50_000),
    VisitorRange("Sehr groß (> 50.000)", 50_000, float("inf")),
]

GENRE_SPLIT_RE = re.compile(r"[,/]")
IGNORED_GENRES = {"k.A.", "N/A", "Unknown"}
TOP_GENRES = 10

T = TypeVar("T")


@dataclass
class FestivalStats:
    """Aggregates shown on the dashboard."""

    region_distribution: dict[str, int] = field(default_factory=dict)
    month_distribution: dict[str, int] = field(default_factory=dict)
    genre_distribution: list[tuple[str, int]] = field(default_factory=list)
    type_distribution: list[tuple[str, int]] = field(default_factory=list)
    size_distribution: dict[str, int] = field(default_factory=dict)
    total_festivals: int = 0
    average_visitors: int = 0
    festivals_with_visitor_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def find_visitor_range(label: str) -> VisitorRange | None:
    for visitor_range in VISITOR_RANGES:
        if visitor_range.label == label:
            return visitor_range
    return None


def calculate_stats(festivals: Sequence[Festival]) -> FestivalStats:
    """Compute the region, month, genre, type and size distributions."""
    regions = {region.value: 0 for region in REGIONS}
    months = {name: 0 for name in MONTHS}
    genres: dict[str, int] = {}
    types = {label: 0 for label in FESTIVAL_TYPES}
    sizes = {visitor_range.label: 0 for visitor_range in VISITOR_RANGES}

    total_visitors = 0
    with_visitors = 0

    for festival in festivals:
        if festival.region.value in regions:
            regions[festival.region.value] += 1

        if 1 <= festival.month <= 12:
            months[MONTHS[festival.month - 1]] += 1

        for genre in GENRE_SPLIT_RE.split(festival.genre or ""):
            genre = genre.strip()
            if genre and genre not in IGNORED_GENRES:
                genres[genre] = genres.get(genre, 0) + 1

        if festival.festival_type in types:
            types[festival.festival_type] += 1

        if festival.visitors > 0:
            total_visitors += festival.visitors
            with_visitors += 1
            for visitor_range in VISITOR_RANGES:
                if visitor_range.contains(festival.visitors):
                    sizes[visitor_range.label] += 1
                    break

    average = int(total_visitors / with_visitors + 0.5) if with_visitors else 0

    return FestivalStats(
        region_distribution=regions,
        month_distribution=months,
        genre_distribution=sorted(genres.items(), key=lambda item: item[1], reverse=True)[:TOP_GENRES],
        type_distribution=sorted(types.items(), key=lambda item: item[1], reverse=True),
        size_distribution=sizes,
        total_festivals=len(festivals),
        average_visitors=average,
        festivals_with_visitor_count=with_visitors,
    )


def filter_events(
    records: Iterable[T],
    region: str | None = None,
    month: int | None = None,
    event_type: str | None = None,
    visitor_range: VisitorRange | None = None,
    search: str | None = None,
    hide_empty: bool = False,
) -> list[T]:
    """Apply the dashboard filters. ``None`` disables a filter.

    Works for festivals and city festivals alike (both expose ``region``,
    ``month``, ``event_type``, ``visitors``, ``name``, ``location``, ``plz``).
    """
    needle = search.strip().lower() if search else ""
    selected: list[T] = []

    for record in records:
        if region is not None and record.region.value != region:
            continue
        if month is not None and record.month != month:
            continue
        if event_type is not None and record.event_type != event_type:
            continue
        if visitor_range is not None and not visitor_range.contains(record.visitors):
            continue
        if hide_empty and record.visitors <= 0:
            continue
        if needle:
            haystack = (record.name, record.location, record.plz, record.event_type)
            if not any(needle in (value or "").lower() for value in haystack):
                continue
        selected.append(record)

    return selected
