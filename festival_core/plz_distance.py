"""PLZ-based distance approximation.

German postal code prefixes correlate loosely with geography. The distance
returned here is an ordinal proximity scale, not kilometres:

    0   very close (same 2-digit prefix)
    1   close (same first digit)
    2   medium
    3   far
    4   very far
    999 indeterminate (missing or invalid input)

Pairs of prefixes that are geographically closer than their numbers suggest
are listed in ``SPECIAL_CASES`` and override the digit difference.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, TypeVar

from .parser import Region, clean_plz


INDETERMINATE_DISTANCE = 999
MAX_SUPPORTED_DISTANCE = 1


class Locatable(Protocol):
    plz: str

    @property
    def location(self) -> str: ...


T = TypeVar("T", bound=Locatable)


# Ungeordnete Praefix-Paare -> Distanzstufe
SPECIAL_CASES: dict[frozenset[str], int] = {
    frozenset({"99", "04"}): 2,  # Erfurt - Leipzig
    frozenset({"01", "04"}): 1,  # Dresden - Leipzig
    frozenset({"99", "01"}): 2,  # Erfurt - Dresden
    frozenset({"80", "90"}): 2,  # Muenchen - Nuernberg
    frozenset({"50", "60"}): 2,  # Koeln - Frankfurt
    frozenset({"20", "30"}): 2,  # Hamburg - Hannover
    frozenset({"40", "44"}): 1,  # Duesseldorf - Dortmund
    frozenset({"44", "45"}): 1,  # Dortmund - Essen
    frozenset({"40", "47"}): 1,  # Duesseldorf - Duisburg
    frozenset({"40", "50"}): 1,  # Duesseldorf - Koeln
}

# (maximale Ziffern-Differenz, Distanzstufe)
DIFFERENCE_STEPS: list[tuple[int, int]] = [
    (5, 2),
    (15, 3),
]
FALLBACK_DISTANCE = 4


@dataclass(frozen=True)
class MajorCity:
    """Reference data for a large German city."""

    name: str
    primary_plz: str
    plz_ranges: tuple[str, ...]
    region: Region
    lat: float
    lon: float


MAJOR_CITIES: list[MajorCity] = [
    MajorCity("Berlin", "10115", ("10", "12", "13", "14"), Region.OST, 52.52, 13.405),
    MajorCity("Hamburg", "20095", ("20", "21", "22"), Region.NORD, 53.5511, 9.9937),
    MajorCity("München", "80331", ("80", "81", "82"), Region.SUED, 48.1351, 11.582),
    MajorCity("Köln", "50667", ("50", "51"), Region.WEST, 50.9375, 6.9603),
    MajorCity("Frankfurt am Main", "60311", ("60", "61", "65"), Region.WEST, 50.1109, 8.6821),
    MajorCity("Stuttgart", "70173", ("70", "71"), Region.SUED, 48.7758, 9.1829),
    MajorCity("Düsseldorf", "40213", ("40", "41"), Region.WEST, 51.2277, 6.7735),
    MajorCity("Leipzig", "04109", ("04",), Region.OST, 51.3397, 12.3731),
    MajorCity("Dortmund", "44135", ("44",), Region.WEST, 51.5136, 7.4653),
    MajorCity("Essen", "45127", ("45",), Region.WEST, 51.4556, 7.0116),
    MajorCity("Bremen", "28195", ("28",), Region.NORD, 53.0793, 8.8017),
    MajorCity("Dresden", "01067", ("01",), Region.OST, 51.0504, 13.7373),
    MajorCity("Hannover", "30159", ("30",), Region.NORD, 52.3759, 9.732),
    MajorCity("Nürnberg", "90402", ("90",), Region.SUED, 49.4521, 11.0767),
    MajorCity("Duisburg", "47051", ("47",), Region.WEST, 51.4344, 6.7623),
    MajorCity("Kiel", "24103", ("24",), Region.NORD, 54.3233, 10.1228),
    MajorCity("Wiesbaden", "65183", ("65",), Region.WEST, 50.0782, 8.2398),
    MajorCity("Magdeburg", "39104", ("39",), Region.OST, 52.1205, 11.6276),
    MajorCity("Freiburg", "79098", ("79",), Region.SUED, 47.999, 7.8421),
    MajorCity("Erfurt", "99084", ("99",), Region.OST, 50.9847, 11.0299),
    MajorCity("Rostock", "18055", ("18",), Region.NORD, 54.0924, 12.0991),
    MajorCity("Mainz", "55116", ("55",), Region.WEST, 49.9929, 8.2473),
    MajorCity("Saarbrücken", "66111", ("66",), Region.WEST, 49.2401, 6.9969),
    MajorCity("Potsdam", "14467", ("14",), Region.OST, 52.3906, 13.0645),
    MajorCity("Münster", "48143", ("48",), Region.WEST, 51.9607, 7.6261),
]


def calculate_plz_distance(plz_a: str | None, plz_b: str | None) -> int:
    """Approximate the distance between two PLZ on the ordinal scale.

    The result is symmetric: swapping the arguments never changes it.
    """
    clean_a = clean_plz(plz_a)
    clean_b = clean_plz(plz_b)

    if not clean_a or not clean_b:
        return INDETERMINATE_DISTANCE

    prefix_a = clean_a[:2]
    prefix_b = clean_b[:2]

    if prefix_a == prefix_b:
        return 0

    if clean_a[0] == clean_b[0]:
        return 1

    special = SPECIAL_CASES.get(frozenset({prefix_a, prefix_b}))
    if special is not None:
        return special

    difference = abs(int(prefix_a) - int(prefix_b))
    for max_difference, distance in DIFFERENCE_STEPS:
        if difference <= max_difference:
            return distance
    return FALLBACK_DISTANCE


def radius_to_max_distance(radius_km: float) -> int:
    """Translate a search radius into the highest accepted distance step.

    Up to 20 km only the same 2-digit prefix counts; anything larger is
    capped at "close" (step 1).
    """
    if radius_km <= 20:
        return 0
    return MAX_SUPPORTED_DISTANCE


def get_distance_label(distance: int) -> str:
    if distance == 0:
        return "Sehr nah (0-20km)"
    if distance == 1:
        return "Nah (20-50km)"
    return "Außerhalb des Suchradius"


def get_distance_class(distance: int) -> str:
    if distance == 0:
        return "very-close"
    if distance == 1:
        return "close"
    return "far"


def find_city_by_name(name: str | None) -> MajorCity | None:
    """Find a major city by (case-insensitive) name or a text containing it."""
    if not name:
        return None

    normalized = name.lower().strip()
    for city in MAJOR_CITIES:
        city_name = city.name.lower()
        if city_name == normalized or city_name in normalized:
            return city
    return None


def find_city_by_plz(plz: str | None) -> MajorCity | None:
    """Find the major city whose primary PLZ or prefix range covers ``plz``."""
    cleaned = clean_plz(plz)
    if not cleaned:
        return None

    for city in MAJOR_CITIES:
        if city.primary_plz == cleaned:
            return city

    prefix = cleaned[:2]
    for city in MAJOR_CITIES:
        if any(prefix.startswith(plz_range) for plz_range in city.plz_ranges):
            return city
    return None


def calculate_city_distance(city_a: str, city_b: str) -> int:
    first = find_city_by_name(city_a)
    second = find_city_by_name(city_b)
    if first is None or second is None:
        return INDETERMINATE_DISTANCE
    return calculate_plz_distance(first.primary_plz, second.primary_plz)


def calculate_city_to_plz_distance(city: str, plz: str) -> int:
    city_data = find_city_by_name(city)
    if city_data is None:
        return INDETERMINATE_DISTANCE
    return calculate_plz_distance(city_data.primary_plz, plz)


def resolve_reference_plz(reference: str | None) -> str:
    """Resolve a search reference (PLZ or city name) to a PLZ.

    Returns an empty string if neither digits nor a known city are found.
    """
    cleaned = clean_plz(reference)
    if cleaned:
        return cleaned

    city = find_city_by_name(reference)
    return city.primary_plz if city else ""


def rank_by_proximity(
    records: Iterable[T],
    reference_plz: str,
    radius_km: float,
) -> list[tuple[T, int]]:
    """Pair records with their distance to ``reference_plz`` and keep those in range.

    Records without PLZ are dropped. The result is sorted by distance; the
    sort is stable, so equally distant records keep their input order.
    """
    max_distance = radius_to_max_distance(radius_km)

    ranked: list[tuple[T, int]] = []
    for record in records:
        if not record.plz:
            continue
        distance = calculate_plz_distance(reference_plz, record.plz)
        if distance <= max_distance:
            ranked.append((record, distance))

    return sorted(ranked, key=lambda pair: pair[1])


def filter_by_proximity(
    records: Sequence[T],
    reference: str | None,
    radius_km: float,
) -> list[T]:
    """Select records near a reference PLZ or city, nearest first.

    Falls back to a case-insensitive location match when the reference
    cannot be resolved to a PLZ.
    """
    if not reference or not reference.strip():
        return list(records)

    reference_plz = resolve_reference_plz(reference)
    if not reference_plz:
        needle = reference.strip().lower()
        return [record for record in records if record.location and needle in record.location.lower()]

    return [record for record, _ in rank_by_proximity(records, reference_plz, radius_km)]
