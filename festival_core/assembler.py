"""Record assembly: raw CSV row -> Festival / CityFestival.

Each field is parsed independently and falls back to its own default, so a
defective cell never spoils the rest of the row, and a defective row never
spoils the batch. No cross-row validation is done; duplicates are allowed.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Mapping, Sequence, Union

from .description import generate_city_festival_description, generate_festival_description
from .festival_type import DatasetKind, determine_city_festival_type, determine_general_festival_type
from .geocoding import GeocodeCache, GeocodeLookup
from .models import CityFestival, Coordinates, Festival
from .parser import calculate_duration, determine_region, extract_month, parse_number

logger = logging.getLogger(__name__)

SLUG_RE = re.compile(r"[^a-z0-9]")

UNKNOWN_TEXT = "Unbekannt"
UNKNOWN_GENRE = "Unknown"

EventRecord = Union[Festival, CityFestival]


def _normalize_row(row: Mapping[str, object]) -> dict[str, str]:
    """Copy a raw row with stripped keys and values; None becomes ""."""
    normalized: dict[str, str] = {}
    for key, value in row.items():
        if key is None:
            continue
        normalized[str(key).strip()] = "" if value is None else str(value).strip()
    return normalized


def _slug(name: str) -> str:
    return SLUG_RE.sub("-", name.lower())


def geocode_key(city: str, plz: str) -> str:
    """Build the geocoding address / cache key for a location."""
    return f"{city} {plz}".strip()


async def _resolve_coordinates(
    city: str,
    plz: str,
    cache: GeocodeCache,
    lookup: GeocodeLookup | None,
) -> Coordinates | None:
    address = geocode_key(city, plz)
    if not address or lookup is None:
        return None
    return await cache.resolve(address, lookup)


async def assemble_festival(
    row: Mapping[str, object],
    index: int,
    cache: GeocodeCache,
    lookup: GeocodeLookup | None,
) -> Festival:
    """Assemble a music festival from its CSV row.

    Args:
        row: Raw CSV row (not modified)
        index: Zero-based position of the row in the file
        cache: Geocode cache shared by the batch
        lookup: Geocoding collaborator, None to skip geocoding

    Returns:
        The festival with ``id == index + 1``.
    """
    fields = _normalize_row(row)

    name = fields.get("Name") or f"Festival {index + 1}"
    city = fields.get("Ort", "")
    plz = fields.get("PLZ", "")
    date_raw = fields.get("Datum", "")
    genre = fields.get("Genre", "")

    coordinates = await _resolve_coordinates(city, plz, cache, lookup)
    slug = _slug(name)

    return Festival(
        id=index + 1,
        name=name,
        location=city,
        plz=plz,
        date=date_raw,
        month=extract_month(date_raw),
        duration=parse_number(fields.get("Dauer")) or calculate_duration(date_raw),
        genre=genre or UNKNOWN_GENRE,
        visitors=parse_number(fields.get("Besucher")),
        insta_followers=parse_number(fields.get("Instagram Follower April 25")),
        region=determine_region(plz or city),
        website=f"www.{slug}.de",
        contact=f"info@{slug}.de",
        festival_type=determine_general_festival_type(genre),
        description=generate_festival_description(fields),
        lat=coordinates.lat if coordinates else None,
        lon=coordinates.lon if coordinates else None,
    )


async def assemble_city_festival(
    row: Mapping[str, object],
    index: int,
    cache: GeocodeCache,
    lookup: GeocodeLookup | None,
) -> CityFestival:
    """Assemble a city festival from its CSV row.

    A missing city is displayed as "Unbekannt" but never geocoded.
    """
    fields = _normalize_row(row)

    city_raw = fields.get("Stadt", "")
    stadt = city_raw or UNKNOWN_TEXT
    plz = fields.get("PLZ (Veranstaltungsort)", "")
    fest_name = fields.get("Festname") or f"Stadtfest {index + 1}"
    datum_raw = fields.get("Datum (2025/2026)", "")
    anmerkungen = fields.get("Anmerkungen", "")
    besucher = parse_number(fields.get("Besucheranzahl (geschätzt)"))

    coordinates = await _resolve_coordinates(city_raw, plz, cache, lookup)

    return CityFestival(
        id=index + 1,
        bundesland=fields.get("Bundesland") or UNKNOWN_TEXT,
        stadt=stadt,
        fest_name=fest_name,
        plz=plz,
        datum_raw=datum_raw,
        besucher=besucher,
        anmerkungen=anmerkungen,
        lat=coordinates.lat if coordinates else None,
        lon=coordinates.lon if coordinates else None,
        monat=extract_month(datum_raw),
        region=determine_region(plz or stadt),
        beschreibung=generate_city_festival_description(
            fest_name=fest_name,
            datum_raw=datum_raw,
            stadt=stadt,
            plz=plz,
            besucher=besucher,
            anmerkungen=anmerkungen,
        ),
        event_type=determine_city_festival_type(anmerkungen),
    )


ASSEMBLERS = {
    DatasetKind.FESTIVALS: assemble_festival,
    DatasetKind.CITY_FESTIVALS: assemble_city_festival,
}


async def assemble_batch(
    rows: Sequence[Mapping[str, object]],
    kind: DatasetKind,
    cache: GeocodeCache,
    lookup: GeocodeLookup | None,
    concurrency: int = 4,
) -> list[EventRecord]:
    """Assemble all rows of a dataset concurrently.

    The result keeps the input order. A row that fails unexpectedly is
    logged and left out; all other rows are still returned.
    """
    if kind not in ASSEMBLERS:
        raise ValueError(f"Keine Events im Datensatz: {kind.value}")

    assemble = ASSEMBLERS[kind]
    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def run(index: int, row: Mapping[str, object]) -> EventRecord | None:
        async with semaphore:
            try:
                return await assemble(row, index, cache, lookup)
            except Exception:
                logger.exception("Zeile %s konnte nicht verarbeitet werden", index + 1)
                return None

    results = await asyncio.gather(*(run(index, row) for index, row in enumerate(rows)))
    records = [record for record in results if record is not None]
    logger.info("%s von %s Zeilen verarbeitet (%s)", len(records), len(rows), kind.value)
    return records
