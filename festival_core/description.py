"""Display texts for assembled events.

The descriptions are for humans only and are never parsed again.
"""

from __future__ import annotations

from typing import Mapping

from .parser import parse_number

UNKNOWN_MARKER = "k.A."

# (obere Grenze exklusiv, Groessenbeschreibung)
SIZE_TIERS: list[tuple[float, str]] = [
    (1_000, "ein eher kleines Festival"),
    (10_000, "ein mittelgroßes Festival"),
    (50_000, "ein großes Festival"),
    (float("inf"), "ein sehr großes Festival"),
]


def format_number(value: int) -> str:
    """Format with German thousands separators (10000 -> "10.000")."""
    return f"{value:,}".replace(",", ".")


def _is_known(value: str | None) -> bool:
    return bool(value) and value != UNKNOWN_MARKER


def _size_clause(visitors: int) -> str:
    for upper_bound, label in SIZE_TIERS:
        if visitors < upper_bound:
            amount = str(visitors) if visitors < 1_000 else format_number(visitors)
            return f". Es ist {label} mit rund {amount} Besuchern"
    return ""


def generate_festival_description(row: Mapping[str, str]) -> str:
    """Describe a festival from its raw CSV row."""
    name = row.get("Name") or "Das Festival"
    date_raw = row.get("Datum") or ""
    location = row.get("Ort") or ""
    plz = row.get("PLZ") or ""
    genre = row.get("Genre") or ""

    description = f"{name} findet"

    lowered_date = date_raw.lower()
    if _is_known(date_raw) and "abgesagt" not in lowered_date and "tba" not in lowered_date:
        description += f" vom {date_raw}"
    else:
        description += " voraussichtlich in 2025/2026"

    if _is_known(location):
        description += f" in {location}"
        if _is_known(plz):
            description += f" ({plz})"
    description += " statt"

    if _is_known(genre):
        description += f" und bietet {genre} Musik"

    visitors = parse_number(row.get("Besucher"))
    if visitors > 0:
        description += _size_clause(visitors)

    return description + "."


def generate_city_festival_description(
    fest_name: str,
    datum_raw: str,
    stadt: str,
    plz: str,
    besucher: int,
    anmerkungen: str,
) -> str:
    """Describe a city festival from its already parsed fields."""
    description = f"{fest_name or 'Das Stadtfest'} findet"

    lowered_date = (datum_raw or "").lower()
    if _is_known(datum_raw) and "tba" not in lowered_date and "unbestimmt" not in lowered_date:
        description += f" am {datum_raw}"

    if _is_known(stadt):
        description += f" in {stadt}"
        if _is_known(plz):
            description += f" ({plz})"
    description += " statt."

    if besucher > 0:
        description += f" Es werden rund {format_number(besucher)} Besucher erwartet."

    notes = (anmerkungen or "").strip()
    if notes and notes != UNKNOWN_MARKER:
        description += f" {notes}"

    return description.strip()
