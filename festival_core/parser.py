"""Field parsers for raw CSV cells.

Every function here is pure and never raises for bad input: a cell that
cannot be interpreted degrades to a safe default (0, ``Region.UNKNOWN``).
"""

from __future__ import annotations

import math
import re
from datetime import date
from enum import Enum


RANGE_SEPARATOR_RE = re.compile(r"[–-]")
QUALIFIER_RE = re.compile(r"ca\.?|zirca|etwa|rund")
UNIT_RE = re.compile(r"\s*(tage|besucher|follower|jahre|stunden|minuten|sekunden|million|mio\.?).*")
THOUSANDS_DOT_RE = re.compile(r"\.(?=\d{3}(?!\d))")
NON_NUMERIC_RE = re.compile(r"[^0-9.]")
LEADING_FLOAT_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
NON_DIGIT_RE = re.compile(r"[^0-9]")

FULL_DATE_RE = re.compile(r"\d{1,2}\.(\d{1,2})\.(\d{2,4})?")
SHORT_DATE_RE = re.compile(r"(\d{1,2})\.(\d{1,2})")
BARE_MONTH_RE = re.compile(r"^(\d{1,2})$")
SPAN_DATE_RE = re.compile(r"(\d{1,2})\.(\d{1,2})\.(\d{4})")

NUMBER_EXACT_SENTINELS = {"k.a.", "n.a", "n/a"}
NUMBER_SENTINEL_FRAGMENTS = ("variiert stark", "nicht gefunden", "abgesagt", "tba", "unbestimmt")

MONTH_EXACT_SENTINELS = {"k.a.", "t.b.a", "tba"}
MONTH_SENTINEL_FRAGMENTS = ("noch nicht bekannt", "abgesagt", "unbestimmt")

# Reihenfolge = Prioritaet, erster Treffer gewinnt
MONTH_KEYWORDS: list[tuple[tuple[str, ...], int]] = [
    (("jan", "januar", "jän"), 1),
    (("feb", "februar"), 2),
    (("mär", "märz", "mar"), 3),
    (("apr", "april"), 4),
    (("mai",), 5),
    (("jun", "juni"), 6),
    (("jul", "juli"), 7),
    (("aug", "august"), 8),
    (("sep", "september"), 9),
    (("okt", "oktober", "oct"), 10),
    (("nov", "november"), 11),
    (("dez", "dezember", "dec"), 12),
]


class Region(str, Enum):
    """Sales region derived from the first PLZ digit."""

    OST = "Ost"
    NORD = "Nord"
    WEST = "West"
    SUED = "Süd"
    UNKNOWN = "Unknown"


REGION_BY_FIRST_DIGIT = {
    "0": Region.OST,
    "1": Region.OST,
    "2": Region.NORD,
    "3": Region.WEST,
    "4": Region.WEST,
    "5": Region.WEST,
    "6": Region.SUED,
    "7": Region.SUED,
    "8": Region.SUED,
    "9": Region.SUED,
}

BERLIN_PREFIXES = ("10", "12", "13", "14")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_valid_month(value: int) -> bool:
    return 1 <= value <= 12


def clean_plz(value: object) -> str:
    """Reduce a postal code cell to its digits."""
    if value is None:
        return ""
    return NON_DIGIT_RE.sub("", str(value))


def parse_number(value: object) -> int:
    """Parse a loosely formatted German number into a non-negative integer.

    Handles thousands dots ("10.000"), decimal commas ("1,5"), ranges
    ("10000-15000" -> average), qualifiers ("ca.", "rund") and trailing
    units ("500 Besucher"). Unknown markers such as "k.A." or "TBA" give 0.

    Args:
        value: Raw cell value (usually a string, numbers are accepted)

    Returns:
        The rounded value, 0 if nothing usable was found.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return 0
        return _round_half_up(abs(value))

    text = str(value).strip().lower()
    if not text:
        return 0

    if text in NUMBER_EXACT_SENTINELS:
        return 0
    if any(fragment in text for fragment in NUMBER_SENTINEL_FRAGMENTS):
        return 0

    text = QUALIFIER_RE.sub("", text).strip()

    if RANGE_SEPARATOR_RE.search(text):
        parts = RANGE_SEPARATOR_RE.split(text)
        if len(parts) == 2:
            start = parse_number(parts[0])
            end = parse_number(parts[1])
            if start > 0 and end > 0:
                return _round_half_up((start + end) / 2)
            return start if start > 0 else end

    text = UNIT_RE.sub("", text, count=1).strip()

    cleaned = THOUSANDS_DOT_RE.sub("", text).replace(",", ".")
    cleaned = NON_NUMERIC_RE.sub("", cleaned)
    if not cleaned:
        return 0

    match = LEADING_FLOAT_RE.match(cleaned)
    if not match:
        return 0

    number = float(match.group(0))
    if not math.isfinite(number):
        return 0
    return _round_half_up(number)


def extract_month(value: object) -> int:
    """Extract the calendar month (1-12) from a raw date cell.

    Only the start of a date range is considered. German month names win
    over numeric patterns. ``DD.MM`` is read day-first, falling back to the
    first group when the second one is not a valid month.

    Returns:
        The month, or 0 if it cannot be determined.
    """
    if value is None:
        return 0

    text = str(value).strip().lower()
    if not text:
        return 0

    if text in MONTH_EXACT_SENTINELS:
        return 0
    if any(fragment in text for fragment in MONTH_SENTINEL_FRAGMENTS):
        return 0

    if RANGE_SEPARATOR_RE.search(text):
        text = RANGE_SEPARATOR_RE.split(text)[0].strip()

    for keywords, month in MONTH_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return month

    match = FULL_DATE_RE.search(text)
    if match:
        month = int(match.group(1))
        if _is_valid_month(month):
            return month
        if match.group(2):
            month = int(match.group(2))
            if _is_valid_month(month):
                return month

    match = SHORT_DATE_RE.search(text)
    if match:
        second = int(match.group(2))
        if _is_valid_month(second):
            return second
        first = int(match.group(1))
        if _is_valid_month(first):
            return first

    match = BARE_MONTH_RE.match(text)
    if match:
        month = int(match.group(1))
        if _is_valid_month(month):
            return month

    return 0


def determine_region(plz: object) -> Region:
    """Map a PLZ (or a city name) to a sales region.

    Berlin codes (10, 12, 13, 14) and any value mentioning "berlin" are
    always ``Region.OST``.
    """
    if plz is None:
        return Region.UNKNOWN

    raw = str(plz)
    if not raw.strip():
        return Region.UNKNOWN

    cleaned = clean_plz(raw)

    if "berlin" in raw.lower() or cleaned.startswith(BERLIN_PREFIXES):
        return Region.OST

    if not cleaned:
        return Region.UNKNOWN

    return REGION_BY_FIRST_DIGIT.get(cleaned[0], Region.UNKNOWN)


def _parse_span_date(text: str) -> date | None:
    match = SPAN_DATE_RE.search(text)
    if not match:
        return None
    day, month, year = (int(group) for group in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def calculate_duration(value: object) -> int:
    """Count the days of a ``DD.MM.YYYY-DD.MM.YYYY`` range, both ends included.

    Returns 1 for single dates and anything that is not a complete range.
    """
    if value is None:
        return 1

    text = str(value)
    if not RANGE_SEPARATOR_RE.search(text):
        return 1

    parts = [part.strip() for part in RANGE_SEPARATOR_RE.split(text)]
    if len(parts) != 2:
        return 1

    start = _parse_span_date(parts[0])
    end = _parse_span_date(parts[1])
    if start is None or end is None:
        return 1

    return abs((end - start).days) + 1
