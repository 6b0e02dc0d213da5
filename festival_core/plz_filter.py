from __future__ import annotations

from dataclasses import dataclass

from .parser import clean_plz


@dataclass(frozen=True)
class PlzFilter:
    """Filter for PLZ selection.

    Supports two modes:
    - Prefix mode: Match PLZ starting with a given prefix (e.g., "4", "40", "401")
    - Range mode: Match PLZ within a numeric range (e.g., 40000-41000)

    In range mode ``width`` limits the comparison to the leading digits of
    the PLZ, so a range of 3-digit prefixes like 300-399 covers 30000-39999.
    """

    prefix: str | None = None
    range_start: int | None = None
    range_end: int | None = None
    width: int | None = None


def parse_plz_filter(value: str) -> PlzFilter:
    """Parse a PLZ filter string entered by a user.

    Args:
        value: Filter string, either:
            - A prefix like "4", "40", "401"
            - A range like "40000-41000"

    Returns:
        PlzFilter with either prefix or range set.

    Raises:
        ValueError: If the filter string is invalid.
    """
    value = value.strip()
    if "-" in value:
        parts = value.split("-")
        if len(parts) != 2:
            raise ValueError(f"Ungültiger Bereich: {value}")
        try:
            start = int(parts[0])
            end = int(parts[1])
        except ValueError:
            raise ValueError(f"Ungültiger Bereich: {value}")

        if start >= end:
            raise ValueError(f"Start muss kleiner als Ende sein: {value}")
        if start < 0 or end > 99999:
            raise ValueError(f"PLZ muss zwischen 0 und 99999 liegen: {value}")

        return PlzFilter(range_start=start, range_end=end)
    else:
        if not value.isdigit():
            raise ValueError(f"Präfix muss nur Ziffern enthalten: {value}")
        if len(value) > 5:
            raise ValueError(f"Präfix darf maximal 5 Ziffern haben: {value}")

        return PlzFilter(prefix=value)


def parse_area_pattern(pattern: str) -> PlzFilter | None:
    """Parse a sales territory pattern from the PLZ list.

    Territory files mix notations, checked in this order:
    - "30*"      prefix wildcard
    - "300xx"    prefix with placeholder digits
    - "30xxx"    prefix up to the first "x"
    - "300-399"  numeric range (compared on the width of the endpoints)
    - "30159"    exact PLZ, or a bare prefix like "30"

    Unlike ``parse_plz_filter`` this never raises: a pattern without usable
    digits yields None and never matches.

    Two notations differ from the old dashboard: "30xxx" strips
    every placeholder (prefix "30"; cutting only "xx" left "30x", which
    never matched), and a pattern without digits matches nothing instead of
    every PLZ. Territory counts differ accordingly; only "*" matches all.
    """
    pattern = pattern.strip().lower()
    if not pattern:
        return None

    if pattern.endswith("*"):
        return PlzFilter(prefix=pattern[:-1])

    # "30xxx" endet ebenfalls auf "xx": alle Platzhalter entfernen
    if pattern.endswith("xx"):
        return PlzFilter(prefix=pattern.rstrip("x"))

    if pattern.endswith("x"):
        return PlzFilter(prefix=pattern[: pattern.index("x")])

    if "-" in pattern:
        parts = pattern.split("-")
        start_digits = clean_plz(parts[0])
        end_digits = clean_plz(parts[1])
        if not start_digits or not end_digits:
            return None
        return PlzFilter(
            range_start=int(start_digits),
            range_end=int(end_digits),
            width=max(len(start_digits), len(end_digits)),
        )

    digits = clean_plz(pattern)
    if not digits:
        return None
    return PlzFilter(prefix=digits)


def matches_filter(plz: str, plz_filter: PlzFilter) -> bool:
    """Check if a PLZ matches the filter.

    Args:
        plz: The PLZ to check (5-digit string)
        plz_filter: The filter to match against

    Returns:
        True if the PLZ matches the filter.
    """
    if plz_filter.prefix is not None:
        return plz.startswith(plz_filter.prefix)

    if plz_filter.range_start is not None and plz_filter.range_end is not None:
        compared = plz
        if plz_filter.width is not None and plz_filter.width < len(plz):
            compared = plz[: plz_filter.width]
        try:
            plz_int = int(compared)
            return plz_filter.range_start <= plz_int <= plz_filter.range_end
        except ValueError:
            return False

    return True


def matches_any_pattern(plz: str, patterns: list[str] | tuple[str, ...]) -> bool:
    """Check a PLZ against territory patterns in order; first match wins."""
    cleaned = clean_plz(plz)
    if not cleaned:
        return False

    for pattern in patterns:
        plz_filter = parse_area_pattern(pattern)
        if plz_filter is not None and matches_filter(cleaned, plz_filter):
            return True

    return False
