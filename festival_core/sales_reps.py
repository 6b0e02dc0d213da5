"""Sales representatives and their PLZ territories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Protocol, Sequence

from .plz_filter import matches_any_pattern

logger = logging.getLogger(__name__)

PLZ_COLUMN = "PLZ"
REP_ID_COLUMN = "BezWertH"

# Mitarbeiternummern, die im Dashboard beruecksichtigt werden
KNOWN_SALES_REP_IDS = [
    "111",
    "112",
    "113",
    "115",
    "117",
    "119",
    "127",
    "131",
    "134",
    "135",
    "136",
    "141",
    "243",
    "244",
    "245",
    "246",
    "252",
    "256",
    "258",
    "259",
    "261",
    "262",
    "266",
]


class HasPlz(Protocol):
    plz: str


@dataclass(frozen=True)
class SalesRepresentative:
    """A sales representative with the PLZ patterns of their territory."""

    id: str
    name: str
    plz_areas: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "plz_areas": list(self.plz_areas)}


def build_sales_representatives(
    rows: Iterable[Mapping[str, str]],
    fieldnames: Sequence[str],
    known_ids: Sequence[str] = KNOWN_SALES_REP_IDS,
) -> list[SalesRepresentative]:
    """Group PLZ assignments by representative.

    Every known id is returned, even without assigned areas; rows for
    unknown ids are ignored. Pattern order follows the file.

    Args:
        rows: Parsed CSV rows
        fieldnames: Header of the CSV file
        known_ids: Allowlist of representative ids

    Returns:
        Representatives sorted by id, or an empty list if the PLZ or
        BezWertH column is missing.
    """
    headers = [name.strip() for name in fieldnames]
    if PLZ_COLUMN not in headers or REP_ID_COLUMN not in headers:
        logger.error(
            "CSV-Format nicht wie erwartet. Konnte %s oder %s nicht finden (Spalten: %s)",
            PLZ_COLUMN,
            REP_ID_COLUMN,
            headers,
        )
        return []

    areas: dict[str, list[str]] = {rep_id: [] for rep_id in known_ids}
    skipped = 0

    for row in rows:
        plz = (row.get(PLZ_COLUMN) or "").strip()
        rep_id = (row.get(REP_ID_COLUMN) or "").strip()
        if not plz or not rep_id:
            skipped += 1
            continue
        if rep_id not in areas:
            skipped += 1
            continue
        areas[rep_id].append(plz)

    if skipped:
        logger.debug("%s Zeilen ohne bekannte Mitarbeiternummer uebersprungen", skipped)

    reps = [
        SalesRepresentative(id=rep_id, name=f"Mitarbeiter {rep_id}", plz_areas=tuple(plz_areas))
        for rep_id, plz_areas in areas.items()
    ]
    return sorted(reps, key=lambda rep: rep.id)


def is_event_in_sales_rep_area(event: HasPlz, rep: SalesRepresentative) -> bool:
    """Check whether an event's PLZ lies in the representative's territory."""
    if not event.plz or not rep.plz_areas:
        return False
    return matches_any_pattern(event.plz, rep.plz_areas)


def sales_rep_predicate(rep: SalesRepresentative) -> Callable[[HasPlz], bool]:
    """Return a predicate usable with ``filter()`` for one territory."""

    def predicate(event: HasPlz) -> bool:
        return is_event_in_sales_rep_area(event, rep)

    return predicate


def count_events_per_sales_rep(
    events: Sequence[HasPlz],
    reps: Iterable[SalesRepresentative],
) -> dict[str, int]:
    """Count the events inside each representative's territory."""
    return {
        rep.id: sum(1 for event in events if is_event_in_sales_rep_area(event, rep))
        for rep in reps
    }


def find_sales_rep(reps: Iterable[SalesRepresentative], rep_id: str) -> SalesRepresentative | None:
    for rep in reps:
        if rep.id == rep_id:
            return rep
    return None
