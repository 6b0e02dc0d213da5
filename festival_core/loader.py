"""Dataset loader (CSV -> records).

The three datasets (festivals, city festivals, sales territories) load
independently: a failing source only affects its own dataset.

Sources are either http(s) URLs, fetched with httpx, or local file paths.
"""

from __future__ import annotations

import csv
import io
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import httpx

from .assembler import assemble_batch
from .config import Config
from .festival_type import DatasetKind
from .geocoding import GeocodeCache, NominatimGeocoder
from .models import CityFestival, Festival
from .sales_reps import SalesRepresentative, build_sales_representatives

logger = logging.getLogger(__name__)


class UpstreamFetchError(Exception):
    """A CSV source could not be read."""

    def __init__(self, source: str, status_code: int | None, reason: str) -> None:
        self.source = source
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"Failed to fetch CSV: {status_code} {reason}"
        else:
            message = f"Failed to fetch CSV: {reason}"
        super().__init__(message)


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def fetch_csv_text(source: str, client: httpx.AsyncClient) -> str:
    """Read the raw CSV text from a URL or a local file.

    Raises:
        UpstreamFetchError: If the source is unreachable, answers with a
            non-2xx status or the file does not exist.
    """
    if not _is_url(source):
        path = Path(source)
        try:
            return path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise UpstreamFetchError(source, None, f"Datei nicht lesbar: {e}") from e

    try:
        response = await client.get(source)
    except httpx.HTTPError as e:
        raise UpstreamFetchError(source, None, str(e)) from e

    if not response.is_success:
        raise UpstreamFetchError(source, response.status_code, response.reason_phrase)

    return response.text


def read_csv_rows(text: str) -> tuple[list[str], list[dict[str, str]]]:
    """Parse CSV text with a header row.

    Returns:
        Tuple of (fieldnames, rows). Completely empty rows are skipped.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    fieldnames = [name.strip() for name in (reader.fieldnames or [])]

    rows: list[dict[str, str]] = []
    for row in reader:
        if not any((value or "").strip() for key, value in row.items() if key is not None):
            continue
        rows.append({(key or "").strip(): value for key, value in row.items() if key is not None})

    return fieldnames, rows


@asynccontextmanager
async def _http_client(config: Config, client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=config.timeout_sec, follow_redirects=True) as own_client:
        yield own_client


async def _load_events(
    kind: DatasetKind,
    source: str,
    config: Config,
    cache: GeocodeCache,
    client: httpx.AsyncClient | None,
) -> list:
    async with _http_client(config, client) as http:
        text = await fetch_csv_text(source, http)
        _, rows = read_csv_rows(text)
        logger.info("%s Zeilen aus %s geladen", len(rows), source)

        lookup = None
        if config.geocoding_enabled:
            geocoder = NominatimGeocoder(
                http,
                url=config.geocoder_url,
                user_agent=config.geocoder_user_agent,
            )
            lookup = geocoder.geocode

        return await assemble_batch(rows, kind, cache, lookup, concurrency=config.max_concurrency)


async def load_festivals(
    config: Config,
    cache: GeocodeCache,
    client: httpx.AsyncClient | None = None,
) -> list[Festival]:
    """Load and assemble the general festival list."""
    return await _load_events(DatasetKind.FESTIVALS, config.festivals_source, config, cache, client)


async def load_city_festivals(
    config: Config,
    cache: GeocodeCache,
    client: httpx.AsyncClient | None = None,
) -> list[CityFestival]:
    """Load and assemble the city festival list."""
    return await _load_events(DatasetKind.CITY_FESTIVALS, config.city_festivals_source, config, cache, client)


async def load_sales_representatives(
    config: Config,
    client: httpx.AsyncClient | None = None,
) -> list[SalesRepresentative]:
    """Load the PLZ assignment list and build the representatives.

    Returns an empty list (and logs the reason) if the file lacks the
    PLZ or BezWertH column.
    """
    async with _http_client(config, client) as http:
        text = await fetch_csv_text(config.sales_reps_source, http)

    fieldnames, rows = read_csv_rows(text)
    reps = build_sales_representatives(rows, fieldnames)
    logger.info("%s Vertriebsmitarbeiter geladen", len(reps))
    return reps
