"""Geocoding via Nominatim with a process-lifetime cache.

``NominatimGeocoder`` performs the HTTP lookup and reports a distinguishable
status (found, not found, rate limited, error). ``GeocodeCache`` memoizes
the outcome per address, failures included, so a failing address is asked
for at most once per process.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

import httpx

from .models import Coordinates

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "FestivalRadar/1.0"


class GeocodeStatus(Enum):
    """Outcome of a single geocoding request."""

    OK = "ok"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"


@dataclass(frozen=True)
class GeocodeResult:
    status: GeocodeStatus
    coordinates: Coordinates | None = None
    error: str | None = None


GeocodeLookup = Callable[[str], Awaitable[GeocodeResult]]


class NominatimGeocoder:
    """Resolve free-text addresses with the OpenStreetMap Nominatim API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str = NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limit_pause: float = 1.0,
    ) -> None:
        """Initialize the geocoder.

        Args:
            client: Shared async HTTP client (owned by the caller)
            url: Search endpoint
            user_agent: User-Agent header, required by the Nominatim usage policy
            rate_limit_pause: Seconds to wait after an HTTP 429 before giving up
        """
        self.client = client
        self.url = url
        self.user_agent = user_agent
        self.rate_limit_pause = rate_limit_pause

    async def geocode(self, address: str) -> GeocodeResult:
        """Look up the best match for an address. Never raises."""
        try:
            response = await self.client.get(
                self.url,
                params={"format": "json", "q": address, "limit": 1},
                headers={"User-Agent": self.user_agent},
            )
        except httpx.HTTPError as e:
            logger.error("Geocoding fehlgeschlagen fuer '%s': %s", address, e)
            return GeocodeResult(GeocodeStatus.ERROR, error=str(e))

        if response.status_code == 429:
            logger.warning("Rate-Limit beim Geocoding erreicht fuer '%s'", address)
            if self.rate_limit_pause > 0:
                await asyncio.sleep(self.rate_limit_pause)
            return GeocodeResult(GeocodeStatus.RATE_LIMITED, error="HTTP 429")

        if not response.is_success:
            logger.error(
                "Geocoding-Fehler fuer '%s': %s %s",
                address,
                response.status_code,
                response.reason_phrase,
            )
            return GeocodeResult(
                GeocodeStatus.ERROR,
                error=f"HTTP {response.status_code} {response.reason_phrase}",
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Ungueltige Geocoding-Antwort fuer '%s': %s", address, e)
            return GeocodeResult(GeocodeStatus.ERROR, error=str(e))

        if not data or not isinstance(data, list):
            return GeocodeResult(GeocodeStatus.NOT_FOUND)

        first = data[0]
        try:
            coordinates = Coordinates(lat=float(first["lat"]), lon=float(first["lon"]))
        except (KeyError, TypeError, ValueError):
            return GeocodeResult(GeocodeStatus.NOT_FOUND)

        return GeocodeResult(GeocodeStatus.OK, coordinates=coordinates)


class GeocodeCache:
    """Address -> coordinates store without eviction.

    A cached ``None`` means the address was looked up before without a
    usable result; it is returned without asking the geocoder again.
    Concurrent requests for the same address on the same event loop share
    one in-flight lookup. The cache may outlive event loops (one
    ``asyncio.run`` per Flask request), so in-flight lookups are kept per
    loop; a request on another loop starts its own lookup.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Coordinates | None] = {}
        self._pending: dict[tuple[asyncio.AbstractEventLoop, str], asyncio.Task] = {}
        self._generation = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: object) -> bool:
        return address in self._entries

    def get(self, address: str) -> Coordinates | None:
        return self._entries.get(address)

    def clear(self) -> None:
        """Drop all entries. Lookups still in flight are not written back."""
        self._generation += 1
        self._entries.clear()
        self._pending.clear()
        logger.info("Geocode-Cache geleert")

    async def resolve(self, address: str, lookup: GeocodeLookup) -> Coordinates | None:
        """Return coordinates for ``address``, asking ``lookup`` only on a cache miss.

        Args:
            address: Address string, used verbatim as cache key
            lookup: Geocoding collaborator, e.g. ``NominatimGeocoder.geocode``

        Returns:
            Coordinates, or None if empty, not found or failed.
        """
        if not address or not address.strip():
            return None

        if address in self._entries:
            return self._entries[address]

        key = (asyncio.get_running_loop(), address)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._lookup(key, lookup, self._generation))
            self._pending[key] = task

        return await task

    async def _lookup(
        self,
        key: tuple[asyncio.AbstractEventLoop, str],
        lookup: GeocodeLookup,
        generation: int,
    ) -> Coordinates | None:
        address = key[1]
        try:
            result = await lookup(address)
        except Exception as e:
            logger.error("Geocoding-Ausnahme fuer '%s': %s", address, e)
            result = GeocodeResult(GeocodeStatus.ERROR, error=str(e))
        finally:
            self._pending.pop(key, None)

        coordinates = result.coordinates if result.status is GeocodeStatus.OK else None
        # nach clear() nicht mehr zurueckschreiben
        if generation == self._generation:
            self._entries[address] = coordinates
        logger.debug("Geocode '%s' -> %s (%s)", address, coordinates, result.status.value)
        return coordinates
