"""Dataset Service.

Runs the async dataset loaders for the synchronous Flask views, using the
application's configuration and geocode cache.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path

from flask import current_app

from festival_core.config import Config
from festival_core.geocoding import GeocodeCache
from festival_core.loader import load_city_festivals, load_festivals, load_sales_representatives
from festival_core.models import CityFestival, Festival
from festival_core.sales_reps import SalesRepresentative


def _resolve_source(source: str, project_root: Path) -> str:
    """Resolve relative file sources against the project root."""
    if source.startswith(("http://", "https://")):
        return source
    path = Path(source)
    if path.is_absolute() or path.exists():
        return source
    return str(project_root / path)


class DatasetService:
    """Service for loading the datasets inside a request or CLI context."""

    @classmethod
    def _config(cls) -> Config:
        config: Config = current_app.config["FESTIVAL_CONFIG"]
        project_root = current_app.config["PROJECT_ROOT"]
        return replace(
            config,
            festivals_source=_resolve_source(config.festivals_source, project_root),
            city_festivals_source=_resolve_source(config.city_festivals_source, project_root),
            sales_reps_source=_resolve_source(config.sales_reps_source, project_root),
        )

    @classmethod
    def _cache(cls) -> GeocodeCache:
        return current_app.extensions["geocode_cache"]

    @classmethod
    def festivals(cls) -> list[Festival]:
        """Load all festivals.

        Raises:
            UpstreamFetchError: If the festival CSV cannot be fetched.
        """
        return asyncio.run(load_festivals(cls._config(), cls._cache()))

    @classmethod
    def city_festivals(cls) -> list[CityFestival]:
        """Load all city festivals.

        Raises:
            UpstreamFetchError: If the city festival CSV cannot be read.
        """
        return asyncio.run(load_city_festivals(cls._config(), cls._cache()))

    @classmethod
    def sales_reps(cls) -> list[SalesRepresentative]:
        """Load the sales representatives with their territories."""
        return asyncio.run(load_sales_representatives(cls._config()))
