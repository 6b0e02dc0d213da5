"""Shared pytest fixtures for the festival radar test suite."""

from __future__ import annotations

import pytest

from festival_core.config import Config
from festival_core.models import Festival
from festival_core.parser import Region


@pytest.fixture
def make_config():
    """Return a function that builds a Config with test defaults.

    Geocoding is disabled and sources point to example.test URLs unless
    overridden via keyword arguments.
    """

    def _make_config(**overrides) -> Config:
        defaults = {
            "festivals_source": "https://data.example.test/festivals.csv",
            "city_festivals_source": "https://data.example.test/cityfestivals.csv",
            "sales_reps_source": "https://data.example.test/plz-liste.csv",
            "geocoder_url": "https://geo.example.test/search",
            "geocoder_user_agent": "FestivalRadarTests/1.0",
            "geocoding_enabled": False,
            "timeout_sec": 5.0,
            "max_concurrency": 4,
            "log_level": "DEBUG",
        }
        defaults.update(overrides)
        return Config(**defaults)

    return _make_config


@pytest.fixture
def create_festival():
    """Return a function that creates Festival records with sensible defaults."""

    def _create_festival(id: int = 1, **kwargs) -> Festival:
        defaults = {
            "id": id,
            "name": f"Festival {id}",
            "location": "Berlin",
            "plz": "10115",
            "date": "01.07.2025",
            "month": 7,
            "duration": 1,
            "genre": "Rock",
            "visitors": 0,
            "insta_followers": 0,
            "region": Region.OST,
            "website": "",
            "contact": "",
            "festival_type": "Rock/Metal",
            "description": "",
            "lat": None,
            "lon": None,
        }
        defaults.update(kwargs)
        return Festival(**defaults)

    return _create_festival
