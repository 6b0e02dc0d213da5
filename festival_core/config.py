from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    festivals_source: str
    city_festivals_source: str
    sales_reps_source: str
    geocoder_url: str
    geocoder_user_agent: str
    geocoding_enabled: bool
    timeout_sec: float
    max_concurrency: int
    log_level: str


DEFAULT_FESTIVALS_CSV = (
    "https://hebbkx1anhila5yf.public.blob.vercel-storage.com/"
    "Unbenannte%20Tabelle%20-%20Tabellenblatt1-jRVLuFgapHaOy9sOsKVsd8WCMoU8Ha.csv"
)
DEFAULT_CITY_FESTIVALS_CSV = "data/cityfestivals.csv"
DEFAULT_SALES_REPS_CSV = (
    "https://hebbkx1anhila5yf.public.blob.vercel-storage.com/"
    "PLZ-LISTE%20ab%202025%2001%2001%20Event%20und%20Handel.xlsx%20-%20Tabelle1%20%281%29"
    "-HyHQCasWlczAL8FnDXI4KkNO4kBu0t.csv"
)
DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "FestivalRadar/1.0"


def load_config() -> Config:
    geocoding_env = os.getenv("GEOCODING_ENABLED", "true").strip().lower()
    geocoding_enabled = geocoding_env in {"1", "true", "yes"}

    return Config(
        festivals_source=os.getenv("FESTIVALS_CSV", DEFAULT_FESTIVALS_CSV),
        city_festivals_source=os.getenv("CITY_FESTIVALS_CSV", DEFAULT_CITY_FESTIVALS_CSV),
        sales_reps_source=os.getenv("SALES_REPS_CSV", DEFAULT_SALES_REPS_CSV),
        geocoder_url=os.getenv("GEOCODER_URL", DEFAULT_GEOCODER_URL),
        geocoder_user_agent=os.getenv("GEOCODER_USER_AGENT", DEFAULT_USER_AGENT),
        geocoding_enabled=geocoding_enabled,
        timeout_sec=float(os.getenv("TIMEOUT_SEC", "10")),
        max_concurrency=int(os.getenv("MAX_CONCURRENCY", "4")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
