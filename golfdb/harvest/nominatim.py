"""Cached, rate-limited Nominatim reverse geocoding."""

from __future__ import annotations

import logging
from pathlib import Path

from golfdb.common.fs import read_json_or_default, write_json
from golfdb.common.http import HttpClient, HttpRequestError, TimeoutConfig

logger = logging.getLogger(__name__)

CACHE_PATH = Path("cache") / "nominatim_cache.json"


def cache_key(lat: float, lng: float) -> str:
    return f"{lat:.5f},{lng:.5f}"


class ReverseGeocoder:
    """Reverse geocoder backed by a JSON file cache.

    Lookup failures are cached as ``None`` only for the current run and
    surface to callers as a missing address, never as an error.
    """

    def __init__(
        self,
        nominatim_config: dict,
        cache_path: Path,
        http_client: HttpClient | None = None,
    ) -> None:
        self.endpoint = nominatim_config["endpoint"]
        self.zoom = int(nominatim_config.get("zoom", 18))
        self.flush_every = max(int(nominatim_config.get("cache_flush_every", 25)), 1)
        self.cache_path = cache_path
        self.cache: dict[str, dict | None] = read_json_or_default(cache_path, {})
        self._owns_client = http_client is None
        self.client = http_client or HttpClient(
            service_rates={"nominatim": float(nominatim_config.get("rate_per_sec", 0.9))}
        )
        self._failed: set[str] = set()
        self.lookups = 0
        self.cache_hits = 0
        self.failures = 0
        self._pending_writes = 0

    def reverse(self, lat: float, lng: float) -> dict | None:
        key = cache_key(lat, lng)
        if key in self.cache:
            self.cache_hits += 1
            return self.cache[key]
        if key in self._failed:
            return None

        self.lookups += 1
        try:
            payload = self.client.get_json(
                self.endpoint,
                service="nominatim",
                params={
                    "format": "jsonv2",
                    "zoom": self.zoom,
                    "addressdetails": 1,
                    "lat": lat,
                    "lon": lng,
                },
                timeout=TimeoutConfig(connect=10, read=30),
            )
        except HttpRequestError as exc:
            logger.warning("reverse geocode failed for %s: %s", key, exc)
            self.failures += 1
            self._failed.add(key)
            return None

        self.cache[key] = payload
        self._pending_writes += 1
        if self._pending_writes >= self.flush_every:
            self.flush()
        return payload

    def flush(self) -> None:
        write_json(self.cache_path, self.cache)
        self._pending_writes = 0

    def close(self) -> None:
        self.flush()
        if self._owns_client:
            self.client.close()

    def stats(self) -> dict:
        return {
            "lookups": self.lookups,
            "cache_hits": self.cache_hits,
            "failures": self.failures,
        }
