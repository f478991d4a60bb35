from __future__ import annotations

import json
from pathlib import Path

import pytest

from golfdb.common.http import RetryableHttpError
from golfdb.harvest.nominatim import ReverseGeocoder, cache_key

CONFIG = {
    "enabled": True,
    "endpoint": "https://nominatim.example/reverse",
    "zoom": 18,
    "rate_per_sec": 0.9,
    "cache_flush_every": 2,
}


class FakeHttpClient:
    def __init__(self, payload: dict | None = None, fail: bool = False):
        self.payload = payload or {"address": {"town": "Gullane"}}
        self.fail = fail
        self.calls: list[dict] = []

    def get_json(self, url, *, params, **_kwargs):
        self.calls.append(params)
        if self.fail:
            raise RetryableHttpError("Retryable HTTP status: 503")
        return self.payload

    def close(self):
        return None


def test_cache_key_rounds_to_five_places():
    assert cache_key(51.1234567, -0.1) == "51.12346,-0.10000"


@pytest.mark.integration
def test_reverse_uses_and_populates_cache(tmp_path: Path):
    cache_path = tmp_path / "cache" / "nominatim_cache.json"
    client = FakeHttpClient()
    geocoder = ReverseGeocoder(CONFIG, cache_path, http_client=client)

    first = geocoder.reverse(56.03, -2.82)
    second = geocoder.reverse(56.03, -2.82)
    geocoder.close()

    assert first == second == {"address": {"town": "Gullane"}}
    assert len(client.calls) == 1
    assert client.calls[0]["zoom"] == 18
    assert geocoder.stats() == {"lookups": 1, "cache_hits": 1, "failures": 0}
    assert json.loads(cache_path.read_text(encoding="utf-8")) == {"56.03000,-2.82000": first}


@pytest.mark.integration
def test_cache_is_flushed_periodically(tmp_path: Path):
    cache_path = tmp_path / "nominatim_cache.json"
    geocoder = ReverseGeocoder(CONFIG, cache_path, http_client=FakeHttpClient())

    geocoder.reverse(51.0, -1.0)
    assert not cache_path.exists()
    geocoder.reverse(52.0, -1.0)
    assert len(json.loads(cache_path.read_text(encoding="utf-8"))) == 2


@pytest.mark.integration
def test_existing_cache_avoids_network(tmp_path: Path):
    cache_path = tmp_path / "nominatim_cache.json"
    cache_path.write_text(json.dumps({"51.00000,-1.00000": {"address": {"city": "Leeds"}}}), encoding="utf-8")
    client = FakeHttpClient()

    geocoder = ReverseGeocoder(CONFIG, cache_path, http_client=client)

    assert geocoder.reverse(51.0, -1.0) == {"address": {"city": "Leeds"}}
    assert client.calls == []


@pytest.mark.integration
def test_failed_lookup_returns_none_and_is_not_persisted(tmp_path: Path):
    cache_path = tmp_path / "nominatim_cache.json"
    client = FakeHttpClient(fail=True)
    geocoder = ReverseGeocoder(CONFIG, cache_path, http_client=client)

    assert geocoder.reverse(51.0, -1.0) is None
    assert geocoder.reverse(51.0, -1.0) is None
    geocoder.close()

    assert len(client.calls) == 1
    assert geocoder.stats()["failures"] == 1
    assert json.loads(cache_path.read_text(encoding="utf-8")) == {}
