from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest
import requests
from prometheus_client import CollectorRegistry

from openweather_exporter.errors import ResolutionError
from openweather_exporter.services.openweather import ONECALL_URL, POLLUTION_URL
from openweather_exporter.services.registry import build_api_call_counter


SEATTLE = ("Seattle, WA", 47.6, -122.3)
NEW_YORK = ("New York, NY", 40.7, -74.0)


def fake_response(payload: Any, status_code: int = 200, reason: str = "OK") -> Mock:
    m = Mock()
    m.status_code = status_code
    m.reason = reason
    if isinstance(payload, Exception):
        m.json.side_effect = payload
    else:
        m.json.return_value = payload
    return m


def onecall_payload(**current: Any) -> Dict[str, Any]:
    body = {
        "temp": 60.5,
        "humidity": 80,
        "sunrise": 1690000000,
        "sunset": 1690050000,
        "uvi": 5.2,
        "weather": [{"description": "clear sky"}],
    }
    body.update(current)
    # None drops a key from the current block
    body = {k: v for k, v in body.items() if v is not None}
    return {"lat": 47.6, "lon": -122.3, "timezone": "America/Los_Angeles", "current": body}


def pollution_payload(aqi: float = 2, **components: float) -> Dict[str, Any]:
    comps = {"co": 201.94, "no": 0.02, "no2": 0.77, "o3": 68.66, "so2": 0.64, "pm2_5": 0.5, "pm10": 0.54, "nh3": 0.12}
    comps.update(components)
    return {"coord": {"lon": -122.3, "lat": 47.6}, "list": [{"dt": 1690000000, "main": {"aqi": aqi}, "components": comps}]}


class FakeSession:
    """Stands in for ``requests.Session``: routes GETs by (url, lat) to canned responses."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, float], Any] = {}
        self.calls: List[Dict[str, Any]] = []

    def route(self, url: str, lat: float, response: Any) -> None:
        self.routes[(url, lat)] = response

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, timeout: Any = None, **kwargs: Any) -> Mock:
        params = params or {}
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        response = self.routes.get((url, params.get("lat")))
        if response is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(response, Exception):
            raise response
        return response

    def count(self, url: Optional[str] = None) -> int:
        return sum(1 for c in self.calls if url is None or c["url"] == url)


class FakeGeocoder:
    def __init__(self, table: Dict[str, Tuple[float, float]]) -> None:
        self.table = table
        self.queries: List[str] = []

    def geocode(self, query: str) -> Tuple[float, float]:
        self.queries.append(query)
        try:
            return self.table[query]
        except KeyError:
            raise ResolutionError(f"no geocoding result for {query!r}") from None


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def session() -> FakeSession:
    s = FakeSession()
    for _, lat, _lon in (SEATTLE, NEW_YORK):
        s.route(ONECALL_URL, lat, fake_response(onecall_payload()))
        s.route(POLLUTION_URL, lat, fake_response(pollution_payload()))
    return s


@pytest.fixture()
def geocoder() -> FakeGeocoder:
    return FakeGeocoder({name: (lat, lon) for name, lat, lon in (SEATTLE, NEW_YORK)})


@pytest.fixture()
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture()
def call_counter(registry: CollectorRegistry):
    return build_api_call_counter(registry)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
