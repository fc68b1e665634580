from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type, TypeVar

import requests
import structlog
from prometheus_client import Counter
from pydantic import BaseModel, ValidationError

from ..errors import ConfigurationError, ParseError, UpstreamFetchError
from ..schemas.openweather import PollutionSnapshot, UVSnapshot, WeatherSnapshot
from .geocoding import Location

logger = structlog.get_logger()

DATA_UNITS: Dict[str, str] = {"C": "metric", "F": "imperial", "K": "internal"}

ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"
POLLUTION_URL = "https://api.openweathermap.org/data/2.5/air_pollution"

M = TypeVar("M", bound=BaseModel)


def resolve_units(degrees_unit: str) -> str:
    try:
        return DATA_UNITS[degrees_unit]
    except KeyError:
        raise ConfigurationError(
            f"unknown unit {degrees_unit!r} (must be C, F, or K)"
        ) from None


@dataclass
class OpenWeatherClient:
    """OpenWeatherMap REST client, one fetch method per data source.

    Each call issues exactly one GET with a bounded timeout and no retries;
    a failed fetch is simply tried again on the next scrape. Every completed
    exchange is counted in ``call_counter`` by location, endpoint and status.

    The degrees unit is validated on construction, so a bad unit fails before
    any request is sent.
    """

    api_key: str
    degrees_unit: str = "F"
    language: str = "EN"
    timeout: float = 10.0
    call_counter: Optional[Counter] = None
    session: requests.Session = field(default_factory=requests.Session)
    onecall_url: str = ONECALL_URL
    pollution_url: str = POLLUTION_URL

    def __post_init__(self) -> None:
        self.units = resolve_units(self.degrees_unit)

    def fetch_weather(self, location: Location) -> WeatherSnapshot:
        current = self._onecall_current(location, {"units": self.units, "lang": self.language})
        return _parse(WeatherSnapshot, current)

    def fetch_pollution(self, location: Location) -> PollutionSnapshot:
        payload = self._get(location, self.pollution_url, self._params(location))
        entries = payload.get("list") if isinstance(payload, dict) else None
        if not isinstance(entries, list) or not entries:
            raise ParseError("air_pollution response has an empty 'list'")
        return _parse(PollutionSnapshot, entries[0])

    def fetch_uv(self, location: Location) -> UVSnapshot:
        # UV index is only published in the One Call current block
        current = self._onecall_current(location)
        if "uvi" not in current:
            raise ParseError("onecall 'current' block has no 'uvi'")
        return _parse(UVSnapshot, current)

    def _onecall_current(self, location: Location, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params = self._params(location)
        params.update(extra or {})
        params["exclude"] = "minutely,hourly,daily,alerts"
        payload = self._get(location, self.onecall_url, params)
        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise ParseError("onecall response has no 'current' block")
        return current

    def _params(self, location: Location) -> Dict[str, Any]:
        return {
            "appid": self.api_key,
            "lat": location.latitude,
            "lon": location.longitude,
        }

    def _get(self, location: Location, endpoint: str, params: Dict[str, Any]) -> Any:
        try:
            resp = self.session.get(endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            self._count(location, endpoint, "error")
            raise UpstreamFetchError(f"request to {endpoint} failed: {e}") from e

        self._count(location, endpoint, f"{resp.status_code} {resp.reason or ''}".strip())
        if not 200 <= resp.status_code < 300:
            raise UpstreamFetchError(
                f"{endpoint} returned HTTP {resp.status_code}", status_code=resp.status_code
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ParseError(f"{endpoint} returned invalid JSON: {e}") from e

    def _count(self, location: Location, endpoint: str, status: str) -> None:
        if self.call_counter is not None:
            self.call_counter.labels(
                location=location.name, endpoint=endpoint, response_status=status
            ).inc()


def _parse(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"unexpected {model.__name__} payload: {e}") from e
