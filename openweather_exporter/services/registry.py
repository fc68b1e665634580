"""Declarative metric tables, one per upstream source.

Each ``Gauge`` pairs a metric identity with pure extractors over a snapshot,
so the catalog can be advertised without fetching and re-evaluated against
any snapshot, fresh or cached. Adding a metric means adding a row here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar

from prometheus_client import CollectorRegistry, Counter
from prometheus_client.core import GaugeMetricFamily

from ..schemas.openweather import PollutionSnapshot, UVSnapshot, WeatherSnapshot

S = TypeVar("S")

LOCATION_LABELS: Tuple[str, ...] = ("location",)


def _location_only(snapshot: object, location: str) -> Sequence[str]:
    return (location,)


@dataclass(frozen=True)
class Gauge(Generic[S]):
    name: str
    documentation: str
    value: Callable[[S], float]
    labelnames: Tuple[str, ...] = LOCATION_LABELS
    labels: Callable[[S, str], Sequence[str]] = _location_only

    def family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(self.name, self.documentation, labels=self.labelnames)

    def add_sample(self, family: GaugeMetricFamily, snapshot: S, location: str) -> None:
        family.add_metric(list(self.labels(snapshot, location)), float(self.value(snapshot)))


def _conditions_labels(w: WeatherSnapshot, location: str) -> Sequence[str]:
    return (location, w.description)


WEATHER_GAUGES: Tuple[Gauge[WeatherSnapshot], ...] = (
    Gauge("openweather_temperature", "Current temperature in degrees", lambda w: w.temp),
    Gauge("openweather_humidity", "Current relative humidity", lambda w: w.humidity),
    Gauge("openweather_feelslike", "Current feels_like temperature in degrees", lambda w: w.feels_like),
    Gauge("openweather_pressure", "Current Atmospheric pressure hPa", lambda w: w.pressure),
    Gauge("openweather_windspeed", "Current Wind Speed in mph or meters/sec if imperial", lambda w: w.wind_speed),
    Gauge("openweather_rain1h", "Rain volume for last hour, in millimeters", lambda w: w.rain.one_h),
    Gauge("openweather_snow1h", "Snow volume for last hour, in millimeters", lambda w: w.snow.one_h),
    Gauge("openweather_winddegree", "Wind direction, degrees (meteorological)", lambda w: w.wind_deg),
    Gauge("openweather_cloudiness", "Cloudiness percentage", lambda w: w.clouds),
    Gauge("openweather_sunrise", "Sunrise time, unix, UTC", lambda w: w.sunrise),
    Gauge("openweather_sunset", "Sunset time, unix, UTC", lambda w: w.sunset),
    Gauge(
        "openweather_currentconditions",
        "Current weather conditions",
        lambda w: 0,
        labelnames=("location", "currentconditions"),
        labels=_conditions_labels,
    ),
)

POLLUTION_GAUGES: Tuple[Gauge[PollutionSnapshot], ...] = (
    Gauge("openweather_pollution_airqualityindex", "Air Quality Index (1 = Good ... 5 = Very Poor)", lambda p: p.main.aqi),
    Gauge("openweather_pollution_carbonmonoxide", "Concentration of CO (Carbon monoxide), μg/m3", lambda p: p.components.co),
    Gauge("openweather_pollution_nitrogenmonoxide", "Concentration of NO (Nitrogen monoxide), μg/m3", lambda p: p.components.no),
    Gauge("openweather_pollution_nitrogendioxide", "Concentration of NO2 (Nitrogen dioxide), μg/m3", lambda p: p.components.no2),
    Gauge("openweather_pollution_ozone", "Concentration of O3 (Ozone), μg/m3", lambda p: p.components.o3),
    Gauge("openweather_pollution_sulphurdioxide", "Concentration of SO2 (Sulphur dioxide), μg/m3", lambda p: p.components.so2),
    Gauge("openweather_pollution_pm25", "Concentration of PM2.5 (Fine particles matter), μg/m3", lambda p: p.components.pm2_5),
    Gauge("openweather_pollution_pm10", "Concentration of PM10 (Coarse particulate matter), μg/m3", lambda p: p.components.pm10),
    Gauge("openweather_pollution_nh3", "Concentration of NH3 (Ammonia), μg/m3", lambda p: p.components.nh3),
)

UV_GAUGES: Tuple[Gauge[UVSnapshot], ...] = (
    Gauge("openweather_ultraviolet_index", "Ultraviolet Index", lambda u: u.uvi),
)


def build_api_call_counter(registry: Optional[CollectorRegistry] = None) -> Counter:
    return Counter(
        "openweather_api_calls_total",
        "Number of API calls to openweathermap.org",
        labelnames=["location", "endpoint", "response_status"],
        registry=registry,
    )
