"""Parsed OpenWeatherMap responses.

Docs:
- One Call 3.0 current block: https://openweathermap.org/api/one-call-3#current
- Air pollution: https://openweathermap.org/api/air-pollution#current
- UV index: ``uvi`` of the One Call current block

Fields the upstream omits default to zero, e.g. no ``rain`` block means no rain
in the last hour.
"""

from __future__ import annotations

from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Precipitation(_Snapshot):
    one_h: float = Field(0.0, alias="1h")


class WeatherCondition(_Snapshot):
    id: int = 0
    main: str = ""
    description: str = ""
    icon: str = ""


class WeatherSnapshot(_Snapshot):
    dt: int = 0
    sunrise: int = 0
    sunset: int = 0
    temp: float = 0.0
    feels_like: float = 0.0
    pressure: float = 0.0
    humidity: float = 0.0
    dew_point: float = 0.0
    clouds: float = 0.0
    uvi: float = 0.0
    visibility: int = 0
    wind_speed: float = 0.0
    wind_gust: float = 0.0
    wind_deg: float = 0.0
    rain: Precipitation = Field(default_factory=Precipitation)
    snow: Precipitation = Field(default_factory=Precipitation)
    weather: List[WeatherCondition] = Field(default_factory=list)

    @property
    def description(self) -> str:
        # last reported condition wins
        return self.weather[-1].description if self.weather else ""


class AirQuality(_Snapshot):
    aqi: float = 0.0


class PollutantComponents(_Snapshot):
    co: float = 0.0
    no: float = 0.0
    no2: float = 0.0
    o3: float = 0.0
    so2: float = 0.0
    pm2_5: float = 0.0
    pm10: float = 0.0
    nh3: float = 0.0


class PollutionSnapshot(_Snapshot):
    dt: int = 0
    main: AirQuality = Field(default_factory=AirQuality)
    components: PollutantComponents = Field(default_factory=PollutantComponents)


class UVSnapshot(_Snapshot):
    dt: int = 0
    uvi: float


Snapshot = Union[WeatherSnapshot, PollutionSnapshot, UVSnapshot]
