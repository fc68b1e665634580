import pytest
import requests

from openweather_exporter.errors import ConfigurationError, ParseError, UpstreamFetchError
from openweather_exporter.services.geocoding import Location
from openweather_exporter.services.openweather import (
    ONECALL_URL,
    POLLUTION_URL,
    OpenWeatherClient,
    resolve_units,
)

from conftest import FakeSession, fake_response, onecall_payload, pollution_payload

SEATTLE = Location("Seattle, WA", 47.6, -122.3)


@pytest.mark.parametrize("unit,expected", [("C", "metric"), ("F", "imperial"), ("K", "internal")])
def test_unit_mapping(unit, expected):
    assert resolve_units(unit) == expected


def test_unknown_unit_fails_before_any_request(session):
    with pytest.raises(ConfigurationError):
        OpenWeatherClient(api_key="k", degrees_unit="X", session=session)
    assert session.calls == []


def test_fetch_weather_request_and_parse(session, registry, call_counter):
    client = OpenWeatherClient(
        api_key="secret", degrees_unit="C", language="de", timeout=7.5,
        call_counter=call_counter, session=session,
    )
    snap = client.fetch_weather(SEATTLE)

    call = session.calls[0]
    assert call["url"] == ONECALL_URL
    assert call["timeout"] == 7.5
    assert call["params"] == {
        "appid": "secret",
        "lat": 47.6,
        "lon": -122.3,
        "units": "metric",
        "lang": "de",
        "exclude": "minutely,hourly,daily,alerts",
    }
    assert snap.temp == 60.5
    assert snap.humidity == 80
    assert snap.description == "clear sky"
    # omitted fields default to zero
    assert snap.rain.one_h == 0.0
    assert snap.wind_speed == 0.0
    assert registry.get_sample_value(
        "openweather_api_calls_total",
        {"location": "Seattle, WA", "endpoint": ONECALL_URL, "response_status": "200 OK"},
    ) == 1.0


def test_fetch_weather_rain_and_snow_blocks():
    session = FakeSession()
    session.route(ONECALL_URL, 47.6, fake_response(onecall_payload(rain={"1h": 1.25}, snow={"1h": 0.5})))
    snap = OpenWeatherClient(api_key="k", session=session).fetch_weather(SEATTLE)
    assert snap.rain.one_h == 1.25
    assert snap.snow.one_h == 0.5


def test_non_2xx_is_fetch_error_and_counted(registry, call_counter):
    session = FakeSession()
    session.route(ONECALL_URL, 47.6, fake_response({"cod": 401, "message": "Invalid API key"}, 401, "Unauthorized"))
    client = OpenWeatherClient(api_key="bad", call_counter=call_counter, session=session)

    with pytest.raises(UpstreamFetchError) as exc:
        client.fetch_weather(SEATTLE)
    assert exc.value.status_code == 401
    assert not isinstance(exc.value, ParseError)
    assert registry.get_sample_value(
        "openweather_api_calls_total",
        {"location": "Seattle, WA", "endpoint": ONECALL_URL, "response_status": "401 Unauthorized"},
    ) == 1.0


def test_transport_error_is_fetch_error(registry, call_counter):
    session = FakeSession()
    session.route(ONECALL_URL, 47.6, requests.Timeout("read timed out"))
    client = OpenWeatherClient(api_key="k", call_counter=call_counter, session=session)

    with pytest.raises(UpstreamFetchError):
        client.fetch_weather(SEATTLE)
    assert registry.get_sample_value(
        "openweather_api_calls_total",
        {"location": "Seattle, WA", "endpoint": ONECALL_URL, "response_status": "error"},
    ) == 1.0


@pytest.mark.parametrize(
    "response",
    [
        fake_response(ValueError("Expecting value")),
        fake_response({"lat": 47.6}),
        fake_response({"current": {"temp": "warm"}}),
    ],
)
def test_malformed_weather_body_is_parse_error(response):
    session = FakeSession()
    session.route(ONECALL_URL, 47.6, response)
    with pytest.raises(ParseError):
        OpenWeatherClient(api_key="k", session=session).fetch_weather(SEATTLE)


def test_fetch_pollution(session):
    client = OpenWeatherClient(api_key="k", session=session)
    snap = client.fetch_pollution(SEATTLE)

    call = session.calls[0]
    assert call["url"] == POLLUTION_URL
    assert call["params"] == {"appid": "k", "lat": 47.6, "lon": -122.3}
    assert snap.main.aqi == 2
    assert snap.components.pm2_5 == 0.5
    assert snap.components.co == 201.94


def test_pollution_empty_list_is_parse_error():
    session = FakeSession()
    session.route(POLLUTION_URL, 47.6, fake_response({"coord": {}, "list": []}))
    with pytest.raises(ParseError):
        OpenWeatherClient(api_key="k", session=session).fetch_pollution(SEATTLE)


def test_fetch_uv_reads_onecall_current(session):
    snap = OpenWeatherClient(api_key="k", degrees_unit="C", session=session).fetch_uv(SEATTLE)

    call = session.calls[0]
    assert call["url"] == ONECALL_URL
    assert call["params"] == {
        "appid": "k",
        "lat": 47.6,
        "lon": -122.3,
        "exclude": "minutely,hourly,daily,alerts",
    }
    assert snap.uvi == 5.2


@pytest.mark.parametrize("response", [fake_response(onecall_payload(uvi=None)), fake_response({"lat": 47.6})])
def test_uv_missing_is_parse_error(response):
    session = FakeSession()
    session.route(ONECALL_URL, 47.6, response)
    with pytest.raises(ParseError):
        OpenWeatherClient(api_key="k", session=session).fetch_uv(SEATTLE)
