import httpx
import pytest

from freelookup.domain.errors import ProviderHTTPError, ProviderResponseError
from freelookup.domain.models.common import WeatherQuery
from freelookup.infrastructure.providers.weather import OpenMeteoProvider, WttrInProvider

OPEN_METEO_BODY = {
    "latitude": 52.52,
    "longitude": 13.419998,
    "current_weather": {"temperature": 13.2, "windspeed": 9.4, "winddirection": 250, "weathercode": 3,
                        "time": "2024-05-01T12:00"},
}

WTTR_BODY = {
    "current_condition": [{
        "temp_C": "14",
        "windspeedKmph": "11",
        "weatherCode": "116",
        "weatherDesc": [{"value": "Partly cloudy"}],
        "localObsDateTime": "2024-05-01 12:10 PM",
    }],
}


def test_open_meteo_maps_current_weather(fetch_with):
    provider = OpenMeteoProvider("https://api.open-meteo.com")
    report, requests = fetch_with(provider, WeatherQuery(52.52, 13.41), lambda r: httpx.Response(200, json=OPEN_METEO_BODY))

    assert requests[0].url.path == "/v1/forecast"
    assert requests[0].url.params["current_weather"] == "true"
    assert requests[0].url.params["latitude"] == "52.52"
    assert report.temperature_c == 13.2
    assert report.windspeed_kmh == 9.4
    assert report.weather_code == 3
    assert report.description == "Overcast"
    assert report.observed_at == "2024-05-01T12:00"


def test_open_meteo_error_body(fetch_with):
    provider = OpenMeteoProvider("https://api.open-meteo.com")
    body = {"error": True, "reason": "Latitude must be in range of -90 to 90"}
    with pytest.raises(ProviderResponseError, match="Latitude"):
        fetch_with(provider, WeatherQuery(0.0, 0.0), lambda r: httpx.Response(200, json=body))


def test_open_meteo_http_400(fetch_with):
    provider = OpenMeteoProvider("https://api.open-meteo.com")
    with pytest.raises(ProviderHTTPError):
        fetch_with(provider, WeatherQuery(0.0, 0.0), lambda r: httpx.Response(400, json={"error": True}))


def test_open_meteo_missing_block(fetch_with):
    provider = OpenMeteoProvider("https://api.open-meteo.com")
    with pytest.raises(ProviderResponseError, match="current_weather"):
        fetch_with(provider, WeatherQuery(0.0, 0.0), lambda r: httpx.Response(200, json={"latitude": 0}))


def test_wttr_maps_string_fields_and_converts_code(fetch_with):
    provider = WttrInProvider("https://wttr.in")
    report, requests = fetch_with(provider, WeatherQuery(52.52, 13.41), lambda r: httpx.Response(200, json=WTTR_BODY))

    assert "52.52" in str(requests[0].url)
    assert requests[0].url.params["format"] == "j1"
    assert report.temperature_c == 14.0
    assert report.windspeed_kmh == 11.0
    assert report.weather_code == 2
    assert report.description == "Partly cloudy"


def test_wttr_missing_condition(fetch_with):
    provider = WttrInProvider("https://wttr.in")
    with pytest.raises(ProviderResponseError):
        fetch_with(provider, WeatherQuery(1.0, 1.0), lambda r: httpx.Response(200, json={"current_condition": []}))
