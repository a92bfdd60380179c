"""Current-weather providers (Open-Meteo, wttr.in). No API keys required."""

import logging
from typing import Any, Optional

import httpx

from freelookup.domain.errors import ProviderResponseError
from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.domain.models.common import WeatherQuery
from freelookup.domain.models.results import WeatherReport
from freelookup.infrastructure.providers.http import get_json, require_mapping, to_float
from freelookup.utils.weather_codes import describe_weather_code, wwo_to_wmo

logger = logging.getLogger(__name__)


def _opt_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class OpenMeteoProvider(ProviderAdapter[WeatherQuery, WeatherReport]):
    kind = "open-meteo"

    async def fetch(self, client: httpx.AsyncClient, query: WeatherQuery) -> WeatherReport:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/v1/forecast",
            params={"latitude": query.lat, "longitude": query.lon, "current_weather": "true"},
            provider=self.name,
        ), self.name)
        if data.get("error"):
            raise ProviderResponseError(f"Soft error: {data.get('reason')}", provider=self.name)
        current = data.get("current_weather")
        if not isinstance(current, dict):
            raise ProviderResponseError("Missing 'current_weather'", provider=self.name)

        code = _opt_int(current.get("weathercode"))
        windspeed = current.get("windspeed")
        return WeatherReport(
            lat=query.lat,
            lon=query.lon,
            temperature_c=to_float(current.get("temperature"), "temperature", self.name),
            windspeed_kmh=float(windspeed) if windspeed is not None else None,
            weather_code=code,
            description=describe_weather_code(code) if code is not None else "Unknown",
            observed_at=current.get("time"),
        )


class WttrInProvider(ProviderAdapter[WeatherQuery, WeatherReport]):
    """wttr.in JSON format (format=j1); codes are WorldWeatherOnline codes."""

    kind = "wttr.in"

    async def fetch(self, client: httpx.AsyncClient, query: WeatherQuery) -> WeatherReport:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/{query.lat},{query.lon}",
            params={"format": "j1"},
            provider=self.name,
        ), self.name)
        conditions = data.get("current_condition")
        if not isinstance(conditions, list) or not conditions or not isinstance(conditions[0], dict):
            raise ProviderResponseError("Missing 'current_condition'", provider=self.name)
        current = conditions[0]

        wmo_code = wwo_to_wmo(_opt_int(current.get("weatherCode")))
        desc_list = current.get("weatherDesc")
        description = None
        if isinstance(desc_list, list) and desc_list and isinstance(desc_list[0], dict):
            description = desc_list[0].get("value")
        if not description:
            description = describe_weather_code(wmo_code) if wmo_code is not None else "Unknown"

        windspeed = current.get("windspeedKmph")
        return WeatherReport(
            lat=query.lat,
            lon=query.lon,
            temperature_c=to_float(current.get("temp_C"), "temp_C", self.name),
            windspeed_kmh=float(windspeed) if windspeed not in (None, "") else None,
            weather_code=wmo_code,
            description=str(description),
            observed_at=current.get("localObsDateTime"),
        )
