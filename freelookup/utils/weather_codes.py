"""WMO weather interpretation codes (as returned by Open-Meteo)."""

from typing import Dict, Optional

WMO_WEATHER_CODES: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

# WorldWeatherOnline codes used by wttr.in, mapped to the closest WMO code.
_WWO_TO_WMO: Dict[int, int] = {
    113: 0, 116: 2, 119: 3, 122: 3,
    143: 45, 248: 45, 260: 48,
    176: 80, 263: 51, 266: 53, 281: 56, 284: 57,
    293: 61, 296: 61, 299: 63, 302: 63, 305: 65, 308: 65,
    311: 66, 314: 67, 317: 66, 320: 73, 350: 77,
    179: 71, 182: 66, 185: 56, 227: 75, 230: 75,
    323: 71, 326: 71, 329: 73, 332: 73, 335: 75, 338: 75,
    353: 80, 356: 81, 359: 82, 362: 85, 365: 86, 368: 85, 371: 86,
    374: 77, 377: 77,
    200: 95, 386: 95, 389: 95, 392: 96, 395: 96,
}


def describe_weather_code(code: int) -> str:
    """Human readable text for a WMO code; unknown codes are reported, not raised."""
    return WMO_WEATHER_CODES.get(code, f"Unknown ({code})")


def wwo_to_wmo(code: Optional[int]) -> Optional[int]:
    if code is None:
        return None
    return _WWO_TO_WMO.get(code)
