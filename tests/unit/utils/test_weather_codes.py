import pytest

from freelookup.utils.weather_codes import WMO_WEATHER_CODES, describe_weather_code, wwo_to_wmo


@pytest.mark.parametrize("code, text", [(0, "Clear sky"), (3, "Overcast"), (95, "Thunderstorm")])
def test_known_codes(code, text):
    assert describe_weather_code(code) == text


def test_unknown_code_is_reported_not_raised():
    assert describe_weather_code(42) == "Unknown (42)"


def test_wwo_codes_map_onto_known_wmo_codes():
    assert wwo_to_wmo(113) == 0
    assert wwo_to_wmo(None) is None
    assert wwo_to_wmo(1) is None
    for code in (116, 176, 200, 389):
        assert wwo_to_wmo(code) in WMO_WEATHER_CODES
