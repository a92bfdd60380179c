import httpx
import pytest

from freelookup.domain.errors import EmptyResultError, ProviderResponseError
from freelookup.domain.models.common import GeocodeQuery, ReverseGeocodeQuery
from freelookup.infrastructure.providers.geocoding import (
    NominatimGeocodeProvider,
    NominatimReverseProvider,
    PhotonGeocodeProvider,
    PhotonReverseProvider,
)

NOMINATIM_SEARCH = [
    {"lat": "52.5170365", "lon": "13.3888599", "display_name": "Berlin, Deutschland"},
    {"lat": "39.6", "lon": "-79.2", "display_name": "Berlin, Maryland"},
]

PHOTON_SEARCH = {
    "type": "FeatureCollection",
    "features": [
        {"geometry": {"type": "Point", "coordinates": [2.3514616, 48.8566969]},
         "properties": {"name": "Paris", "city": "Paris", "state": "Ile-de-France", "country": "France"}},
    ],
}


def test_nominatim_parses_string_coordinates(fetch_with):
    provider = NominatimGeocodeProvider("https://nominatim.example")
    places, requests = fetch_with(provider, GeocodeQuery("Berlin", limit=1),
                                  lambda r: httpx.Response(200, json=NOMINATIM_SEARCH))

    assert requests[0].url.path == "/search"
    assert requests[0].url.params["format"] == "jsonv2"
    assert requests[0].url.params["limit"] == "1"
    assert len(places) == 1
    assert places[0].lat == pytest.approx(52.5170365)
    assert places[0].display_name == "Berlin, Deutschland"


def test_nominatim_no_match_is_empty(fetch_with):
    provider = NominatimGeocodeProvider("https://nominatim.example")
    with pytest.raises(EmptyResultError):
        fetch_with(provider, GeocodeQuery("Qwxzv"), lambda r: httpx.Response(200, json=[]))


def test_nominatim_object_body_is_a_failure(fetch_with):
    provider = NominatimGeocodeProvider("https://nominatim.example")
    with pytest.raises(ProviderResponseError):
        fetch_with(provider, GeocodeQuery("Berlin"), lambda r: httpx.Response(200, json={"error": "x"}))


def test_photon_swaps_geojson_coordinate_order(fetch_with):
    provider = PhotonGeocodeProvider("https://photon.example")
    places, requests = fetch_with(provider, GeocodeQuery("Paris"), lambda r: httpx.Response(200, json=PHOTON_SEARCH))

    assert requests[0].url.path == "/api/"
    assert places[0].lat == pytest.approx(48.8566969)
    assert places[0].lon == pytest.approx(2.3514616)
    assert places[0].display_name == "Paris, Ile-de-France, France"


def test_photon_empty_features_is_empty(fetch_with):
    provider = PhotonGeocodeProvider("https://photon.example")
    with pytest.raises(EmptyResultError):
        fetch_with(provider, GeocodeQuery("Qwxzv"), lambda r: httpx.Response(200, json={"features": []}))


def test_photon_feature_without_point_is_a_failure(fetch_with):
    provider = PhotonGeocodeProvider("https://photon.example")
    body = {"features": [{"geometry": {"coordinates": []}, "properties": {"name": "x"}}]}
    with pytest.raises(ProviderResponseError):
        fetch_with(provider, GeocodeQuery("Paris"), lambda r: httpx.Response(200, json=body))


def test_nominatim_reverse(fetch_with):
    provider = NominatimReverseProvider("https://nominatim.example")
    body = {"lat": "48.8584", "lon": "2.2945", "display_name": "Tour Eiffel, Paris"}
    place, requests = fetch_with(provider, ReverseGeocodeQuery(48.8584, 2.2945), lambda r: httpx.Response(200, json=body))

    assert requests[0].url.path == "/reverse"
    assert place.display_name == "Tour Eiffel, Paris"
    assert place.lon == pytest.approx(2.2945)


def test_nominatim_reverse_unable_to_geocode_is_empty(fetch_with):
    provider = NominatimReverseProvider("https://nominatim.example")
    with pytest.raises(EmptyResultError, match="Unable to geocode"):
        fetch_with(provider, ReverseGeocodeQuery(0.0, -30.0),
                   lambda r: httpx.Response(200, json={"error": "Unable to geocode"}))


def test_photon_reverse_uses_query_coordinates(fetch_with):
    provider = PhotonReverseProvider("https://photon.example")
    place, _ = fetch_with(provider, ReverseGeocodeQuery(48.85, 2.35), lambda r: httpx.Response(200, json=PHOTON_SEARCH))
    assert (place.lat, place.lon) == (48.85, 2.35)
    assert place.display_name.startswith("Paris")


def test_photon_reverse_nothing_found(fetch_with):
    provider = PhotonReverseProvider("https://photon.example")
    with pytest.raises(EmptyResultError):
        fetch_with(provider, ReverseGeocodeQuery(0.0, -30.0), lambda r: httpx.Response(200, json={"features": []}))
