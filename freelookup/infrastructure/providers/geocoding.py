"""Geocoding providers (Nominatim instances, Photon).

Nominatim's usage policy requires an identifying User-Agent and at most one
request per second; the rotator's client sets the former and batch runs
enforce the latter.
"""

import logging
from typing import Any, List

import httpx

from freelookup.domain.errors import EmptyResultError, ProviderResponseError
from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.domain.models.common import GeocodeQuery, ReverseGeocodeQuery
from freelookup.domain.models.results import GeoResult
from freelookup.infrastructure.providers.http import get_json, require_mapping, to_float

logger = logging.getLogger(__name__)


class NominatimGeocodeProvider(ProviderAdapter[GeocodeQuery, List[GeoResult]]):
    kind = "nominatim"

    async def fetch(self, client: httpx.AsyncClient, query: GeocodeQuery) -> List[GeoResult]:
        data = await get_json(
            client,
            f"{self.base_url}/search",
            params={"q": query.address, "format": "jsonv2", "limit": query.limit},
            provider=self.name,
        )
        if not isinstance(data, list):
            raise ProviderResponseError("Expected a JSON array", provider=self.name)
        if not data:
            raise EmptyResultError(f"No match for '{query.address}'", provider=self.name)

        results = []
        for place in data[:query.limit]:
            place = require_mapping(place, self.name)
            results.append(GeoResult(
                lat=to_float(place.get("lat"), "lat", self.name),
                lon=to_float(place.get("lon"), "lon", self.name),
                display_name=str(place.get("display_name") or query.address),
            ))
        return results


def _photon_label(props: Any) -> str:
    if not isinstance(props, dict):
        return ""
    parts = [props.get("name"), props.get("street"), props.get("city"), props.get("state"), props.get("country")]
    seen: List[str] = []
    for part in parts:
        if part and str(part) not in seen:
            seen.append(str(part))
    return ", ".join(seen)


class PhotonGeocodeProvider(ProviderAdapter[GeocodeQuery, List[GeoResult]]):
    """komoot Photon, returns GeoJSON with [lon, lat] coordinate order."""

    kind = "photon"

    async def fetch(self, client: httpx.AsyncClient, query: GeocodeQuery) -> List[GeoResult]:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/api/",
            params={"q": query.address, "limit": query.limit},
            provider=self.name,
        ), self.name)
        features = data.get("features")
        if not isinstance(features, list):
            raise ProviderResponseError("Missing 'features' list", provider=self.name)
        if not features:
            raise EmptyResultError(f"No match for '{query.address}'", provider=self.name)

        results = []
        for feature in features[:query.limit]:
            geometry = require_mapping(feature, self.name).get("geometry") or {}
            coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
            if not isinstance(coords, list) or len(coords) < 2:
                raise ProviderResponseError("Feature without point coordinates", provider=self.name)
            results.append(GeoResult(
                lat=to_float(coords[1], "lat", self.name),
                lon=to_float(coords[0], "lon", self.name),
                display_name=_photon_label(feature.get("properties")) or query.address,
            ))
        return results


class NominatimReverseProvider(ProviderAdapter[ReverseGeocodeQuery, GeoResult]):
    kind = "nominatim"

    async def fetch(self, client: httpx.AsyncClient, query: ReverseGeocodeQuery) -> GeoResult:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/reverse",
            params={"lat": query.lat, "lon": query.lon, "format": "jsonv2"},
            provider=self.name,
        ), self.name)
        if data.get("error"):
            # e.g. {"error": "Unable to geocode"} over open sea
            raise EmptyResultError(f"Soft error: {data['error']}", provider=self.name)
        if not data.get("display_name"):
            raise ProviderResponseError("Missing 'display_name'", provider=self.name)
        return GeoResult(
            lat=to_float(data.get("lat", query.lat), "lat", self.name),
            lon=to_float(data.get("lon", query.lon), "lon", self.name),
            display_name=str(data["display_name"]),
        )


class PhotonReverseProvider(ProviderAdapter[ReverseGeocodeQuery, GeoResult]):
    kind = "photon"

    async def fetch(self, client: httpx.AsyncClient, query: ReverseGeocodeQuery) -> GeoResult:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/reverse",
            params={"lat": query.lat, "lon": query.lon},
            provider=self.name,
        ), self.name)
        features = data.get("features")
        if not isinstance(features, list):
            raise ProviderResponseError("Missing 'features' list", provider=self.name)
        if not features:
            raise EmptyResultError("Nothing found at these coordinates", provider=self.name)
        label = _photon_label(require_mapping(features[0], self.name).get("properties"))
        if not label:
            raise EmptyResultError("Feature without a usable name", provider=self.name)
        return GeoResult(lat=query.lat, lon=query.lon, display_name=label)
