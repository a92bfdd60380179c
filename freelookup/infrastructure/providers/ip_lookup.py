"""IP geolocation providers (ipapi.co, ipwho.is, ip-api.com)."""

import logging
from typing import Any, Dict, Optional

import httpx

from freelookup.domain.errors import ProviderResponseError
from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.domain.models.common import IpQuery
from freelookup.domain.models.results import IpInfo
from freelookup.infrastructure.providers.http import get_json, require_mapping

logger = logging.getLogger(__name__)


def _opt_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _opt_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def _require_ip(data: Dict[str, Any], field: str, provider: str) -> str:
    ip = data.get(field)
    if not ip:
        raise ProviderResponseError(f"Missing '{field}'", provider=provider)
    return str(ip)


class IpApiCoProvider(ProviderAdapter[IpQuery, IpInfo]):
    kind = "ipapi.co"

    async def fetch(self, client: httpx.AsyncClient, query: IpQuery) -> IpInfo:
        path = f"/{query.address}/json/" if query.address else "/json/"
        data = require_mapping(await get_json(client, f"{self.base_url}{path}", provider=self.name), self.name)
        if data.get("error"):
            raise ProviderResponseError(f"Soft error: {data.get('reason') or data.get('message')}", provider=self.name)
        return IpInfo(
            ip=_require_ip(data, "ip", self.name),
            city=_opt_str(data.get("city")),
            region=_opt_str(data.get("region")),
            country=_opt_str(data.get("country_name") or data.get("country")),
            lat=_opt_float(data.get("latitude")),
            lon=_opt_float(data.get("longitude")),
            org=_opt_str(data.get("org")),
            timezone=_opt_str(data.get("timezone")),
        )


class IpWhoIsProvider(ProviderAdapter[IpQuery, IpInfo]):
    kind = "ipwho.is"

    async def fetch(self, client: httpx.AsyncClient, query: IpQuery) -> IpInfo:
        path = f"/{query.address}" if query.address else "/"
        data = require_mapping(await get_json(client, f"{self.base_url}{path}", provider=self.name), self.name)
        if data.get("success") is False:
            raise ProviderResponseError(f"Soft error: {data.get('message')}", provider=self.name)
        connection = data.get("connection") if isinstance(data.get("connection"), dict) else {}
        timezone = data.get("timezone") if isinstance(data.get("timezone"), dict) else {}
        return IpInfo(
            ip=_require_ip(data, "ip", self.name),
            city=_opt_str(data.get("city")),
            region=_opt_str(data.get("region")),
            country=_opt_str(data.get("country")),
            lat=_opt_float(data.get("latitude")),
            lon=_opt_float(data.get("longitude")),
            org=_opt_str(connection.get("org") or connection.get("isp")),
            timezone=_opt_str(timezone.get("id")),
        )


class IpApiComProvider(ProviderAdapter[IpQuery, IpInfo]):
    """ip-api.com free tier. HTTP only; HTTPS requires a key."""

    kind = "ip-api.com"

    async def fetch(self, client: httpx.AsyncClient, query: IpQuery) -> IpInfo:
        path = f"/json/{query.address}" if query.address else "/json/"
        data = require_mapping(await get_json(client, f"{self.base_url}{path}", provider=self.name), self.name)
        if data.get("status") != "success":
            raise ProviderResponseError(f"Soft error: {data.get('message') or data.get('status')}", provider=self.name)
        return IpInfo(
            ip=_require_ip(data, "query", self.name),
            city=_opt_str(data.get("city")),
            region=_opt_str(data.get("regionName")),
            country=_opt_str(data.get("country")),
            lat=_opt_float(data.get("lat")),
            lon=_opt_float(data.get("lon")),
            org=_opt_str(data.get("org") or data.get("isp")),
            timezone=_opt_str(data.get("timezone")),
        )
