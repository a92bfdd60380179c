"""Builds the ordered provider list for each lookup operation.

Order within an operation is the fallback order. Instance URLs come from
configuration (`providers.<kind>`), falling back to the documented defaults
in `settings.DEFAULT_PROVIDER_URLS`.
"""

import logging
from typing import Callable, Dict, List, Optional

from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.infrastructure.config.settings import get_config, get_provider_urls
from freelookup.infrastructure.providers.geocoding import (
    NominatimGeocodeProvider,
    NominatimReverseProvider,
    PhotonGeocodeProvider,
    PhotonReverseProvider,
)
from freelookup.infrastructure.providers.ip_lookup import IpApiComProvider, IpApiCoProvider, IpWhoIsProvider
from freelookup.infrastructure.providers.search import DuckDuckGoInstantProvider, SearxngSearchProvider
from freelookup.infrastructure.providers.translation import LibreTranslateProvider, MyMemoryProvider
from freelookup.infrastructure.providers.weather import OpenMeteoProvider, WttrInProvider

logger = logging.getLogger(__name__)

OPERATIONS = ("search", "translate", "ip", "geocode", "reverse", "weather")

UrlSource = Callable[[str], List[str]]


class ProviderRegistry:
    """Maps an operation name to its ordered list of provider adapters."""

    def __init__(self, url_source: UrlSource = get_provider_urls, translate_api_key: Optional[str] = None):
        self.url_source = url_source
        self.translate_api_key = translate_api_key
        self._overrides: Dict[str, List[ProviderAdapter]] = {}

    def override(self, operation: str, providers: List[ProviderAdapter]) -> None:
        """Replaces the provider list for one operation (tests, custom instances)."""
        if operation not in OPERATIONS:
            raise KeyError(f"Unknown operation '{operation}'")
        self._overrides[operation] = list(providers)

    def providers_for(self, operation: str) -> List[ProviderAdapter]:
        if operation in self._overrides:
            return list(self._overrides[operation])
        builder = getattr(self, f"_build_{operation}", None)
        if builder is None:
            raise KeyError(f"Unknown operation '{operation}'")
        providers = builder()
        logger.debug(f"Providers for {operation}: {[p.name for p in providers]}")
        return providers

    def _build_search(self) -> List[ProviderAdapter]:
        return (
            [SearxngSearchProvider(url) for url in self.url_source("searxng")]
            + [DuckDuckGoInstantProvider(url) for url in self.url_source("duckduckgo")]
        )

    def _build_translate(self) -> List[ProviderAdapter]:
        key = self.translate_api_key or get_config("translate.api_key")
        return (
            [LibreTranslateProvider(url, api_key=key) for url in self.url_source("libretranslate")]
            + [MyMemoryProvider(url) for url in self.url_source("mymemory")]
        )

    def _build_ip(self) -> List[ProviderAdapter]:
        return (
            [IpApiCoProvider(url) for url in self.url_source("ipapi_co")]
            + [IpWhoIsProvider(url) for url in self.url_source("ipwhois")]
            + [IpApiComProvider(url) for url in self.url_source("ip_api_com")]
        )

    def _build_geocode(self) -> List[ProviderAdapter]:
        return (
            [NominatimGeocodeProvider(url) for url in self.url_source("nominatim")]
            + [PhotonGeocodeProvider(url) for url in self.url_source("photon")]
        )

    def _build_reverse(self) -> List[ProviderAdapter]:
        return (
            [NominatimReverseProvider(url) for url in self.url_source("nominatim")]
            + [PhotonReverseProvider(url) for url in self.url_source("photon")]
        )

    def _build_weather(self) -> List[ProviderAdapter]:
        return (
            [OpenMeteoProvider(url) for url in self.url_source("open_meteo")]
            + [WttrInProvider(url) for url in self.url_source("wttr")]
        )
