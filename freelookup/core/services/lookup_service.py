"""Core service for single lookups against free public APIs.

Validates each query before any network I/O, asks the provider registry for
the ordered provider list of the operation and hands both to the rotator.
"""

import ipaddress
import itertools
import logging
import re
from typing import Dict, Iterator, List, Optional

from freelookup.domain.errors import InvalidQueryError
from freelookup.domain.models.common import (
    GeocodeQuery,
    IpQuery,
    LanguageCode,
    ReverseGeocodeQuery,
    SearchQuery,
    TranslationQuery,
    WeatherQuery,
)
from freelookup.domain.models.results import (
    GeoResult,
    IpInfo,
    RotationResult,
    SearchHit,
    TranslationResult,
    WeatherReport,
)
from freelookup.infrastructure.providers.registry import OPERATIONS, ProviderRegistry
from freelookup.infrastructure.resilience.provider_rotator import ProviderRotator
from freelookup.utils.geo import validate_coordinates

logger = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 3
MAX_SEARCH_RESULTS = 50
_LANGUAGE_RE = re.compile(r"[A-Za-z]{2,3}(-[A-Za-z0-9]{2,8})?")


def _normalize_language(code: str, allow_auto: bool) -> LanguageCode:
    value = (code or "").strip()
    if value.lower() == "auto" and allow_auto:
        return LanguageCode("auto")
    if not _LANGUAGE_RE.fullmatch(value):
        raise InvalidQueryError(f"Invalid language code: '{code}'")
    # Region/script subtags keep their case (zh-Hans, pt-BR)
    primary, _, subtag = value.partition("-")
    return LanguageCode(f"{primary.lower()}-{subtag}" if subtag else primary.lower())


class LookupService:
    """Orchestrates lookups for every supported operation."""

    def __init__(
        self,
        rotator: ProviderRotator,
        registry: ProviderRegistry,
        timeout_s: Optional[float] = None,
        rotate_start: bool = False,
    ):
        """Initializes the LookupService.

        Args:
            rotator: Runs a query across the provider list.
            registry: Supplies the ordered provider list per operation.
            timeout_s: Per-attempt timeout; the rotator's default when None.
            rotate_start: Start each call one provider further along the list
                than the previous call of the same operation.
        """
        self.rotator = rotator
        self.registry = registry
        self.timeout_s = timeout_s
        self.rotate_start = rotate_start
        self._counters: Dict[str, Iterator[int]] = {op: itertools.count() for op in OPERATIONS}

    def _start_index(self, operation: str) -> int:
        if not self.rotate_start:
            return 0
        return next(self._counters[operation])

    async def _run(self, operation: str, query: object) -> RotationResult:
        providers = self.registry.providers_for(operation)
        logger.info(f"Running '{operation}' across {len(providers)} provider(s)")
        return await self.rotator.execute(
            operation,
            query,
            providers,
            timeout_s=self.timeout_s,
            start_index=self._start_index(operation),
        )

    # --- Query builders (validation only, no I/O) ---

    @staticmethod
    def build_search_query(text: str, language: str = "en", max_results: int = 10) -> SearchQuery:
        if not text or not text.strip():
            raise InvalidQueryError("Search text must not be empty")
        if not 1 <= max_results <= MAX_SEARCH_RESULTS:
            raise InvalidQueryError(f"max_results must be between 1 and {MAX_SEARCH_RESULTS}")
        return SearchQuery(text=text.strip(), language=_normalize_language(language, allow_auto=False), max_results=max_results)

    @staticmethod
    def build_translation_query(text: str, target: str, source: str = "auto") -> TranslationQuery:
        if not text or not text.strip():
            raise InvalidQueryError("Text to translate must not be empty")
        src = _normalize_language(source, allow_auto=True)
        tgt = _normalize_language(target, allow_auto=False)
        if src == tgt:
            raise InvalidQueryError(f"Source and target language are both '{tgt}'")
        return TranslationQuery(text=text, source=src, target=tgt)

    @staticmethod
    def build_ip_query(address: Optional[str] = None) -> IpQuery:
        if address is None or not address.strip():
            return IpQuery(address=None)
        try:
            ip = ipaddress.ip_address(address.strip())
        except ValueError as e:
            raise InvalidQueryError(f"Invalid IP address: '{address}'") from e
        if ip.is_private or ip.is_loopback:
            raise InvalidQueryError(f"{ip} is a private or loopback address and cannot be geolocated")
        return IpQuery(address=str(ip))

    @staticmethod
    def build_geocode_query(address: str, limit: int = 1) -> GeocodeQuery:
        cleaned = " ".join((address or "").split())
        if len(cleaned) < MIN_ADDRESS_LENGTH:
            raise InvalidQueryError(f"Address too short (minimum {MIN_ADDRESS_LENGTH} characters)")
        if limit < 1:
            raise InvalidQueryError("limit must be at least 1")
        return GeocodeQuery(address=cleaned, limit=limit)

    @staticmethod
    def build_reverse_query(lat: float, lon: float) -> ReverseGeocodeQuery:
        validate_coordinates(lat, lon)
        return ReverseGeocodeQuery(lat=lat, lon=lon)

    @staticmethod
    def build_weather_query(lat: float, lon: float) -> WeatherQuery:
        validate_coordinates(lat, lon)
        return WeatherQuery(lat=lat, lon=lon)

    # --- Operations ---

    async def search(self, text: str, language: str = "en", max_results: int = 10) -> RotationResult[List[SearchHit]]:
        return await self._run("search", self.build_search_query(text, language, max_results))

    async def translate(self, text: str, target: str, source: str = "auto") -> RotationResult[TranslationResult]:
        return await self._run("translate", self.build_translation_query(text, target, source))

    async def lookup_ip(self, address: Optional[str] = None) -> RotationResult[IpInfo]:
        return await self._run("ip", self.build_ip_query(address))

    async def geocode(self, address: str, limit: int = 1) -> RotationResult[List[GeoResult]]:
        return await self._run("geocode", self.build_geocode_query(address, limit))

    async def reverse_geocode(self, lat: float, lon: float) -> RotationResult[GeoResult]:
        return await self._run("reverse", self.build_reverse_query(lat, lon))

    async def current_weather(self, lat: float, lon: float) -> RotationResult[WeatherReport]:
        return await self._run("weather", self.build_weather_query(lat, lon))
