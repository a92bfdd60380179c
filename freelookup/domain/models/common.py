"""Defines common Value Objects used across different lookup contexts.

These objects represent simple values like provider URLs, language codes
and query payloads, ensuring consistency and type safety.
"""

from dataclasses import dataclass
from typing import NewType, Optional, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
ProviderName = NewType("ProviderName", str)    # Short label, e.g. 'searxng:searx.be'
ProviderUrl = NewType("ProviderUrl", str)      # Base URL of one public instance
LanguageCode = NewType("LanguageCode", str)    # ISO 639-1 code or 'auto'

# === Queries ===
# Frozen: a query is passed unchanged to every provider attempt.

@dataclass(frozen=True)
class SearchQuery:
    text: str
    language: LanguageCode = LanguageCode("en")
    max_results: int = 10

@dataclass(frozen=True)
class TranslationQuery:
    text: str
    source: LanguageCode = LanguageCode("auto")
    target: LanguageCode = LanguageCode("en")

@dataclass(frozen=True)
class IpQuery:
    address: Optional[str] = None  # None means "the caller's own address"

@dataclass(frozen=True)
class GeocodeQuery:
    address: str
    limit: int = 1

@dataclass(frozen=True)
class ReverseGeocodeQuery:
    lat: float
    lon: float

@dataclass(frozen=True)
class WeatherQuery:
    lat: float
    lon: float

# --- Structured Data ---
class BackoffPolicy(TypedDict):
    """Value Object representing the outer batch backoff configuration."""
    initial_delay: float
    factor: float
    max_delay: float
