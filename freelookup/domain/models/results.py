"""Normalized result types, one per lookup operation.

Provider adapters map each upstream's raw JSON into these shapes before the
rotator inspects them, so callers never see provider-specific payloads.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from freelookup.domain.models.common import LanguageCode, ProviderName

T = TypeVar("T")

# --- Normalized Results ---

@dataclass
class SearchHit:
    """One search result entry."""
    title: str
    url: str
    snippet: str = ""

@dataclass
class TranslationResult:
    text: str
    source: LanguageCode
    target: LanguageCode
    detected_language: Optional[LanguageCode] = None

@dataclass
class GeoResult:
    """A geocoded place (forward or reverse)."""
    lat: float
    lon: float
    display_name: str

@dataclass
class IpInfo:
    ip: str
    city: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    org: Optional[str] = None
    timezone: Optional[str] = None

@dataclass
class WeatherReport:
    """Current conditions at a coordinate."""
    lat: float
    lon: float
    temperature_c: float
    windspeed_kmh: Optional[float]
    weather_code: Optional[int]
    description: str
    observed_at: Optional[str] = None

# --- Rotation Bookkeeping ---

@dataclass
class AttemptRecord:
    """Outcome of a single provider attempt within one rotation."""
    provider: ProviderName
    ok: bool
    elapsed_s: float
    error_type: Optional[str] = None
    error_message: Optional[str] = None

@dataclass
class RotationResult(Generic[T]):
    """Successful rotation: the winning provider's normalized value."""
    value: T
    provider: ProviderName
    attempts: List[AttemptRecord] = field(default_factory=list)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

@dataclass
class BatchItemOutcome:
    """Result of one item in a sequential batch run."""
    item: Any
    result: Optional[RotationResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None
