"""Domain Events related to provider rotation.

Emitted by the rotator when an attempt starts, succeeds or fails, and when
every provider in a list has been exhausted.
"""

from dataclasses import dataclass, field
import time
from typing import List, Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific Rotation Events ---

@dataclass
class ProviderAttemptStarted(DomainEvent):
    """Event triggered when a provider is about to be called."""
    operation: str  # e.g., 'search', 'translate'
    provider: str
    position: int   # 1-based position in this rotation
    timestamp: float = field(default_factory=time.time)

@dataclass
class ProviderAttemptSucceeded(DomainEvent):
    """Event triggered when a provider returned a usable result."""
    operation: str
    provider: str
    position: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class ProviderAttemptFailed(DomainEvent):
    """Event triggered when a provider attempt failed and rotation moves on."""
    operation: str
    provider: str
    position: int
    error_type: str
    error_message: str
    latency_ms: Optional[float] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class AllProvidersExhausted(DomainEvent):
    """Event triggered when every provider in the list failed."""
    operation: str
    tried: List[str]
    last_error_type: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class BatchBackoffScheduled(DomainEvent):
    """Event triggered when a batch pauses after a rate-limited exhaustion."""
    operation: str
    item_index: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)
