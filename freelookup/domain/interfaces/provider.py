"""Interface for lookup providers.

Defines the contract for one concrete public service endpoint among several
interchangeable ones for the same operation (e.g., one SearXNG instance).
"""

import abc
from typing import Generic, TypeVar

import httpx

from freelookup.domain.models.common import ProviderName, ProviderUrl

Q = TypeVar("Q")
R = TypeVar("R")


class ProviderAdapter(abc.ABC, Generic[Q, R]):
    """Abstract Base Class for a provider of one lookup operation.

    Subclasses set `kind` (e.g. 'searxng') and implement `fetch`, which must
    return a normalized result or raise. Returning an empty value is treated
    as a failure by the rotator.
    """

    kind: str = "provider"

    def __init__(self, base_url: str):
        self.base_url = ProviderUrl(base_url.rstrip("/"))

    @property
    def name(self) -> ProviderName:
        """Label used in logs, events and error reports."""
        host = httpx.URL(self.base_url).host or self.base_url
        return ProviderName(f"{self.kind}:{host}")

    @abc.abstractmethod
    async def fetch(self, client: httpx.AsyncClient, query: Q) -> R:
        """Performs one request for `query` and returns the normalized result.

        Args:
            client: Shared async HTTP client (timeouts are enforced by the caller).
            query: The immutable query payload.

        Returns:
            The normalized result for this operation.

        Raises:
            ProviderError: On non-2xx status, malformed payload or empty result.
            httpx.HTTPError: On transport failures.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.base_url!r})"
