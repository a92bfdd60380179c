"""Shared HTTP helpers for provider adapters.

Maps HTTP status codes and undecodable bodies onto the provider error
taxonomy so every adapter fails the same way.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from freelookup.domain.errors import (
    ProviderHTTPError,
    ProviderRateLimitedError,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)


def _retry_after(resp: httpx.Response) -> Optional[float]:
    value = resp.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def handle_response(resp: httpx.Response, provider: Optional[str] = None) -> Any:
    """Returns the decoded JSON body of a 2xx response.

    Raises:
        ProviderRateLimitedError: On HTTP 429.
        ProviderHTTPError: On any other non-2xx status.
        ProviderResponseError: If the body is not valid JSON.
    """
    if resp.status_code == 429:
        raise ProviderRateLimitedError(provider=provider, retry_after=_retry_after(resp))
    if not 200 <= resp.status_code < 300:
        message = f"HTTP {resp.status_code}"
        snippet = resp.text[:200].strip()
        if snippet:
            message = f"{message}: {snippet}"
        raise ProviderHTTPError(resp.status_code, message, provider=provider)
    try:
        return resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.debug(f"Undecodable body from {provider}: {resp.text[:200]!r}")
        raise ProviderResponseError(f"Response is not valid JSON: {e}", provider=provider) from e


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    provider: Optional[str] = None,
) -> Any:
    logger.debug(f"GET {url} params={params}")
    resp = await client.get(url, params=params)
    return handle_response(resp, provider)


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    payload: Dict[str, Any],
    provider: Optional[str] = None,
) -> Any:
    logger.debug(f"POST {url}")
    resp = await client.post(url, json=payload)
    return handle_response(resp, provider)


def require_mapping(data: Any, provider: Optional[str] = None) -> Dict[str, Any]:
    """Top-level body must be a JSON object."""
    if not isinstance(data, dict):
        raise ProviderResponseError(
            f"Expected a JSON object, got {type(data).__name__}", provider=provider
        )
    return data


def to_float(value: Any, field: str, provider: Optional[str] = None) -> float:
    """Coordinates arrive as strings from Nominatim and as numbers elsewhere."""
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ProviderResponseError(f"Field '{field}' is not numeric: {value!r}", provider=provider) from e
