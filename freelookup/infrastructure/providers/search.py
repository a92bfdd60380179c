"""Web search providers (SearXNG instances, DuckDuckGo Instant Answer API)."""

import logging
from typing import Any, Dict, Iterable, List

import httpx

from freelookup.domain.errors import EmptyResultError, ProviderResponseError
from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.domain.models.common import SearchQuery
from freelookup.domain.models.results import SearchHit
from freelookup.infrastructure.providers.http import get_json, require_mapping

logger = logging.getLogger(__name__)


class SearxngSearchProvider(ProviderAdapter[SearchQuery, List[SearchHit]]):
    """One SearXNG instance queried through its JSON output format.

    Many public instances disable `format=json` and answer 403 or an HTML
    page; both count as failures.
    """

    kind = "searxng"

    async def fetch(self, client: httpx.AsyncClient, query: SearchQuery) -> List[SearchHit]:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/search",
            params={"q": query.text, "format": "json", "language": query.language, "pageno": 1},
            provider=self.name,
        ), self.name)

        results = data.get("results")
        if not isinstance(results, list):
            raise ProviderResponseError("Missing 'results' list", provider=self.name)

        hits = []
        for item in results:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            hits.append(SearchHit(
                title=str(item.get("title") or item["url"]),
                url=str(item["url"]),
                snippet=str(item.get("content") or ""),
            ))
            if len(hits) >= query.max_results:
                break

        if not hits:
            raise EmptyResultError(f"No results for '{query.text}'", provider=self.name)
        return hits


def _iter_topics(topics: Iterable[Any]) -> Iterable[Dict[str, Any]]:
    """RelatedTopics mixes plain entries with {'Name': ..., 'Topics': [...]} groups."""
    for topic in topics:
        if not isinstance(topic, dict):
            continue
        if isinstance(topic.get("Topics"), list):
            yield from _iter_topics(topic["Topics"])
        else:
            yield topic


class DuckDuckGoInstantProvider(ProviderAdapter[SearchQuery, List[SearchHit]]):
    """DuckDuckGo Instant Answer API (no key). Returns abstracts, not full web results."""

    kind = "duckduckgo"

    async def fetch(self, client: httpx.AsyncClient, query: SearchQuery) -> List[SearchHit]:
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/",
            params={"q": query.text, "format": "json", "no_html": 1, "skip_disambig": 1, "no_redirect": 1},
            provider=self.name,
        ), self.name)

        hits: List[SearchHit] = []
        abstract = str(data.get("AbstractText") or "").strip()
        if abstract and data.get("AbstractURL"):
            hits.append(SearchHit(
                title=str(data.get("Heading") or query.text),
                url=str(data["AbstractURL"]),
                snippet=abstract,
            ))

        for topic in _iter_topics(data.get("RelatedTopics") or []):
            if len(hits) >= query.max_results:
                break
            text = str(topic.get("Text") or "").strip()
            url = topic.get("FirstURL")
            if not text or not url:
                continue
            title, _, rest = text.partition(" - ")
            hits.append(SearchHit(title=title, url=str(url), snippet=rest or text))

        if not hits:
            raise EmptyResultError(f"No instant answer for '{query.text}'", provider=self.name)
        return hits[:query.max_results]
