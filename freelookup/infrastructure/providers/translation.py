"""Translation providers (LibreTranslate instances, MyMemory).

Both services can answer HTTP 200 with an error message in the body; such
soft errors are raised as `ProviderResponseError` so the rotator moves on.
"""

import logging
from typing import Optional

import httpx

from freelookup.domain.errors import EmptyResultError, ProviderResponseError
from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.domain.models.common import LanguageCode, TranslationQuery
from freelookup.domain.models.results import TranslationResult
from freelookup.infrastructure.providers.http import get_json, post_json, require_mapping

logger = logging.getLogger(__name__)


class LibreTranslateProvider(ProviderAdapter[TranslationQuery, TranslationResult]):
    """One LibreTranslate instance (POST /translate)."""

    kind = "libretranslate"

    def __init__(self, base_url: str, api_key: Optional[str] = None):
        super().__init__(base_url)
        self.api_key = api_key

    async def fetch(self, client: httpx.AsyncClient, query: TranslationQuery) -> TranslationResult:
        payload = {"q": query.text, "source": query.source, "target": query.target, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        data = require_mapping(
            await post_json(client, f"{self.base_url}/translate", payload, provider=self.name), self.name
        )

        if data.get("error"):
            raise ProviderResponseError(f"Soft error: {data['error']}", provider=self.name)
        translated = data.get("translatedText")
        if not isinstance(translated, str):
            raise ProviderResponseError("Missing 'translatedText'", provider=self.name)
        if not translated.strip():
            raise EmptyResultError("Empty translation", provider=self.name)

        detected = None
        detected_info = data.get("detectedLanguage")
        if isinstance(detected_info, dict) and detected_info.get("language"):
            detected = LanguageCode(str(detected_info["language"]))

        return TranslationResult(
            text=translated,
            source=query.source,
            target=query.target,
            detected_language=detected,
        )


class MyMemoryProvider(ProviderAdapter[TranslationQuery, TranslationResult]):
    """MyMemory translation memory (GET /get). Needs an explicit source language."""

    kind = "mymemory"

    async def fetch(self, client: httpx.AsyncClient, query: TranslationQuery) -> TranslationResult:
        source = query.source if query.source != "auto" else "autodetect"
        data = require_mapping(await get_json(
            client,
            f"{self.base_url}/get",
            params={"q": query.text, "langpair": f"{source}|{query.target}"},
            provider=self.name,
        ), self.name)

        status = data.get("responseStatus")
        if str(status) != "200":
            details = data.get("responseDetails") or f"responseStatus={status}"
            raise ProviderResponseError(f"Soft error: {details}", provider=self.name)

        response_data = data.get("responseData")
        if not isinstance(response_data, dict) or not isinstance(response_data.get("translatedText"), str):
            raise ProviderResponseError("Missing 'responseData.translatedText'", provider=self.name)
        translated = response_data["translatedText"]
        if not translated.strip():
            raise EmptyResultError("Empty translation", provider=self.name)
        # Quota exhaustion is reported inside translatedText with status 200
        if translated.upper().startswith("MYMEMORY WARNING"):
            raise ProviderResponseError(f"Soft error: {translated[:120]}", provider=self.name)

        detected = response_data.get("detectedLanguage")
        return TranslationResult(
            text=translated,
            source=query.source,
            target=query.target,
            detected_language=LanguageCode(str(detected)) if detected else None,
        )
