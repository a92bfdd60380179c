import json

import httpx
import pytest

from freelookup.domain.errors import EmptyResultError, ProviderRateLimitedError, ProviderResponseError
from freelookup.domain.models.common import TranslationQuery
from freelookup.infrastructure.providers.translation import LibreTranslateProvider, MyMemoryProvider


def test_libretranslate_posts_payload_and_maps_result(fetch_with):
    provider = LibreTranslateProvider("https://libre.example")
    body = {"translatedText": "Hallo Welt", "detectedLanguage": {"confidence": 90, "language": "en"}}

    result, requests = fetch_with(provider, TranslationQuery("Hello world", "auto", "de"),
                                  lambda r: httpx.Response(200, json=body))

    sent = json.loads(requests[0].content)
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/translate"
    assert sent == {"q": "Hello world", "source": "auto", "target": "de", "format": "text"}
    assert result.text == "Hallo Welt"
    assert result.target == "de"
    assert result.detected_language == "en"


def test_libretranslate_sends_api_key_when_configured(fetch_with):
    provider = LibreTranslateProvider("https://libre.example", api_key="secret")
    _, requests = fetch_with(provider, TranslationQuery("Hi", "en", "fr"),
                             lambda r: httpx.Response(200, json={"translatedText": "Salut"}))
    assert json.loads(requests[0].content)["api_key"] == "secret"


def test_libretranslate_soft_error_in_200_body_is_a_failure(fetch_with):
    provider = LibreTranslateProvider("https://libre.example")
    with pytest.raises(ProviderResponseError, match="Soft error"):
        fetch_with(provider, TranslationQuery("Hi", "en", "xx"),
                   lambda r: httpx.Response(200, json={"error": "xx is not supported"}))


def test_libretranslate_empty_translation_is_a_failure(fetch_with):
    provider = LibreTranslateProvider("https://libre.example")
    with pytest.raises(EmptyResultError):
        fetch_with(provider, TranslationQuery("Hi", "en", "de"),
                   lambda r: httpx.Response(200, json={"translatedText": "  "}))


def test_libretranslate_missing_field_is_a_failure(fetch_with):
    provider = LibreTranslateProvider("https://libre.example")
    with pytest.raises(ProviderResponseError, match="translatedText"):
        fetch_with(provider, TranslationQuery("Hi", "en", "de"), lambda r: httpx.Response(200, json={}))


def test_libretranslate_rate_limit(fetch_with):
    provider = LibreTranslateProvider("https://libre.example")
    with pytest.raises(ProviderRateLimitedError):
        fetch_with(provider, TranslationQuery("Hi", "en", "de"), lambda r: httpx.Response(429))


def test_mymemory_uses_langpair_with_autodetect(fetch_with):
    provider = MyMemoryProvider("https://api.mymemory.translated.net")
    body = {"responseStatus": 200, "responseData": {"translatedText": "Bonjour", "detectedLanguage": "en-GB"}}

    result, requests = fetch_with(provider, TranslationQuery("Hello", "auto", "fr"),
                                  lambda r: httpx.Response(200, json=body))

    assert requests[0].url.path == "/get"
    assert requests[0].url.params["langpair"] == "autodetect|fr"
    assert result.text == "Bonjour"
    assert result.source == "auto"
    assert result.detected_language == "en-GB"


def test_mymemory_explicit_source(fetch_with):
    provider = MyMemoryProvider("https://api.mymemory.translated.net")
    body = {"responseStatus": "200", "responseData": {"translatedText": "Hola"}}
    result, requests = fetch_with(provider, TranslationQuery("Hello", "en", "es"),
                                  lambda r: httpx.Response(200, json=body))
    assert requests[0].url.params["langpair"] == "en|es"
    assert result.detected_language is None


def test_mymemory_non_200_status_in_body_is_a_failure(fetch_with):
    provider = MyMemoryProvider("https://api.mymemory.translated.net")
    body = {"responseStatus": 403, "responseDetails": "INVALID LANGUAGE PAIR SPECIFIED", "responseData": None}
    with pytest.raises(ProviderResponseError, match="INVALID LANGUAGE PAIR"):
        fetch_with(provider, TranslationQuery("Hello", "en", "zz"), lambda r: httpx.Response(200, json=body))


def test_mymemory_quota_warning_is_a_failure(fetch_with):
    provider = MyMemoryProvider("https://api.mymemory.translated.net")
    body = {
        "responseStatus": 200,
        "responseData": {"translatedText": "MYMEMORY WARNING: YOU USED ALL AVAILABLE FREE TRANSLATIONS FOR TODAY."},
    }
    with pytest.raises(ProviderResponseError, match="MYMEMORY WARNING"):
        fetch_with(provider, TranslationQuery("Hello", "en", "de"), lambda r: httpx.Response(200, json=body))
