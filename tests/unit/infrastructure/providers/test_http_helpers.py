import asyncio

import httpx
import pytest

from freelookup.domain.errors import ProviderHTTPError, ProviderRateLimitedError, ProviderResponseError
from freelookup.infrastructure.providers.http import get_json, handle_response, post_json, require_mapping, to_float


def test_handle_response_returns_decoded_json():
    assert handle_response(httpx.Response(200, json={"a": 1})) == {"a": 1}


def test_handle_response_maps_429_with_retry_after():
    resp = httpx.Response(429, headers={"Retry-After": "30"}, text="slow down")
    with pytest.raises(ProviderRateLimitedError) as exc_info:
        handle_response(resp, provider="searxng:a.example")
    assert exc_info.value.status_code == 429
    assert exc_info.value.retry_after == 30.0
    assert exc_info.value.provider == "searxng:a.example"


def test_handle_response_ignores_unparseable_retry_after():
    resp = httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})
    with pytest.raises(ProviderRateLimitedError) as exc_info:
        handle_response(resp)
    assert exc_info.value.retry_after is None


@pytest.mark.parametrize("status", [301, 403, 404, 500, 503])
def test_handle_response_maps_non_2xx_to_http_error(status):
    with pytest.raises(ProviderHTTPError) as exc_info:
        handle_response(httpx.Response(status, text="nope"))
    assert exc_info.value.status_code == status
    assert "nope" in str(exc_info.value)


def test_handle_response_rejects_html_body():
    with pytest.raises(ProviderResponseError, match="not valid JSON"):
        handle_response(httpx.Response(200, text="<html>captcha</html>"))


def test_get_json_sends_params_and_decodes():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        return httpx.Response(200, json=[1, 2])

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await get_json(client, "https://api.example/search", params={"q": "x y"})

    assert asyncio.run(scenario()) == [1, 2]
    assert seen["url"].params["q"] == "x y"


def test_post_json_sends_json_payload():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        seen["method"] = request.method
        return httpx.Response(200, json={"ok": True})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await post_json(client, "https://api.example/translate", {"q": "hi"})

    assert asyncio.run(scenario()) == {"ok": True}
    assert seen["method"] == "POST"
    assert b'"q"' in seen["body"]


def test_require_mapping_rejects_lists():
    assert require_mapping({"a": 1}) == {"a": 1}
    with pytest.raises(ProviderResponseError, match="Expected a JSON object"):
        require_mapping([])


def test_to_float_accepts_numeric_strings():
    assert to_float("52.5", "lat") == 52.5
    with pytest.raises(ProviderResponseError, match="'lat'"):
        to_float(None, "lat")
