import asyncio
import os
from typing import Any, Callable, Iterable, List, Optional

import httpx
import pytest
from typer.testing import CliRunner

from freelookup.domain.interfaces.provider import ProviderAdapter
from freelookup.infrastructure.config import settings


class StubProvider(ProviderAdapter):
    """Deterministic provider: returns `result` or raises `error`, recording each call."""

    kind = "stub"

    def __init__(self, label: str, result: Any = None, error: Optional[BaseException] = None, delay: float = 0.0):
        super().__init__(f"https://{label}.example")
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: List[Any] = []

    async def fetch(self, client: httpx.AsyncClient, query: Any) -> Any:
        self.calls.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class FakeClock:
    """Returns the given readings in order, then keeps returning the last one."""

    def __init__(self, readings: Iterable[float]):
        self.readings = list(readings)
        self.index = 0

    def __call__(self) -> float:
        value = self.readings[min(self.index, len(self.readings) - 1)]
        self.index += 1
        return value


def mock_client_factory(handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
    """httpx client factory whose transport never touches the network."""
    def default_handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected HTTP request: {request.url}")

    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler or default_handler))
    return factory


@pytest.fixture
def stub_provider():
    """Factory fixture for StubProvider instances."""
    return StubProvider


@pytest.fixture
def offline_client_factory():
    return mock_client_factory()


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps user config files and FREELOOKUP_* variables out of tests."""
    for key in list(os.environ):
        if key.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "missing.yaml")
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_overrides", {})
    monkeypatch.setattr(settings, "_loaded", True)
    settings.clear_test_config()
    yield
    settings.clear_test_config()


@pytest.fixture
def fake_clock():
    """Factory fixture for FakeClock instances."""
    return FakeClock


@pytest.fixture
def client_factory():
    """Factory fixture: handler -> httpx client factory backed by MockTransport."""
    return mock_client_factory


@pytest.fixture
def fetch_with():
    """Runs one adapter fetch against a MockTransport handler; returns (result, requests)."""
    def _fetch(provider: ProviderAdapter, query: Any, handler: Callable[[httpx.Request], httpx.Response]):
        requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        async def scenario():
            async with mock_client_factory(recording_handler)() as client:
                return await provider.fetch(client, query)

        return asyncio.run(scenario()), requests
    return _fetch
