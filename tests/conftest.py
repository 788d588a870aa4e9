import os
from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

API_BASE = "https://api.pinterest.com/v5"


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    os.environ["ENV"] = "test"
    os.environ["OBSERVABILITY_ENABLED"] = "false"
    os.environ["PINTEREST_ACCESS_TOKEN"] = ""
    os.environ["PINTEREST_API_BASE_URL"] = API_BASE
    os.environ["USE_MOCK"] = "false"

    from app.core.config import get_settings
    from app.services.search_cache import get_search_cache

    get_settings.cache_clear()
    get_search_cache.cache_clear()
    yield


class FakeUpstream:
    """Routes MockTransport requests by URL path and records every call."""

    def __init__(self):
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []

    def on(self, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[path] = handler

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [call for call in self.calls if call.url.path == path]

    def __call__(self, request: httpx.Request):
        self.calls.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, text="no such route")
        return handler(request)


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(fake_upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_upstream))


@pytest.fixture
def raw_pin():
    def build(pin_id: str, size: int = 600, **fields) -> dict:
        pin = {
            "id": pin_id,
            "title": f"Pin {pin_id}",
            "link": f"https://example.com/{pin_id}",
            "media": {
                "images": {
                    f"{size}x": {
                        "url": f"https://i.pinimg.com/{size}x/{pin_id}.jpg",
                        "width": size,
                        "height": size,
                    }
                }
            },
        }
        pin.update(fields)
        return pin

    return build


@pytest.fixture
def pinterest_client(http_client):
    from app.services.pinterest.client import PinterestClient

    return PinterestClient(http_client, "test-token", base_url=API_BASE, timeout_seconds=5)


@pytest.fixture
def token():
    return {"value": "test-token"}


@pytest.fixture
def client(setup_test_env, http_client, token):
    from app.api.deps import get_http_client
    from app.core.credentials import StaticCredentialProvider, get_credential_provider
    from app.main import app
    from app.services.search_cache import get_search_cache

    get_search_cache().clear()
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_credential_provider] = lambda: StaticCredentialProvider(token["value"])

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
