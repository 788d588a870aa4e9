from collections.abc import Callable

import httpx
from fastapi import Depends, Request

from app.core.config import get_settings
from app.services.pinterest.client import PinterestClient


def build_http_client() -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(max(settings.upstream_timeout_seconds, settings.image_proxy_timeout_seconds)),
        follow_redirects=False,
    )


async def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = build_http_client()
        request.app.state.http_client = client
    return client


def get_pinterest_client_factory(
    http: httpx.AsyncClient = Depends(get_http_client),
) -> Callable[[str], PinterestClient]:
    def factory(token: str) -> PinterestClient:
        return PinterestClient(http, token)

    return factory
