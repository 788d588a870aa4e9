import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import httpx

from app.core.config import Settings, get_settings
from app.core.errors import BadRequestError, PayloadTooLargeError, UpstreamError
from app.core.observability import PROXIED_IMAGES
from app.utils.http import fetch_with_timeout
from app.utils.network import assert_allowed_url

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
PROXY_RESPONSE_HEADERS = {
    "Cache-Control": "public, max-age=86400",
    "Access-Control-Allow-Origin": "*",
    "X-Content-Type-Options": "nosniff",
}


@dataclass
class ProxiedImage:
    upstream: httpx.Response
    content_type: str
    headers: dict[str, str] = field(default_factory=dict)

    def iter_bytes(self) -> AsyncIterator[bytes]:
        return self.upstream.aiter_bytes()

    async def aclose(self) -> None:
        await self.upstream.aclose()


def _declared_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def open_image(http: httpx.AsyncClient, url: str | None, settings: Settings | None = None) -> ProxiedImage:
    """Open an allow-listed image for streaming back to the caller.

    The declared Content-Length is checked against the size ceiling before any
    body is read; bodies without a declared length are streamed unchecked.
    """
    settings = settings or get_settings()
    if not url or not url.strip():
        raise BadRequestError("url is required")
    url = url.strip()
    host = assert_allowed_url(url, settings.image_proxy_allowed_host_list)

    response = await fetch_with_timeout(
        http,
        url,
        headers={"Accept": "image/*", "User-Agent": settings.image_proxy_user_agent},
        timeout_seconds=settings.image_proxy_timeout_seconds,
        stream=True,
        operation="image_proxy",
    )

    if not response.is_success:
        await response.aclose()
        PROXIED_IMAGES.labels("upstream_error").inc()
        logger.error("Image upstream %s returned %s for %s", host, response.status_code, url)
        raise UpstreamError("Upstream image fetch failed", upstream_status=response.status_code)

    declared = _declared_length(response)
    if declared is not None and declared > settings.image_proxy_max_bytes:
        await response.aclose()
        PROXIED_IMAGES.labels("too_large").inc()
        logger.warning("Image %s declares %d bytes, over %d", url, declared, settings.image_proxy_max_bytes)
        raise PayloadTooLargeError("Image too large")

    PROXIED_IMAGES.labels("ok").inc()
    return ProxiedImage(
        upstream=response,
        content_type=response.headers.get("content-type") or DEFAULT_CONTENT_TYPE,
        headers=dict(PROXY_RESPONSE_HEADERS),
    )
