import asyncio
from time import perf_counter
from typing import Any

import httpx

from app.core.errors import BadRequestError, UpstreamError, UpstreamTimeoutError
from app.core.observability import UPSTREAM_COUNT, UPSTREAM_LATENCY

DEFAULT_TIMEOUT_SECONDS = 10.0


async def fetch_with_timeout(
    client: httpx.AsyncClient,
    url: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    content: bytes | str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    stream: bool = False,
    operation: str = "pinterest",
) -> httpx.Response:
    """Send one request and give up once ``timeout_seconds`` have elapsed.

    The deadline covers the whole exchange; with ``stream=True`` it covers the
    response head only and the caller owns closing the response. Error status
    codes are returned as-is, never raised. There is no retry.
    """
    try:
        request = client.build_request(method, url, headers=headers, params=params, content=content)
    except httpx.InvalidURL as exc:
        raise BadRequestError(f"Invalid url: {exc}") from exc
    started = perf_counter()
    try:
        async with asyncio.timeout(timeout_seconds):
            response = await client.send(request, stream=stream)
    except (TimeoutError, httpx.TimeoutException) as exc:
        UPSTREAM_COUNT.labels(operation, "timeout").inc()
        raise UpstreamTimeoutError(f"Request to {request.url.host} timed out after {timeout_seconds}s") from exc
    except httpx.HTTPError as exc:
        UPSTREAM_COUNT.labels(operation, "network_error").inc()
        raise UpstreamError(f"Request to {request.url.host} failed: {exc}") from exc
    finally:
        UPSTREAM_LATENCY.labels(operation).observe(perf_counter() - started)

    UPSTREAM_COUNT.labels(operation, "success" if response.is_success else "http_error").inc()
    return response
