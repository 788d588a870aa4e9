import json
import logging
from typing import Any

import httpx

from app.core.config import get_settings
from app.core.errors import UpstreamError, UpstreamParseError
from app.utils.http import fetch_with_timeout

logger = logging.getLogger(__name__)


class PinterestClient:
    """Authenticated JSON access to the Pinterest v5 REST API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        access_token: str,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
    ):
        settings = get_settings()
        self.http = http
        self.access_token = access_token
        self.base_url = (base_url or settings.pinterest_api_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.upstream_timeout_seconds

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = self.url_for(path)
        response = await fetch_with_timeout(
            self.http,
            url,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self.access_token}",
            },
            params=params,
            timeout_seconds=self.timeout_seconds,
        )
        text = response.text
        if not response.is_success:
            logger.error("Pinterest API error %s on %s: %s", response.status_code, path, text)
            raise UpstreamError("Pinterest API error", upstream_status=response.status_code, body=text)

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse Pinterest JSON from %s: %s", path, text[:500])
            raise UpstreamParseError(
                "Failed to parse Pinterest response", upstream_status=response.status_code, body=text
            ) from exc
