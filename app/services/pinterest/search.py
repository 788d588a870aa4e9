import json
import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from app.core.credentials import CredentialProvider, require_access_token
from app.core.errors import MockDataError, UpstreamError, UpstreamTimeoutError
from app.core.observability import SEARCH_CACHE
from app.schemas.common import PinRecord
from app.services.pinterest.client import PinterestClient
from app.services.pinterest.normalize import normalize_collection
from app.services.pinterest.paging import MAX_PAGE_SIZE
from app.services.search_cache import SearchCache

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search/pins"


def load_mock_items(path: Path, limit: int) -> list[PinRecord]:
    try:
        sample = json.loads(path.read_text(encoding="utf-8"))
        items = sample.get("items") if isinstance(sample, dict) else None
        return [PinRecord.model_validate(item) for item in (items or [])[:limit]]
    except (OSError, ValueError, ValidationError) as exc:
        logger.exception("Failed to load mock data from %s", path)
        raise MockDataError("Failed to load mock data") from exc


async def search_pins(
    client: PinterestClient, query: str, limit: int
) -> list[PinRecord]:
    """Single-page search; the upstream page is capped at ``MAX_PAGE_SIZE``."""
    try:
        payload = await client.get_json(
            SEARCH_PATH, {"query": query, "page_size": min(limit, MAX_PAGE_SIZE)}
        )
    except UpstreamError as exc:
        if exc.upstream_status is None:
            logger.error("Pinterest API request failed: %s", exc.message)
            error_cls = UpstreamTimeoutError if isinstance(exc, UpstreamTimeoutError) else UpstreamError
            raise error_cls("Pinterest API request failed") from exc
        raise
    return normalize_collection(payload)[:limit]


async def run_search(
    *,
    query: str,
    limit: int,
    cache: SearchCache,
    credentials: CredentialProvider,
    client_factory: Callable[[str], PinterestClient],
    use_mock: bool = False,
    mock_data_path: Path | None = None,
) -> tuple[str, list[PinRecord]]:
    """Resolve a search to ``(source, items)``.

    Live results are cached under ``(query, limit, mode)``; a hit is served
    before any credential check. Mock mode never touches the network.
    """
    mode = "mock" if use_mock else "live"
    key = (query, limit, mode)

    if use_mock:
        if mock_data_path is None:
            raise MockDataError("Failed to load mock data")
        return "mock", load_mock_items(mock_data_path, limit)

    cached = cache.get(key)
    if cached is not None:
        SEARCH_CACHE.labels("hit").inc()
        return "cache", cached
    SEARCH_CACHE.labels("miss").inc()

    token = require_access_token(credentials)
    items = await search_pins(client_factory(token), query, limit)
    cache.set(key, items)
    return "pinterest-v5", items
