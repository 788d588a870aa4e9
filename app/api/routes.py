import math
from collections.abc import Callable

import httpx
from fastapi import APIRouter, Depends, Query
from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

from app.api.deps import get_http_client, get_pinterest_client_factory
from app.core.config import get_settings
from app.core.credentials import CredentialProvider, get_credential_provider, require_access_token
from app.core.errors import BadRequestError
from app.core.responses import success_response
from app.schemas.common import BoardListResponse, PinListResponse, SearchResponse
from app.services.image_proxy import open_image
from app.services.pinterest.boards import aggregate_all_pins, fetch_board_pins, list_boards
from app.services.pinterest.client import PinterestClient
from app.services.pinterest.search import run_search
from app.services.search_cache import SearchCache, get_search_cache

router = APIRouter(prefix="/api", tags=["api"])

PINS_DEFAULT_LIMIT = 120
PINS_MAX_LIMIT = 500
SEARCH_DEFAULT_LIMIT = 60
SEARCH_MAX_LIMIT = 120


def parse_limit(raw: str | None, default: int, high: int) -> int:
    """Lenient ``limit`` parsing: junk falls back to the default, numbers are clamped."""
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if not math.isfinite(value):
        return default
    return max(1, min(int(value), high))


def _dump(records) -> list[dict]:
    return [record.model_dump(mode="json") for record in records]


@router.get("/me/boards", response_model=BoardListResponse)
async def my_boards(
    credentials: CredentialProvider = Depends(get_credential_provider),
    client_factory: Callable[[str], PinterestClient] = Depends(get_pinterest_client_factory),
):
    client = client_factory(require_access_token(credentials))
    boards = await list_boards(client)
    return success_response(_dump(boards))


@router.get("/me/pins", response_model=PinListResponse)
async def my_pins(
    limit: str | None = Query(default=None),
    credentials: CredentialProvider = Depends(get_credential_provider),
    client_factory: Callable[[str], PinterestClient] = Depends(get_pinterest_client_factory),
):
    target = parse_limit(limit, PINS_DEFAULT_LIMIT, PINS_MAX_LIMIT)
    client = client_factory(require_access_token(credentials))
    pins = await aggregate_all_pins(client, target)
    return success_response(_dump(pins))


@router.get("/boards/{board_id}/pins", response_model=PinListResponse)
async def board_pins(
    board_id: str,
    limit: str | None = Query(default=None),
    credentials: CredentialProvider = Depends(get_credential_provider),
    client_factory: Callable[[str], PinterestClient] = Depends(get_pinterest_client_factory),
):
    target = parse_limit(limit, PINS_DEFAULT_LIMIT, PINS_MAX_LIMIT)
    client = client_factory(require_access_token(credentials))
    pins = await fetch_board_pins(client, board_id, target)
    return success_response(_dump(pins))


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    credentials: CredentialProvider = Depends(get_credential_provider),
    client_factory: Callable[[str], PinterestClient] = Depends(get_pinterest_client_factory),
    cache: SearchCache = Depends(get_search_cache),
):
    query = (q or "").strip()
    if not query:
        raise BadRequestError("q is required")

    settings = get_settings()
    source, items = await run_search(
        query=query,
        limit=parse_limit(limit, SEARCH_DEFAULT_LIMIT, SEARCH_MAX_LIMIT),
        cache=cache,
        credentials=credentials,
        client_factory=client_factory,
        use_mock=settings.use_mock,
        mock_data_path=settings.mock_data_path,
    )
    return success_response(_dump(items), source=source)


@router.get("/image-proxy")
async def image_proxy(
    url: str | None = Query(default=None),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    image = await open_image(http, url)
    return StreamingResponse(
        image.iter_bytes(),
        media_type=image.content_type,
        headers=image.headers,
        background=BackgroundTask(image.aclose),
    )
