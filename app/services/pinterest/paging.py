from collections.abc import Iterable
from typing import Any

from app.schemas.common import PinRecord
from app.services.pinterest.client import PinterestClient
from app.services.pinterest.normalize import normalize_collection

MAX_TARGET_COUNT = 500
MAX_PAGE_SIZE = 50
MAX_PAGE_FETCHES = 50


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def next_bookmark(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    bookmark = payload.get("bookmark")
    if isinstance(bookmark, str) and bookmark:
        return bookmark
    return None


async def fetch_paged(
    client: PinterestClient,
    path: str,
    target_count: int,
    exclude: Iterable[str] = (),
    params: dict[str, Any] | None = None,
) -> list[PinRecord]:
    """Walk a bookmark-paginated pin collection until ``target_count`` unique pins.

    Ids in ``exclude`` count as already seen and are never returned. Stops when
    the collection has no further bookmark or after ``MAX_PAGE_FETCHES`` pages.
    Any page failure raises and discards what this call had gathered.
    """
    target = clamp(target_count, 1, MAX_TARGET_COUNT)
    page_size = min(target, MAX_PAGE_SIZE)

    seen = set(exclude)
    records: list[PinRecord] = []
    bookmark: str | None = None

    for _ in range(MAX_PAGE_FETCHES):
        query = {**(params or {}), "page_size": page_size}
        if bookmark:
            query["bookmark"] = bookmark

        payload = await client.get_json(path, query)
        for record in normalize_collection(payload):
            if record.id in seen:
                continue
            seen.add(record.id)
            records.append(record)

        bookmark = next_bookmark(payload)
        if len(records) >= target or not bookmark:
            break

    return records[:target]
