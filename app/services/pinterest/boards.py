import logging
from typing import Any

from app.core.errors import UpstreamError
from app.core.observability import BOARD_FAILURES
from app.schemas.common import Board, PinRecord
from app.services.pinterest.client import PinterestClient
from app.services.pinterest.paging import MAX_TARGET_COUNT, clamp, fetch_paged, next_bookmark

logger = logging.getLogger(__name__)

BOARDS_PAGE_SIZE = 100
MAX_BOARDS = 500
MAX_BOARD_PAGES = 20


def _to_board(raw: Any) -> Board | None:
    if not isinstance(raw, dict) or raw.get("id") in (None, ""):
        return None
    name = raw.get("name")
    description = raw.get("description")
    return Board(
        id=str(raw["id"]),
        name=name if isinstance(name, str) else "",
        description=description if isinstance(description, str) else "",
    )


async def list_boards(client: PinterestClient) -> list[Board]:
    """Enumerate the token owner's boards. Any failing page aborts the listing."""
    boards: list[Board] = []
    bookmark: str | None = None

    for _ in range(MAX_BOARD_PAGES):
        params: dict[str, Any] = {"page_size": BOARDS_PAGE_SIZE}
        if bookmark:
            params["bookmark"] = bookmark

        payload = await client.get_json("/boards", params)
        items = payload.get("items") if isinstance(payload, dict) else None
        for raw in items if isinstance(items, list) else []:
            board = _to_board(raw)
            if board is not None:
                boards.append(board)

        bookmark = next_bookmark(payload)
        if len(boards) >= MAX_BOARDS or not bookmark:
            break

    return boards[:MAX_BOARDS]


def board_pins_path(board_id: str) -> str:
    return f"/boards/{board_id}/pins"


async def fetch_board_pins(client: PinterestClient, board_id: str, limit: int) -> list[PinRecord]:
    return await fetch_paged(client, board_pins_path(board_id), limit)


async def aggregate_all_pins(client: PinterestClient, target_limit: int) -> list[PinRecord]:
    """Merge pins across every board, in board order, skipping boards that fail."""
    target = clamp(target_limit, 1, MAX_TARGET_COUNT)
    boards = await list_boards(client)

    seen: set[str] = set()
    records: list[PinRecord] = []
    for board in boards:
        remaining = target - len(records)
        if remaining <= 0:
            break
        try:
            batch = await fetch_paged(client, board_pins_path(board.id), remaining, exclude=seen)
        except UpstreamError as exc:
            BOARD_FAILURES.inc()
            logger.warning(
                "Skipping board %s (%s): %s status=%s body=%s",
                board.id,
                board.name,
                exc.message,
                exc.upstream_status,
                exc.body[:500],
            )
            continue

        for record in batch:
            seen.add(record.id)
        records.extend(batch)

    logger.info("Aggregated %d pins from %d boards", len(records), len(boards))
    return records[:target]
