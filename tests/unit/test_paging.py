import httpx
import pytest

from app.core.errors import UpstreamError, UpstreamParseError
from app.services.pinterest.paging import MAX_PAGE_FETCHES, fetch_paged

BOARD_PATH = "/v5/boards/b1/pins"


def _page(raw_pin, start: int, count: int, bookmark: str | None = None) -> dict:
    payload = {"items": [raw_pin(f"p{i}") for i in range(start, start + count)]}
    if bookmark is not None:
        payload["bookmark"] = bookmark
    return payload


@pytest.mark.asyncio
async def test_walks_bookmarks_until_exhausted(fake_upstream, pinterest_client, raw_pin):
    pages = {
        None: _page(raw_pin, 0, 50, "bm1"),
        "bm1": _page(raw_pin, 50, 50, "bm2"),
        "bm2": _page(raw_pin, 100, 30),
    }
    fake_upstream.on(
        BOARD_PATH, lambda request: httpx.Response(200, json=pages[request.url.params.get("bookmark")])
    )

    records = await fetch_paged(pinterest_client, "/boards/b1/pins", 120)

    calls = fake_upstream.calls_to(BOARD_PATH)
    assert len(calls) == 3
    assert "bookmark" not in calls[0].url.params
    assert calls[1].url.params["bookmark"] == "bm1"
    assert all(call.url.params["page_size"] == "50" for call in calls)
    assert len(records) == 120
    assert len({record.id for record in records}) == 120


@pytest.mark.asyncio
async def test_stops_once_target_reached(fake_upstream, pinterest_client, raw_pin):
    fake_upstream.on(BOARD_PATH, lambda request: httpx.Response(200, json=_page(raw_pin, 0, 10, "more")))

    records = await fetch_paged(pinterest_client, "/boards/b1/pins", 10)

    assert len(records) == 10
    assert len(fake_upstream.calls_to(BOARD_PATH)) == 1
    assert fake_upstream.calls_to(BOARD_PATH)[0].url.params["page_size"] == "10"


@pytest.mark.asyncio
async def test_page_ceiling_guards_against_endless_bookmarks(fake_upstream, pinterest_client, raw_pin):
    # same pins and same bookmark every time, so the target is never reached
    fake_upstream.on(BOARD_PATH, lambda request: httpx.Response(200, json=_page(raw_pin, 0, 5, "again")))

    records = await fetch_paged(pinterest_client, "/boards/b1/pins", 500)

    assert len(fake_upstream.calls_to(BOARD_PATH)) == MAX_PAGE_FETCHES
    assert [record.id for record in records] == ["p0", "p1", "p2", "p3", "p4"]


@pytest.mark.asyncio
async def test_dedups_within_call_and_honours_exclude(fake_upstream, pinterest_client, raw_pin):
    pages = {
        None: {"items": [raw_pin("a"), raw_pin("b"), raw_pin("a")], "bookmark": "next"},
        "next": {"items": [raw_pin("b"), raw_pin("c")], "bookmark": ""},
    }
    fake_upstream.on(
        BOARD_PATH, lambda request: httpx.Response(200, json=pages[request.url.params.get("bookmark")])
    )

    records = await fetch_paged(pinterest_client, "/boards/b1/pins", 50, exclude={"c"})

    assert [record.id for record in records] == ["a", "b"]


@pytest.mark.asyncio
async def test_target_is_clamped(fake_upstream, pinterest_client, raw_pin):
    fake_upstream.on(BOARD_PATH, lambda request: httpx.Response(200, json=_page(raw_pin, 0, 3)))

    records = await fetch_paged(pinterest_client, "/boards/b1/pins", 0)

    assert len(records) == 1
    assert fake_upstream.calls_to(BOARD_PATH)[0].url.params["page_size"] == "1"


@pytest.mark.asyncio
async def test_failing_page_aborts_whole_fetch(fake_upstream, pinterest_client, raw_pin):
    def handler(request):
        if request.url.params.get("bookmark"):
            return httpx.Response(500, text="boom")
        return httpx.Response(200, json=_page(raw_pin, 0, 5, "bm1"))

    fake_upstream.on(BOARD_PATH, handler)

    with pytest.raises(UpstreamError) as excinfo:
        await fetch_paged(pinterest_client, "/boards/b1/pins", 20)
    assert excinfo.value.upstream_status == 500
    assert excinfo.value.body == "boom"


@pytest.mark.asyncio
async def test_unparseable_page_raises_parse_error(fake_upstream, pinterest_client):
    fake_upstream.on(BOARD_PATH, lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(UpstreamParseError):
        await fetch_paged(pinterest_client, "/boards/b1/pins", 20)


@pytest.mark.asyncio
async def test_requests_carry_bearer_token(fake_upstream, pinterest_client, raw_pin):
    fake_upstream.on(BOARD_PATH, lambda request: httpx.Response(200, json=_page(raw_pin, 0, 1)))

    await fetch_paged(pinterest_client, "/boards/b1/pins", 5)

    assert fake_upstream.calls[0].headers["Authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_target_above_ceiling_is_clamped_to_500(fake_upstream, pinterest_client, raw_pin):
    def handler(request):
        page = int(request.url.params.get("bookmark") or 0)
        return httpx.Response(200, json=_page(raw_pin, page * 50, 50, str(page + 1)))

    fake_upstream.on(BOARD_PATH, handler)

    records = await fetch_paged(pinterest_client, "/boards/b1/pins", 1000)

    assert len(records) == 500
    assert len(fake_upstream.calls_to(BOARD_PATH)) == 10
    assert fake_upstream.calls_to(BOARD_PATH)[0].url.params["page_size"] == "50"
