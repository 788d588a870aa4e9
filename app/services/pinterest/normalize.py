"""Map raw Pinterest v5 pin objects onto the canonical ``PinRecord``.

Upstream shapes vary with the fields requested and the endpoint used, so every
field is treated as optional. Pins without any resolvable image are dropped.
"""

from typing import Any, Mapping

from app.schemas.common import PinRecord
from app.services.pinterest.variants import DEFAULT_SCORER, VariantScorer, select_best_variant


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def pick_image_url(raw: Mapping[str, Any], scorer: VariantScorer = DEFAULT_SCORER) -> str | None:
    media = raw.get("media")
    if isinstance(media, Mapping):
        url = select_best_variant(media.get("images"), scorer)
        if url:
            return url

    url = select_best_variant(raw.get("images"), scorer)
    if url:
        return url

    return _text(raw.get("image_url")) or _text(raw.get("thumbnail_url"))


def normalize_pin(raw: Any, scorer: VariantScorer = DEFAULT_SCORER) -> PinRecord | None:
    if not isinstance(raw, Mapping):
        return None

    image = pick_image_url(raw, scorer)
    if not image:
        return None

    raw_id = raw.get("id")
    # image is always resolved here, so it is the only fallback id needed
    pin_id = str(raw_id) if raw_id not in (None, "") else image
    title = (
        _text(raw.get("title"))
        or _text(raw.get("description"))
        or _text(raw.get("alt_text"))
        or ""
    )
    return PinRecord(id=pin_id, title=title, link=_text(raw.get("link")), image=image)


def normalize_collection(payload: Any, scorer: VariantScorer = DEFAULT_SCORER) -> list[PinRecord]:
    items = payload.get("items") if isinstance(payload, Mapping) else None
    if not isinstance(items, list):
        return []

    records: list[PinRecord] = []
    for raw in items:
        record = normalize_pin(raw, scorer)
        if record is not None:
            records.append(record)
    return records
