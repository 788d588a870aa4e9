from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PinRecord(BaseModel):
    """Canonical pin shape consumed by the slideshow front end."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    link: str | None = None
    image: str


class Board(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    description: str = ""


class PinListResponse(BaseModel):
    ok: Literal[True] = True
    items: list[PinRecord] = Field(default_factory=list)


class BoardListResponse(BaseModel):
    ok: Literal[True] = True
    items: list[Board] = Field(default_factory=list)


class SearchResponse(PinListResponse):
    source: Literal["cache", "mock", "pinterest-v5"]
