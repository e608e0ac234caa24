from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class LayoutRequest:
    project_details: str
    # Order defines imageIndex: index i refers to image_urls[i].
    image_urls: tuple[str, ...]


@dataclass(frozen=True)
class RawLayoutResponse:
    # Keep the untouched model output; it is validated downstream, never trusted here.
    raw_text: str | None
    provider: str
    model: str
    parsed: Any = None
    raw_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GeneratedMap:
    data_uri: str
    provider: str
    model: str


class LayoutProvider(Protocol):
    name: str

    async def suggest_layout(self, request: LayoutRequest, prompt: str) -> RawLayoutResponse: ...


class MapProvider(Protocol):
    name: str

    async def generate_map(self, location: str) -> GeneratedMap: ...
