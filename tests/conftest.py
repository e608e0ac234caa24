"""Shared fixtures and fakes for archfolio tests."""

from __future__ import annotations

import asyncio
import json
import struct
import zlib
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from archfolio.assets.pipeline import AssetIngestionPipeline
from archfolio.assets.record import LocalFile
from archfolio.errors import UploadError
from archfolio.generation.project import ProjectMetadata
from archfolio.providers.base import RawLayoutResponse

PLACEHOLDER = "blob:uploading"


async def settle(ticks: int = 10) -> None:
    """Let scheduled tasks and their done-callbacks run."""
    for _ in range(ticks):
        await asyncio.sleep(0)


class GatedStore:
    """Object store whose uploads finish only when the test opens their gate."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}
        self.failing: set[str] = set()
        self.keys: list[str] = []

    def gate(self, filename: str) -> asyncio.Event:
        return self.gates.setdefault(filename, asyncio.Event())

    async def put(self, data: bytes, key: str, content_type: str | None = None) -> str:
        self.keys.append(key)
        filename = key.rsplit("/", 1)[-1].split("_", 1)[1]
        await self.gate(filename).wait()
        if filename in self.failing:
            raise UploadError(f"store rejected {filename}")
        return f"https://cdn.test/{key}"


def make_file(name: str) -> LocalFile:
    return LocalFile(filename=name, content=name.encode(), content_type="image/png")


def layout_payload(grid_cols: int = 4, image_indices: tuple[int, ...] = (0,), with_text: bool = True) -> dict[str, Any]:
    components: list[dict[str, Any]] = [
        {"type": "image", "gridPosition": {"colSpan": 2, "rowSpan": 1}, "content": {"imageIndex": i}}
        for i in image_indices
    ]
    if with_text:
        components.append(
            {
                "type": "text",
                "gridPosition": {"colSpan": 1, "rowSpan": 1},
                "content": {"title": "Section", "content": "Lorem ipsum dolor sit amet."},
            }
        )
    return {"gridCols": grid_cols, "components": components}


def fake_layout_provider(payload: Any = None, error: Exception | None = None) -> MagicMock:
    provider = MagicMock()
    provider.name = "fake"
    if error is not None:
        provider.suggest_layout = AsyncMock(side_effect=error)
    else:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        provider.suggest_layout = AsyncMock(
            return_value=RawLayoutResponse(raw_text=text, provider="fake", model="fake-1")
        )
    return provider


@pytest.fixture
def store() -> GatedStore:
    return GatedStore()


@pytest.fixture
def pipeline(store: GatedStore) -> AssetIngestionPipeline:
    # Every record shares one preview marker, so only ids can tell them apart.
    return AssetIngestionPipeline(store, key_prefix="portfolio", preview=lambda content, ct: PLACEHOLDER)


@pytest.fixture
def project() -> ProjectMetadata:
    return ProjectMetadata(
        title="Casa Norte",
        description="A timber house on a sloping coastal site.",
        client="Private",
        location="Porto, Portugal",
        year=2023,
        area="240 m2",
    )


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture
def huge_png() -> bytes:
    """A well-formed PNG header declaring 20000x20000 pixels, far over Pillow's bomb limit."""
    ihdr = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )
