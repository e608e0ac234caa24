from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from archfolio.config import settings
from archfolio.errors import UploadError

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def safe_filename(name: str) -> str:
    # Prevent path traversal; keep only the final path component.
    cleaned = os.path.basename(name.replace("\\", "/")).replace("..", "_").strip()
    return cleaned or "upload.bin"


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str
    sha256: str
    size: int
    content_type: str | None
    created_at: str


class ObjectStore(Protocol):
    async def put(self, data: bytes, key: str, content_type: str | None = None) -> str:
        """Persist ``data`` under ``key`` and return a durable, fetchable URL."""
        ...


class LocalObjectStore:
    """Filesystem-backed object store rooted at ``<data_dir>/objects``."""

    def __init__(self, root_dir: Path | None = None, public_base_url: str | None = None) -> None:
        self.root_dir = Path(root_dir or settings.data_dir).resolve()
        self.objects_dir = self.root_dir / "objects"
        self.objects_dir.mkdir(parents=True, exist_ok=True)
        base = public_base_url if public_base_url is not None else settings.public_base_url
        self.public_base_url = base.rstrip("/") if base else None

    async def put(self, data: bytes, key: str, content_type: str | None = None) -> str:
        path = self._path_for(key)
        try:
            stored = await asyncio.to_thread(self._write, path, key, data, content_type)
        except OSError as exc:
            raise UploadError(f"failed to store {key!r}: {exc}") from exc
        logger.debug("Stored %s (%d bytes, sha256=%s)", key, stored.size, stored.sha256[:12])
        return stored.url

    def stat(self, key: str) -> StoredObject:
        meta_path = self._meta_path(self._path_for(key))
        return StoredObject(**json.loads(meta_path.read_text("utf-8")))

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return self._path_for(key).as_uri()

    def _path_for(self, key: str) -> Path:
        parts = [p for p in key.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise UploadError(f"invalid object key {key!r}")
        path = (self.objects_dir.joinpath(*parts)).resolve()
        if not str(path).startswith(str(self.objects_dir) + os.sep):
            raise UploadError(f"refusing to write outside objects_dir: {key!r}")
        return path

    @staticmethod
    def _meta_path(path: Path) -> Path:
        return path.with_name(path.name + ".meta.json")

    def _write(self, path: Path, key: str, data: bytes, content_type: str | None) -> StoredObject:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        stored = StoredObject(
            key=key,
            url=self.url_for(key),
            sha256=_sha256_bytes(data),
            size=len(data),
            content_type=content_type,
            created_at=_now_iso(),
        )
        self._meta_path(path).write_text(json.dumps(asdict(stored), indent=2), encoding="utf-8")
        return stored
