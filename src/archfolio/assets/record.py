from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class AssetState(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    DURABLE = "durable"
    FAILED = "failed"


@dataclass(frozen=True)
class LocalFile:
    filename: str
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class AssetRecord:
    asset_id: str
    filename: str
    state: AssetState
    local_preview_ref: str | None = None
    remote_url: str | None = None
    # Position in the user-facing sequence as of the snapshot it came from.
    order: int = 0

    @property
    def display_ref(self) -> str | None:
        """The reference a renderer should show: the durable URL once present."""
        return self.remote_url or self.local_preview_ref

    @property
    def is_durable(self) -> bool:
        return self.state is AssetState.DURABLE

    def uploading(self) -> AssetRecord:
        return replace(self, state=AssetState.UPLOADING)

    def durable(self, remote_url: str) -> AssetRecord:
        # The local preview is ephemeral; once the store answers it is dropped.
        return replace(self, state=AssetState.DURABLE, remote_url=remote_url, local_preview_ref=None)


@dataclass(frozen=True)
class UploadCompleted:
    asset_id: str
    remote_url: str


@dataclass(frozen=True)
class UploadFailed:
    asset_id: str
    cause: BaseException


AssetEvent = UploadCompleted | UploadFailed
