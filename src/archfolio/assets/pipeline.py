"""Concurrent ingestion of user-selected images.

Every file gets a fresh id at enqueue time and a local preview right away; its
upload runs as an independent task. Completions and failures are reconciled by
that id alone, never by comparing preview references or placeholder markers,
so any interleaving of sibling uploads leaves every other record untouched.

Display order is enqueue order (or whatever ``move`` made it) and never
follows completion order. A failed upload removes its record from the sequence
and is reported as an ``UploadFailed`` event. ``remove`` does not abort the
network call; a completion that arrives for an id no longer present is
ignored.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import replace

from archfolio.assets.preview import make_local_preview
from archfolio.assets.record import (
    AssetEvent,
    AssetRecord,
    AssetState,
    LocalFile,
    UploadCompleted,
    UploadFailed,
)
from archfolio.config import settings
from archfolio.storage import ObjectStore, safe_filename

logger = logging.getLogger(__name__)

Listener = Callable[[AssetEvent], None]


class AssetIngestionPipeline:
    def __init__(
        self,
        store: ObjectStore,
        key_prefix: str | None = None,
        preview: Callable[[bytes, str | None], str] = make_local_preview,
    ) -> None:
        self.store = store
        self.key_prefix = (key_prefix if key_prefix is not None else settings.upload_key_prefix).strip("/")
        self._preview = preview
        self._sequence: list[str] = []
        self._records: dict[str, AssetRecord] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._failures: dict[str, UploadFailed] = {}
        self._listeners: list[Listener] = []

    # -- commands -------------------------------------------------------------

    def enqueue(self, file: LocalFile) -> str:
        """
        Register ``file`` and start its upload. Returns the new asset id.

        Must be called from inside a running event loop; the upload task is
        scheduled on it and this call returns without awaiting anything.
        """
        loop = asyncio.get_running_loop()
        asset_id = uuid.uuid4().hex[:12]
        record = AssetRecord(
            asset_id=asset_id,
            filename=safe_filename(file.filename),
            state=AssetState.PENDING,
            local_preview_ref=self._preview(file.content, file.content_type),
        )
        self._records[asset_id] = record
        self._sequence.append(asset_id)

        task = loop.create_task(self._upload(asset_id, file), name=f"upload-{asset_id}")
        self._tasks[asset_id] = task
        task.add_done_callback(lambda _t, aid=asset_id: self._tasks.pop(aid, None))
        self._records[asset_id] = record.uploading()
        logger.debug("Enqueued %s as %s", record.filename, asset_id)
        return asset_id

    def remove(self, asset_id: str) -> None:
        """
        Drop a record. A still-running upload keeps going but its result is
        discarded. Removing a failed id acknowledges and forgets the failure.
        """
        if self._failures.pop(asset_id, None) is not None:
            return
        if self._records.pop(asset_id, None) is None:
            logger.debug("remove(%s): not in sequence", asset_id)
            return
        self._sequence.remove(asset_id)

    def move(self, asset_id: str, position: int) -> None:
        if asset_id not in self._records:
            raise KeyError(asset_id)
        self._sequence.remove(asset_id)
        position = max(0, min(position, len(self._sequence)))
        self._sequence.insert(position, asset_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # -- queries --------------------------------------------------------------

    def status(self, asset_id: str) -> AssetState:
        record = self._records.get(asset_id)
        if record is not None:
            return record.state
        if asset_id in self._failures:
            return AssetState.FAILED
        raise KeyError(asset_id)

    def snapshot(self) -> tuple[AssetRecord, ...]:
        return tuple(replace(self._records[aid], order=i) for i, aid in enumerate(self._sequence))

    def durable_urls(self) -> tuple[str, ...]:
        return tuple(r.remote_url for r in self.snapshot() if r.is_durable and r.remote_url)

    @property
    def failures(self) -> tuple[UploadFailed, ...]:
        return tuple(self._failures.values())

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    # -- lifecycle ------------------------------------------------------------

    async def wait(self) -> None:
        """Wait until no upload is in flight, including ones enqueued meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel in-flight uploads and drop their records; durable records stay."""
        cancelled = list(self._tasks.items())
        for _aid, task in cancelled:
            task.cancel()
        await asyncio.gather(*(task for _aid, task in cancelled), return_exceptions=True)
        for aid, _task in cancelled:
            record = self._records.get(aid)
            if record is not None and record.state is AssetState.UPLOADING:
                del self._records[aid]
                self._sequence.remove(aid)
                logger.debug("Upload of %s cancelled on close", aid)

    # -- reconciliation -------------------------------------------------------

    def _object_key(self, asset_id: str, filename: str) -> str:
        name = f"{asset_id}_{safe_filename(filename)}"
        return f"{self.key_prefix}/{name}" if self.key_prefix else name

    async def _upload(self, asset_id: str, file: LocalFile) -> None:
        key = self._object_key(asset_id, file.filename)
        try:
            url = await self.store.put(file.content, key, file.content_type)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._mark_failed(asset_id, exc)
            return
        self._mark_durable(asset_id, url)

    def _mark_durable(self, asset_id: str, url: str) -> None:
        record = self._records.get(asset_id)
        if record is None:
            logger.debug("Late completion for removed asset %s ignored", asset_id)
            return
        self._records[asset_id] = record.durable(url)
        logger.info("Asset %s durable at %s", asset_id, url)
        self._emit(UploadCompleted(asset_id=asset_id, remote_url=url))

    def _mark_failed(self, asset_id: str, cause: BaseException) -> None:
        record = self._records.pop(asset_id, None)
        if record is None:
            logger.debug("Late failure for removed asset %s ignored: %s", asset_id, cause)
            return
        self._sequence.remove(asset_id)
        event = UploadFailed(asset_id=asset_id, cause=cause)
        self._failures[asset_id] = event
        logger.warning("Upload of %s (%s) failed: %s", record.filename, asset_id, cause)
        self._emit(event)

    def _emit(self, event: AssetEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken listener must not leave the sequence half-reconciled.
                logger.exception("Asset event listener failed for %s", event)
