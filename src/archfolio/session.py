from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from archfolio.assets.pipeline import AssetIngestionPipeline
from archfolio.assets.record import AssetRecord
from archfolio.errors import ArchfolioError, GenerationError, NoAssetsError
from archfolio.generation.generator import GenerationResult, LayoutGenerator
from archfolio.generation.project import ProjectMetadata
from archfolio.layout.resolve import ResolvedComponent, resolve_components
from archfolio.layout.schema import Layout
from archfolio.logging_utils import get_logger
from archfolio.providers.base import MapProvider


@dataclass(frozen=True)
class SessionView:
    """Immutable read model handed to renderers."""

    metadata: ProjectMetadata | None
    assets: tuple[AssetRecord, ...]
    layout: Layout | None
    items: tuple[ResolvedComponent, ...]
    coverage_incomplete: bool
    is_generating: bool
    map_ref: str | None
    last_error: ArchfolioError | None


class PortfolioSession:
    """
    Per-user, in-memory aggregate: project metadata, the asset pipeline and at
    most one accepted layout.

    The layout is only ever replaced wholesale. It is cleared as soon as a
    submission starts, and a response belonging to an older submission is
    dropped, so the stored layout always matches the latest metadata.
    """

    def __init__(
        self,
        assets: AssetIngestionPipeline,
        generator: LayoutGenerator,
        map_provider: MapProvider | None = None,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.assets = assets
        self.generator = generator
        self.map_provider = map_provider
        self.log = get_logger(__name__, session_id=self.session_id)

        self.metadata: ProjectMetadata | None = None
        self.layout: Layout | None = None
        self.asset_urls: tuple[str, ...] = ()
        self.missing_indices: tuple[int, ...] = ()
        self.last_error: ArchfolioError | None = None
        self.map_ref: str | None = None
        self._generation = 0
        self._pending: set[int] = set()

    @property
    def coverage_incomplete(self) -> bool:
        return bool(self.missing_indices)

    @property
    def is_generating(self) -> bool:
        return bool(self._pending)

    async def submit(self, metadata: ProjectMetadata | Mapping[str, Any]) -> GenerationResult:
        if not isinstance(metadata, ProjectMetadata):
            metadata = ProjectMetadata.model_validate(metadata)

        # Only durable uploads are sent; in-flight ones are not waited for.
        urls = self.assets.durable_urls()
        if not urls:
            error = NoAssetsError()
            self.last_error = error
            self.log.info("Submit refused: no durable assets")
            return GenerationResult(error=error)

        self._generation += 1
        token = self._generation
        self._pending.add(token)
        self.metadata = metadata
        self.layout = None
        self.asset_urls = ()
        self.missing_indices = ()
        self.last_error = None

        try:
            result = await self.generator.generate(metadata, urls)
        finally:
            self._pending.discard(token)

        if token != self._generation:
            self.log.info("Discarding layout from superseded submission %d", token)
            return result

        if result.ok:
            self.layout = result.layout
            self.asset_urls = result.asset_urls
            self.missing_indices = result.missing_indices
            # Drop any refusal recorded while this call was pending.
            self.last_error = None
        else:
            self.last_error = result.error
            self.log.warning("Generation failed: %s", result.error)
        return result

    async def generate_location_map(self) -> str:
        """
        Generate an abstract map of the project location and keep it as
        ``map_ref``. Raises GenerationError when the image model fails.
        """
        if self.metadata is None or not self.metadata.location:
            raise ValueError("project metadata with a location is required")
        if self.map_provider is None:
            raise ValueError("no map provider configured")
        try:
            generated = await self.map_provider.generate_map(self.metadata.location)
        except Exception as exc:
            self.log.warning("Map generation failed: %s", exc)
            raise GenerationError.model_unavailable(exc) from exc
        self.map_ref = generated.data_uri
        return generated.data_uri

    def view(self) -> SessionView:
        items: tuple[ResolvedComponent, ...] = ()
        if self.layout is not None:
            items = tuple(resolve_components(self.layout, self.asset_urls))
        return SessionView(
            metadata=self.metadata,
            assets=self.assets.snapshot(),
            layout=self.layout,
            items=items,
            coverage_incomplete=self.coverage_incomplete,
            is_generating=self.is_generating,
            map_ref=self.map_ref,
            last_error=self.last_error,
        )
