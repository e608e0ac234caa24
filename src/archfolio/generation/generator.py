from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from archfolio.config import settings
from archfolio.errors import ArchfolioError, GenerationError, LayoutValidationError, ValidationErrorKind
from archfolio.generation.project import ProjectMetadata
from archfolio.generation.prompt import build_layout_prompt
from archfolio.layout.schema import GRID_COLS_MAX, GRID_COLS_MIN, Layout
from archfolio.layout.validator import validate_layout
from archfolio.providers.base import LayoutProvider, LayoutRequest, RawLayoutResponse
from archfolio.providers.jsonish import parse_json_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    layout: Layout | None = None
    error: ArchfolioError | None = None
    missing_indices: tuple[int, ...] = ()
    # The URL list the layout's image indices refer to.
    asset_urls: tuple[str, ...] = ()
    response: RawLayoutResponse | None = None

    @property
    def ok(self) -> bool:
        return self.layout is not None

    @property
    def incomplete_coverage(self) -> bool:
        return bool(self.missing_indices)

    def unwrap(self) -> Layout:
        if self.layout is None:
            assert self.error is not None
            raise self.error
        return self.layout


class LayoutGenerator:
    """
    One request/response round trip against the layout model.

    No retries here: ``MODEL_UNAVAILABLE`` results are marked retryable and
    the caller decides whether to issue another call.
    """

    def __init__(
        self,
        provider: LayoutProvider,
        grid_cols_bounds: tuple[int, int] = (GRID_COLS_MIN, GRID_COLS_MAX),
        prompt_cols_range: tuple[int, int] | None = None,
    ) -> None:
        self.provider = provider
        self.grid_cols_bounds = grid_cols_bounds
        self.prompt_cols_range = prompt_cols_range or (settings.grid_cols_min, settings.grid_cols_max)

    def build_request(self, project: ProjectMetadata, asset_urls: Sequence[str]) -> LayoutRequest:
        return LayoutRequest(project_details=project.to_project_details(), image_urls=tuple(asset_urls))

    async def generate(self, project: ProjectMetadata, asset_urls: Sequence[str]) -> GenerationResult:
        request = self.build_request(project, asset_urls)
        if not request.image_urls:
            raise ValueError("generate() needs at least one asset url")
        prompt = build_layout_prompt(request, self.prompt_cols_range)

        logger.info("Requesting layout from %s for %d images", self.provider.name, len(request.image_urls))
        try:
            response = await self.provider.suggest_layout(request, prompt)
        except Exception as exc:
            logger.warning("Layout provider %s failed: %s", self.provider.name, exc)
            return GenerationResult(error=GenerationError.model_unavailable(exc), asset_urls=request.image_urls)

        try:
            candidate = _candidate_from(response)
        except ValueError as exc:
            violation = LayoutValidationError(ValidationErrorKind.MALFORMED_PAYLOAD, f"unparseable model output: {exc}")
            return GenerationResult(
                error=GenerationError.schema_violation(violation),
                asset_urls=request.image_urls,
                response=response,
            )

        checked = validate_layout(candidate, len(request.image_urls), self.grid_cols_bounds)
        if not checked.ok:
            assert checked.error is not None
            return GenerationResult(
                error=GenerationError.schema_violation(checked.error),
                asset_urls=request.image_urls,
                response=response,
            )

        logger.info(
            "Layout accepted: %d components on %d columns",
            len(checked.unwrap().components),
            checked.unwrap().grid_cols,
        )
        return GenerationResult(
            layout=checked.layout,
            missing_indices=checked.missing_indices,
            asset_urls=request.image_urls,
            response=response,
        )


def _candidate_from(response: RawLayoutResponse) -> Any:
    if isinstance(response.parsed, dict):
        return response.parsed
    return parse_json_object(response.raw_text)
