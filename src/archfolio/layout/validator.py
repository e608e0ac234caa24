"""Trust boundary for candidate layouts.

Model output (or a hand-authored payload) is checked here before anything
indexes into the asset list or renders it. Checks run in a fixed order, each
across every component, and the first failing check is reported:

1. ``gridCols`` is an integer within the bounds.
2. ``components`` is a sequence of objects with a known ``type``.
3. Every span is >= 1 and ``colSpan`` <= ``gridCols``.
4. Image indices fall within ``[0, asset_count)``.
5. Text boxes carry a non-empty title and content.

Nothing is repaired: an out-of-range index is rejected, never clamped.
Missing coverage (an asset index no image component uses) is reported but
not rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from archfolio.errors import LayoutValidationError, ValidationErrorKind
from archfolio.layout.schema import GRID_COLS_MAX, GRID_COLS_MIN, Layout

logger = logging.getLogger(__name__)

COMPONENT_TYPES = ("image", "text")


@dataclass(frozen=True)
class ValidationResult:
    layout: Layout | None = None
    error: LayoutValidationError | None = None
    # Asset indices not referenced by any image component of an accepted layout.
    missing_indices: tuple[int, ...] = ()

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


def _as_int(value: Any) -> int | None:
    # bool is an int subclass; JSON true/false is never a valid count.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _unwrap_envelope(raw: Any) -> tuple[Any, str]:
    """Accept both ``{gridCols, components}`` and ``{layoutDescription, layout: {...}}``."""
    if isinstance(raw, Layout):
        return raw.to_payload(), raw.description
    if not isinstance(raw, Mapping):
        return raw, ""
    body: Any = raw
    if "gridCols" not in raw and isinstance(raw.get("layout"), Mapping):
        body = raw["layout"]
    description = raw.get("layoutDescription", raw.get("description", body.get("description", "")))
    return body, description if isinstance(description, str) else ""


def _fail(kind: ValidationErrorKind, message: str, component_index: int | None = None) -> ValidationResult:
    error = LayoutValidationError(kind, message, component_index)
    logger.warning("Layout rejected (%s): %s", kind.value, message)
    return ValidationResult(error=error)


def validate_layout(
    raw: Any,
    asset_count: int,
    grid_cols_bounds: tuple[int, int] = (GRID_COLS_MIN, GRID_COLS_MAX),
) -> ValidationResult:
    """Validate an untrusted candidate and return a sanitized Layout or the first failure."""
    lo, hi = grid_cols_bounds
    if not (GRID_COLS_MIN <= lo <= hi <= GRID_COLS_MAX):
        raise ValueError(f"grid_cols_bounds must lie within [{GRID_COLS_MIN}, {GRID_COLS_MAX}], got {grid_cols_bounds}")
    if asset_count < 0:
        raise ValueError("asset_count must be >= 0")

    body, description = _unwrap_envelope(raw)
    if not isinstance(body, Mapping):
        return _fail(ValidationErrorKind.MALFORMED_PAYLOAD, f"layout must be an object, got {type(body).__name__}")

    # 1. grid columns
    grid_cols = _as_int(body.get("gridCols"))
    if grid_cols is None or not (lo <= grid_cols <= hi):
        return _fail(
            ValidationErrorKind.OUT_OF_RANGE_GRID_COLS,
            f"gridCols must be an integer in [{lo}, {hi}], got {body.get('gridCols')!r}",
        )

    # 2. component container and discriminants
    components = body.get("components")
    if not isinstance(components, Sequence) or isinstance(components, (str, bytes)):
        return _fail(ValidationErrorKind.MALFORMED_PAYLOAD, "components must be a list")
    for i, comp in enumerate(components):
        if not isinstance(comp, Mapping):
            return _fail(ValidationErrorKind.MALFORMED_PAYLOAD, f"component {i} must be an object", i)
        if comp.get("type") not in COMPONENT_TYPES:
            return _fail(
                ValidationErrorKind.UNKNOWN_COMPONENT_TYPE,
                f"component {i} has unknown type {comp.get('type')!r}",
                i,
            )

    # 3. spans
    spans: list[tuple[int, int]] = []
    for i, comp in enumerate(components):
        pos = comp.get("gridPosition")
        pos = pos if isinstance(pos, Mapping) else {}
        col_span = _as_int(pos.get("colSpan"))
        row_span = _as_int(pos.get("rowSpan"))
        if col_span is None or row_span is None:
            return _fail(ValidationErrorKind.INVALID_SPAN, f"component {i} is missing integer colSpan/rowSpan", i)
        if col_span < 1 or col_span > grid_cols:
            return _fail(
                ValidationErrorKind.INVALID_SPAN,
                f"component {i} colSpan {col_span} outside [1, {grid_cols}]",
                i,
            )
        if row_span < 1:
            return _fail(ValidationErrorKind.INVALID_SPAN, f"component {i} rowSpan {row_span} < 1", i)
        spans.append((col_span, row_span))

    # 4. image indices
    image_indices: dict[int, int] = {}
    for i, comp in enumerate(components):
        if comp["type"] != "image":
            continue
        content = comp.get("content")
        index = _as_int(content.get("imageIndex")) if isinstance(content, Mapping) else None
        if index is None or not (0 <= index < asset_count):
            shown = content.get("imageIndex") if isinstance(content, Mapping) else None
            return _fail(
                ValidationErrorKind.IMAGE_INDEX_OUT_OF_RANGE,
                f"component {i} imageIndex {shown!r} outside [0, {asset_count})",
                i,
            )
        image_indices[i] = index

    # 5. text content
    for i, comp in enumerate(components):
        if comp["type"] != "text":
            continue
        content = comp.get("content")
        if not isinstance(content, Mapping) or not (
            _non_empty_str(content.get("title")) and _non_empty_str(content.get("content"))
        ):
            return _fail(
                ValidationErrorKind.INVALID_TEXT_CONTENT,
                f"component {i} text box needs a non-empty title and content",
                i,
            )

    sanitized: list[dict[str, Any]] = []
    for i, comp in enumerate(components):
        col_span, row_span = spans[i]
        entry: dict[str, Any] = {"type": comp["type"], "gridPosition": {"colSpan": col_span, "rowSpan": row_span}}
        if comp["type"] == "image":
            entry["content"] = {"imageIndex": image_indices[i]}
        else:
            entry["content"] = {"title": comp["content"]["title"], "content": comp["content"]["content"]}
        sanitized.append(entry)

    layout = Layout.model_validate({"description": description, "gridCols": grid_cols, "components": sanitized})

    # 6. coverage (soft)
    used = set(image_indices.values())
    missing = tuple(idx for idx in range(asset_count) if idx not in used)
    if missing:
        logger.info("Layout accepted with incomplete coverage; unused image indices: %s", list(missing))
    return ValidationResult(layout=layout, missing_indices=missing)
