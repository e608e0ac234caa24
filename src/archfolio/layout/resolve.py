from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union, assert_never

from archfolio.layout.schema import ImageComponent, Layout, LayoutComponent, TextComponent


@dataclass(frozen=True)
class ResolvedImage:
    url: str
    image_index: int
    col_span: int
    row_span: int


@dataclass(frozen=True)
class ResolvedText:
    title: str
    content: str
    col_span: int
    row_span: int


ResolvedComponent = Union[ResolvedImage, ResolvedText]


def resolve_component(component: LayoutComponent, asset_urls: Sequence[str]) -> ResolvedComponent:
    pos = component.grid_position
    if isinstance(component, ImageComponent):
        index = component.content.image_index
        return ResolvedImage(
            url=asset_urls[index],
            image_index=index,
            col_span=pos.col_span,
            row_span=pos.row_span,
        )
    if isinstance(component, TextComponent):
        return ResolvedText(
            title=component.content.title,
            content=component.content.content,
            col_span=pos.col_span,
            row_span=pos.row_span,
        )
    assert_never(component)


def resolve_components(layout: Layout, asset_urls: Sequence[str]) -> list[ResolvedComponent]:
    """
    Map a validated layout onto the URL list it was generated against.

    ``asset_urls`` must be the same ordered list the layout was validated with;
    a shorter list means the layout is stale and an IndexError is raised.
    """
    needed = max(layout.image_indices(), default=-1) + 1
    if len(asset_urls) < needed:
        raise IndexError(f"layout references {needed} images but only {len(asset_urls)} urls were given")
    return [resolve_component(c, asset_urls) for c in layout.components]


def pack_rows(layout: Layout) -> list[list[LayoutComponent]]:
    """
    Greedy left-to-right row packing: a component starts a new row when it no
    longer fits in the current one. Row spans do not carry across rows here;
    the renderer's CSS/PDF grid handles vertical flow.
    """
    rows: list[list[LayoutComponent]] = []
    current: list[LayoutComponent] = []
    used = 0
    for comp in layout.components:
        span = comp.grid_position.col_span
        if current and used + span > layout.grid_cols:
            rows.append(current)
            current, used = [], 0
        current.append(comp)
        used += span
    if current:
        rows.append(current)
    return rows
