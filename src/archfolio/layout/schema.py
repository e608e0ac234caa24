from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Hard bounds for any accepted layout; generation asks for a narrower range.
GRID_COLS_MIN = 1
GRID_COLS_MAX = 12


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid")


class GridPosition(_WireModel):
    col_span: int = Field(ge=1)
    row_span: int = Field(ge=1)


class ImageRef(_WireModel):
    # 0-based index into the ordered asset URL list sent with the request.
    image_index: int = Field(ge=0)


class TextBox(_WireModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)


class ImageComponent(_WireModel):
    type: Literal["image"] = "image"
    grid_position: GridPosition
    content: ImageRef


class TextComponent(_WireModel):
    type: Literal["text"] = "text"
    grid_position: GridPosition
    content: TextBox


LayoutComponent = Annotated[Union[ImageComponent, TextComponent], Field(discriminator="type")]


class Layout(_WireModel):
    """A validated grid layout. Only the validator should construct these."""

    description: str = ""
    grid_cols: int = Field(ge=GRID_COLS_MIN, le=GRID_COLS_MAX)
    components: tuple[LayoutComponent, ...] = ()

    def image_indices(self) -> list[int]:
        return [c.content.image_index for c in self.components if isinstance(c, ImageComponent)]

    def to_payload(self) -> dict[str, Any]:
        """Wire shape (camelCase keys), accepted back by the validator unchanged."""
        return self.model_dump(by_alias=True, mode="json")


# Structured-output schema handed to the model (OpenAPI subset used by Gemini).
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "layoutDescription": {
            "type": "STRING",
            "description": "A brief explanation of the arrangement of images and text.",
        },
        "layout": {
            "type": "OBJECT",
            "properties": {
                "gridCols": {"type": "INTEGER", "description": "Number of columns in the grid."},
                "components": {
                    "type": "ARRAY",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "type": {"type": "STRING", "enum": ["image", "text"]},
                            "gridPosition": {
                                "type": "OBJECT",
                                "properties": {
                                    "colSpan": {"type": "INTEGER"},
                                    "rowSpan": {"type": "INTEGER"},
                                },
                                "required": ["colSpan", "rowSpan"],
                            },
                            "content": {
                                "type": "OBJECT",
                                "description": "{imageIndex} for images, {title, content} for text boxes.",
                                "properties": {
                                    "imageIndex": {"type": "INTEGER"},
                                    "title": {"type": "STRING"},
                                    "content": {"type": "STRING"},
                                },
                            },
                        },
                        "required": ["type", "gridPosition", "content"],
                    },
                },
            },
            "required": ["gridCols", "components"],
        },
    },
    "required": ["layoutDescription", "layout"],
}
