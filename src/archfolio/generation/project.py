from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    title: str = Field(min_length=3)
    description: str = Field(min_length=10)
    client: str | None = None
    location: str | None = None
    year: int | None = None
    area: str | None = None

    @field_validator("client", "location", "area", "year", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Form inputs submit empty strings for untouched optional fields.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_project_details(self) -> str:
        return "\n".join(
            [
                f"Project Title: {self.title}",
                f"Description: {self.description}",
                f"Client: {self.client or 'N/A'}",
                f"Location: {self.location or 'N/A'}",
                f"Year: {self.year if self.year is not None else 'N/A'}",
                f"Area: {self.area or 'N/A'}",
            ]
        )
