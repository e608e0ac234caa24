from __future__ import annotations

from archfolio.config import settings
from archfolio.providers.base import LayoutRequest, RawLayoutResponse

JSON_SHAPE_HINT = (
    "\nReturn STRICT JSON only (no markdown, no commentary) shaped as:\n"
    '{"layoutDescription": string, "layout": {"gridCols": integer, "components": ['
    '{"type": "image", "gridPosition": {"colSpan": integer, "rowSpan": integer}, "content": {"imageIndex": integer}} | '
    '{"type": "text", "gridPosition": {"colSpan": integer, "rowSpan": integer}, "content": {"title": string, "content": string}}'
    "]}}\n"
)


class OpenAILayoutProvider:
    name = "openai"

    def __init__(self, api_key: str) -> None:
        from openai import AsyncOpenAI  # type: ignore

        self.client = AsyncOpenAI(api_key=api_key)

    async def suggest_layout(self, request: LayoutRequest, prompt: str) -> RawLayoutResponse:
        """The Responses API has no schema here; the shape is spelled out in the prompt."""
        model = settings.openai_text_model
        resp = await self.client.responses.create(
            model=model,
            input=prompt + JSON_SHAPE_HINT,
        )
        return RawLayoutResponse(
            raw_text=getattr(resp, "output_text", None),
            provider=self.name,
            model=model,
            raw_metadata={"image_count": len(request.image_urls), "response_id": getattr(resp, "id", None)},
        )
